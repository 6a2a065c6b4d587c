"""NationStates client.

Fetches the three inputs of a timesheet:

  - the daily regions dump (pages/regions.xml.gz), streamed to disk
  - regions without a governor   (api.cgi?q=regionsbytag;tags=governorless)
  - regions without a password   (api.cgi?q=regionsbytag;tags=-password)

Requests are made one after another in a single session; NationStates
asks API users to stay well under 50 requests per 30 seconds, and three
requests never come close.
"""

import logging
import os
from pathlib import Path

import aiohttp

from srsglass.dump.membership import parse_region_list
from srsglass.scrapers.base import BaseScraper

logger = logging.getLogger(__name__)

BASE_URL = "https://www.nationstates.net"
DUMP_PATH = "/pages/regions.xml.gz"
API_PATH = "/cgi-bin/api.cgi"
UNGOVERNED_TAG = "governorless"
UNSECURED_TAG = "-password"
CHUNK_SIZE = 65536


class NationStatesScraper(BaseScraper):
    """Downloads the regions dump and regionsbytag membership lists.

    Args:
        user_agent: Identifying User-Agent (see RunSettings.user_agent).
        config: Optional srsglass_config dict; reads the "nationstates" and
                "resilience" sections.
    """

    def __init__(self, user_agent: str, config: dict | None = None):
        super().__init__("nationstates", user_agent, config)
        ns = (config or {}).get("nationstates", {})
        base_url = ns.get("base_url", BASE_URL).rstrip("/")
        self.dump_url = base_url + ns.get("dump_path", DUMP_PATH)
        self.api_url = base_url + ns.get("api_path", API_PATH)
        self.ungoverned_tag = ns.get("ungoverned_tag", UNGOVERNED_TAG)
        self.unsecured_tag = ns.get("unsecured_tag", UNSECURED_TAG)

    async def download_dump(self, dest: Path) -> Path:
        """Download the daily dump to dest, replacing any previous copy."""
        async with self._create_session() as session:
            return await self._download_dump(session, dest)

    async def fetch_membership(self) -> tuple[list[str], list[str]]:
        """Return (ungoverned, unsecured) region names."""
        async with self._create_session() as session:
            ungoverned = await self._fetch_region_list(session, self.ungoverned_tag)
            unsecured = await self._fetch_region_list(session, self.unsecured_tag)
        return ungoverned, unsecured

    async def _download_dump(self, session: aiohttp.ClientSession, dest: Path) -> Path:
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = dest.with_suffix(".tmp")

        async def _stream_to_disk(resp: aiohttp.ClientResponse) -> int:
            written = 0
            with open(tmp_path, "wb") as f:
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    f.write(chunk)
                    written += len(chunk)
            return written

        logger.info("Downloading dump from %s", self.dump_url)
        try:
            size = await self._request_with_retry(session, "GET", self.dump_url, _stream_to_disk)
            os.replace(str(tmp_path), str(dest))
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        logger.info("Saved dump to %s (%d bytes)", dest, size)
        return dest

    async def _fetch_region_list(self, session: aiohttp.ClientSession, tag: str) -> list[str]:
        async def _read_text(resp: aiohttp.ClientResponse) -> str:
            return await resp.text()

        # Shards are ';'-separated inside q, so the query is built literally
        url = f"{self.api_url}?q=regionsbytag;tags={tag}"
        body = await self._request_with_retry(session, "GET", url, _read_text)
        names = parse_region_list(body)
        logger.info("regionsbytag %s: %d regions", tag, len(names))
        return names
