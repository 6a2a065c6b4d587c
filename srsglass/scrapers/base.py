"""Base scraper with shared request handling.

All NationStates clients inherit from this class to get:
- An identifying User-Agent header (required by the NationStates API rules)
- Exponential backoff with retry on transient failures
- Honoring Retry-After on 429 responses
- Config-driven retry/backoff/timeout parameters
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp

from srsglass.config import resilience_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseScraper:
    """Shared request handling for all scrapers.

    Args:
        source_name: Identifier used in log lines (e.g., "nationstates").
        user_agent: User-Agent header sent with every request.
        config: Optional srsglass_config dict. Reads the "resilience" section
                for retry/backoff/timeout parameters; module-level defaults
                apply to anything missing.
    """

    def __init__(self, source_name: str, user_agent: str, config: dict | None = None):
        self.source_name = source_name
        self._headers = {"User-Agent": user_agent}

        resilience = resilience_settings(config)
        self.max_retries = max(1, resilience.max_retries)
        self.backoff_base = max(1, resilience.backoff_base)
        self.backoff_max = resilience.backoff_max
        self.request_timeout = aiohttp.ClientTimeout(total=resilience.request_timeout)

    def _create_session(self) -> aiohttp.ClientSession:
        """Create an aiohttp session with the identifying User-Agent."""
        return aiohttp.ClientSession(headers=self._headers)

    async def _request_with_retry(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        consume: Callable[[aiohttp.ClientResponse], Awaitable[T]],
        retries: int | None = None,
        **kwargs,
    ) -> T:
        """Make an HTTP request with exponential backoff on transient failures.

        Args:
            session: Open client session.
            method: HTTP method name ("GET", ...).
            url: Request URL.
            consume: Coroutine function reading the successful response
                     (text, bytes, or streaming to disk). Its return value is
                     returned from this method.
            retries: Attempts before giving up; defaults to max_retries.

        Raises:
            aiohttp.ClientError / asyncio.TimeoutError: after the last attempt.
        """
        if retries is None:
            retries = self.max_retries

        kwargs.setdefault("timeout", self.request_timeout)
        last_error = None
        method_lower = method.lower()
        if not hasattr(session, method_lower):
            raise ValueError(f"Unsupported HTTP method: {method}")
        request_fn = getattr(session, method_lower)

        attempt = 0
        rate_limit_hits = 0
        while attempt < retries:
            try:
                async with request_fn(url, **kwargs) as resp:
                    if resp.status == 429:
                        rate_limit_hits += 1
                        if rate_limit_hits > retries:
                            logger.error(
                                "%s: too many 429 responses (%d), giving up",
                                self.source_name, rate_limit_hits,
                            )
                            raise aiohttp.ClientResponseError(
                                resp.request_info, resp.history, status=429,
                            )
                        raw_retry = resp.headers.get("Retry-After", "")
                        try:
                            retry_after = max(0, min(int(raw_retry), self.backoff_max))
                        except (ValueError, TypeError):
                            retry_after = min(
                                self.backoff_base ** (attempt + 2), self.backoff_max
                            )
                        logger.warning(
                            "%s: 429 rate limited, waiting %ds",
                            self.source_name, retry_after,
                        )
                        await asyncio.sleep(retry_after)
                        continue  # server-requested delay does not use up an attempt
                    resp.raise_for_status()
                    return await consume(resp)
            except aiohttp.ClientResponseError as e:
                if e.status == 429 or 400 <= e.status < 500:
                    # Client errors will not fix themselves on retry
                    logger.error("%s: %s %s failed: %s", self.source_name, method, url, e)
                    raise
                last_error = e
                logger.warning(
                    "%s: request failed (attempt %d/%d): %s",
                    self.source_name, attempt + 1, retries, e,
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(
                    "%s: request failed (attempt %d/%d): %s",
                    self.source_name, attempt + 1, retries, e,
                )

            attempt += 1
            if attempt < retries:
                backoff = min(self.backoff_base ** attempt + random.uniform(0, 1), self.backoff_max)
                logger.info("%s: retrying in %.1fs...", self.source_name, backoff)
                await asyncio.sleep(backoff)

        logger.error(
            "%s: all %d attempts exhausted, last error: %s",
            self.source_name, retries, last_error,
        )
        raise last_error or aiohttp.ClientError(
            f"{self.source_name}: request failed after {retries} attempts"
        )
