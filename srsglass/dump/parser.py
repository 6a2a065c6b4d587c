"""Streaming parser for the daily regions dump.

Turns the decompressed XML byte stream into an ordered list of Region
records in a single pass, without holding the document in memory:

  start REGION  -- begin a fresh region (nested REGION is rejected)
  start <tag>   -- remember <tag> as the one open element of interest
  end <field>   -- if <field> is still the open element, parse its text
                   into the current region
  end REGION    -- stamp nations_before from the running population,
                   add this region's population, emit, reset

Only one level of tag context is tracked. The dump schema never nests
same-named elements, so a REGION inside a REGION means the input is broken.

The running population is a local accumulator of parse_dump(); nothing
outside the loop can observe it until the pass completes.
"""

import gzip
import html
import logging
import re
import zlib
from pathlib import Path
from typing import BinaryIO, NamedTuple

from lxml import etree

from srsglass.dump.reader import open_dump
from srsglass.errors import MalformedInputError
from srsglass.schemas.models import Region

logger = logging.getLogger(__name__)

REGION_TAG = "REGION"

# Integer-valued child elements -> Region attribute
INT_FIELDS = {
    "NUMNATIONS": "population",
    "DELEGATEVOTES": "delegate_votes",
    "LASTMAJORUPDATE": "last_major",
    "LASTMINORUPDATE": "last_minor",
}

# DELEGATEAUTH flag character for executive authority
EXECUTIVE_FLAG = "X"

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class ParsedDump(NamedTuple):
    """Regions in dump order plus the sum of their populations."""

    regions: list[Region]
    total_population: int


def parse_dump(stream: BinaryIO) -> ParsedDump:
    """Parse a decompressed dump stream into regions in update order.

    Args:
        stream: Binary file-like object yielding the XML document.

    Returns:
        ParsedDump with every REGION in document order.

    Raises:
        MalformedInputError: on any well-formedness error, corrupt or
            truncated compressed data, nested REGION, or non-numeric
            integer field. Nothing parsed before the error is returned.
    """
    regions: list[Region] = []
    current = Region()
    current_tag: str | None = None
    in_region = False
    nations_before = 0

    context = etree.iterparse(
        stream,
        events=("start", "end"),
        huge_tree=True,
        no_network=True,
        resolve_entities=False,
    )
    try:
        for event, elem in context:
            tag = elem.tag

            if event == "start":
                if tag == REGION_TAG:
                    if in_region:
                        raise MalformedInputError(
                            f"Nested REGION inside {current.name or 'unnamed region'!r}",
                            line=elem.sourceline,
                            offset=_stream_offset(stream),
                        )
                    in_region = True
                current_tag = tag
                continue

            if tag == current_tag:
                if in_region:
                    _assign_field(current, tag, elem, stream)
                current_tag = None

            if tag == REGION_TAG:
                current.nations_before = nations_before
                if current.population is not None:
                    nations_before += current.population
                regions.append(current)
                current = Region()
                in_region = False
                _release(elem)

    except etree.XMLSyntaxError as e:
        line, column = e.position
        raise MalformedInputError(
            f"Dump is not well-formed XML: {e.msg}",
            line=line,
            column=column,
            offset=_stream_offset(stream),
        ) from e
    except (EOFError, zlib.error, gzip.BadGzipFile) as e:
        raise MalformedInputError(
            f"Dump stream is corrupt or truncated: {e}",
            offset=_stream_offset(stream),
        ) from e
    finally:
        del context

    logger.info("Parsed %d regions (%d nations)", len(regions), nations_before)
    return ParsedDump(regions=regions, total_population=nations_before)


def parse_dump_file(path: Path | str) -> ParsedDump:
    """Parse a gzip-compressed dump from disk."""
    logger.info("Parsing dump %s", path)
    with open_dump(path) as stream:
        return parse_dump(stream)


def _assign_field(region: Region, tag: str, elem: etree._Element, stream: BinaryIO) -> None:
    """Copy one leaf element's text into the matching Region attribute."""
    text = elem.text

    if tag == "FACTBOOK":
        # CDATA body; an empty FACTBOOK still counts as present
        region.factbook = html.unescape(text or "").strip()
        return

    if text is None:
        return
    text = text.strip()
    if not text:
        return

    if tag == "NAME":
        region.name = text
    elif tag in INT_FIELDS:
        setattr(region, INT_FIELDS[tag], _parse_int(tag, text, elem, stream))
    elif tag == "DELEGATEAUTH":
        region.delegate_exec = EXECUTIVE_FLAG in text
    elif tag == "EMBASSY":
        region.embassies.append(text)


def _parse_int(tag: str, text: str, elem: etree._Element, stream: BinaryIO) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise MalformedInputError(
            f"{tag} is not a base-10 integer: {text!r}",
            line=elem.sourceline,
            offset=_stream_offset(stream),
        )
    return int(text, 10)


def _release(elem: etree._Element) -> None:
    """Drop a finished REGION subtree and any siblings already parsed."""
    elem.clear(keep_tail=True)
    parent = elem.getparent()
    if parent is None:
        return
    while elem.getprevious() is not None:
        del parent[0]


def _stream_offset(stream: BinaryIO) -> int | None:
    """Decompressed bytes consumed so far, if the stream can say."""
    try:
        return stream.tell()
    except (AttributeError, OSError, ValueError):
        return None
