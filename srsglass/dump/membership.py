"""Region membership lists from the NationStates API.

The world shard ``regionsbytag`` answers with a single list element:

    <WORLD><REGIONS>Lazarus,Osiris,Balder</REGIONS></WORLD>

which becomes ["Lazarus", "Osiris", "Balder"]. Lists are kept in response
order without deduplication; membership is tested linearly downstream and
the lists run to the low thousands at most.
"""

import logging

from lxml import etree

from srsglass.errors import MalformedInputError

logger = logging.getLogger(__name__)

LIST_TAG = "REGIONS"


def parse_region_list(response: str | bytes) -> list[str]:
    """Parse a regionsbytag response into region names.

    Args:
        response: Raw XML response body. An empty body is an empty list.

    Returns:
        Region names in response order.

    Raises:
        MalformedInputError: if the body is not well-formed XML.
    """
    if isinstance(response, str):
        response = response.encode("utf-8")
    if not response.strip():
        return []

    try:
        root = etree.fromstring(response, parser=etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as e:
        line, column = e.position
        raise MalformedInputError(
            f"Region list is not well-formed XML: {e.msg}", line=line, column=column,
        ) from e

    element = root if root.tag == LIST_TAG else root.find(LIST_TAG)
    if element is None:
        element = next(iter(root), None)
    if element is None or not element.text:
        return []

    names = [name.strip() for name in element.text.split(",")]
    names = [name for name in names if name]
    logger.debug("Parsed region list <%s> with %d names", element.tag, len(names))
    return names
