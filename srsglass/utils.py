"""Shared formatting helpers for srsglass.

Canonical implementations of the small text transforms used by the
timesheet. All callsites should import from here rather than keeping
local copies.
"""

REGION_URL_BASE = "https://www.nationstates.net/region="

# Longest string an Excel cell holds
# https://support.microsoft.com/en-us/office/excel-specifications-and-limits-1672b34d-7043-467e-8e27-269d656771c3
MAX_CELL_LENGTH = 32767


def region_url(name: str) -> str:
    """Link to a region's page, e.g. "The North Pacific" -> .../region=the_north_pacific."""
    return REGION_URL_BASE + name.lower().replace(" ", "_")


def truncate_cell(text: str, limit: int = MAX_CELL_LENGTH) -> str:
    """Cut text down to what a spreadsheet cell can store."""
    return text[:limit]


def join_embassies(embassies: list[str]) -> str:
    return ", ".join(embassies)
