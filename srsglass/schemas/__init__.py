"""Pydantic v2 schema models for srsglass.

- Region: mutable accumulator for one <REGION> of the daily dump
- CompleteRegion: a region with every timesheet field present
- Dump: parsed regions, total population, membership lists, dump date
- UpdateEstimate: per-region progress and predicted update offsets
- WorldSummary: world-level figures for the timesheet side panel
"""

from srsglass.schemas.models import (
    REQUIRED_REGION_FIELDS,
    CompleteRegion,
    Dump,
    Region,
    UpdateEstimate,
    WorldSummary,
)

__all__ = [
    "REQUIRED_REGION_FIELDS",
    "CompleteRegion",
    "Dump",
    "Region",
    "UpdateEstimate",
    "WorldSummary",
]
