"""Pydantic v2 models for srsglass data structures.

Data sources modeled:
- regions.xml.gz <REGION> element -> Region (mutable parse accumulator)
- Region with every timesheet field present -> CompleteRegion
- whole parse result + membership lists -> Dump
- per-region estimator output -> UpdateEstimate
- side panel of the timesheet -> WorldSummary
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from srsglass.errors import IncompleteRecordError

# Fields a region must carry to appear in the timesheet
REQUIRED_REGION_FIELDS = (
    "name",
    "population",
    "delegate_votes",
    "factbook",
    "nations_before",
)


# ── Region (one <REGION> of the dump) ──

class Region(BaseModel):
    """One region of the daily dump, filled in field by field while parsing.

    Every scalar is optional because the dump is trusted but not enforced;
    completeness is checked once, at timesheet assembly, by
    require_complete().
    """

    name: Optional[str] = Field(
        default=None,
        description="Display name, unique within a dump",
        examples=["The North Pacific"],
    )
    population: Optional[int] = Field(
        default=None,
        description="NUMNATIONS: nation count at snapshot time",
    )
    delegate_votes: Optional[int] = Field(
        default=None,
        description="DELEGATEVOTES: delegate endorsements + 1; 0 means no delegate",
    )
    delegate_exec: Optional[bool] = Field(
        default=None,
        description="True when DELEGATEAUTH contains the executive flag 'X'",
    )
    last_major: Optional[int] = Field(
        default=None,
        description="LASTMAJORUPDATE, seconds since the epoch",
    )
    last_minor: Optional[int] = Field(
        default=None,
        description="LASTMINORUPDATE, seconds since the epoch",
    )
    nations_before: Optional[int] = Field(
        default=None,
        description="Cumulative population of every earlier region in dump order",
    )
    embassies: list[str] = Field(
        default_factory=list,
        description="EMBASSY partner names in document order, duplicates kept",
    )
    factbook: Optional[str] = Field(
        default=None,
        description="FACTBOOK body, unescaped and stripped",
    )

    def require_complete(self) -> CompleteRegion:
        """Return the timesheet view of this region.

        Raises:
            IncompleteRecordError: if any of REQUIRED_REGION_FIELDS is absent.
        """
        missing = [f for f in REQUIRED_REGION_FIELDS if getattr(self, f) is None]
        if missing:
            raise IncompleteRecordError(self.name, missing)
        return CompleteRegion(
            name=self.name,
            population=self.population,
            delegate_votes=self.delegate_votes,
            delegate_exec=bool(self.delegate_exec),
            nations_before=self.nations_before,
            embassies=list(self.embassies),
            factbook=self.factbook,
        )


class CompleteRegion(BaseModel):
    """A region eligible for estimation and classification."""

    model_config = ConfigDict(frozen=True)

    name: str
    population: int
    delegate_votes: int
    delegate_exec: bool = False
    nations_before: int
    embassies: list[str] = Field(default_factory=list)
    factbook: str


# ── Dump (one pipeline run) ──

class Dump(BaseModel):
    """Everything a timesheet is built from."""

    regions: list[Region] = Field(
        ...,
        description="Regions in canonical update order; never re-sorted",
    )
    total_population: int = Field(
        ...,
        ge=0,
        description="Sum of every region's population",
    )
    ungoverned: list[str] = Field(
        default_factory=list,
        description="Regions without a governor (regionsbytag governorless)",
    )
    unsecured: list[str] = Field(
        default_factory=list,
        description="Regions without a password (regionsbytag -password)",
    )
    dump_date: date = Field(
        ...,
        description="Day of the update cycle the snapshot describes",
    )


# ── Estimator output ──

class UpdateEstimate(BaseModel):
    """Predicted offsets of one region into the major and minor updates."""

    model_config = ConfigDict(frozen=True)

    progress: float = Field(..., ge=0.0, le=1.0)
    major_seconds: float = Field(..., ge=0.0)
    minor_seconds: float = Field(..., ge=0.0)


# ── Side panel ──

class WorldSummary(BaseModel):
    """World-level figures shown next to the region table."""

    total_population: int
    major_length: int
    minor_length: int
    major_seconds_per_nation: float
    major_nations_per_second: float
    minor_seconds_per_nation: float
    minor_nations_per_second: float
    version: str
    generated_at: datetime
    dump_date: date
