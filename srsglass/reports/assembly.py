"""Timesheet assembly.

Joins parsed regions, membership lists and update estimates into the typed
rows and world figures the timesheet writer serializes. Pure: no I/O, and
the same inputs always give the same rows.

Regions missing any timesheet field are left out silently. Text is not
truncated here; the writer does that at serialization.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from srsglass import __version__
from srsglass.analysis.classifier import HighlightCategory, adjusted_endorsements, classify
from srsglass.analysis.estimator import ElapsedTime, decompose_seconds, estimate, validate_precision
from srsglass.errors import IncompleteRecordError, MissingAggregateError
from srsglass.schemas.models import Dump, WorldSummary
from srsglass.utils import join_embassies, region_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimesheetRow:
    """One region line of the timesheet."""

    name: str
    link: str
    population: int
    nations_before: int
    minor: ElapsedTime
    major: ElapsedTime
    delegate_votes: int
    endorsements: int
    no_delegate: bool
    embassies: str
    factbook: str
    category: HighlightCategory


@dataclass
class Timesheet:
    """Rows in dump order plus the side-panel figures."""

    rows: list[TimesheetRow]
    summary: WorldSummary
    precision: int = 0
    skipped: list[str | None] = field(default_factory=list)


def world_summary(
    dump: Dump,
    major_length: int,
    minor_length: int,
    generated_at: datetime,
) -> WorldSummary:
    """Compute the world-level figures for the side panel.

    Raises:
        MissingAggregateError: if the dump has no nations.
    """
    total = dump.total_population
    if total <= 0:
        raise MissingAggregateError(
            f"Total population must be positive to build a timesheet, got {total}"
        )
    return WorldSummary(
        total_population=total,
        major_length=major_length,
        minor_length=minor_length,
        major_seconds_per_nation=major_length / total,
        major_nations_per_second=total / major_length,
        minor_seconds_per_nation=minor_length / total,
        minor_nations_per_second=total / minor_length,
        version=__version__,
        generated_at=generated_at,
        dump_date=dump.dump_date,
    )


def assemble(
    dump: Dump,
    major_length: int,
    minor_length: int,
    precision: int = 0,
    generated_at: datetime | None = None,
) -> Timesheet:
    """Build every timesheet row for a dump.

    Args:
        dump: Parsed dump with membership lists and dump date.
        major_length: Major update length in seconds.
        minor_length: Minor update length in seconds.
        precision: Sub-second digits for update offsets (0-3).
        generated_at: Generation timestamp; defaults to now (local time).

    Raises:
        InvalidConfigurationError: if precision is outside 0-3.
        MissingAggregateError: if the dump has no nations.
    """
    validate_precision(precision)
    if generated_at is None:
        generated_at = datetime.now().replace(microsecond=0)
    summary = world_summary(dump, major_length, minor_length, generated_at)

    ungoverned = frozenset(dump.ungoverned)
    unsecured = frozenset(dump.unsecured)

    rows: list[TimesheetRow] = []
    skipped: list[str | None] = []
    for region in dump.regions:
        try:
            complete = region.require_complete()
        except IncompleteRecordError as e:
            logger.debug("Skipping region: %s", e)
            skipped.append(region.name)
            continue

        est = estimate(
            complete.nations_before, dump.total_population, major_length, minor_length,
        )
        endorsements, no_delegate = adjusted_endorsements(complete.delegate_votes)
        rows.append(TimesheetRow(
            name=complete.name,
            link=region_url(complete.name),
            population=complete.population,
            nations_before=complete.nations_before,
            minor=decompose_seconds(est.minor_seconds, precision),
            major=decompose_seconds(est.major_seconds, precision),
            delegate_votes=complete.delegate_votes,
            endorsements=endorsements,
            no_delegate=no_delegate,
            embassies=join_embassies(complete.embassies),
            factbook=complete.factbook,
            category=classify(complete.name, complete.delegate_exec, ungoverned, unsecured),
        ))

    if skipped:
        logger.info("Left %d incomplete regions off the timesheet", len(skipped))
    logger.info("Assembled %d timesheet rows", len(rows))
    return Timesheet(rows=rows, summary=summary, precision=precision, skipped=skipped)
