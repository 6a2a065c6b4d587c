"""Reference date of a daily dump.

The first region to update in a major update has the smallest
LASTMAJORUPDATE. That update opens the game day on the update clock
(midnight in the reference zone), and the dump describes the day before it.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo

from dateutil import tz

from srsglass.errors import InvalidConfigurationError, MalformedInputError, MissingAggregateError
from srsglass.schemas.models import Region

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/New_York"


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA zone name, failing loudly on typos."""
    zone = tz.gettz(name)
    if zone is None:
        raise InvalidConfigurationError(f"Unknown time zone: {name!r}")
    return zone


def dump_date(regions: list[Region], zone: tzinfo | str = DEFAULT_TIMEZONE) -> date:
    """Compute the calendar date the dump represents.

    Args:
        regions: Parsed regions (any order).
        zone: Reference zone or IANA zone name for the update clock.

    Raises:
        MissingAggregateError: if there are no regions, or the earliest
            region carries no LASTMAJORUPDATE.
        MalformedInputError: if the timestamp is not a representable instant.
    """
    if not regions:
        raise MissingAggregateError("Cannot date a dump with no regions")
    if isinstance(zone, str):
        zone = resolve_timezone(zone)

    # A region without a timestamp sorts first, so its presence is an error
    first = min(
        regions,
        key=lambda r: (r.last_major is not None, r.last_major or 0),
    )
    if first.last_major is None:
        raise MissingAggregateError(
            f"Region {first.name!r} has no LASTMAJORUPDATE; cannot date the dump"
        )

    try:
        local = datetime.fromtimestamp(first.last_major, tz=zone)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedInputError(
            f"LASTMAJORUPDATE {first.last_major} of {first.name!r} is not a valid timestamp: {e}"
        ) from e

    result = local.date() - timedelta(days=1)
    logger.debug("Earliest major update %s (%s) -> dump date %s", local, first.name, result)
    return result
