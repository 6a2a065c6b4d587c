"""Update-time estimator.

Regions update in dump order, and the time the update spends on a region is
proportional to its population. A region's predicted offset into an update
window is therefore its share of the world's nations that update before it:

    progress  = nations_before / total_population
    predicted = progress * window_length

All arithmetic is double precision. Offsets are elapsed time: hours are
unbounded and never wrap at 24, so they are represented as ElapsedTime /
timedelta and rendered with an ``[h]`` spreadsheet format, never as a
time of day.
"""

import math
from datetime import timedelta
from typing import NamedTuple

from srsglass.errors import InvalidConfigurationError, MissingAggregateError
from srsglass.schemas.models import UpdateEstimate

MAX_PRECISION = 3
DEFAULT_MAJOR_LENGTH = 5350
DEFAULT_MINOR_LENGTH = 3550


class ElapsedTime(NamedTuple):
    """An offset split into hours, minutes, seconds and a rounded fraction.

    ``fraction`` is an integer count of 10**-precision seconds.
    """

    hours: int
    minutes: int
    seconds: int
    fraction: int
    precision: int

    def total_seconds(self) -> float:
        return (
            self.hours * 3600
            + self.minutes * 60
            + self.seconds
            + self.fraction / 10 ** self.precision
        )

    def to_timedelta(self) -> timedelta:
        return timedelta(
            hours=self.hours,
            minutes=self.minutes,
            seconds=self.seconds,
            milliseconds=self.fraction * 10 ** (MAX_PRECISION - self.precision),
        )

    def __str__(self) -> str:
        text = f"{self.hours}:{self.minutes:02d}:{self.seconds:02d}"
        if self.precision:
            text += f".{self.fraction:0{self.precision}d}"
        return text


def validate_precision(precision: int) -> int:
    """Return precision unchanged if it is a supported sub-second digit count."""
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise InvalidConfigurationError(f"Precision must be an integer, got {precision!r}")
    if not 0 <= precision <= MAX_PRECISION:
        raise InvalidConfigurationError(
            f"Precision must be between 0 and {MAX_PRECISION}, got {precision}"
        )
    return precision


def progress(nations_before: int, total_population: int) -> float:
    """Fraction of the world that updates before a region, in [0, 1)."""
    if total_population <= 0:
        raise MissingAggregateError(
            f"Total population must be positive to estimate update times, got {total_population}"
        )
    return float(nations_before) / float(total_population)


def estimate(
    nations_before: int,
    total_population: int,
    major_length: float = DEFAULT_MAJOR_LENGTH,
    minor_length: float = DEFAULT_MINOR_LENGTH,
) -> UpdateEstimate:
    """Predict a region's offset into the major and minor updates.

    Args:
        nations_before: Cumulative population of earlier regions.
        total_population: Population of the whole dump.
        major_length: Major update length in seconds.
        minor_length: Minor update length in seconds.

    Raises:
        MissingAggregateError: if total_population is not positive.
    """
    p = progress(nations_before, total_population)
    return UpdateEstimate(
        progress=p,
        major_seconds=p * float(major_length),
        minor_seconds=p * float(minor_length),
    )


def decompose_seconds(seconds: float, precision: int = 0) -> ElapsedTime:
    """Split an offset into h, m, s and a fraction rounded to `precision` digits.

    h = floor(s / 3600), m = floor((s / 60) mod 60), s' = floor(s mod 60).
    A fraction that rounds up to a full second carries into the whole part,
    at every precision including 0 (3599.6 s is 1:00:00), so s' departs from
    a plain floor of s mod 60 and matches how a [h]:mm:ss cell displays.

    Raises:
        InvalidConfigurationError: if precision is outside 0-3.
    """
    validate_precision(precision)
    if seconds < 0 or not math.isfinite(seconds):
        raise ValueError(f"Offset must be a finite non-negative number, got {seconds!r}")

    whole = math.floor(seconds)
    scale = 10 ** precision
    fraction = round((seconds - whole) * scale)
    if fraction >= scale:
        whole += 1
        fraction = 0

    return ElapsedTime(
        hours=whole // 3600,
        minutes=(whole // 60) % 60,
        seconds=whole % 60,
        fraction=fraction,
        precision=precision,
    )


def format_elapsed(seconds: float, precision: int = 0) -> str:
    """Render an offset as ``H:MM:SS[.fff]``, e.g. 3661.5 at 1 -> ``1:01:01.5``."""
    return str(decompose_seconds(seconds, precision))


def elapsed_number_format(precision: int = 0) -> str:
    """Spreadsheet number format for an elapsed duration with unbounded hours."""
    validate_precision(precision)
    if precision == 0:
        return "[h]:mm:ss"
    return "[h]:mm:ss." + "0" * precision
