"""Exception taxonomy for the srsglass pipeline.

  MalformedInputError       -- dump or API XML not well-formed, corrupt gzip,
                               non-numeric field, unrepresentable timestamp
  MissingAggregateError     -- zero total population or empty region list
  InvalidConfigurationError -- run settings out of range (precision, windows)
  IncompleteRecordError     -- a region lacks a field the timesheet needs;
                               always recovered by skipping the region

Everything except IncompleteRecordError is fatal to the run and propagates
to main(), which logs it and exits non-zero.
"""


class SrsglassError(Exception):
    """Base class for all pipeline errors."""


class MalformedInputError(SrsglassError):
    """Raised when the dump or an API response cannot be trusted.

    Attributes:
        line: 1-based line number in the decompressed document, if known.
        column: 1-based column number, if known.
        offset: Decompressed byte offset reached when the error surfaced,
                if known. Offsets are approximate (read-buffer granularity).
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        offset: int | None = None,
    ):
        self.line = line
        self.column = column
        self.offset = offset
        location = []
        if line is not None:
            location.append(f"line {line}")
        if column is not None:
            location.append(f"column {column}")
        if offset is not None:
            location.append(f"byte offset {offset}")
        if location:
            message = f"{message} (at {', '.join(location)})"
        super().__init__(message)


class MissingAggregateError(SrsglassError):
    """Raised when a whole-dump figure needed downstream is unavailable."""


class InvalidConfigurationError(SrsglassError):
    """Raised when run settings are outside their accepted range."""


class IncompleteRecordError(SrsglassError):
    """Raised when a region is missing a field required for the timesheet.

    Attributes:
        region_name: The region's name, or None if the name itself is missing.
        missing: Names of the absent fields.
    """

    def __init__(self, region_name: str | None, missing: list[str]):
        self.region_name = region_name
        self.missing = missing
        super().__init__(
            f"Region {region_name!r} is missing required fields: {', '.join(missing)}"
        )
