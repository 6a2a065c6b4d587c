"""Run configuration for srsglass.

Settings come from two layers:
    1. config/srsglass_config.json (endpoints, resilience, update defaults)
    2. command-line flags, which override the file

The merged values are validated once by RunSettings before any network or
file work starts, so a bad precision or window length fails the run
immediately.

Example:
    config = load_config()
    settings = build_settings(config, user_nation="Testlandia", precision=2)
"""

import json
import logging
from pathlib import Path
from typing import Optional

from dateutil import tz
from pydantic import BaseModel, Field, ValidationError, field_validator

from srsglass import __version__
from srsglass.analysis.dump_date import DEFAULT_TIMEZONE
from srsglass.analysis.estimator import DEFAULT_MAJOR_LENGTH, DEFAULT_MINOR_LENGTH, MAX_PRECISION
from srsglass.errors import InvalidConfigurationError
from srsglass.paths import DEFAULT_DUMP_PATH, SRSGLASS_CONFIG_PATH

logger = logging.getLogger(__name__)

TOOL_AUTHOR = "Esfalsa"

MAX_RETRIES = 3
BACKOFF_BASE = 2  # seconds
BACKOFF_MAX = 300
REQUEST_TIMEOUT = 300  # the dump is tens of megabytes


def load_config(path: Path | None = None) -> dict:
    """Load the JSON configuration file.

    A missing default file yields an empty dict (built-in defaults apply);
    a missing file the caller asked for explicitly is an error.
    """
    config_path = path or SRSGLASS_CONFIG_PATH
    if not config_path.exists():
        if path is not None:
            raise InvalidConfigurationError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigurationError(f"Config file {config_path} is not valid JSON: {e}") from e


class RunSettings(BaseModel):
    """Validated settings for one timesheet run."""

    user_nation: str = Field(
        ...,
        min_length=1,
        description="Nation identifying the user to NationStates",
        examples=["Testlandia"],
    )
    outfile: Optional[Path] = Field(
        default=None,
        description="Timesheet path; defaults to srsglass<dump date>.xlsx",
    )
    major_length: int = Field(
        default=DEFAULT_MAJOR_LENGTH,
        gt=0,
        description="Major update length in seconds",
    )
    minor_length: int = Field(
        default=DEFAULT_MINOR_LENGTH,
        gt=0,
        description="Minor update length in seconds",
    )
    use_dump: bool = Field(
        default=False,
        description="Reuse the dump at dump_path instead of downloading",
    )
    dump_path: Path = Field(
        default=DEFAULT_DUMP_PATH,
        description="Where the dump is saved or reused from",
    )
    precision: int = Field(
        default=0,
        ge=0,
        le=MAX_PRECISION,
        description="Sub-second digits in update offsets",
    )
    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA zone of the update clock, used to date the dump",
    )

    @field_validator("user_nation")
    @classmethod
    def strip_nation(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("User nation must not be blank")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if tz.gettz(v) is None:
            raise ValueError(f"Unknown time zone: {v!r}")
        return v

    @property
    def user_agent(self) -> str:
        return f"srsglass/{__version__} (by:{TOOL_AUTHOR}, usedBy:{self.user_nation})"


def build_settings(config: dict, **overrides) -> RunSettings:
    """Merge config file defaults with CLI overrides and validate.

    Overrides that are None are treated as "not given".

    Raises:
        InvalidConfigurationError: if the merged values fail validation.
    """
    update = config.get("update", {})
    report = config.get("report", {})
    values = {
        "major_length": update.get("major_length", DEFAULT_MAJOR_LENGTH),
        "minor_length": update.get("minor_length", DEFAULT_MINOR_LENGTH),
        "timezone": update.get("timezone", DEFAULT_TIMEZONE),
        "precision": report.get("precision", 0),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RunSettings(**values)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid settings: {_problems(e)}") from e


class ResilienceSettings(BaseModel):
    """Retry, backoff and timeout knobs from the "resilience" config section."""

    max_retries: int = Field(default=MAX_RETRIES, ge=0, description="Attempts per request")
    backoff_base: int = Field(default=BACKOFF_BASE, ge=0, description="Base of the exponential backoff, seconds")
    backoff_max: int = Field(default=BACKOFF_MAX, ge=0, description="Cap on any single wait, seconds")
    request_timeout: float = Field(default=REQUEST_TIMEOUT, gt=0, description="Total timeout per request, seconds")


def resilience_settings(config: dict | None) -> ResilienceSettings:
    """Validate the "resilience" section; missing keys take the defaults.

    Raises:
        InvalidConfigurationError: if a value is not a usable number.
    """
    section = (config or {}).get("resilience") or {}
    try:
        return ResilienceSettings(**section)
    except (ValidationError, TypeError) as e:
        problems = _problems(e) if isinstance(e, ValidationError) else str(e)
        raise InvalidConfigurationError(f"Invalid resilience settings: {problems}") from e


def _problems(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
