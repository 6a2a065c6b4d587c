"""Centralized path constants for srsglass.

Design rules:
  1. This module imports ONLY ``pathlib.Path`` -- no project imports.
  2. No path existence checks at import time. Callers create directories
     as needed (``mkdir(parents=True, exist_ok=True)``).
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# -- Project Root --
# ---------------------------------------------------------------------------

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
"""Absolute path to the project root directory (one level above ``srsglass/``)."""

# ---------------------------------------------------------------------------
# -- Config Paths --
# ---------------------------------------------------------------------------

CONFIG_DIR: Path = PROJECT_ROOT / "config"
"""Directory containing configuration files."""

SRSGLASS_CONFIG_PATH: Path = CONFIG_DIR / "srsglass_config.json"
"""Default run configuration (endpoints, resilience, update windows)."""

# ---------------------------------------------------------------------------
# -- Working-directory Paths --
# ---------------------------------------------------------------------------

DEFAULT_DUMP_PATH: Path = Path("regions.xml.gz")
"""Where the daily dump is saved and, with --dump, reused from."""

OUTFILE_PREFIX: str = "srsglass"
"""Timesheets default to ``srsglass<YYYY-MM-DD>.xlsx`` in the working directory."""


def default_outfile(dump_date_iso: str) -> Path:
    """Timesheet path for a dump date, e.g. ``srsglass2026-10-17.xlsx``."""
    return Path(f"{OUTFILE_PREFIX}{dump_date_iso}.xlsx")
