"""Daily dump file access.

The dump is stored exactly as downloaded (gzip-compressed XML) and is only
ever read as a decompressing byte stream; the parser never sees the whole
document at once.
"""

import gzip
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def open_dump(path: Path | str) -> gzip.GzipFile:
    """Open a gzip-compressed dump for streaming binary reads."""
    path = Path(path)
    logger.debug("Opening dump %s (%d bytes compressed)", path, path.stat().st_size)
    return gzip.open(path, "rb")


def reusable_dump(path: Path | str) -> Path | None:
    """Return the path if a previously downloaded dump can be reused.

    An empty file is what an interrupted download leaves behind, so it is
    not considered reusable.
    """
    path = Path(path)
    if path.is_file() and path.stat().st_size > 0:
        return path
    return None
