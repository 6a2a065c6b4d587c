"""Region highlight classifier.

Sorts each region into one of four highlight categories. The rules are
evaluated in priority order and the first match wins:

  1  fully-open     -- no governor and no password
  2  delegate-risk  -- has a governor, executive delegate, no password
  3  locked         -- has a password (governor status not considered)
  4  neutral        -- everything else

Rule 3 ignores the governor check that rules 1 and 2 make. That asymmetry
is how the highlight has always behaved and is kept as is.

Exports:
    HighlightCategory     -- the four categories
    classify              -- first-match rule chain
    adjusted_endorsements -- delegate endorsements excluding the self-vote
"""

import enum
import logging
from collections.abc import Callable, Collection

logger = logging.getLogger(__name__)


class HighlightCategory(enum.Enum):
    """Row highlight for a region on the timesheet."""

    FULLY_OPEN = "fully-open"
    DELEGATE_RISK = "delegate-risk"
    LOCKED = "locked"
    NEUTRAL = "neutral"


# (category, predicate(ungoverned, unsecured, delegate_exec)) in priority order
_RULES: list[tuple[HighlightCategory, Callable[[bool, bool, bool], bool]]] = [
    (HighlightCategory.FULLY_OPEN,
     lambda ungoverned, unsecured, exec_: ungoverned and unsecured),
    (HighlightCategory.DELEGATE_RISK,
     lambda ungoverned, unsecured, exec_: not ungoverned and exec_ and unsecured),
    (HighlightCategory.LOCKED,
     lambda ungoverned, unsecured, exec_: not unsecured),
]


def classify(
    name: str,
    delegate_exec: bool | None,
    ungoverned: Collection[str],
    unsecured: Collection[str],
) -> HighlightCategory:
    """Return the highlight category for one region.

    Args:
        name: Region name as it appears in the dump.
        delegate_exec: Whether the delegate holds executive authority.
        ungoverned: Names of regions without a governor.
        unsecured: Names of regions without a password.
    """
    is_ungoverned = name in ungoverned
    is_unsecured = name in unsecured
    for category, rule in _RULES:
        if rule(is_ungoverned, is_unsecured, bool(delegate_exec)):
            return category
    return HighlightCategory.NEUTRAL


def adjusted_endorsements(delegate_votes: int) -> tuple[int, bool]:
    """Endorsements on the delegate, and whether the region has no delegate.

    DELEGATEVOTES counts the delegate's own vote, so one is subtracted. A
    count of 0 means there is no delegate at all and is flagged.
    """
    if delegate_votes == 0:
        return 0, True
    return delegate_votes - 1, False
