"""
Value allocation for a single dragged task.

For each axis the sort mode moves, the dragged task gets the midpoint of its
new neighbors:

    hi  = predecessor value (MAX_VALUE when there is none)
    lo  = successor value   (0 when the target is last)
    new = round((hi + lo) / 2)

When any participating gap is narrower than REBALANCE_THRESHOLD the midpoint
would leave no room for the next insertion, so the allocator signals that the
whole list has to be rebalanced instead.
"""

from typing import Dict, Optional

from .coordinates import (
    CoordinatePatch,
    MAX_VALUE,
    MIN_VALUE,
    PriorityRecord,
    REBALANCE_THRESHOLD,
    SortMode,
    round_half_up,
)
from .exceptions import RebalanceRequired


def allocate(
    predecessor: Optional[PriorityRecord],
    successor: Optional[PriorityRecord],
    dragged: PriorityRecord,
    mode: SortMode
) -> CoordinatePatch:
    """
    Compute the dragged record's new coordinates.

    Axes outside ``mode.axes`` are left out of the patch, so the record keeps
    its own value there.

    Raises:
        RebalanceRequired: carrying every participating axis whose gap is
            below the threshold
    """
    values: Dict[str, int] = {}
    tight = set()

    for axis in sorted(mode.axes):
        hi = predecessor.coordinate(axis) if predecessor is not None else MAX_VALUE
        lo = successor.coordinate(axis) if successor is not None else MIN_VALUE
        if hi - lo < REBALANCE_THRESHOLD:
            tight.add(axis)
            continue
        values[axis] = round_half_up((hi + lo) / 2)

    if tight:
        raise RebalanceRequired(frozenset(tight))

    return CoordinatePatch(id=dragged.id, **values)
