"""
Even redistribution of coordinates over a whole list.

For N records, step = MAX_VALUE / (N + 1) and the k-th record from the top
(1-indexed) gets round(MAX_VALUE - step * k). The result is strictly
descending and leaves the widest possible gaps for later midpoint inserts.
"""

from typing import FrozenSet, List, Sequence

from .coordinates import (
    CoordinatePatch,
    MAX_VALUE,
    PriorityRecord,
    is_in_bounds,
    round_half_up,
)
from .exceptions import InvariantViolation


def spaced_values(count: int) -> List[int]:
    """Evenly spaced, strictly descending values for ``count`` slots."""
    if count <= 0:
        return []

    step = MAX_VALUE / (count + 1)
    values = [round_half_up(MAX_VALUE - step * k) for k in range(1, count + 1)]

    for upper, lower in zip(values, values[1:]):
        if upper <= lower:
            raise InvariantViolation(
                f"Cannot space {count} tasks within [0, {MAX_VALUE}]"
            )
    for value in values:
        if not is_in_bounds(value):
            raise InvariantViolation(f"Rebalanced value {value} is out of bounds")

    return values


def rebalance(
    sequence: Sequence[PriorityRecord],
    axes: FrozenSet[str]
) -> List[CoordinatePatch]:
    """
    Stage one patch per record, in ``sequence`` order.

    ``sequence`` must already be in the target order, with the dragged record
    at its new position. Only the axes in ``axes`` are rewritten.
    """
    values = spaced_values(len(sequence))
    return [
        CoordinatePatch(id=record.id, **{axis: value for axis in axes})
        for record, value in zip(sequence, values)
    ]
