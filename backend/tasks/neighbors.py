"""
Neighbor resolution for drop intents.

A drop intent means "place the dragged task immediately after the target
task in the current order". Inserting before a task is expressed by choosing
the task preceding it as the target.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .coordinates import PriorityRecord
from .exceptions import NoOp, NotFound


@dataclass(frozen=True)
class Neighbors:
    """The records bounding a drop point."""
    predecessor: PriorityRecord
    successor: Optional[PriorityRecord]


def _index_of(sequence: Sequence[PriorityRecord], record_id) -> int:
    for index, record in enumerate(sequence):
        if record.id == record_id:
            return index
    raise NotFound(record_id)


def resolve_neighbors(
    sequence: Sequence[PriorityRecord],
    dragged_id,
    target_id
) -> Neighbors:
    """
    Find the predecessor and successor of the drop point.

    ``sequence`` is the owner's active list in the current (pre-drag) order.
    The successor is whatever follows the target right now, which may be the
    dragged record itself.

    Raises:
        NoOp: the record was dropped onto itself
        NotFound: either id is absent from the active sequence
    """
    if dragged_id == target_id:
        raise NoOp("Task dropped onto itself")

    _index_of(sequence, dragged_id)
    target_index = _index_of(sequence, target_id)

    successor = None
    if target_index + 1 < len(sequence):
        successor = sequence[target_index + 1]

    return Neighbors(predecessor=sequence[target_index], successor=successor)


def move_after(
    sequence: Sequence[PriorityRecord],
    dragged_id,
    target_id
) -> List[PriorityRecord]:
    """Return the order the list should have once the drag is applied."""
    if dragged_id == target_id:
        raise NoOp("Task dropped onto itself")

    dragged = sequence[_index_of(sequence, dragged_id)]
    remaining = [record for record in sequence if record.id != dragged_id]
    target_index = _index_of(remaining, target_id)
    remaining.insert(target_index + 1, dragged)
    return remaining
