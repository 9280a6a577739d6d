"""
Reorder orchestration: the public entry point for drag-and-drop moves.

Pipeline:
---------
1. Load the owner's active list in the order of the requested sort mode
2. Resolve the predecessor/successor of the drop point (pre-drag order)
3. Allocate midpoint coordinates for the dragged task, or
4. Rebalance the whole list in its post-drag order when a gap is too tight
5. Write the resulting patches in one batch and return the fresh view

Nothing is written until every computation step has succeeded.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .allocation import allocate
from .coordinates import CoordinatePatch, PriorityRecord, SortMode, check_patch_bounds, quadrant
from .exceptions import NoOp, RebalanceRequired
from .neighbors import move_after, resolve_neighbors
from .rebalance import rebalance
from .repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass
class UpdatedView:
    """The owner's list as it reads after a reorder."""
    owner_id: str
    mode: SortMode
    records: List[PriorityRecord]
    patches: List[CoordinatePatch] = field(default_factory=list)
    rebalanced: bool = False

    def position_of(self, record_id) -> Optional[int]:
        for index, record in enumerate(self.records):
            if record.id == record_id:
                return index
        return None

    def to_dict(self) -> Dict:
        return {
            'owner_id': self.owner_id,
            'mode': self.mode.value,
            'rebalanced': self.rebalanced,
            'updated_count': len(self.patches),
            'patches': [patch.to_dict() for patch in self.patches],
            'order': [record.id for record in self.records],
        }


def plan_reorder(
    records: List[PriorityRecord],
    dragged_id,
    target_id,
    mode: SortMode
) -> Tuple[List[CoordinatePatch], bool]:
    """
    Compute the patch set for a drop without touching storage.

    Returns the patches and whether the list was rebalanced: a single patch
    on the midpoint path, one patch per record on the rebalance path.
    """
    neighbors = resolve_neighbors(records, dragged_id, target_id)
    dragged = next(record for record in records if record.id == dragged_id)

    rebalanced = False
    try:
        patches = [allocate(neighbors.predecessor, neighbors.successor, dragged, mode)]
    except RebalanceRequired as signal:
        logger.info(
            "Rebalancing %d tasks on %s (tight axes: %s)",
            len(records),
            ', '.join(sorted(mode.axes)),
            ', '.join(sorted(signal.axes))
        )
        patches = rebalance(move_after(records, dragged_id, target_id), mode.axes)
        rebalanced = True

    check_patch_bounds(patches)
    return patches, rebalanced


def reorder(
    owner_id: str,
    dragged_id,
    target_id,
    mode: SortMode,
    repository: Optional[TaskRepository] = None
) -> UpdatedView:
    """
    Move ``dragged_id`` to sit immediately after ``target_id`` under ``mode``.

    Raises:
        NoOp: dropped onto itself; nothing is read or written
        NotFound: either task is not in the owner's active list
        InvariantViolation: a computed coordinate is out of bounds
        PersistenceFailure: the batch could not be written (nothing committed)
    """
    if dragged_id == target_id:
        logger.debug("Ignoring drop of task %s onto itself", dragged_id)
        raise NoOp("Task dropped onto itself")

    repository = repository or TaskRepository()
    records = repository.list_active(owner_id, mode)

    patches, rebalanced = plan_reorder(records, dragged_id, target_id, mode)
    repository.patch_coordinates(patches)

    view = UpdatedView(
        owner_id=owner_id,
        mode=mode,
        records=repository.list_active(owner_id, mode),
        patches=patches,
        rebalanced=rebalanced,
    )

    moved = next((r for r in view.records if r.id == dragged_id), None)
    logger.info(
        "Reordered task %s after %s for owner=%s mode=%s rebalanced=%s patches=%d quadrant=%s",
        dragged_id,
        target_id,
        owner_id,
        mode.value,
        view.rebalanced,
        len(patches),
        quadrant(moved).code if moved else None
    )
    return view
