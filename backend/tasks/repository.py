"""
Persistence adapter between the ordering engine and the Task table.

The engine only needs two operations: read an owner's active list in a given
order, and write a set of coordinate patches. Patch sets are applied inside a
single database transaction so a rebalance either lands completely or not at
all.
"""

import logging
from typing import List, Sequence

from django.db import DatabaseError, transaction
from django.utils import timezone

from .coordinates import CoordinatePatch, PriorityRecord, SortMode, check_patch_bounds
from .exceptions import PersistenceFailure
from .models import Task

logger = logging.getLogger(__name__)


class TaskRepository:
    """Django ORM implementation of the persistence adapter."""

    def active_queryset(self, owner_id: str, mode: SortMode):
        return (
            Task.objects
            .filter(owner_id=owner_id, completed=False)
            .order_by(*mode.order_by)
        )

    def list_active(self, owner_id: str, mode: SortMode) -> List[PriorityRecord]:
        """Active records for ``owner_id``, ordered by ``mode``'s comparator."""
        return [task.to_record() for task in self.active_queryset(owner_id, mode)]

    def patch_coordinates(self, patches: Sequence[CoordinatePatch]) -> int:
        """
        Write every patch or none of them.

        Returns the number of rows updated. Any database error, or a patch
        addressing a row that no longer exists, rolls the batch back and
        raises PersistenceFailure.
        """
        if not patches:
            return 0

        check_patch_bounds(patches)

        now = timezone.now()
        try:
            with transaction.atomic():
                updated = 0
                for patch in patches:
                    values = patch.values()
                    if not values:
                        continue
                    count = Task.objects.filter(pk=patch.id).update(updated_at=now, **values)
                    if count != 1:
                        logger.error(
                            "Task %s missing; rolling back batch of %d patches",
                            patch.id,
                            len(patches)
                        )
                        raise PersistenceFailure(
                            f"Task {patch.id} disappeared during the update"
                        )
                    updated += count
        except DatabaseError as exc:
            logger.exception("Coordinate batch of %d patches failed", len(patches))
            raise PersistenceFailure("Could not save the new task order") from exc

        logger.debug("Patched coordinates for %d tasks", updated)
        return updated
