"""
Coordinate model for continuous priority ordering.

Every task carries two bounded integer coordinates, importance and urgency,
both in the range [0, MAX_VALUE]. A list view is simply the active tasks
sorted by those coordinates, so moving a task only requires giving it new
coordinates that fall between its new neighbors.

Sort modes:
-----------
- importance: importance desc, urgency desc, id asc
- urgency:    urgency desc, importance desc, id asc
- both:       urgency desc, importance desc, id asc (both axes move together)

Eisenhower Quadrant:
--------------------
The quadrant is derived from the coordinates and never stored:

    important = importance >= MAX_VALUE / 2
    urgent    = urgency    >= MAX_VALUE / 2
"""

import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .exceptions import InvariantViolation


MAX_VALUE = 1_000_000
MIN_VALUE = 0
MIDPOINT = MAX_VALUE // 2

# Smallest neighbor gap that still admits a midpoint insertion
REBALANCE_THRESHOLD = 1000

IMPORTANCE = 'importance'
URGENCY = 'urgency'
AXES = (IMPORTANCE, URGENCY)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward."""
    return int(math.floor(value + 0.5))


def is_in_bounds(value: int) -> bool:
    return MIN_VALUE <= value <= MAX_VALUE


def check_patch_bounds(patches: Iterable["CoordinatePatch"]) -> None:
    """Raise InvariantViolation if any patched value falls outside [0, MAX_VALUE]."""
    for patch in patches:
        for axis, value in patch.values().items():
            if not is_in_bounds(value):
                raise InvariantViolation(
                    f"{axis}={value} for task {patch.id} is out of bounds"
                )


# ==================== Records ====================

@dataclass(frozen=True)
class PriorityRecord:
    """The unit being ordered: an id and its two coordinates."""
    id: int
    importance: int = MIDPOINT
    urgency: int = MIDPOINT
    active: bool = True

    def coordinate(self, axis: str) -> int:
        return getattr(self, axis)


@dataclass(frozen=True)
class CoordinatePatch:
    """
    New coordinate values for one record.

    An axis left as None is not written, so the record keeps its value.
    """
    id: int
    importance: Optional[int] = None
    urgency: Optional[int] = None

    def values(self) -> Dict[str, int]:
        return {
            axis: getattr(self, axis)
            for axis in AXES
            if getattr(self, axis) is not None
        }

    def apply(self, record: PriorityRecord) -> PriorityRecord:
        values = self.values()
        return PriorityRecord(
            id=record.id,
            importance=values.get(IMPORTANCE, record.importance),
            urgency=values.get(URGENCY, record.urgency),
            active=record.active
        )

    def to_dict(self) -> Dict:
        return {'id': self.id, **self.values()}


# ==================== Sort Modes ====================

class SortMode(Enum):
    """Closed set of ordering strategies for a list view."""
    IMPORTANCE = 'importance'
    URGENCY = 'urgency'
    BOTH = 'both'

    @property
    def axes(self) -> FrozenSet[str]:
        """Axes that participate in allocation and rebalancing."""
        if self is SortMode.IMPORTANCE:
            return frozenset({IMPORTANCE})
        if self is SortMode.URGENCY:
            return frozenset({URGENCY})
        return frozenset(AXES)

    @property
    def key_axes(self) -> Tuple[str, str]:
        """Primary and secondary comparison axes."""
        if self is SortMode.IMPORTANCE:
            return (IMPORTANCE, URGENCY)
        return (URGENCY, IMPORTANCE)

    @property
    def order_by(self) -> Tuple[str, ...]:
        """ORM ordering equivalent to ``sort_key``."""
        primary, secondary = self.key_axes
        return (f'-{primary}', f'-{secondary}', 'id')

    def sort_key(self, record: PriorityRecord) -> Tuple[int, int, int]:
        primary, secondary = self.key_axes
        return (-record.coordinate(primary), -record.coordinate(secondary), record.id)

    @classmethod
    def choices(cls) -> List[Tuple[str, str]]:
        return [(mode.value, mode.value.title()) for mode in cls]


def compare(a: PriorityRecord, b: PriorityRecord, mode: SortMode) -> int:
    """
    Compare two records under a sort mode.

    Returns -1 if ``a`` is ordered before ``b``, 1 if after, 0 if they
    share coordinates and id.
    """
    key_a = mode.sort_key(a)
    key_b = mode.sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_records(records: Iterable[PriorityRecord], mode: SortMode) -> List[PriorityRecord]:
    return sorted(records, key=cmp_to_key(lambda a, b: compare(a, b, mode)))


# ==================== Eisenhower Quadrant ====================

class Quadrant(Enum):
    """Eisenhower Matrix quadrant classification."""
    DO_FIRST = 1       # Important + Urgent
    SCHEDULE = 2       # Important, Not Urgent
    DELEGATE = 3       # Urgent, Not Important
    ELIMINATE = 4      # Neither

    @property
    def title(self) -> str:
        return {
            Quadrant.DO_FIRST: 'Do First',
            Quadrant.SCHEDULE: 'Schedule',
            Quadrant.DELEGATE: 'Delegate',
            Quadrant.ELIMINATE: 'Eliminate',
        }[self]

    @property
    def subtitle(self) -> str:
        return {
            Quadrant.DO_FIRST: 'Important & Urgent',
            Quadrant.SCHEDULE: 'Important, Not Urgent',
            Quadrant.DELEGATE: 'Urgent, Not Important',
            Quadrant.ELIMINATE: 'Neither',
        }[self]

    @property
    def code(self) -> str:
        return f'Q{self.value}'

    def to_dict(self) -> Dict:
        return {
            'quadrant': self.code,
            'title': self.title,
            'subtitle': self.subtitle
        }


def classify(importance: int, urgency: int) -> Quadrant:
    """Classify a coordinate pair into its Eisenhower quadrant."""
    is_important = importance >= MAX_VALUE / 2
    is_urgent = urgency >= MAX_VALUE / 2

    if is_important and is_urgent:
        return Quadrant.DO_FIRST
    elif is_important and not is_urgent:
        return Quadrant.SCHEDULE
    elif not is_important and is_urgent:
        return Quadrant.DELEGATE
    else:
        return Quadrant.ELIMINATE


def quadrant(record: PriorityRecord) -> Quadrant:
    return classify(record.importance, record.urgency)


def group_by_quadrant(
    records: Iterable[PriorityRecord],
    mode: SortMode = SortMode.BOTH
) -> Dict[Quadrant, List[PriorityRecord]]:
    """
    Split active records into the four matrix cells.

    Every quadrant is present in the result, empty cells included, and each
    cell keeps the order of ``mode``.
    """
    groups: Dict[Quadrant, List[PriorityRecord]] = {q: [] for q in Quadrant}
    for record in sort_records((r for r in records if r.active), mode):
        groups[quadrant(record)].append(record)
    return groups
