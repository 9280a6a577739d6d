"""
Unit Tests for the task manager.

This module contains tests for the priority ordering engine (coordinate
model, neighbor resolution, value allocation, rebalancing and the reorder
orchestrator), its persistence adapter and the API endpoints.
"""

from django.core.cache import cache
from django.db import DatabaseError
from django.db.models import QuerySet
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APITestCase
from rest_framework import status
from unittest import mock
import json
import random

from .allocation import allocate
from .coordinates import (
    CoordinatePatch,
    MAX_VALUE,
    MIDPOINT,
    PriorityRecord,
    Quadrant,
    SortMode,
    compare,
    check_patch_bounds,
    group_by_quadrant,
    is_in_bounds,
    quadrant,
    round_half_up,
    sort_records,
)
from .exceptions import (
    ErrorCode,
    InvariantViolation,
    NoOp,
    NotFound,
    PersistenceFailure,
    RebalanceRequired,
)
from .models import Task
from .neighbors import move_after, resolve_neighbors
from .rebalance import rebalance, spaced_values
from .reorder import plan_reorder, reorder
from .repository import TaskRepository


OWNER = 'owner-1'


def make_task(title, importance=MIDPOINT, urgency=MIDPOINT, owner_id=OWNER, completed=False):
    return Task.objects.create(
        owner_id=owner_id,
        title=title,
        importance=importance,
        urgency=urgency,
        completed=completed
    )


class CoordinateModelTests(SimpleTestCase):
    """Tests for comparison, sort modes and quadrant classification."""

    def test_urgency_mode_orders_by_urgency_first(self):
        a = PriorityRecord(id=1, importance=100, urgency=900)
        b = PriorityRecord(id=2, importance=900, urgency=100)
        self.assertEqual(compare(a, b, SortMode.URGENCY), -1)
        self.assertEqual(compare(b, a, SortMode.URGENCY), 1)

    def test_importance_mode_orders_by_importance_first(self):
        a = PriorityRecord(id=1, importance=100, urgency=900)
        b = PriorityRecord(id=2, importance=900, urgency=100)
        self.assertEqual(compare(a, b, SortMode.IMPORTANCE), 1)

    def test_ties_broken_by_secondary_axis_then_id(self):
        a = PriorityRecord(id=5, importance=300, urgency=700)
        b = PriorityRecord(id=3, importance=400, urgency=700)
        c = PriorityRecord(id=9, importance=400, urgency=700)
        ordered = sort_records([a, c, b], SortMode.BOTH)
        self.assertEqual([r.id for r in ordered], [3, 9, 5])

    def test_compare_equal_records(self):
        a = PriorityRecord(id=1, importance=10, urgency=10)
        self.assertEqual(compare(a, a, SortMode.BOTH), 0)

    def test_mode_axes(self):
        self.assertEqual(SortMode.IMPORTANCE.axes, frozenset({'importance'}))
        self.assertEqual(SortMode.URGENCY.axes, frozenset({'urgency'}))
        self.assertEqual(SortMode.BOTH.axes, frozenset({'importance', 'urgency'}))

    def test_order_by_matches_sort_key(self):
        self.assertEqual(SortMode.IMPORTANCE.order_by, ('-importance', '-urgency', 'id'))
        self.assertEqual(SortMode.BOTH.order_by, ('-urgency', '-importance', 'id'))

    def test_quadrant_classification(self):
        self.assertEqual(quadrant(PriorityRecord(1, 800000, 800000)), Quadrant.DO_FIRST)
        self.assertEqual(quadrant(PriorityRecord(1, 800000, 200000)), Quadrant.SCHEDULE)
        self.assertEqual(quadrant(PriorityRecord(1, 200000, 800000)), Quadrant.DELEGATE)
        self.assertEqual(quadrant(PriorityRecord(1, 200000, 200000)), Quadrant.ELIMINATE)

    def test_midpoint_counts_as_important_and_urgent(self):
        """Thresholds are inclusive: the default record is Do First."""
        self.assertEqual(quadrant(PriorityRecord(1)), Quadrant.DO_FIRST)
        self.assertEqual(quadrant(PriorityRecord(1, 499999, 499999)), Quadrant.ELIMINATE)

    def test_quadrant_is_pure(self):
        record = PriorityRecord(id=1, importance=450000, urgency=650000)
        other = PriorityRecord(id=2, importance=450000, urgency=650000)
        results = {quadrant(record) for _ in range(5)} | {quadrant(other)}
        self.assertEqual(results, {Quadrant.DELEGATE})

    def test_quadrant_labels(self):
        self.assertEqual(Quadrant.DO_FIRST.code, 'Q1')
        self.assertEqual(Quadrant.SCHEDULE.title, 'Schedule')
        self.assertEqual(Quadrant.ELIMINATE.to_dict()['subtitle'], 'Neither')

    def test_group_by_quadrant_skips_inactive(self):
        records = [
            PriorityRecord(1, 900000, 900000),
            PriorityRecord(2, 100000, 100000),
            PriorityRecord(3, 700000, 600000),
            PriorityRecord(4, 900000, 900000, active=False),
        ]
        groups = group_by_quadrant(records)
        self.assertEqual([r.id for r in groups[Quadrant.DO_FIRST]], [1, 3])
        self.assertEqual([r.id for r in groups[Quadrant.ELIMINATE]], [2])
        self.assertEqual(groups[Quadrant.DELEGATE], [])

    def test_round_half_up(self):
        self.assertEqual(round_half_up(500.5), 501)
        self.assertEqual(round_half_up(500.4), 500)
        self.assertEqual(round_half_up(700000.0), 700000)

    def test_bounds(self):
        self.assertTrue(is_in_bounds(0))
        self.assertTrue(is_in_bounds(MAX_VALUE))
        self.assertFalse(is_in_bounds(-1))
        self.assertFalse(is_in_bounds(MAX_VALUE + 1))

    def test_check_patch_bounds(self):
        check_patch_bounds([CoordinatePatch(id=1, importance=0, urgency=MAX_VALUE)])
        with self.assertRaises(InvariantViolation):
            check_patch_bounds([CoordinatePatch(id=2, importance=-1)])

    def test_patch_only_applies_given_axes(self):
        record = PriorityRecord(id=1, importance=10, urgency=20)
        patched = CoordinatePatch(id=1, urgency=99).apply(record)
        self.assertEqual((patched.importance, patched.urgency), (10, 99))


class NeighborResolverTests(SimpleTestCase):
    """Tests for predecessor/successor lookup of a drop point."""

    def setUp(self):
        self.sequence = [
            PriorityRecord(1, urgency=900000),
            PriorityRecord(2, urgency=500000),
            PriorityRecord(3, urgency=100000),
        ]

    def test_neighbors_of_middle_target(self):
        neighbors = resolve_neighbors(self.sequence, 3, 1)
        self.assertEqual(neighbors.predecessor.id, 1)
        self.assertEqual(neighbors.successor.id, 2)

    def test_last_target_has_no_successor(self):
        neighbors = resolve_neighbors(self.sequence, 1, 3)
        self.assertEqual(neighbors.predecessor.id, 3)
        self.assertIsNone(neighbors.successor)

    def test_successor_may_be_the_dragged_record(self):
        neighbors = resolve_neighbors(self.sequence, 2, 1)
        self.assertEqual(neighbors.successor.id, 2)

    def test_drop_onto_itself_is_noop(self):
        with self.assertRaises(NoOp):
            resolve_neighbors(self.sequence, 2, 2)

    def test_missing_dragged_record(self):
        with self.assertRaises(NotFound) as ctx:
            resolve_neighbors(self.sequence, 42, 1)
        self.assertEqual(ctx.exception.record_id, 42)

    def test_missing_target_record(self):
        with self.assertRaises(NotFound):
            resolve_neighbors(self.sequence, 1, 42)

    def test_move_after(self):
        self.assertEqual([r.id for r in move_after(self.sequence, 3, 1)], [1, 3, 2])
        self.assertEqual([r.id for r in move_after(self.sequence, 1, 3)], [2, 3, 1])
        self.assertEqual([r.id for r in move_after(self.sequence, 2, 1)], [1, 2, 3])


class ValueAllocatorTests(SimpleTestCase):
    """Tests for midpoint allocation and the rebalance signal."""

    def test_midpoint_on_single_axis(self):
        pred = PriorityRecord(1, urgency=900000)
        succ = PriorityRecord(2, urgency=500000)
        dragged = PriorityRecord(3, importance=123456, urgency=100000)

        patch = allocate(pred, succ, dragged, SortMode.URGENCY)

        self.assertEqual(patch.id, 3)
        self.assertEqual(patch.urgency, 700000)
        self.assertIsNone(patch.importance)

    def test_missing_successor_uses_zero(self):
        pred = PriorityRecord(1, importance=300000)
        dragged = PriorityRecord(3, importance=900000)
        patch = allocate(pred, None, dragged, SortMode.IMPORTANCE)
        self.assertEqual(patch.importance, 150000)

    def test_missing_predecessor_uses_max(self):
        succ = PriorityRecord(2, urgency=800000)
        dragged = PriorityRecord(3, urgency=100)
        patch = allocate(None, succ, dragged, SortMode.URGENCY)
        self.assertEqual(patch.urgency, 900000)

    def test_both_axes_allocated_together(self):
        pred = PriorityRecord(1, importance=800000, urgency=800000)
        succ = PriorityRecord(2, importance=400000, urgency=600000)
        patch = allocate(pred, succ, PriorityRecord(3), SortMode.BOTH)
        self.assertEqual((patch.importance, patch.urgency), (600000, 700000))

    def test_tight_gap_requires_rebalance(self):
        pred = PriorityRecord(1, urgency=600001)
        succ = PriorityRecord(2, urgency=600000)
        with self.assertRaises(RebalanceRequired) as ctx:
            allocate(pred, succ, PriorityRecord(3), SortMode.URGENCY)
        self.assertEqual(ctx.exception.axes, frozenset({'urgency'}))

    def test_gap_at_threshold_still_allocates(self):
        pred = PriorityRecord(1, urgency=2000)
        succ = PriorityRecord(2, urgency=1000)
        patch = allocate(pred, succ, PriorityRecord(3), SortMode.URGENCY)
        self.assertEqual(patch.urgency, 1500)

    def test_any_tight_axis_triggers_rebalance_in_both_mode(self):
        """Importance may run backwards between urgency-ordered neighbors."""
        pred = PriorityRecord(1, importance=100000, urgency=900000)
        succ = PriorityRecord(2, importance=700000, urgency=100000)
        with self.assertRaises(RebalanceRequired) as ctx:
            allocate(pred, succ, PriorityRecord(3), SortMode.BOTH)
        self.assertEqual(ctx.exception.axes, frozenset({'importance'}))


class RebalancerTests(SimpleTestCase):
    """Tests for even redistribution of a whole list."""

    def test_four_records_evenly_spaced(self):
        self.assertEqual(spaced_values(4), [800000, 600000, 400000, 200000])

    def test_values_strictly_descending_and_distinct(self):
        for count in (1, 2, 3, 7, 13, 250):
            values = spaced_values(count)
            self.assertEqual(len(set(values)), count)
            self.assertTrue(all(a > b for a, b in zip(values, values[1:])))
            self.assertTrue(all(is_in_bounds(v) for v in values))

    def test_empty_sequence(self):
        self.assertEqual(rebalance([], frozenset({'urgency'})), [])

    def test_only_requested_axes_rewritten(self):
        sequence = [PriorityRecord(7, importance=11, urgency=12), PriorityRecord(8)]
        patches = rebalance(sequence, frozenset({'importance'}))
        self.assertEqual([p.id for p in patches], [7, 8])
        self.assertEqual([p.importance for p in patches], [666667, 333333])
        self.assertTrue(all(p.urgency is None for p in patches))

    def test_both_axes_share_values(self):
        patches = rebalance([PriorityRecord(1), PriorityRecord(2)], SortMode.BOTH.axes)
        self.assertEqual(patches[0].to_dict(), {'id': 1, 'importance': 666667, 'urgency': 666667})

    def test_too_many_records_to_space(self):
        with self.assertRaises(InvariantViolation):
            spaced_values(MAX_VALUE + 1)


class PlanReorderTests(SimpleTestCase):
    """Tests for the pure planning step of a reorder."""

    def test_single_patch_path(self):
        records = [PriorityRecord(1, urgency=900000), PriorityRecord(2, urgency=100000)]
        patches, rebalanced = plan_reorder(records, 2, 1, SortMode.URGENCY)
        self.assertFalse(rebalanced)
        self.assertEqual(patches, [CoordinatePatch(id=2, urgency=500000)])

    def test_rebalance_path_uses_post_drag_order(self):
        records = [
            PriorityRecord(1, urgency=600001),
            PriorityRecord(2, urgency=600000),
            PriorityRecord(3, urgency=100),
        ]
        patches, rebalanced = plan_reorder(records, 3, 1, SortMode.URGENCY)
        self.assertTrue(rebalanced)
        self.assertEqual([p.id for p in patches], [1, 3, 2])
        self.assertEqual([p.urgency for p in patches], [750000, 500000, 250000])


class TaskModelTests(TestCase):
    """Tests for the Task model."""

    def test_defaults_to_midpoint(self):
        task = Task.objects.create(owner_id=OWNER, title='Inbox item')
        self.assertEqual(task.importance, MIDPOINT)
        self.assertEqual(task.urgency, MIDPOINT)
        self.assertTrue(task.active)

    def test_to_record(self):
        task = make_task('Write report', importance=700000, urgency=200000, completed=True)
        record = task.to_record()
        self.assertEqual(record, PriorityRecord(task.pk, 700000, 200000, active=False))
        self.assertEqual(task.quadrant, Quadrant.SCHEDULE)
        self.assertIn('Schedule', str(task))


class TaskRepositoryTests(TestCase):
    """Tests for the ORM persistence adapter."""

    def setUp(self):
        self.repository = TaskRepository()
        self.a = make_task('A', importance=100000, urgency=900000)
        self.b = make_task('B', importance=900000, urgency=100000)
        self.c = make_task('C', importance=500000, urgency=500000, completed=True)
        self.other = make_task('Other', owner_id='owner-2')

    def test_list_active_filters_owner_and_completed(self):
        ids = [r.id for r in self.repository.list_active(OWNER, SortMode.URGENCY)]
        self.assertEqual(ids, [self.a.pk, self.b.pk])

    def test_list_active_respects_mode(self):
        ids = [r.id for r in self.repository.list_active(OWNER, SortMode.IMPORTANCE)]
        self.assertEqual(ids, [self.b.pk, self.a.pk])

    def test_database_order_matches_comparator(self):
        make_task('Tie 1', importance=300000, urgency=900000)
        make_task('Tie 2', importance=300000, urgency=900000)
        for mode in SortMode:
            records = self.repository.list_active(OWNER, mode)
            self.assertEqual(records, sort_records(records, mode))

    def test_patch_coordinates(self):
        updated = self.repository.patch_coordinates([
            CoordinatePatch(id=self.a.pk, urgency=42),
            CoordinatePatch(id=self.b.pk, importance=7, urgency=8),
        ])
        self.assertEqual(updated, 2)
        self.a.refresh_from_db()
        self.b.refresh_from_db()
        self.assertEqual((self.a.importance, self.a.urgency), (100000, 42))
        self.assertEqual((self.b.importance, self.b.urgency), (7, 8))

    def test_batch_rolls_back_when_a_row_is_missing(self):
        with self.assertLogs('tasks.repository', level='ERROR') as logs:
            with self.assertRaises(PersistenceFailure):
                self.repository.patch_coordinates([
                    CoordinatePatch(id=self.a.pk, urgency=1),
                    CoordinatePatch(id=999999, urgency=2),
                ])
        self.assertIn('999999', logs.output[0])
        self.a.refresh_from_db()
        self.assertEqual(self.a.urgency, 900000)

    def test_out_of_bounds_patch_is_rejected_before_writing(self):
        with self.assertRaises(InvariantViolation):
            self.repository.patch_coordinates([
                CoordinatePatch(id=self.a.pk, urgency=5),
                CoordinatePatch(id=self.b.pk, urgency=MAX_VALUE + 1),
            ])
        self.a.refresh_from_db()
        self.assertEqual(self.a.urgency, 900000)

    def test_database_error_becomes_persistence_failure(self):
        with mock.patch.object(QuerySet, 'update', side_effect=DatabaseError('disk I/O error')):
            with self.assertRaises(PersistenceFailure) as ctx:
                self.repository.patch_coordinates([CoordinatePatch(id=self.a.pk, urgency=1)])
        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)
        self.assertEqual(ctx.exception.code, ErrorCode.ERR_PERSISTENCE_FAILURE)


class ReorderTests(TestCase):
    """Tests for the reorder orchestrator against the database."""

    def coordinates(self):
        return {
            task.pk: (task.importance, task.urgency)
            for task in Task.objects.all()
        }

    def test_simple_insert(self):
        x = make_task('X', urgency=900000)
        y = make_task('Y', urgency=500000)
        z = make_task('Z', urgency=100000)

        view = reorder(OWNER, z.pk, x.pk, SortMode.URGENCY)

        self.assertFalse(view.rebalanced)
        self.assertEqual([r.id for r in view.records], [x.pk, z.pk, y.pk])
        self.assertEqual([r.urgency for r in view.records], [900000, 700000, 500000])
        z.refresh_from_db()
        self.assertEqual(z.importance, MIDPOINT)

    def test_forced_rebalance(self):
        a = make_task('A', urgency=600001)
        b = make_task('B', urgency=600000)
        c = make_task('C', urgency=599999)
        d = make_task('D', urgency=100000)

        view = reorder(OWNER, d.pk, a.pk, SortMode.URGENCY)

        self.assertTrue(view.rebalanced)
        self.assertEqual(len(view.patches), 4)
        self.assertEqual([r.id for r in view.records], [a.pk, d.pk, b.pk, c.pk])
        self.assertEqual([r.urgency for r in view.records], [800000, 600000, 400000, 200000])
        self.assertTrue(all(r.importance == MIDPOINT for r in view.records))

    def test_cross_quadrant_drag(self):
        p = make_task('P', importance=800000, urgency=800000)
        r = make_task('R', importance=400000, urgency=400000)
        s = make_task('S', importance=300000, urgency=200000)
        self.assertEqual(s.quadrant, Quadrant.ELIMINATE)

        view = reorder(OWNER, s.pk, p.pk, SortMode.BOTH)

        s.refresh_from_db()
        self.assertEqual((s.importance, s.urgency), (600000, 600000))
        self.assertEqual(s.quadrant, Quadrant.DO_FIRST)
        self.assertEqual(view.position_of(s.pk), view.position_of(p.pk) + 1)
        self.assertEqual(view.position_of(r.pk), 2)

    def test_drop_after_last_task(self):
        a = make_task('A', urgency=900000)
        b = make_task('B', urgency=100000)

        view = reorder(OWNER, a.pk, b.pk, SortMode.URGENCY)

        self.assertEqual([r.id for r in view.records], [b.pk, a.pk])
        self.assertEqual(view.records[1].urgency, 50000)

    def test_noop_touches_nothing(self):
        a = make_task('A')
        before = self.coordinates()

        with self.assertNumQueries(0):
            with self.assertRaises(NoOp):
                reorder(OWNER, a.pk, a.pk, SortMode.BOTH)

        self.assertEqual(self.coordinates(), before)

    def test_completed_task_is_not_found(self):
        a = make_task('A')
        done = make_task('Done', completed=True)
        before = self.coordinates()

        with self.assertRaises(NotFound):
            reorder(OWNER, done.pk, a.pk, SortMode.BOTH)
        with self.assertRaises(NotFound):
            reorder(OWNER, a.pk, done.pk, SortMode.BOTH)

        self.assertEqual(self.coordinates(), before)

    def test_other_owner_task_is_not_found(self):
        a = make_task('A')
        foreign = make_task('Foreign', owner_id='owner-2')
        with self.assertRaises(NotFound):
            reorder(OWNER, foreign.pk, a.pk, SortMode.URGENCY)

    def test_failed_rebalance_commits_nothing(self):
        tasks = [make_task(f'T{i}', urgency=600000 - i) for i in range(4)]
        before = self.coordinates()
        real_update = QuerySet.update
        calls = []

        def flaky_update(queryset, **kwargs):
            calls.append(kwargs)
            if len(calls) == 3:
                raise DatabaseError('database is locked')
            return real_update(queryset, **kwargs)

        with mock.patch.object(QuerySet, 'update', autospec=True, side_effect=flaky_update):
            with self.assertRaises(PersistenceFailure):
                reorder(OWNER, tasks[3].pk, tasks[0].pk, SortMode.URGENCY)

        self.assertEqual(len(calls), 3)
        self.assertEqual(self.coordinates(), before)

    def test_order_placement_and_bounds_over_random_drags(self):
        rng = random.Random(20240611)
        tasks = []
        for i in range(8):
            # Half the list is clustered so both branches get exercised
            if i % 2:
                importance = MIDPOINT + rng.randint(-3, 3)
                urgency = MIDPOINT + rng.randint(-3, 3)
            else:
                importance = rng.randint(0, MAX_VALUE)
                urgency = rng.randint(0, MAX_VALUE)
            tasks.append(make_task(f'T{i}', importance=importance, urgency=urgency))
        ids = [t.pk for t in tasks]

        branches = set()
        for _ in range(60):
            mode = rng.choice(list(SortMode))
            dragged_id, target_id = rng.sample(ids, 2)

            view = reorder(OWNER, dragged_id, target_id, mode)
            branches.add(view.rebalanced)

            self.assertEqual(
                view.position_of(dragged_id),
                view.position_of(target_id) + 1,
                f"{dragged_id} should follow {target_id} in {mode.value} mode"
            )
            by_id = {r.id: r for r in view.records}
            self.assertEqual(compare(by_id[target_id], by_id[dragged_id], mode), -1)
            for importance, urgency in self.coordinates().values():
                self.assertTrue(is_in_bounds(importance))
                self.assertTrue(is_in_bounds(urgency))

        self.assertEqual(branches, {True, False})

    def test_rebalance_produces_strictly_descending_values(self):
        tasks = [make_task(f'T{i}', importance=300000 + i) for i in range(6)]

        view = reorder(OWNER, tasks[0].pk, tasks[5].pk, SortMode.IMPORTANCE)

        self.assertTrue(view.rebalanced)
        values = [r.importance for r in view.records]
        self.assertEqual(len(set(values)), 6)
        self.assertTrue(all(a > b for a, b in zip(values, values[1:])))


class APIEndpointTests(APITestCase):
    """Tests for the API endpoints."""

    def setUp(self):
        cache.clear()

    def url(self, suffix=''):
        return f'/api/owners/{OWNER}/tasks/{suffix}'

    def post_json(self, url, data):
        return self.client.post(
            url,
            data=json.dumps(data),
            content_type='application/json'
        )

    def test_create_task_with_defaults(self):
        response = self.post_json(self.url(), {'title': '  Call the bank  '})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        task = response.data['task']
        self.assertEqual(task['title'], 'Call the bank')
        self.assertEqual(task['importance'], MIDPOINT)
        self.assertEqual(task['urgency'], MIDPOINT)
        self.assertEqual(task['quadrant']['quadrant'], 'Q1')
        self.assertEqual(Task.objects.get(pk=task['id']).owner_id, OWNER)

    def test_create_task_rejects_out_of_range_coordinates(self):
        response = self.post_json(self.url(), {'title': 'Bad', 'importance': MAX_VALUE + 1})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_INVALID_INPUT.value)
        self.assertIn('importance', response.data['errors'])

    def test_create_task_rejects_blank_title(self):
        response = self.post_json(self.url(), {'title': '   '})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_tasks_sorted_by_mode(self):
        a = make_task('A', importance=100000, urgency=900000)
        b = make_task('B', importance=900000, urgency=100000)
        make_task('Done', completed=True)

        response = self.client.get(self.url(), {'mode': 'importance'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['mode'], 'importance')
        self.assertEqual([t['id'] for t in response.data['tasks']], [b.pk, a.pk])

    def test_list_tasks_invalid_mode(self):
        response = self.client.get(self.url(), {'mode': 'eisenhower'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_INVALID_MODE.value)

    def test_reorder_endpoint_success(self):
        x = make_task('X', urgency=900000)
        y = make_task('Y', urgency=500000)
        z = make_task('Z', urgency=100000)

        response = self.post_json(
            self.url('reorder/'),
            {'dragged_id': z.pk, 'target_id': x.pk, 'mode': 'urgency'}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['changed'])
        self.assertFalse(response.data['rebalanced'])
        self.assertEqual(response.data['order'], [x.pk, z.pk, y.pk])
        self.assertEqual(response.data['tasks'][1]['urgency'], 700000)

    def test_reorder_endpoint_defaults_to_both_mode(self):
        p = make_task('P', importance=800000, urgency=800000)
        s = make_task('S', importance=300000, urgency=200000)

        response = self.post_json(self.url('reorder/'), {'dragged_id': s.pk, 'target_id': p.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['mode'], 'both')
        self.assertEqual(response.data['tasks'][1]['quadrant']['quadrant'], 'Q1')

    def test_reorder_endpoint_noop(self):
        a = make_task('A')

        response = self.post_json(self.url('reorder/'), {'dragged_id': a.pk, 'target_id': a.pk})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertFalse(response.data['changed'])

    def test_reorder_endpoint_not_found(self):
        a = make_task('A')

        response = self.post_json(self.url('reorder/'), {'dragged_id': a.pk, 'target_id': 424242})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_NOT_FOUND.value)

    def test_reorder_endpoint_persistence_failure(self):
        a = make_task('A', urgency=900000)
        b = make_task('B', urgency=100000)

        with mock.patch.object(QuerySet, 'update', side_effect=DatabaseError('read-only')):
            response = self.post_json(self.url('reorder/'), {'dragged_id': a.pk, 'target_id': b.pk})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_PERSISTENCE_FAILURE.value)

    def test_reorder_endpoint_invalid_input(self):
        response = self.post_json(self.url('reorder/'), {'dragged_id': 1, 'mode': 'sideways'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('target_id', response.data['errors'])
        self.assertIn('mode', response.data['errors'])

    def test_reorder_endpoint_invalid_mode(self):
        """An unknown sort mode is reported as ERR_INVALID_MODE."""
        a = make_task('A')
        b = make_task('B')

        response = self.post_json(
            self.url('reorder/'),
            {'dragged_id': a.pk, 'target_id': b.pk, 'mode': 'bogus'}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_INVALID_MODE.value)
        self.assertIn('mode', response.data['errors'])

    def test_reorder_endpoint_invariant_violation(self):
        """An out-of-range computed coordinate aborts the write with HTTP 500."""
        a = make_task('A', urgency=900000)
        b = make_task('B', urgency=100000)
        bad_patch = CoordinatePatch(id=a.pk, urgency=MAX_VALUE + 1)

        with mock.patch('tasks.reorder.allocate', return_value=bad_patch):
            response = self.post_json(self.url('reorder/'), {'dragged_id': a.pk, 'target_id': b.pk})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error_code'], ErrorCode.ERR_INVARIANT_VIOLATION.value)
        a.refresh_from_db()
        self.assertEqual(a.urgency, 900000)

    def test_toggle_removes_task_from_ordering(self):
        a = make_task('A')

        response = self.client.post(self.url(f'{a.pk}/toggle/'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['task']['completed'])
        self.assertEqual(self.client.get(self.url()).data['count'], 0)

    def test_toggle_other_owner_task_is_404(self):
        foreign = make_task('Foreign', owner_id='owner-2')
        response = self.client.post(self.url(f'{foreign.pk}/toggle/'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_matrix_groups_by_quadrant(self):
        make_task('Fire', importance=900000, urgency=900000)
        make_task('Plan', importance=900000, urgency=100000)
        make_task('Noise', importance=100000, urgency=100000)

        response = self.client.get(self.url('matrix/'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        quadrants = response.data['quadrants']
        self.assertEqual(response.data['total_tasks'], 3)
        self.assertEqual(quadrants['Q1']['count'], 1)
        self.assertEqual(quadrants['Q2']['tasks'][0]['title'], 'Plan')
        self.assertEqual(quadrants['Q3']['count'], 0)
        self.assertEqual(quadrants['Q4']['title'], 'Eliminate')

    def test_api_info_endpoint(self):
        """GET /api/ should return API information."""
        response = self.client.get('/api/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('name', response.data)
        self.assertIn('endpoints', response.data)
        self.assertIn('both', response.data['modes'])
        self.assertIn('ERR_NOT_FOUND', response.data['error_codes'])
