"""
API Views for the task manager.

This module provides the REST API endpoints for listing an owner's tasks in
priority order, creating and completing tasks, and persisting drag-and-drop
reorders through the priority ordering engine.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.response import Response
from rest_framework.request import Request
from rest_framework.throttling import AnonRateThrottle
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from django.shortcuts import get_object_or_404

from .coordinates import (
    MAX_VALUE,
    Quadrant,
    REBALANCE_THRESHOLD,
    SortMode,
    group_by_quadrant,
)
from .exceptions import ErrorCode, NoOp, NotFound, ReorderError
from .models import Task
from .reorder import reorder
from .repository import TaskRepository
from .serializers import (
    ReorderInputSerializer,
    TaskInputSerializer,
    TaskOutputSerializer,
)

logger = logging.getLogger(__name__)


# ============================================
# RATE LIMITING CLASSES
# ============================================

class TaskRateThrottle(AnonRateThrottle):
    """Rate limit for task list/create endpoints - 120 requests per minute."""
    rate = '120/min'


class ReorderRateThrottle(AnonRateThrottle):
    """Rate limit for the reorder endpoint - 120 requests per minute."""
    rate = '120/min'


MODE_PARAMETER = OpenApiParameter(
    name='mode',
    type=OpenApiTypes.STR,
    location=OpenApiParameter.QUERY,
    enum=[mode.value for mode in SortMode],
    default=SortMode.BOTH.value,
    description='Sort mode of the list view'
)


def _error_response(code: ErrorCode, message: str, http_status: int, **extra) -> Response:
    return Response(
        {
            'success': False,
            'error_code': code.value,
            'message': message,
            **extra
        },
        status=http_status
    )


def _mode_from_query(request: Request) -> SortMode:
    raw = request.query_params.get('mode', SortMode.BOTH.value)
    return SortMode(raw)


def _invalid_mode_response(request: Request) -> Response:
    return _error_response(
        ErrorCode.ERR_INVALID_MODE,
        f"Invalid mode: {request.query_params.get('mode')}. "
        f"Valid options: {[mode.value for mode in SortMode]}",
        status.HTTP_400_BAD_REQUEST
    )


# ============================================
# API ENDPOINTS
# ============================================

@extend_schema(
    methods=['GET'],
    summary="List active tasks in priority order",
    description="Return the owner's active tasks sorted by the requested mode, each with its quadrant.",
    parameters=[MODE_PARAMETER],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@extend_schema(
    methods=['POST'],
    summary="Create a task",
    description="Create a task. Importance and urgency default to the middle of the range.",
    request=TaskInputSerializer,
    responses={201: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET', 'POST'])
@throttle_classes([TaskRateThrottle])
def task_list(request: Request, owner_id: str) -> Response:
    """
    List or create tasks for one owner.

    GET  /api/owners/<owner_id>/tasks/?mode=both
    POST /api/owners/<owner_id>/tasks/
    """
    if request.method == 'POST':
        serializer = TaskInputSerializer(data=request.data)
        if not serializer.is_valid():
            return _error_response(
                ErrorCode.ERR_INVALID_INPUT,
                'Invalid input data. Please check the task format.',
                status.HTTP_400_BAD_REQUEST,
                errors=serializer.errors
            )

        task = serializer.save(owner_id=owner_id)
        logger.info("Created task %s for owner=%s", task.pk, owner_id)
        return Response(
            {
                'success': True,
                'error_code': ErrorCode.SUCCESS.value,
                'task': TaskOutputSerializer(task).data
            },
            status=status.HTTP_201_CREATED
        )

    try:
        mode = _mode_from_query(request)
    except ValueError:
        return _invalid_mode_response(request)

    tasks = TaskRepository().active_queryset(owner_id, mode)
    result_tasks = TaskOutputSerializer(tasks, many=True).data

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'mode': mode.value,
        'count': len(result_tasks),
        'tasks': result_tasks
    })


@extend_schema(
    summary="Toggle task completion",
    description="Mark a task completed (removing it from the ordering) or reopen it.",
    request=None,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['POST'])
@throttle_classes([TaskRateThrottle])
def toggle_task(request: Request, owner_id: str, task_id: int) -> Response:
    """
    Flip the completed flag of a task.

    POST /api/owners/<owner_id>/tasks/<task_id>/toggle/
    """
    task = get_object_or_404(Task, pk=task_id, owner_id=owner_id)
    task.completed = not task.completed
    task.save(update_fields=['completed', 'updated_at'])

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'task': TaskOutputSerializer(task).data
    })


@extend_schema(
    summary="Reorder a task",
    description="""
    Place `dragged_id` immediately after `target_id` in the list sorted by `mode`.

    The dragged task normally receives the midpoint of its new neighbors. When the
    gap between them is too small the whole list is re-spaced in one transaction.
    Dropping a task onto itself is accepted and changes nothing.
    """,
    request=ReorderInputSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Ordering']
)
@api_view(['POST'])
@throttle_classes([ReorderRateThrottle])
def reorder_tasks(request: Request, owner_id: str) -> Response:
    """
    Persist a drag-and-drop move.

    POST /api/owners/<owner_id>/tasks/reorder/

    Request Body:
    {
        "dragged_id": 12,
        "target_id": 7,
        "mode": "urgency"        // Optional: importance | urgency | both
    }
    """
    serializer = ReorderInputSerializer(data=request.data)

    if not serializer.is_valid():
        if 'mode' in serializer.errors:
            return _error_response(
                ErrorCode.ERR_INVALID_MODE,
                f"Invalid mode: {request.data.get('mode')}. "
                f"Valid options: {[mode.value for mode in SortMode]}",
                status.HTTP_400_BAD_REQUEST,
                errors=serializer.errors
            )
        return _error_response(
            ErrorCode.ERR_INVALID_INPUT,
            'Invalid reorder request.',
            status.HTTP_400_BAD_REQUEST,
            errors=serializer.errors
        )

    validated_data = serializer.validated_data
    mode = validated_data['mode']
    repository = TaskRepository()

    try:
        view = reorder(
            owner_id,
            validated_data['dragged_id'],
            validated_data['target_id'],
            mode,
            repository=repository
        )
    except NoOp:
        return Response({
            'success': True,
            'error_code': ErrorCode.SUCCESS.value,
            'changed': False,
            'message': 'Task dropped onto itself; nothing to do.'
        })
    except NotFound as exc:
        logger.warning("Stale reorder for owner=%s: %s", owner_id, exc.message)
        return _error_response(exc.code, exc.message, status.HTTP_404_NOT_FOUND)
    except ReorderError as exc:
        logger.error("Reorder failed for owner=%s: %s", owner_id, exc.message)
        return _error_response(
            exc.code,
            'Failed to reorder task. Reload the list and try again.',
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    tasks = repository.active_queryset(owner_id, mode)

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'changed': True,
        **view.to_dict(),
        'tasks': TaskOutputSerializer(tasks, many=True).data
    })


@extend_schema(
    summary="Eisenhower matrix view",
    description="Return the owner's active tasks grouped into the four priority quadrants.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Ordering']
)
@api_view(['GET'])
@throttle_classes([TaskRateThrottle])
def quadrant_matrix(request: Request, owner_id: str) -> Response:
    """
    Group active tasks by quadrant.

    GET /api/owners/<owner_id>/tasks/matrix/
    """
    tasks = {
        task.pk: task
        for task in TaskRepository().active_queryset(owner_id, SortMode.BOTH)
    }
    groups = group_by_quadrant(task.to_record() for task in tasks.values())

    quadrants = {}
    for quadrant, records in groups.items():
        quadrants[quadrant.code] = {
            **quadrant.to_dict(),
            'count': len(records),
            'tasks': TaskOutputSerializer([tasks[r.id] for r in records], many=True).data
        }

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'total_tasks': len(tasks),
        'quadrants': quadrants
    })


@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'Task Manager API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'endpoints': {
            'GET /api/owners/<owner_id>/tasks/': 'List active tasks in priority order',
            'POST /api/owners/<owner_id>/tasks/': 'Create a task',
            'POST /api/owners/<owner_id>/tasks/<id>/toggle/': 'Complete or reopen a task',
            'POST /api/owners/<owner_id>/tasks/reorder/': 'Move a task after another one',
            'GET /api/owners/<owner_id>/tasks/matrix/': 'Tasks grouped by quadrant',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
            'GET /api/': 'This info endpoint'
        },
        'modes': {
            'importance': 'Importance first, then urgency',
            'urgency': 'Urgency first, then importance',
            'both': 'Urgency then importance; reorders move both values (default)'
        },
        'coordinates': {
            'max_value': MAX_VALUE,
            'rebalance_threshold': REBALANCE_THRESHOLD
        },
        'quadrants': {q.code: f"{q.title} ({q.subtitle})" for q in Quadrant},
        'error_codes': {
            code.value: code.name for code in ErrorCode
        }
    })
