"""
API Views for the Task Tracker.

This module provides the REST API endpoints for managing a user's tasks
and for reading statistics about them. Every task endpoint is scoped to
the authenticated user.
"""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .models import Task, TaskStatus
from .serializers import (
    SORT_FIELDS,
    BulkDeleteSerializer,
    StatsReportSerializer,
    TaskListQuerySerializer,
    TaskSerializer,
    TimeSummarySerializer
)
from .stats import (
    ErrorCode,
    InputDataError,
    StatsReport,
    compute_stats,
    summarize_pending_time
)


logger = logging.getLogger(__name__)


# ============================================
# RATE LIMITING CLASSES
# ============================================

class StatsRateThrottle(UserRateThrottle):
    """Rate limit for statistics endpoints - 60 requests per minute."""
    rate = '60/min'


class BulkDeleteRateThrottle(UserRateThrottle):
    """Rate limit for bulk deletion - 10 requests per minute."""
    rate = '10/min'


# ============================================
# HELPERS
# ============================================

def error_response(code: ErrorCode, message: str, http_status: int, **extra) -> Response:
    """Build the standard error envelope."""
    return Response(
        {
            'success': False,
            'error_code': code.value,
            'message': message,
            **extra
        },
        status=http_status
    )


def _validation_error_code(errors) -> ErrorCode:
    """Pick the most specific error code for a set of serializer errors."""
    if 'priority' in errors:
        return ErrorCode.ERR_INVALID_PRIORITY
    if 'endTime' in errors:
        return ErrorCode.ERR_INVALID_TIME_RANGE
    if 'status' in errors:
        return ErrorCode.ERR_INVALID_STATUS
    return ErrorCode.ERR_MISSING_FIELD


def _get_owned_task(request: Request, task_id: int):
    """
    Look up a task and check that it belongs to the requesting user.

    Returns:
        Tuple of (task, error_response). Exactly one of them is None.
    """
    task = Task.objects.filter(pk=task_id).first()
    if task is None:
        return None, error_response(
            ErrorCode.ERR_TASK_NOT_FOUND,
            'Task not found',
            status.HTTP_404_NOT_FOUND
        )
    if task.user_id != request.user.pk:
        logger.warning(
            "User %s tried to access task %s owned by user %s",
            request.user.pk, task.pk, task.user_id
        )
        return None, error_response(
            ErrorCode.ERR_NOT_AUTHORIZED,
            'Not authorized to access this task',
            status.HTTP_403_FORBIDDEN
        )
    return task, None


def build_stats_report(user) -> StatsReport:
    """Compute the statistics report for every task owned by ``user``."""
    tasks = list(Task.objects.for_user(user))
    return compute_stats(tasks, now=timezone.now())


def _stats_failure(exc: InputDataError) -> Response:
    logger.error("Task statistics failed: %s", exc, exc_info=True)
    return Response(
        {
            'success': False,
            **exc.to_dict()
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


# ============================================
# API ENDPOINTS
# ============================================

@extend_schema(
    summary="List or create tasks",
    description="""
    GET lists the authenticated user's tasks, optionally filtered by priority
    and status and sorted by a task field.

    POST creates a new task. The task always starts as Pending.
    """,
    parameters=[
        OpenApiParameter('priority', OpenApiTypes.INT, description='Filter by priority (1-5)'),
        OpenApiParameter('status', OpenApiTypes.STR, enum=TaskStatus.values),
        OpenApiParameter('sortBy', OpenApiTypes.STR, enum=list(SORT_FIELDS)),
        OpenApiParameter('sortOrder', OpenApiTypes.STR, enum=['asc', 'desc']),
    ],
    request=TaskSerializer,
    responses={200: TaskSerializer(many=True), 201: TaskSerializer},
    tags=['Tasks']
)
@api_view(['GET', 'POST'])
def task_list(request: Request) -> Response:
    """
    List the user's tasks or create a new one.

    GET /api/tasks/?priority=3&status=Pending&sortBy=startTime&sortOrder=desc
    POST /api/tasks/
    """
    if request.method == 'POST':
        serializer = TaskSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                _validation_error_code(serializer.errors),
                'Invalid task data. Please check the submitted fields.',
                status.HTTP_400_BAD_REQUEST,
                errors=serializer.errors
            )

        task = serializer.save(user=request.user, status=TaskStatus.PENDING)
        logger.info("User %s created task %s", request.user.pk, task.pk)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)

    query = TaskListQuerySerializer(data=request.query_params)
    if not query.is_valid():
        return error_response(
            ErrorCode.ERR_INVALID_SORT,
            'Invalid filter or sort parameters.',
            status.HTTP_400_BAD_REQUEST,
            errors=query.errors
        )

    params = query.validated_data
    tasks = Task.objects.for_user(request.user)

    if 'priority' in params:
        tasks = tasks.filter(priority=params['priority'])
    if 'status' in params:
        tasks = tasks.filter(status=params['status'])

    if 'sortBy' in params:
        field_name = SORT_FIELDS[params['sortBy']]
        prefix = '-' if params.get('sortOrder') == 'desc' else ''
        # id keeps the order stable between equal keys
        tasks = tasks.order_by(f'{prefix}{field_name}', 'id')

    return Response(TaskSerializer(tasks, many=True).data)


@extend_schema(
    summary="Retrieve, update or delete a task",
    description="""
    PUT and PATCH apply partial updates. Moving a task from Pending to
    Finished records the current time as its actual end time.
    """,
    request=TaskSerializer,
    responses={200: TaskSerializer},
    tags=['Tasks']
)
@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
def task_detail(request: Request, task_id: int) -> Response:
    """
    Read, update or delete a single task owned by the user.

    GET/PUT/PATCH/DELETE /api/tasks/<id>/
    """
    task, failure = _get_owned_task(request, task_id)
    if failure is not None:
        return failure

    if request.method == 'GET':
        return Response(TaskSerializer(task).data)

    if request.method == 'DELETE':
        task.delete()
        logger.info("User %s deleted task %s", request.user.pk, task_id)
        return Response({
            'message': 'Task deleted successfully',
            'id': task_id
        })

    serializer = TaskSerializer(task, data=request.data, partial=True)
    if not serializer.is_valid():
        return error_response(
            _validation_error_code(serializer.errors),
            'Invalid task data. Please check the submitted fields.',
            status.HTTP_400_BAD_REQUEST,
            errors=serializer.errors
        )

    changes = {}
    if (serializer.validated_data.get('status') == TaskStatus.FINISHED
            and task.status == TaskStatus.PENDING):
        changes['actual_end_time'] = timezone.now()

    task = serializer.save(**changes)
    return Response(TaskSerializer(task).data)


@extend_schema(
    summary="Delete several tasks",
    description="Delete every task in `ids` that belongs to the user. Unknown or foreign ids are ignored.",
    request=BulkDeleteSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['POST'])
@throttle_classes([BulkDeleteRateThrottle])
def bulk_delete_tasks(request: Request) -> Response:
    """
    Delete a selection of the user's tasks.

    POST /api/tasks/bulk-delete/

    Request Body:
    {
        "ids": [1, 2, 3]
    }
    """
    serializer = BulkDeleteSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            ErrorCode.ERR_MISSING_FIELD,
            'No task ids provided.',
            status.HTTP_400_BAD_REQUEST,
            errors=serializer.errors
        )

    tasks = Task.objects.for_user(request.user).filter(pk__in=serializer.validated_data['ids'])
    deleted_ids = sorted(tasks.values_list('pk', flat=True))
    tasks.delete()
    logger.info("User %s deleted %d tasks", request.user.pk, len(deleted_ids))

    return Response({
        'success': True,
        'deleted': deleted_ids,
        'count': len(deleted_ids)
    })


@extend_schema(
    summary="Get task statistics",
    description="""
    Completion percentages, average completion time (hours) and, for each
    priority level 1-5, the number of pending tasks with their average time
    lapsed and average time left (hours).
    """,
    responses={200: StatsReportSerializer},
    tags=['Statistics']
)
@api_view(['GET'])
@throttle_classes([StatsRateThrottle])
def task_stats(request: Request) -> Response:
    """
    Return statistics for all of the user's tasks.

    GET /api/tasks/stats/
    """
    try:
        report = build_stats_report(request.user)
    except InputDataError as exc:
        return _stats_failure(exc)

    return Response(StatsReportSerializer(report).data)


@extend_schema(
    summary="Get pending time summary",
    description="Total time lapsed, total time remaining and total estimated time per priority for pending tasks.",
    responses={200: TimeSummarySerializer},
    tags=['Statistics']
)
@api_view(['GET'])
@throttle_classes([StatsRateThrottle])
def task_time_summary(request: Request) -> Response:
    """
    Return the overall pending-time summary for the user's tasks.

    GET /api/tasks/stats/summary/
    """
    try:
        report = build_stats_report(request.user)
    except InputDataError as exc:
        return _stats_failure(exc)

    return Response(TimeSummarySerializer(summarize_pending_time(report)).data)


@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'Task Tracker API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'endpoints': {
            'POST /api/user/register/': 'Create an account and receive a token',
            'POST /api/user/login/': 'Log in and receive a token',
            'GET /api/tasks/': 'List tasks (filter by priority/status, sort by field)',
            'POST /api/tasks/': 'Create a task',
            'GET /api/tasks/<id>/': 'Retrieve a task',
            'PUT /api/tasks/<id>/': 'Update a task',
            'DELETE /api/tasks/<id>/': 'Delete a task',
            'POST /api/tasks/bulk-delete/': 'Delete several tasks',
            'GET /api/tasks/stats/': 'Task statistics',
            'GET /api/tasks/stats/summary/': 'Pending time summary',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
            'GET /api/': 'This info endpoint'
        },
        'error_codes': {
            code.value: code.name for code in ErrorCode
        }
    })
