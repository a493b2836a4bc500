"""
Serializers for the Task model and task statistics.

This module handles validation of incoming task data and the JSON shape
of tasks and statistics reports returned by the API. Field names are
camelCase on the wire.
"""

from rest_framework import serializers

from .models import Task, TaskStatus


SORT_FIELDS = {
    'title': 'title',
    'priority': 'priority',
    'status': 'status',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
}


class TaskSerializer(serializers.ModelSerializer):
    """
    Serializer for reading and writing tasks.

    On creation, title, startTime, endTime and priority are required and
    endTime must be after startTime. The status always starts as Pending
    (the view enforces this); actualEndTime is managed by the server.
    """

    startTime = serializers.DateTimeField(source='start_time')
    endTime = serializers.DateTimeField(source='end_time')
    actualEndTime = serializers.DateTimeField(source='actual_end_time', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    priority = serializers.IntegerField(min_value=1, max_value=5)
    status = serializers.ChoiceField(choices=TaskStatus.choices, required=False)

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'priority', 'status', 'startTime', 'endTime',
            'actualEndTime', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']

    def validate_title(self, value):
        """Ensure title is not empty or just whitespace."""
        if not value or not value.strip():
            raise serializers.ValidationError("Title cannot be empty")
        return value.strip()

    def validate(self, attrs):
        if self.instance is None:
            start_time = attrs.get('start_time')
            end_time = attrs.get('end_time')
            if start_time and end_time and end_time <= start_time:
                raise serializers.ValidationError(
                    {'endTime': 'End time must be after start time'}
                )
        return attrs


class TaskListQuerySerializer(serializers.Serializer):
    """
    Serializer for the filter and sort query parameters of the task list.
    """

    priority = serializers.IntegerField(min_value=1, max_value=5, required=False)
    status = serializers.ChoiceField(choices=TaskStatus.choices, required=False)
    sortBy = serializers.ChoiceField(choices=list(SORT_FIELDS), required=False)
    sortOrder = serializers.ChoiceField(
        choices=[('asc', 'Ascending'), ('desc', 'Descending')],
        default='asc',
        required=False
    )


class BulkDeleteSerializer(serializers.Serializer):

    ids = serializers.ListField(
        child=serializers.IntegerField(),
        min_length=1,
        error_messages={
            'min_length': 'At least one task id is required'
        }
    )


class PriorityBucketSerializer(serializers.Serializer):
    """
    Serializer for one priority level of pending-time statistics.
    """

    priority = serializers.IntegerField()
    averageTimeLapsed = serializers.FloatField(source='average_time_lapsed')
    averageTimeToFinish = serializers.FloatField(source='average_time_to_finish')
    pendingCount = serializers.IntegerField(source='pending_count')


class StatsReportSerializer(serializers.Serializer):
    """
    Serializer for the statistics report of one user's tasks.
    """

    totalTasks = serializers.IntegerField(source='total_tasks')
    completedPercentage = serializers.FloatField(source='completed_percentage')
    pendingPercentage = serializers.FloatField(source='pending_percentage')
    averageCompletionTime = serializers.FloatField(source='average_completion_time')
    pendingTimeStats = PriorityBucketSerializer(source='pending_time_stats', many=True)


class PriorityTimeSerializer(serializers.Serializer):
    priority = serializers.IntegerField()
    pendingCount = serializers.IntegerField(source='pending_count')
    totalEstimatedTime = serializers.FloatField(source='total_estimated_time')


class TimeSummarySerializer(serializers.Serializer):
    """
    Serializer for the overall pending-time summary.
    """

    totalTimeLapsed = serializers.FloatField(source='total_time_lapsed')
    totalTimeRemaining = serializers.FloatField(source='total_time_remaining')
    totalEstimatedTime = serializers.FloatField(source='total_estimated_time')
    perPriority = PriorityTimeSerializer(source='per_priority', many=True)
