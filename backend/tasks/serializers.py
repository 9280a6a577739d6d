"""
Serializers for the Task model.

This module provides serialization/deserialization for Task objects
and validates incoming reorder intents.
"""

from rest_framework import serializers

from .coordinates import MAX_VALUE, MIDPOINT, MIN_VALUE, SortMode
from .models import Task


class TaskInputSerializer(serializers.ModelSerializer):
    """
    Serializer for creating a task.

    Coordinates are optional and default to the midpoint of the range.
    """

    importance = serializers.IntegerField(
        min_value=MIN_VALUE,
        max_value=MAX_VALUE,
        default=MIDPOINT
    )
    urgency = serializers.IntegerField(
        min_value=MIN_VALUE,
        max_value=MAX_VALUE,
        default=MIDPOINT
    )

    class Meta:
        model = Task
        fields = ['title', 'description', 'importance', 'urgency']

    def validate_title(self, value):
        """Ensure title is not empty or just whitespace."""
        if not value or not value.strip():
            raise serializers.ValidationError("Title cannot be empty")
        return value.strip()


class TaskOutputSerializer(serializers.ModelSerializer):
    """
    Serializer for task output with its derived quadrant.
    """

    quadrant = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'completed',
            'importance', 'urgency', 'quadrant',
            'created_at', 'updated_at'
        ]

    def get_quadrant(self, obj) -> dict:
        return obj.quadrant.to_dict()


class SortModeField(serializers.ChoiceField):
    """Choice field that returns a SortMode member."""

    def __init__(self, **kwargs):
        super().__init__(choices=SortMode.choices(), **kwargs)

    def to_internal_value(self, data):
        return SortMode(super().to_internal_value(data))

    def to_representation(self, value):
        if isinstance(value, SortMode):
            return value.value
        return super().to_representation(value)


class ReorderInputSerializer(serializers.Serializer):
    """
    Serializer for a drop intent: place ``dragged_id`` right after ``target_id``.
    """

    dragged_id = serializers.IntegerField(required=True)
    target_id = serializers.IntegerField(required=True)
    mode = SortModeField(default=SortMode.BOTH, required=False)
