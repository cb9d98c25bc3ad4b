"""Serializers for the room catalogue."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Room


class RoomSerializer(serializers.ModelSerializer):
    usage_type = serializers.ReadOnlyField()

    class Meta:
        model = Room
        fields = [
            "room_id",
            "name",
            "room_type",
            "usage_type",
            "capacity",
            "base_rate",
            "floor",
            "amenities",
            "description",
        ]
        read_only_fields = fields
