"""FilterSet for the room catalogue."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Room


class RoomFilterSet(django_filters.FilterSet):
    room_type = django_filters.ChoiceFilter(choices=Room.RoomType.choices)
    min_capacity = django_filters.NumberFilter(field_name="capacity", lookup_expr="gte")

    class Meta:
        model = Room
        fields = ["room_type", "min_capacity"]
