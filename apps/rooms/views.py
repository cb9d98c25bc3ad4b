"""API views for the room catalogue."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore

from .filters import RoomFilterSet
from .models import Room
from .serializers import RoomSerializer


class RoomViewSet(viewsets.ReadOnlyModelViewSet):
    """Active rooms, optionally filtered by ``room_type`` or ``min_capacity``."""

    queryset = Room.objects.active()
    serializer_class = RoomSerializer
    permission_classes = [permissions.AllowAny]
    lookup_field = "room_id"
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = RoomFilterSet
    ordering_fields = ["room_id", "capacity"]
