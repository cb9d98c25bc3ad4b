"""API views for the booking domain."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.rooms.models import Room
from shared.domain.exceptions import PersistenceError

from .application.command_handlers import CommitBookingCommand
from .lock_stores import get_lock_manager
from .models import Booking
from .serializers import (
    AvailabilityRequestSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    CandidateSerializer,
    LockRequestSerializer,
    OccupancyRequestSerializer,
)
from .services import get_availability_index, get_booking_validator, get_commit_handler, search_availability

logger = logging.getLogger(__name__)


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Availability search, final validation and commit of bookings."""

    queryset = Booking.objects.prefetch_related("booking_rooms__room").all()
    serializer_class = BookingSerializer

    def get_permissions(self):  # type: ignore
        if self.action in ("list", "retrieve"):
            return [permissions.IsAdminUser()]
        return [permissions.AllowAny()]

    @action(detail=False, methods=["post"])
    def availability(self, request):  # type: ignore
        serializer = AvailabilityRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = search_availability(
            data["stay"],
            data["guest_count"],
            room_ids=data["room_ids"],
            exclude_booking_id=data.get("exclude_booking_id") or None,
            include_partial=data["include_partial"],
        )
        return Response(result.to_dict())

    @action(detail=False, methods=["post"])
    def occupancy(self, request):  # type: ignore
        serializer = OccupancyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            stats = get_availability_index().occupancy_stats(serializer.validated_data["stay"])
        except PersistenceError as exc:
            logger.error(f"Occupancy stats unavailable: {exc}")
            return Response({"detail": "Occupancy is temporarily unavailable."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(stats.to_dict())

    @action(detail=False, methods=["post"])
    def validate(self, request):  # type: ignore
        serializer = CandidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = get_booking_validator().final_validation(
            serializer.to_candidate(), serializer.validated_data["session_id"]
        )
        return Response(result.to_dict())

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        command = CommitBookingCommand(
            session_id=data["session_id"],
            candidate=serializer.to_candidate(),
            guest_name=data["guest_name"],
            guest_email=data["guest_email"],
            guest_phone=data["guest_phone"],
            organization=data["organization"],
            notes=data["notes"],
            created_by_id=request.user.pk if request.user.is_authenticated else None,
        )
        result = get_commit_handler().handle(command)
        if not result.committed:
            return Response(
                {"state": result.attempt.state.value, **result.validation.to_dict()},
                status=status.HTTP_409_CONFLICT,
            )

        body = BookingSerializer(result.booking, context=self.get_serializer_context()).data
        body["warnings"] = result.warnings
        return Response(body, status=status.HTTP_201_CREATED)


class ReservationLockViewSet(viewsets.ViewSet):
    """Acquire, inspect and release a session's hold on rooms."""

    permission_classes = [permissions.AllowAny]
    lookup_field = "session_id"
    lookup_value_regex = r"[^/]+"

    def create(self, request):  # type: ignore
        serializer = LockRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        room_ids = sorted(set(data["room_ids"]))
        known = set(Room.objects.active().filter(room_id__in=room_ids).values_list("room_id", flat=True))
        unknown = [room_id for room_id in room_ids if room_id not in known]
        if unknown:
            return Response({"room_ids": [f"Unknown or inactive rooms: {', '.join(unknown)}"]},
                            status=status.HTTP_400_BAD_REQUEST)

        locks = get_lock_manager()
        session_id = data["session_id"]
        acquired = locks.acquire(room_ids, data["stay"], session_id)
        body = {
            "acquired": acquired,
            "other_active_sessions": locks.other_active_sessions(session_id, room_ids, data["stay"]),
            **locks.status(session_id).to_dict(),
        }
        return Response(body, status=status.HTTP_200_OK if acquired else status.HTTP_409_CONFLICT)

    def retrieve(self, request, session_id=None):  # type: ignore
        return Response(get_lock_manager().status(session_id).to_dict())

    def destroy(self, request, session_id=None):  # type: ignore
        released = get_lock_manager().release(session_id)
        return Response({"released": released}, status=status.HTTP_200_OK)
