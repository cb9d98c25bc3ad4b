"""Serializers for the booking API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.domain.entities import BookingCandidate
from apps.pricing.serializers import AddonSelectionSerializer, GuestCountSerializer, StaySerializerMixin

from .models import Booking, BookingRoom


class AvailabilityRequestSerializer(StaySerializerMixin):
    room_ids = serializers.ListField(child=serializers.CharField(max_length=32), required=False, default=list)
    guest_count = serializers.IntegerField(min_value=0, default=0)
    exclude_booking_id = serializers.CharField(required=False, allow_blank=True, default=None, allow_null=True)
    include_partial = serializers.BooleanField(default=False)


class OccupancyRequestSerializer(StaySerializerMixin):
    pass


class LockRequestSerializer(StaySerializerMixin):
    session_id = serializers.CharField(max_length=64)
    room_ids = serializers.ListField(child=serializers.CharField(max_length=32), allow_empty=False)


class CandidateSerializer(serializers.Serializer):
    """
    A booking candidate; dates stay raw so final validation can report an
    inverted range in its own result.
    """

    session_id = serializers.CharField(max_length=64)
    room_ids = serializers.ListField(child=serializers.CharField(max_length=32), allow_empty=False)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    guests = GuestCountSerializer()
    addons = AddonSelectionSerializer(many=True, required=False, default=list)
    room_guests = serializers.DictField(child=serializers.IntegerField(min_value=0), required=False, default=dict)
    booking_id = serializers.CharField(required=False, allow_null=True, default=None)

    def to_candidate(self) -> BookingCandidate:
        data = self.validated_data
        return BookingCandidate(
            room_ids=tuple(data["room_ids"]),
            start_date=data["start_date"],
            end_date=data["end_date"],
            guests=GuestCountSerializer.to_domain(data["guests"]),
            addons=tuple(AddonSelectionSerializer.to_domain(a) for a in data.get("addons", [])),
            booking_id=data.get("booking_id"),
            room_guests=dict(data.get("room_guests") or {}),
        )


class BookingCreateSerializer(CandidateSerializer):
    guest_name = serializers.CharField(max_length=150)
    guest_email = serializers.EmailField(required=False, allow_blank=True, default="")
    guest_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    organization = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingRoomSerializer(serializers.ModelSerializer):
    room_id = serializers.ReadOnlyField(source="room.room_id")

    class Meta:
        model = BookingRoom
        fields = ["room_id", "assigned_guests"]


class BookingSerializer(serializers.ModelSerializer):
    rooms = BookingRoomSerializer(source="booking_rooms", many=True, read_only=True)
    nights = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "guest_name",
            "guest_email",
            "guest_phone",
            "organization",
            "start_date",
            "end_date",
            "nights",
            "status",
            "rooms",
            "adult_count",
            "student_count",
            "child_count",
            "infant_count",
            "baby_count",
            "leader_count",
            "addons",
            "room_amount",
            "guest_amount",
            "addon_amount",
            "total_price",
            "currency",
            "rate_config_version",
            "price_breakdown",
            "created_at",
        ]
        read_only_fields = fields
