"""Serializers for the pricing API."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.pricing.domain.inputs import AddonItem, GuestCount, RoomUsage
from apps.pricing.domain.rates import AGE_GROUPS, MEAL_AGE_GROUPS, PRIVATE_ROOM_TYPES, USAGE_PRIVATE, USAGE_SHARED
from apps.rooms.models import Room
from shared.domain.exceptions import BookingValidationError
from shared.domain.value_objects import Stay


class GuestCountSerializer(serializers.Serializer):
    adult = serializers.IntegerField(min_value=0, default=0)
    student = serializers.IntegerField(min_value=0, default=0)
    child = serializers.IntegerField(min_value=0, default=0)
    infant = serializers.IntegerField(min_value=0, default=0)
    baby = serializers.IntegerField(min_value=0, default=0)
    leader = serializers.IntegerField(min_value=0, default=0)

    def validate(self, attrs):  # type: ignore
        if attrs.get("leader", 0) > attrs.get("adult", 0):
            raise serializers.ValidationError("Leader count cannot exceed adult count.")
        return attrs

    @staticmethod
    def to_domain(data) -> GuestCount:
        return GuestCount(**{key: data.get(key, 0) for key in AGE_GROUPS + ("leader",)})


class RoomSelectionSerializer(serializers.Serializer):
    """A selected room; type and usage are looked up when not supplied."""

    room_id = serializers.CharField(max_length=32)
    room_type = serializers.CharField(max_length=20, required=False)
    usage_type = serializers.ChoiceField(choices=[USAGE_SHARED, USAGE_PRIVATE], required=False)
    assigned_guests = serializers.IntegerField(min_value=0, default=0)

    def validate(self, attrs):  # type: ignore
        room = Room.objects.filter(room_id=attrs["room_id"]).first()
        if room is None and "room_type" not in attrs:
            raise serializers.ValidationError({"room_id": f"Unknown room {attrs['room_id']}."})
        attrs["_room"] = room
        return attrs

    @staticmethod
    def to_domain(data) -> RoomUsage:
        room = data.get("_room")
        room_type = data.get("room_type") or room.room_type
        usage_type = data.get("usage_type") or (
            USAGE_PRIVATE if room_type in PRIVATE_ROOM_TYPES else USAGE_SHARED
        )
        return RoomUsage(
            room_id=data["room_id"],
            room_type=room_type,
            usage_type=usage_type,
            capacity=room.capacity if room else 0,
            assigned_guests=data.get("assigned_guests", 0),
            rate=room.base_rate if room else None,
        )


class AddonSelectionSerializer(serializers.Serializer):
    addon_id = serializers.CharField(max_length=50)
    category = serializers.CharField(max_length=10, required=False, default="")
    quantity = serializers.IntegerField(min_value=0, default=1)
    age_breakdown = serializers.DictField(child=serializers.IntegerField(min_value=0), required=False)
    hours = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal("0"), default=Decimal("0"))
    guest_type = serializers.ChoiceField(choices=["guest", "other"], default="guest")

    def validate_age_breakdown(self, value):  # type: ignore
        unknown = set(value) - set(MEAL_AGE_GROUPS)
        if unknown:
            raise serializers.ValidationError(f"Unknown age groups: {', '.join(sorted(unknown))}")
        return value

    @staticmethod
    def to_domain(data) -> AddonItem:
        return AddonItem(
            addon_id=data["addon_id"],
            category=data.get("category", ""),
            quantity=data.get("quantity", 1),
            age_breakdown=dict(data.get("age_breakdown") or {}),
            hours=data.get("hours", Decimal("0")),
            guest_type=data.get("guest_type", "guest"),
        )


class StaySerializerMixin(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        attrs = super().validate(attrs)
        try:
            attrs["stay"] = Stay(attrs["start_date"], attrs["end_date"])
        except BookingValidationError as exc:
            raise serializers.ValidationError({"end_date": str(exc)})
        return attrs


class PriceRequestSerializer(StaySerializerMixin):
    """Input of ``POST /pricing/calculate/``."""

    rooms = RoomSelectionSerializer(many=True, allow_empty=False)
    guests = GuestCountSerializer()
    addons = AddonSelectionSerializer(many=True, required=False, default=list)

    def to_domain(self):
        data = self.validated_data
        return (
            [RoomSelectionSerializer.to_domain(room) for room in data["rooms"]],
            GuestCountSerializer.to_domain(data["guests"]),
            data["stay"],
            [AddonSelectionSerializer.to_domain(addon) for addon in data.get("addons", [])],
        )
