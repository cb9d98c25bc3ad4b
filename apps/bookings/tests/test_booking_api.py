"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.application.validator import LOCK_MISSING
from apps.bookings.models import Booking, ReservationLock
from apps.rooms.models import Room


class BookingAPITests(APITestCase):
    """Covers holds, commit, conflicts and availability search."""

    def setUp(self) -> None:
        self.large = Room.objects.create(
            room_id="L1",
            name="Large room",
            room_type=Room.RoomType.LARGE,
            capacity=20,
            base_rate=Decimal("20000"),
        )
        self.private = Room.objects.create(
            room_id="S1",
            name="Private room A",
            room_type=Room.RoomType.SMALL_A,
            capacity=2,
            base_rate=Decimal("7000"),
        )
        self.check_in = date.today() + timedelta(days=30)
        self.check_out = self.check_in + timedelta(days=2)
        self.list_url = reverse("booking-list")
        self.locks_url = reverse("reservation-lock-list")

    def _stay(self, check_in=None, check_out=None) -> dict[str, str]:
        return {
            "start_date": str(check_in or self.check_in),
            "end_date": str(check_out or self.check_out),
        }

    def _lock(self, session_id: str, room_ids=("L1",), **stay):
        payload = {"session_id": session_id, "room_ids": list(room_ids), **self._stay(**stay)}
        return self.client.post(self.locks_url, payload, format="json")

    def _booking_payload(self, session_id: str, room_ids=("L1",), **overrides):
        payload = {
            "session_id": session_id,
            "room_ids": list(room_ids),
            "guests": {"adult": 4, "child": 1},
            "guest_name": "Sato Hanako",
            "guest_email": "hanako@example.com",
            "organization": "Hill School",
            **self._stay(),
        }
        payload.update(overrides)
        return payload

    def _book(self, session_id: str, **overrides):
        with self.captureOnCommitCallbacks(execute=True):
            return self.client.post(self.list_url, self._booking_payload(session_id, **overrides), format="json")

    def test_held_rooms_can_be_booked(self) -> None:
        self.assertEqual(self._lock("session-a").status_code, status.HTTP_200_OK)

        response = self._book("session-a")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.guest_total, 5)
        self.assertEqual(list(booking.booking_rooms.values_list("room__room_id", flat=True)), ["L1"])
        self.assertEqual(booking.total_price, booking.room_amount + booking.guest_amount + booking.addon_amount)
        self.assertEqual(booking.room_amount, Decimal("40000"))
        self.assertEqual(response.data["booking_code"], booking.booking_code)
        self.assertEqual(response.data["nights"], 2)
        self.assertIn("warnings", response.data)
        # the hold is released once the booking is stored
        self.assertFalse(ReservationLock.objects.filter(session_id="session-a").exists())

    def test_booking_without_a_hold_is_refused(self) -> None:
        response = self._book("session-a")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["state"], "lock_expired")
        self.assertEqual(response.data["errors"], [LOCK_MISSING])
        self.assertEqual(Booking.objects.count(), 0)

    def test_prevent_double_booking_on_overlap(self) -> None:
        self._lock("session-a")
        self.assertEqual(self._book("session-a").status_code, status.HTTP_201_CREATED)

        later_in = self.check_in + timedelta(days=1)
        later_out = self.check_out + timedelta(days=1)
        self.assertEqual(self._lock("session-b", check_in=later_in, check_out=later_out).status_code, status.HTTP_200_OK)
        conflict = self._book("session-b", start_date=str(later_in), end_date=str(later_out))

        self.assertEqual(conflict.status_code, status.HTTP_409_CONFLICT, conflict.data)
        self.assertEqual(conflict.data["state"], "conflict_detected")
        self.assertEqual(conflict.data["conflicts"][0]["room_id"], "L1")
        self.assertEqual(Booking.objects.count(), 1)

    def test_adjacent_stays_can_both_be_booked(self) -> None:
        self._lock("session-a")
        self._book("session-a")

        next_out = self.check_out + timedelta(days=2)
        self._lock("session-b", check_in=self.check_out, check_out=next_out)
        response = self._book("session-b", start_date=str(self.check_out), end_date=str(next_out))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Booking.objects.count(), 2)

    def test_group_larger_than_rooms_is_refused(self) -> None:
        self._lock("session-a", room_ids=("S1",))

        response = self._book("session-a", room_ids=["S1"], guests={"adult": 3})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["state"], "conflict_detected")

    def test_second_session_cannot_hold_the_same_rooms(self) -> None:
        self._lock("session-a")

        response = self._lock("session-b")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["acquired"])
        self.assertEqual(response.data["other_active_sessions"], 1)

    def test_lock_on_unknown_room_is_rejected(self) -> None:
        response = self._lock("session-a", room_ids=("NOPE",))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lock_status_and_release(self) -> None:
        self._lock("session-a", room_ids=("L1", "S1"))
        detail_url = reverse("reservation-lock-detail", kwargs={"session_id": "session-a"})

        lock_status = self.client.get(detail_url)
        self.assertEqual(lock_status.status_code, status.HTTP_200_OK)
        self.assertTrue(lock_status.data["has_lock"])
        self.assertEqual(lock_status.data["room_ids"], ["L1", "S1"])
        self.assertGreater(lock_status.data["seconds_remaining"], 0)

        released = self.client.delete(detail_url)
        self.assertTrue(released.data["released"])
        self.assertFalse(self.client.get(detail_url).data["has_lock"])

    def test_validate_reports_without_writing(self) -> None:
        self._lock("session-a")

        response = self.client.post(reverse("booking-validate"), self._booking_payload("session-a"), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["is_valid"])
        self.assertEqual(Booking.objects.count(), 0)

    def test_availability_lists_rooms_and_suggests_when_taken(self) -> None:
        url = reverse("booking-availability")
        free = self.client.post(url, {**self._stay(), "guest_count": 4}, format="json")
        self.assertEqual(free.status_code, status.HTTP_200_OK, free.data)
        self.assertTrue(free.data["is_available"])
        self.assertEqual([r["room_id"] for r in free.data["available_rooms"]], ["L1"])

        self._lock("session-a")
        self._book("session-a")

        taken = self.client.post(url, {**self._stay(), "guest_count": 4, "room_ids": ["L1"]}, format="json")
        self.assertFalse(taken.data["is_available"])
        self.assertFalse(taken.data["checks"][0]["is_available"])
        self.assertTrue(taken.data["suggestions"])
        self.assertEqual(taken.data["suggestions"][0]["type"], "alternative_dates")

    def test_availability_rejects_inverted_stay(self) -> None:
        response = self.client.post(
            reverse("booking-availability"),
            self._stay(check_in=self.check_out, check_out=self.check_in),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_occupancy(self) -> None:
        self._lock("session-a")
        self._book("session-a")

        response = self.client.post(reverse("booking-occupancy"), self._stay(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_rooms"], 2)
        self.assertEqual(response.data["occupied_rooms"], 1)
        self.assertEqual(response.data["occupancy_rate"], 50.0)

    def test_booking_list_is_staff_only(self) -> None:
        self.assertIn(self.client.get(self.list_url).status_code,
                      (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

        admin = get_user_model().objects.create_user(username="staff", password="StaffPass123", is_staff=True)
        self.client.force_authenticate(admin)
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_200_OK)


class RoomAPITests(APITestCase):
    def setUp(self) -> None:
        Room.objects.create(room_id="L1", name="Large room", room_type=Room.RoomType.LARGE, capacity=20)
        Room.objects.create(room_id="S1", name="Private room A", room_type=Room.RoomType.SMALL_A, capacity=2)
        Room.objects.create(room_id="OLD", name="Closed", room_type=Room.RoomType.MEDIUM_B, capacity=6, is_active=False)

    def test_lists_active_rooms(self) -> None:
        response = self.client.get(reverse("room-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([room["room_id"] for room in response.data], ["L1", "S1"])

    def test_filters_by_capacity(self) -> None:
        response = self.client.get(reverse("room-list"), {"min_capacity": 10})

        self.assertEqual([room["room_id"] for room in response.data], ["L1"])

    def test_non_numeric_capacity_is_rejected(self) -> None:
        response = self.client.get(reverse("room-list"), {"min_capacity": "abc"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("min_capacity", response.data)

    def test_filters_by_room_type(self) -> None:
        response = self.client.get(reverse("room-list"), {"room_type": Room.RoomType.SMALL_A})

        self.assertEqual([room["room_id"] for room in response.data], ["S1"])

    def test_unknown_room_type_is_rejected(self) -> None:
        response = self.client.get(reverse("room-list"), {"room_type": "penthouse"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_orders_by_capacity(self) -> None:
        response = self.client.get(reverse("room-list"), {"ordering": "capacity"})

        self.assertEqual([room["room_id"] for room in response.data], ["S1", "L1"])
