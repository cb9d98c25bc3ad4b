"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BookingViewSet, ReservationLockViewSet

router = DefaultRouter()
# Registered first so "locks/" is never read as a booking id.
router.register(r"locks", ReservationLockViewSet, basename="reservation-lock")
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
