"""URL routing for pricing."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PricingViewSet

router = DefaultRouter()
router.register(r"", PricingViewSet, basename="pricing")

urlpatterns = [
    path("", include(router.urls)),
]
