"""API views for pricing."""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .serializers import PriceRequestSerializer
from .services import get_rate_config_service

logger = logging.getLogger(__name__)


class PricingViewSet(viewsets.ViewSet):
    """Price estimates for the booking wizard."""

    permission_classes = [permissions.AllowAny]

    @action(detail=False, methods=["post"])
    def calculate(self, request):  # type: ignore
        serializer = PriceRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rooms, guests, stay, addons = serializer.to_domain()

        service = get_rate_config_service()
        breakdown = service.compute_price(rooms, guests, stay, addons)
        return Response(breakdown.to_dict(), status=status.HTTP_200_OK)

    @action(
        detail=False,
        methods=["post"],
        url_path="invalidate-cache",
        permission_classes=[permissions.IsAdminUser],
    )
    def invalidate_cache(self, request):  # type: ignore
        get_rate_config_service().invalidate()
        logger.info(f"Rate config cache invalidated by {request.user}")
        return Response({"status": "invalidated"}, status=status.HTTP_200_OK)
