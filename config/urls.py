"""URL configuration for the retreat booking engine.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and the application-level routers provided by Django Rest Framework.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/rooms/', include('apps.rooms.urls')),
    path('api/v1/pricing/', include('apps.pricing.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
]
