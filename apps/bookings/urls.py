"""URL routing for tour bookings (``/api/bookings``, no trailing slash)."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import TourBookingViewSet

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register(r"bookings", TourBookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
