"""URL routing for experience bookings (``/api/experiences/bookings``, no trailing slash)."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ExperienceBookingViewSet

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register(r"experiences/bookings", ExperienceBookingViewSet, basename="experience-booking")

urlpatterns = [
    path("", include(router.urls)),
]
