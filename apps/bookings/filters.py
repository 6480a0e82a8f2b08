"""FilterSet for the booking list endpoints."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters shared by the tour and experience booking lists."""

    status = django_filters.ChoiceFilter(field_name="status", choices=Booking.Status.choices)
    payment_status = django_filters.ChoiceFilter(
        field_name="payment_status",
        choices=Booking.PaymentStatus.choices,
    )
    user_id = django_filters.NumberFilter(field_name="user_id", lookup_expr="exact")
    tour_id = django_filters.NumberFilter(field_name="tour_id", lookup_expr="exact")
    experience_id = django_filters.NumberFilter(field_name="experience_id", lookup_expr="exact")
    start_date = django_filters.DateFilter(field_name="travel_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="travel_date", lookup_expr="lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Booking
        fields = ["status", "payment_status"]

    def filter_search(self, queryset, name, value):  # type: ignore
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(tour__title__icontains=value)
            | Q(experience__title__icontains=value)
            | Q(user__username__icontains=value)
            | Q(user__email__icontains=value)
            | Q(full_name__icontains=value)
            | Q(email__icontains=value)
            | Q(booking_reference__icontains=value)
        )
