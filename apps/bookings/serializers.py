"""Serializers for the booking endpoints."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.users.models import PHONE_VALIDATOR

from .domain import status as machine
from .models import Booking


def _validate_not_in_past(value):
    if value < timezone.localdate():
        raise serializers.ValidationError("Travel date must be in the future")
    return value


def _party_size_field(**kwargs) -> serializers.IntegerField:
    limit = settings.MAX_TRAVELERS_PER_BOOKING
    message = f"Number of travelers must be between 1 and {limit}"
    return serializers.IntegerField(
        min_value=1,
        max_value=limit,
        error_messages={"min_value": message, "max_value": message},
        **kwargs,
    )


# ---------------------------------------------------------------------------
# input
# ---------------------------------------------------------------------------

class TourBookingCreateSerializer(serializers.Serializer):
    """Booking a tour as a signed-in user."""

    tour_id = serializers.IntegerField()
    travel_date = serializers.DateField(validators=[_validate_not_in_past])
    number_of_travelers = _party_size_field()
    payment_method = serializers.ChoiceField(choices=Booking.PaymentMethod.choices)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")
    whatsapp_number = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=20,
    )

    def validate(self, attrs):  # type: ignore
        if attrs["payment_method"] == Booking.PaymentMethod.WHATSAPP:
            number = (attrs.get("whatsapp_number") or "").replace(" ", "").replace("-", "")
            if not number:
                raise serializers.ValidationError(
                    {"whatsapp_number": ["WhatsApp number is required for WhatsApp payments"]}
                )
            try:
                PHONE_VALIDATOR(number)
            except DjangoValidationError as exc:
                raise serializers.ValidationError({"whatsapp_number": exc.messages})
            attrs["whatsapp_number"] = number
        else:
            attrs["whatsapp_number"] = ""
        return attrs


class ExperienceBookingCreateSerializer(serializers.Serializer):
    """Booking an experience; guests do not need an account."""

    experience_id = serializers.IntegerField()
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20)
    number_of_guests = _party_size_field(required=False, default=1)
    booking_date = serializers.DateField(validators=[_validate_not_in_past])
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")


class BookingStatusUpdateSerializer(serializers.Serializer):
    """Admin status change; valid statuses depend on the product type in context."""

    status = serializers.CharField()
    admin_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_status(self, value):  # type: ignore
        product_type = self.context["product_type"]
        if not machine.is_valid_status(product_type, value):
            raise serializers.ValidationError("Please provide a valid status")
        return value


class ExperienceBookingStatusUpdateSerializer(BookingStatusUpdateSerializer):
    payment_status = serializers.ChoiceField(
        choices=Booking.PaymentStatus.choices,
        required=False,
        allow_null=True,
    )


# ---------------------------------------------------------------------------
# output
# ---------------------------------------------------------------------------

class AdminOnlyFieldsMixin:
    """Drops ``admin_only_fields`` from the output unless ``is_admin`` is set in context."""

    admin_only_fields: tuple[str, ...] = ()

    def strip_admin_only(self, data):  # type: ignore
        if not self.context.get("is_admin"):  # type: ignore[attr-defined]
            for name in self.admin_only_fields:
                data.pop(name, None)
        return data

    def to_representation(self, instance):  # type: ignore
        return self.strip_admin_only(super().to_representation(instance))  # type: ignore[misc]


class TourBookingSerializer(AdminOnlyFieldsMixin, serializers.ModelSerializer):
    """Row of the tour booking list."""

    tour_id = serializers.ReadOnlyField()
    tour_title = serializers.ReadOnlyField(source="tour.title")
    user_name = serializers.ReadOnlyField(source="customer_name")

    admin_only_fields = ("user_name",)

    class Meta:
        model = Booking
        fields = [
            "id",
            "tour_id",
            "tour_title",
            "travel_date",
            "number_of_travelers",
            "total_price",
            "status",
            "payment_method",
            "payment_status",
            "created_at",
            "user_name",
        ]
        read_only_fields = fields


class TourBookingCreatedSerializer(serializers.ModelSerializer):
    tour_id = serializers.ReadOnlyField()
    tour_title = serializers.ReadOnlyField(source="tour.title")
    tour_duration = serializers.ReadOnlyField(source="tour.duration")

    class Meta:
        model = Booking
        fields = [
            "id",
            "tour_id",
            "tour_title",
            "travel_date",
            "number_of_travelers",
            "total_price",
            "status",
            "payment_method",
            "payment_status",
            "whatsapp_url",
            "tour_duration",
            "created_at",
        ]
        read_only_fields = fields


class TourBookingDetailSerializer(AdminOnlyFieldsMixin, serializers.ModelSerializer):
    """Full tour booking; expects a ``BookingDetails`` instance."""

    tour_id = serializers.ReadOnlyField()
    tour_title = serializers.ReadOnlyField(source="tour.title")
    tour_description = serializers.ReadOnlyField(source="tour.description")
    tour_price = serializers.DecimalField(source="tour.price", max_digits=10, decimal_places=2, read_only=True)
    tour_discount_price = serializers.DecimalField(
        source="tour.discount_price",
        max_digits=10,
        decimal_places=2,
        read_only=True,
    )
    tour_duration = serializers.ReadOnlyField(source="tour.duration")
    tour_difficulty = serializers.ReadOnlyField(source="tour.difficulty")
    user_id = serializers.ReadOnlyField()
    user_name = serializers.ReadOnlyField(source="customer_name")
    user_email = serializers.ReadOnlyField(source="customer_email")
    user_phone = serializers.ReadOnlyField(source="customer_phone")

    admin_only_fields = ("admin_notes", "user_phone", "payment_history")

    class Meta:
        model = Booking
        fields = [
            "id",
            "tour_id",
            "tour_title",
            "tour_description",
            "tour_price",
            "tour_discount_price",
            "tour_duration",
            "tour_difficulty",
            "travel_date",
            "number_of_travelers",
            "total_price",
            "status",
            "payment_method",
            "payment_status",
            "special_requests",
            "whatsapp_number",
            "whatsapp_url",
            "admin_notes",
            "created_at",
            "updated_at",
            "user_id",
            "user_name",
            "user_email",
            "user_phone",
        ]
        read_only_fields = fields

    def to_representation(self, details):  # type: ignore
        data = serializers.ModelSerializer.to_representation(self, details.booking)
        data["tour_details"] = {
            "itinerary": details.itinerary,
            "included_services": details.included_services,
            "excluded_services": details.excluded_services,
        }
        data["status_history"] = details.status_history
        data["payment_history"] = details.payment_history
        return self.strip_admin_only(data)


class ExperienceBookingSerializer(AdminOnlyFieldsMixin, serializers.ModelSerializer):
    """Experience booking as shown in lists and after creation."""

    experience_id = serializers.ReadOnlyField()
    experience_title = serializers.ReadOnlyField(source="experience.title")
    experience_slug = serializers.ReadOnlyField(source="experience.slug")
    user_id = serializers.ReadOnlyField()
    number_of_guests = serializers.ReadOnlyField(source="number_of_travelers")
    booking_date = serializers.DateField(source="travel_date", read_only=True)

    admin_only_fields = ("admin_notes",)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_reference",
            "experience_id",
            "experience_title",
            "experience_slug",
            "user_id",
            "full_name",
            "email",
            "phone",
            "number_of_guests",
            "booking_date",
            "total_price",
            "special_requests",
            "status",
            "payment_status",
            "admin_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ExperienceBookingDetailSerializer(ExperienceBookingSerializer):
    """Experience booking with its history; expects a ``BookingDetails`` instance."""

    admin_only_fields = ("admin_notes", "payment_history")

    def to_representation(self, details):  # type: ignore
        data = serializers.ModelSerializer.to_representation(self, details.booking)
        data["status_history"] = details.status_history
        data["payment_history"] = details.payment_history
        return self.strip_admin_only(data)


class BookingStatusSerializer(AdminOnlyFieldsMixin, serializers.ModelSerializer):
    """Short form returned by status changes and cancellations."""

    admin_only_fields = ("admin_notes",)

    class Meta:
        model = Booking
        fields = ["id", "status", "payment_status", "admin_notes", "updated_at"]
        read_only_fields = fields
