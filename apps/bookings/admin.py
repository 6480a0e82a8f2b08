"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingPayment, BookingStatusLog


class BookingStatusLogInline(admin.TabularInline):
    model = BookingStatusLog
    extra = 0
    can_delete = False
    readonly_fields = ("status", "changed_by", "notes", "created_at")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


class BookingPaymentInline(admin.TabularInline):
    model = BookingPayment
    extra = 0
    can_delete = False
    readonly_fields = ("amount", "payment_method", "status", "transaction_reference", "notes", "created_at")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "booking_reference",
        "product_type",
        "tour",
        "experience",
        "user",
        "full_name",
        "status",
        "payment_status",
        "travel_date",
        "total_price",
        "created_at",
    )
    list_filter = ("product_type", "status", "payment_status", "payment_method", "travel_date")
    search_fields = ("booking_reference", "tour__title", "experience__title", "user__email", "email", "full_name")
    readonly_fields = (
        "product_type",
        "booking_reference",
        "status",
        "payment_status",
        "total_price",
        "whatsapp_url",
        "created_at",
        "updated_at",
    )
    inlines = [BookingStatusLogInline, BookingPaymentInline]
