"""Booking models for the Touring platform.

A single ``Booking`` table serves both tour and experience reservations;
``product_type`` says which product foreign key is populated. Status log
and payment rows are append-only ledgers written by ``services``.
"""

from __future__ import annotations

import secrets
import time
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain import status as machine


class Booking(models.Model):
    """Reservation of a tour or an experience for a date and party size."""

    class ProductType(models.TextChoices):
        TOUR = machine.TOUR, _("Tour")
        EXPERIENCE = machine.EXPERIENCE, _("Experience")

    class Status(models.TextChoices):
        PENDING = machine.PENDING, _("Pending")
        APPROVED = machine.APPROVED, _("Approved")
        CONFIRMED = machine.CONFIRMED, _("Confirmed")
        CANCELLED = machine.CANCELLED, _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = machine.PAYMENT_PENDING, _("Pending")
        COMPLETED = machine.PAYMENT_COMPLETED, _("Completed")
        PAID = machine.PAYMENT_PAID, _("Paid")
        REFUNDED = machine.PAYMENT_REFUNDED, _("Refunded")
        FAILED = machine.PAYMENT_FAILED, _("Failed")

    class PaymentMethod(models.TextChoices):
        ONLINE = "online", _("Online")
        WHATSAPP = "whatsapp", _("WhatsApp")
        CASH = "cash", _("Cash")
        MPESA = "mpesa", _("M-Pesa")

    product_type = models.CharField(max_length=20, choices=ProductType.choices)
    tour = models.ForeignKey(
        "tours.Tour",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    experience = models.ForeignKey(
        "experiences.Experience",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
        help_text=_("Empty for guest experience bookings."),
    )
    booking_reference = models.CharField(max_length=32, blank=True, db_index=True)

    # Guest contact details (experience bookings)
    full_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)

    travel_date = models.DateField()
    number_of_travelers = models.PositiveSmallIntegerField(default=1)
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Effective unit price times party size, fixed at creation."),
    )
    currency = models.CharField(max_length=3, default="USD")
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    special_requests = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)
    whatsapp_number = models.CharField(max_length=20, blank=True)
    whatsapp_url = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(product_type=machine.TOUR, tour__isnull=False, experience__isnull=True)
                    | models.Q(product_type=machine.EXPERIENCE, experience__isnull=False, tour__isnull=True)
                ),
                name="booking_single_product",
            ),
            models.CheckConstraint(
                condition=models.Q(number_of_travelers__gte=1),
                name="booking_positive_party_size",
            ),
        ]
        indexes = [
            models.Index(fields=["product_type", "status"], name="booking_product_status_idx"),
            models.Index(fields=["travel_date"], name="booking_travel_date_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.reference} ({self.product_type})"

    @staticmethod
    def generate_experience_reference() -> str:
        return f"EXP-{int(time.time() * 1000)}-{secrets.randbelow(1000)}"

    @property
    def reference(self) -> str:
        return self.booking_reference or f"#{self.pk}"

    @property
    def product(self):
        return self.tour if self.product_type == machine.TOUR else self.experience

    @property
    def product_title(self) -> str:
        product = self.product
        return product.title if product is not None else ""

    @property
    def customer_name(self) -> str:
        if self.full_name:
            return self.full_name
        return self.user.display_name if self.user else ""

    @property
    def customer_email(self) -> str:
        if self.email:
            return self.email
        return self.user.email if self.user else ""

    @property
    def customer_phone(self) -> str:
        if self.phone:
            return self.phone
        return (self.user.phone or "") if self.user else ""

    def is_owned_by(self, user) -> bool:
        return self.user_id is not None and self.user_id == getattr(user, "id", None)


class BookingStatusLog(models.Model):
    """Append-only audit row written at creation and on every transition."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="status_logs")
    status = models.CharField(max_length=20, choices=Booking.Status.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="booking_status_changes",
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Status log entry")
        verbose_name_plural = _("Status log")
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.booking_id}: {self.status}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise ValueError("Status log entries are immutable.")
        super().save(*args, **kwargs)


class BookingPayment(models.Model):
    """Payment ledger row; refunds are recorded here on cancellation."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=20)
    status = models.CharField(max_length=20, choices=Booking.PaymentStatus.choices)
    transaction_reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Booking payment")
        verbose_name_plural = _("Booking payments")
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.booking_id}: {self.status} {self.amount}"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise ValueError("Payment ledger rows are immutable.")
        super().save(*args, **kwargs)
