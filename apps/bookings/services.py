"""
Booking repository.

The functions here are the only writers of booking, status log and payment
rows. Every mutation runs in one ``transaction.atomic()`` block with the
booking row locked; on failure the transaction rolls back and the error is
logged and re-raised. Authorization is the caller's job.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping

from django.db import DatabaseError, transaction  # type: ignore
from django.db.models import Avg, Count, Max, Min, Q, Sum  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.experiences.models import Experience
from apps.tours.models import Tour, TourExcludedService, TourIncludedService, TourItinerary

from .domain import status as machine
from .domain.status import InvalidTransition, SideEffect
from .filters import BookingFilterSet
from .models import Booking, BookingPayment, BookingStatusLog

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class BookingNotFound(Exception):
    """Raised when a booking id does not exist."""


class ProductNotFound(Exception):
    """Raised when the tour or experience being booked does not exist."""


class InvalidFilters(Exception):
    """Raised when list filters fail validation."""

    def __init__(self, errors: Mapping[str, Any]):
        self.errors = dict(errors)
        super().__init__("Invalid booking filters")


@dataclass
class BookingDetails:
    """A booking together with the records shown on its detail page."""

    booking: Booking
    itinerary: list[dict] = field(default_factory=list)
    included_services: list[dict] = field(default_factory=list)
    excluded_services: list[dict] = field(default_factory=list)
    status_history: list[dict] = field(default_factory=list)
    payment_history: list[dict] = field(default_factory=list)


@dataclass
class BookingPage:
    records: list[Booking]
    pagination: dict[str, int]


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _get_product(product_type: str, product_id: Any):
    model = Tour if product_type == machine.TOUR else Experience
    try:
        return model.objects.get(pk=product_id)
    except (model.DoesNotExist, ValueError, TypeError):
        raise ProductNotFound(f"{product_type.capitalize()} not found") from None


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------

def create_booking(
    *,
    product_type: str,
    product_id: Any,
    travel_date: date,
    number_of_travelers: int,
    user=None,
    payment_method: str = "",
    special_requests: str = "",
    whatsapp_number: str = "",
    full_name: str = "",
    email: str = "",
    phone: str = "",
    whatsapp_link: Callable[[Booking], str] | None = None,
) -> Booking:
    """Create a pending booking priced from the product's current price.

    ``total_price`` is the effective unit price (discount price when set)
    times the party size and is never recomputed afterwards. When the
    booking is paid through WhatsApp and ``whatsapp_link`` is given, the
    generated link is stored on the booking in the same transaction.
    """

    is_whatsapp = payment_method == Booking.PaymentMethod.WHATSAPP
    try:
        with transaction.atomic():
            product = _get_product(product_type, product_id)
            total = (product.effective_unit_price * number_of_travelers).quantized()

            booking = Booking.objects.create(
                product_type=product_type,
                tour=product if product_type == machine.TOUR else None,
                experience=product if product_type == machine.EXPERIENCE else None,
                user=user,
                booking_reference=(
                    Booking.generate_experience_reference() if product_type == machine.EXPERIENCE else ""
                ),
                full_name=full_name,
                email=email,
                phone=phone,
                travel_date=travel_date,
                number_of_travelers=number_of_travelers,
                total_price=total,
                currency=product.currency,
                payment_method=payment_method,
                payment_status=machine.initial_payment_status(product_type, payment_method),
                status=machine.PENDING,
                special_requests=special_requests or "",
                whatsapp_number=whatsapp_number if is_whatsapp else "",
            )
            BookingStatusLog.objects.create(
                booking=booking,
                status=machine.PENDING,
                changed_by=user,
                notes="Booking created",
            )

            if is_whatsapp and whatsapp_link is not None:
                booking.whatsapp_url = whatsapp_link(booking)
                booking.save(update_fields=["whatsapp_url", "updated_at"])
    except Exception as exc:
        logger.error(f"Booking creation failed for {product_type} {product_id}: {exc}")
        raise

    logger.info(f"Booking {booking.pk} created for {product_type} {product_id}")
    return booking


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------

def _safe_lookup(label: str, booking_id: int, loader: Callable[[], list[dict]]) -> list[dict]:
    try:
        return loader()
    except DatabaseError as exc:
        logger.error(f"Could not load {label} for booking {booking_id}: {exc}")
        return []


def _actor_label(user) -> str | None:
    if user is None:
        return None
    return f"{user.display_name} ({user.role})"


def _itinerary(tour_id: int) -> list[dict]:
    return list(TourItinerary.objects.filter(tour_id=tour_id).order_by("day").values("day", "title", "description"))


def _service_links(tour_id: int, link_model) -> list[dict]:
    links = link_model.objects.filter(tour_id=tour_id).select_related("service").order_by("service__name")
    return [{"name": link.service.name, "details": link.details} for link in links]


def _status_history(booking_id: int) -> list[dict]:
    entries = (
        BookingStatusLog.objects.filter(booking_id=booking_id)
        .select_related("changed_by")
        .order_by("-created_at", "-id")
    )
    return [
        {
            "status": entry.status,
            "notes": entry.notes,
            "created_at": entry.created_at,
            "changed_by": _actor_label(entry.changed_by),
        }
        for entry in entries
    ]


def _payment_history(booking_id: int) -> list[dict]:
    return list(
        BookingPayment.objects.filter(booking_id=booking_id)
        .order_by("-created_at", "-id")
        .values("amount", "payment_method", "status", "transaction_reference", "notes", "created_at")
    )


def get_booking(booking_id: Any) -> BookingDetails | None:
    """Return the booking with its display details, or ``None`` if absent.

    Secondary records are loaded one query at a time; a failure in any of
    them leaves that list empty instead of failing the read.
    """

    try:
        booking = (
            Booking.objects.select_related("tour", "experience", "user")
            .filter(pk=booking_id)
            .first()
        )
    except (ValueError, TypeError):
        return None
    except DatabaseError as exc:
        logger.error(f"Error finding booking {booking_id}: {exc}")
        raise

    if booking is None:
        return None

    details = BookingDetails(booking=booking)
    if booking.product_type == machine.TOUR:
        details.itinerary = _safe_lookup("itinerary", booking.pk, lambda: _itinerary(booking.tour_id))
        details.included_services = _safe_lookup(
            "included services", booking.pk, lambda: _service_links(booking.tour_id, TourIncludedService)
        )
        details.excluded_services = _safe_lookup(
            "excluded services", booking.pk, lambda: _service_links(booking.tour_id, TourExcludedService)
        )
    details.status_history = _safe_lookup("status history", booking.pk, lambda: _status_history(booking.pk))
    details.payment_history = _safe_lookup("payment history", booking.pk, lambda: _payment_history(booking.pk))
    return details


def list_bookings(
    product_type: str,
    filters: Mapping[str, Any] | None = None,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> BookingPage:
    """Filter and paginate bookings of one product type, newest first.

    The total is computed with a separate count over the same filtered
    queryset.
    """

    page = max(int(page), 1)
    limit = min(max(int(limit), 1), MAX_PAGE_SIZE)

    base = Booking.objects.filter(product_type=product_type).select_related("tour", "experience", "user")
    filterset = BookingFilterSet(data=dict(filters or {}), queryset=base)
    if not filterset.is_valid():
        raise InvalidFilters(filterset.errors)

    queryset = filterset.qs.order_by("-created_at", "-id")
    total = queryset.count()
    offset = (page - 1) * limit
    records = list(queryset[offset:offset + limit])

    return BookingPage(
        records=records,
        pagination={
            "total": total,
            "totalPages": math.ceil(total / limit),
            "currentPage": page,
            "limit": limit,
        },
    )


# ---------------------------------------------------------------------------
# status transitions
# ---------------------------------------------------------------------------

def _transition(
    booking: Booking,
    target: str,
    *,
    actor=None,
    log_notes: str,
    admin_notes: str | None = None,
    payment_status: str | None = None,
) -> None:
    """Move a locked booking to ``target`` and apply the table's side effects."""

    effects = machine.resolve_transition(booking.product_type, booking.status, target)

    booking.status = target
    update_fields = ["status", "updated_at"]
    if admin_notes is not None:
        booking.admin_notes = admin_notes
        update_fields.append("admin_notes")
    if payment_status is not None:
        booking.payment_status = payment_status
        update_fields.append("payment_status")

    refund = SideEffect.REFUND_IF_SETTLED in effects and machine.is_settled(booking.payment_status)
    if refund:
        booking.payment_status = machine.PAYMENT_REFUNDED
        if "payment_status" not in update_fields:
            update_fields.append("payment_status")

    booking.save(update_fields=update_fields)
    BookingStatusLog.objects.create(booking=booking, status=target, changed_by=actor, notes=log_notes)

    if refund:
        BookingPayment.objects.create(
            booking=booking,
            amount=booking.total_price,
            payment_method="refund",
            status=machine.PAYMENT_REFUNDED,
            notes="Automatic refund due to cancellation",
        )
        logger.info(f"Refund of {booking.total_price} recorded for booking {booking.pk}")


def _locked_booking(booking_id: Any) -> Booking:
    try:
        booking = _lock_queryset_if_possible(Booking.objects.filter(pk=booking_id)).first()
    except (ValueError, TypeError):
        booking = None
    if booking is None:
        raise BookingNotFound("Booking not found")
    return booking


def _reload(booking_id: Any) -> BookingDetails:
    details = get_booking(booking_id)
    if details is None:
        raise BookingNotFound("Booking not found")
    return details


def update_status(
    booking_id: Any,
    status: str,
    *,
    actor=None,
    notes: str | None = None,
    payment_status: str | None = None,
) -> BookingDetails:
    """Admin status change; cancelling a settled booking records a refund."""

    try:
        with transaction.atomic():
            booking = _locked_booking(booking_id)
            _transition(
                booking,
                status,
                actor=actor,
                log_notes=notes or f"Status changed to {status}",
                admin_notes=notes,
                payment_status=payment_status,
            )
    except (BookingNotFound, InvalidTransition):
        raise
    except Exception as exc:
        logger.error(f"Error updating status of booking {booking_id}: {exc}")
        raise

    return _reload(booking_id)


def cancel_booking(booking_id: Any, *, actor=None, notes: str = "Booking cancelled by user") -> BookingDetails:
    """Cancel a booking; fails with ``InvalidTransition`` if already cancelled."""

    try:
        with transaction.atomic():
            booking = _locked_booking(booking_id)
            _transition(booking, machine.CANCELLED, actor=actor, log_notes=notes)
    except (BookingNotFound, InvalidTransition):
        raise
    except Exception as exc:
        logger.error(f"Error cancelling booking {booking_id}: {exc}")
        raise

    return _reload(booking_id)


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------

def get_booking_stats(product_type: str) -> dict[str, Any]:
    """Aggregate counts and revenue for one product type."""

    accepted = machine.APPROVED if product_type == machine.TOUR else machine.CONFIRMED

    def revenue(*payment_statuses: str):
        return Sum("total_price", filter=Q(payment_status__in=payment_statuses), default=0)

    try:
        stats = Booking.objects.filter(product_type=product_type).aggregate(
            total_bookings=Count("id"),
            pending_bookings=Count("id", filter=Q(status=machine.PENDING)),
            **{f"{accepted}_bookings": Count("id", filter=Q(status=accepted))},
            cancelled_bookings=Count("id", filter=Q(status=machine.CANCELLED)),
            total_revenue=Sum("total_price", default=0),
            average_booking_value=Avg("total_price"),
            earliest_booking=Min("travel_date"),
            latest_booking=Max("travel_date"),
            revenue_completed=revenue(machine.PAYMENT_COMPLETED, machine.PAYMENT_PAID),
            revenue_pending=revenue(machine.PAYMENT_PENDING),
            revenue_refunded=revenue(machine.PAYMENT_REFUNDED),
        )
    except DatabaseError as exc:
        logger.error(f"Error getting {product_type} booking stats: {exc}")
        raise
    return stats
