"""
Post-commit notification fan-out for bookings.

Delivery contract: at most once, no retry. The dispatcher is called after
the booking transaction has committed; each step (WhatsApp links,
customer email, admin email) runs on its own and a failure is logged and
dropped. The persisted booking is the source of truth, so a lost email
is never reported to the API caller. Stronger guarantees would need an
outbox table drained by a worker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from . import services, whatsapp
from .settings_provider import NotificationSettings, SettingsProvider, get_settings_provider

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.services import BookingDetails

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """What happened to each step of one dispatch."""

    emails: dict[str, bool] = field(default_factory=dict)
    admin_whatsapp_link: str | None = None
    user_whatsapp_link: str | None = None


class NotificationDispatcher:
    def __init__(self, settings_provider: SettingsProvider):
        self.settings_provider = settings_provider

    def _step(self, name: str, booking_id: int, action: Callable[[], Any], default: Any = None) -> Any:
        try:
            return action()
        except Exception as exc:
            logger.error(f"Notification step '{name}' failed for booking {booking_id}: {exc}", exc_info=True)
            return default

    def _config(self, details: "BookingDetails") -> NotificationSettings | None:
        booking = details.booking
        return self._step(
            "load settings",
            booking.pk,
            lambda: self.settings_provider.get(booking.product_type),
        )

    def booking_created(self, details: "BookingDetails") -> DispatchReport:
        """Customer confirmation and admin alert for a freshly created booking.

        Tour bookings also get WhatsApp links: the admin link (stored on the
        booking for WhatsApp payments, built here otherwise) and a link to
        the customer's WhatsApp number. Both are put in the admin email.
        """
        report = DispatchReport()
        booking = details.booking
        config = self._config(details)
        if config is None:
            return report

        if booking.product_type == "tour":
            report.admin_whatsapp_link = self._step(
                "admin whatsapp link",
                booking.pk,
                lambda: booking.whatsapp_url or whatsapp.admin_booking_link(booking, config),
            )
            report.user_whatsapp_link = self._step(
                "user whatsapp link",
                booking.pk,
                lambda: whatsapp.user_confirmation_link(booking, config),
            )

        report.emails["confirmation"] = self._step(
            "confirmation email",
            booking.pk,
            lambda: services.send_booking_confirmation_email(details, config),
            default=False,
        )
        report.emails["admin_notification"] = self._step(
            "admin notification email",
            booking.pk,
            lambda: services.send_admin_booking_notification_email(
                details,
                config,
                admin_whatsapp_link=report.admin_whatsapp_link,
                user_whatsapp_link=report.user_whatsapp_link,
            ),
            default=False,
        )
        return report

    def status_changed(self, details: "BookingDetails", *, previous_status: str | None = None) -> DispatchReport:
        """Status update email; nothing is sent if the status did not actually change."""
        report = DispatchReport()
        booking = details.booking
        if previous_status is not None and previous_status == booking.status:
            logger.info(f"Booking {booking.pk} status unchanged ({booking.status}) - no update email")
            return report

        config = self._config(details)
        if config is None:
            return report

        report.emails["status_update"] = self._step(
            "status update email",
            booking.pk,
            lambda: services.send_booking_status_update_email(details, config),
            default=False,
        )
        return report


def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(get_settings_provider())
