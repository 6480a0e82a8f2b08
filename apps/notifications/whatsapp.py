"""
WhatsApp click-to-chat links.

Nothing here talks to the network: "sending" a WhatsApp message means
building a ``{api_url}?phone=...&text=...`` link that a person opens.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import TYPE_CHECKING
from urllib.parse import quote

from shared.domain.value_objects import Money

from .settings_provider import NotificationSettings

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def format_amount(booking: "Booking") -> str:
    return str(Money(booking.total_price, booking.currency))


def build_whatsapp_link(api_url: str, phone: str, message: str) -> str:
    digits = re.sub(r"\D", "", phone or "")
    return f"{api_url}?phone={digits}&text={quote(message, safe=_URI_COMPONENT_SAFE)}"


def _product_label(booking: "Booking") -> str:
    return "Tour" if booking.product_type == "tour" else "Experience"


def _party_label(booking: "Booking") -> str:
    return "Travelers" if booking.product_type == "tour" else "Guests"


def admin_booking_message(booking: "Booking", config: NotificationSettings) -> str:
    lines = [
        "📢 *NEW BOOKING NOTIFICATION* 📢",
        "",
        f"*{config.company_name}*",
        "",
        f"🔖 *Booking ID:* {booking.reference}",
        f"🏕️ *{_product_label(booking)}:* {booking.product_title}",
        f"📅 *Travel Date:* {long_date(booking.travel_date)}",
        f"👥 *{_party_label(booking)}:* {booking.number_of_travelers}",
        f"💰 *Total Price:* {format_amount(booking)}",
        f"📝 *Status:* {booking.status.upper()}",
        "",
        "👤 *Customer Details:*",
        f"Name: {booking.customer_name}",
        f"Email: {booking.customer_email}",
        f"Phone: {booking.customer_phone or booking.whatsapp_number}",
    ]
    if booking.special_requests:
        lines += ["", "📌 *Special Requests:*", booking.special_requests]
    return "\n".join(lines)


def admin_booking_link(booking: "Booking", config: NotificationSettings) -> str:
    """Link that opens a chat with the admin number, prefilled with the booking summary."""

    link = build_whatsapp_link(config.whatsapp_api_url, config.admin_whatsapp_number, admin_booking_message(booking, config))
    logger.info(f"Admin WhatsApp link prepared for booking {booking.pk}")
    return link


def user_confirmation_message(booking: "Booking", config: NotificationSettings) -> str:
    return "\n".join(
        [
            "📌 *BOOKING CONFIRMATION* 📌",
            "",
            f"Thank you for booking with *{config.company_name}*!",
            "",
            f"🔖 *Booking ID:* {booking.reference}",
            f"🏕️ *{_product_label(booking)}:* {booking.product_title}",
            f"📅 *Travel Date:* {long_date(booking.travel_date)}",
            f"👥 *{_party_label(booking)}:* {booking.number_of_travelers}",
            f"💰 *Total Amount:* {format_amount(booking)}",
            "",
            "📝 *Payment Instructions:*",
            f"1. M-Pesa Paybill: {config.mpesa_paybill}",
            f"   Account: {booking.pk}",
            f"2. Send to WhatsApp: {config.company_phone}",
            "3. Cash payment at our office",
            "",
            "🔔 *Next Steps:*",
            "- Complete payment within 24 hours",
            "- Send payment confirmation to this number",
            "- We'll verify and confirm your booking",
            "",
            "📞 *Need Help?*",
            f"Call us at {config.company_phone} or reply to this message.",
        ]
    )


def user_confirmation_link(booking: "Booking", config: NotificationSettings) -> str | None:
    """Link to the customer's WhatsApp number, or ``None`` when they gave none."""

    if not booking.whatsapp_number:
        logger.warning(f"No WhatsApp number provided for booking {booking.pk}")
        return None
    link = build_whatsapp_link(config.whatsapp_api_url, booking.whatsapp_number, user_confirmation_message(booking, config))
    logger.info(f"User WhatsApp confirmation prepared for booking {booking.pk}")
    return link
