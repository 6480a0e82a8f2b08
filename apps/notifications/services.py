"""Email delivery for booking notifications."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import get_connection, send_mail  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .settings_provider import NotificationSettings
from .templates import get_templates

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.services import BookingDetails

logger = logging.getLogger(__name__)


def get_mail_connection(product_type: str):
    """Mail connection for the mailbox that sends ``product_type`` bookings.

    Without a configured host the project's default email backend settings
    are used.
    """
    sender = settings.BOOKING_MAIL_SENDERS.get(product_type) or {}
    options = {"timeout": settings.EMAIL_TIMEOUT}
    if sender.get("HOST"):
        options.update(
            host=sender["HOST"],
            port=sender.get("PORT"),
            username=sender.get("USERNAME") or None,
            password=sender.get("PASSWORD") or None,
            use_ssl=sender.get("USE_SSL", False),
        )
    return get_connection(fail_silently=False, **options)


def _from_address(product_type: str, config: NotificationSettings) -> str:
    sender = settings.BOOKING_MAIL_SENDERS.get(product_type) or {}
    address = sender.get("FROM_EMAIL") or config.company_email or settings.DEFAULT_FROM_EMAIL
    return f"{config.company_name} <{address}>"


def send_email_notification(
    recipient_email: str,
    subject: str,
    html_message: str,
    *,
    product_type: str,
    config: NotificationSettings,
) -> bool:
    """
    Send one HTML email with a plain-text alternative.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        html_message: Full HTML body, the text part is derived from it
        product_type: Selects the sending mailbox
        config: Branding used for the From header

    Returns:
        bool: True if the email was handed to the mail server
    """
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=_from_address(product_type, config),
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
            connection=get_mail_connection(product_type),
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def send_booking_confirmation_email(details: "BookingDetails", config: NotificationSettings) -> bool:
    """Booking summary and payment instructions for the customer."""
    booking = details.booking
    recipient = booking.customer_email
    if not recipient:
        logger.warning(f"Booking {booking.pk} has no customer email - skipping confirmation")
        return False

    email = get_templates(booking.product_type).confirmation(details, config)
    return send_email_notification(
        recipient,
        email.subject,
        email.html,
        product_type=booking.product_type,
        config=config,
    )


def send_admin_booking_notification_email(
    details: "BookingDetails",
    config: NotificationSettings,
    *,
    admin_whatsapp_link: str | None = None,
    user_whatsapp_link: str | None = None,
) -> bool:
    """New-booking alert for the admin mailbox, with WhatsApp shortcuts when available."""
    booking = details.booking
    if not config.admin_email:
        logger.warning("No admin email configured - skipping admin notification")
        return False

    email = get_templates(booking.product_type).admin_notification(
        details,
        config,
        admin_whatsapp_link=admin_whatsapp_link,
        user_whatsapp_link=user_whatsapp_link,
    )
    return send_email_notification(
        config.admin_email,
        email.subject,
        email.html,
        product_type=booking.product_type,
        config=config,
    )


def send_booking_status_update_email(details: "BookingDetails", config: NotificationSettings) -> bool:
    booking = details.booking
    recipient = booking.customer_email
    if not recipient:
        logger.warning(f"Booking {booking.pk} has no customer email - skipping status update")
        return False

    email = get_templates(booking.product_type).status_update(details, config)
    return send_email_notification(
        recipient,
        email.subject,
        email.html,
        product_type=booking.product_type,
        config=config,
    )
