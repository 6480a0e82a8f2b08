"""
HTML email templates for booking notifications.

Templates are looked up per product type (``get_templates``). Each one
returns a ``RenderedEmail`` whose HTML is already wrapped in the branded
layout; the plain-text part is derived from it when the email is sent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from django.utils.html import escape  # type: ignore

from .settings_provider import NotificationSettings
from .whatsapp import format_amount, long_date

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.services import BookingDetails


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


LAYOUT_STYLES = """
    body, html { margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; color: #333333; }
    .container { max-width: 600px; margin: 0 auto; background-color: #ffffff; }
    .header { background-color: #8B7355; padding: 20px; text-align: center; color: #ffffff; }
    .content { padding: 30px; line-height: 1.5; color: #333333; }
    .footer { background-color: #f7f3ee; padding: 20px; text-align: center; color: #8B7355; font-size: 14px; }
    .button { background-color: #8B7355; color: white; padding: 12px 30px; text-decoration: none;
              border-radius: 4px; font-weight: bold; display: inline-block; margin: 20px 0; }
    .status-badge { display: inline-block; padding: 4px 8px; border-radius: 4px; font-weight: bold; font-size: 12px; }
    .status-pending { background-color: #FFF3CD; color: #856404; }
    .status-approved, .status-confirmed { background-color: #D4EDDA; color: #155724; }
    .status-cancelled { background-color: #F8D7DA; color: #721C24; }
    .detail-label { font-weight: bold; width: 150px; }
    .divider { border-top: 1px solid #e5e5e5; margin: 20px 0; }
"""


def render_layout(content: str, config: NotificationSettings) -> str:
    """Wrap ``content`` in the company header and footer."""

    company = escape(config.company_name)
    website = config.website_url.rstrip("/")
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{company}</title>
  <style>{LAYOUT_STYLES}</style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>{company}</h1></div>
    <div class="content">
{content}
    </div>
    <div class="footer">
      <p>&copy; {date.today().year} {company}. All rights reserved.</p>
      <p>Contact us at <a href="mailto:{escape(config.company_email)}">{escape(config.company_email)}</a> or {escape(config.company_phone)}</p>
      <p>
        <a href="{website}/privacy">Privacy Policy</a> |
        <a href="{website}/terms">Terms of Service</a>
      </p>
    </div>
  </div>
</body>
</html>
"""


def _row(label: str, value) -> str:
    return f"""
      <tr>
        <td class="detail-label">{label}:</td>
        <td>{value}</td>
      </tr>"""


def _button(url: str, label: str) -> str:
    return f"""
    <div style="text-align: center; margin: 25px 0;">
      <a href="{escape(url)}" class="button">{label}</a>
    </div>"""


def _badge(status: str) -> str:
    return f'<span class="status-badge status-{status}">{status}</span>'


class BookingEmailTemplates:
    """Templates for tour bookings; experience templates override the wording."""

    product_label = "Tour"
    party_label = "Travelers"
    duration_unit = "days"
    accepted_status = "approved"
    accepted_verb = "approved"
    confirmation_subject = "Booking Confirmation: {title}"
    admin_subject = "New Booking: {title} (Ref: {reference})"
    accepted_subject = "Booking Approved: {title}"
    accepted_cta = ("prepare-for-tour", "Prepare for Your Tour")
    cancelled_cta = ("book-again", "Book Another Tour")

    def _details_table(self, details: "BookingDetails", *, for_admin: bool = False) -> str:
        booking = details.booking
        product = booking.product
        rows = [
            _row("Booking Reference", escape(booking.reference)),
            _row(self.product_label, escape(booking.product_title)),
            _row("Travel Date", long_date(booking.travel_date)),
        ]
        if product is not None and not for_admin:
            rows.append(_row("Duration", f"{product.duration} {self.duration_unit}"))
        rows += [
            _row(self.party_label, f"{booking.number_of_travelers} person(s)"),
            _row("Total Price", format_amount(booking)),
            _row("Status", _badge(booking.status)),
        ]
        if for_admin:
            rows += [
                _row("Customer", escape(booking.customer_name)),
                _row("Customer Email", escape(booking.customer_email)),
                _row("Customer Phone", escape(booking.customer_phone)),
            ]
            if booking.payment_method:
                rows.append(_row("Payment Method", escape(booking.get_payment_method_display())))
            if booking.whatsapp_number:
                rows.append(_row("WhatsApp Number", escape(booking.whatsapp_number)))
        if booking.special_requests:
            rows.append(_row("Special Requests", escape(booking.special_requests)))
        return f'<table class="booking-details">{"".join(rows)}\n    </table>'

    def _payment_instructions(self, details: "BookingDetails", config: NotificationSettings) -> str:
        booking = details.booking
        return f"""
    <h3>📝 Payment Instructions</h3>
    <ol>
      <li>M-Pesa Paybill: {escape(config.mpesa_paybill)}</li>
      <li>Account Number: {booking.pk}</li>
      <li>Amount: {format_amount(booking)}</li>
      <li>Send payment confirmation to WhatsApp: {escape(config.company_phone)}</li>
      <li>Or pay cash at our office</li>
    </ol>
    <h3>🔔 Next Steps</h3>
    <ul>
      <li>Complete payment within 24 hours</li>
      <li>Send payment confirmation to our WhatsApp number</li>
      <li>We'll verify and confirm your booking</li>
    </ul>"""

    def _extra_confirmation_sections(self, details: "BookingDetails") -> str:
        if not details.itinerary:
            return "\n    <h3>Tour Itinerary</h3>\n    <p>No itinerary details available.</p>"
        days = "".join(
            f"""
    <div class="itinerary-item">
      <div><strong>Day {item['day']}: {escape(item['title'])}</strong></div>
      <div>{escape(item['description'])}</div>
    </div>"""
            for item in details.itinerary
        )
        return f"\n    <h3>Tour Itinerary</h3>{days}"

    def confirmation(self, details: "BookingDetails", config: NotificationSettings) -> RenderedEmail:
        booking = details.booking
        whatsapp_section = ""
        if booking.payment_method == "whatsapp" and booking.whatsapp_url:
            whatsapp_section = _button(booking.whatsapp_url, "Complete Payment via WhatsApp")

        content = f"""
    <h2>Booking Confirmation</h2>
    <p>Dear {escape(booking.customer_name)},</p>
    <p>Thank you for booking with {escape(config.company_name)}! Here are your booking details:</p>
    {self._details_table(details)}
    {self._payment_instructions(details, config)}
    {whatsapp_section}
    {self._extra_confirmation_sections(details)}
    <div class="divider"></div>
    <p>We'll contact you soon to confirm your booking details. If you have any questions, please reply to this email.</p>
    <p>Best regards,<br>The {escape(config.company_name)} Team</p>"""

        subject = config.booking_email_subject or self.confirmation_subject.format(title=booking.product_title)
        return RenderedEmail(subject=subject, html=render_layout(content, config))

    def admin_notification(
        self,
        details: "BookingDetails",
        config: NotificationSettings,
        *,
        admin_whatsapp_link: str | None = None,
        user_whatsapp_link: str | None = None,
    ) -> RenderedEmail:
        booking = details.booking
        admin_url = f"{config.admin_base_url.rstrip('/')}/admin/bookings?view={booking.pk}"

        whatsapp_section = ""
        if admin_whatsapp_link:
            whatsapp_section += _button(admin_whatsapp_link, "Open Booking Summary in WhatsApp")
        if user_whatsapp_link:
            whatsapp_section += _button(user_whatsapp_link, "Send Confirmation to Customer on WhatsApp")

        content = f"""
    <h2>New Booking Notification</h2>
    <p>Dear Admin,</p>
    <p>A new booking has been created and requires your attention:</p>
    {self._details_table(details, for_admin=True)}
    {_button(admin_url, "View Booking in Admin Panel")}
    {whatsapp_section}
    <div class="divider"></div>
    <p>Please review and update the booking status as needed.</p>
    <p>Best regards,<br>The {escape(config.company_name)} Team</p>"""

        subject = self.admin_subject.format(title=booking.product_title, reference=booking.reference)
        return RenderedEmail(subject=subject, html=render_layout(content, config))

    def status_update(self, details: "BookingDetails", config: NotificationSettings) -> RenderedEmail:
        booking = details.booking
        title = escape(booking.product_title)
        when = long_date(booking.travel_date)
        website = config.website_url.rstrip("/")

        if booking.status == self.accepted_status:
            subject = config.booking_approval_subject or self.accepted_subject.format(title=booking.product_title)
            message = (
                f"<p>Your booking for <strong>{title}</strong> has been {self.accepted_verb}!</p>\n"
                f"    <p>We're excited to have you join us on {when}.</p>"
            )
            action = _button(f"{website}/{self.accepted_cta[0]}", self.accepted_cta[1])
        elif booking.status == "cancelled":
            subject = config.booking_cancellation_subject or f"Booking Cancelled: {booking.product_title}"
            message = f"<p>Your booking for <strong>{title}</strong> on {when} has been cancelled.</p>"
            if booking.payment_status == "refunded":
                message += (
                    "\n    <p>Your payment has been refunded. "
                    "Please allow 5-7 business days for the refund to process.</p>"
                )
            action = _button(f"{website}/{self.cancelled_cta[0]}", self.cancelled_cta[1])
        else:
            subject = f"Booking Status Update: {booking.product_title}"
            message = f"<p>The status of your booking for <strong>{title}</strong> has been updated.</p>"
            action = ""

        notes = _row("Admin Notes", escape(booking.admin_notes)) if booking.admin_notes else ""
        content = f"""
    <h2>Booking Status Update</h2>
    <p>Dear {escape(booking.customer_name)},</p>
    {message}
    <table class="booking-details">
      {_row("Booking Reference", escape(booking.reference))}
      {_row(self.product_label, title)}
      {_row("Travel Date", when)}
      {_row("Status", _badge(booking.status))}
      {notes}
    </table>
    {action}
    <div class="divider"></div>
    <p>If you have any questions about this update, please reply to this email.</p>
    <p>Best regards,<br>The {escape(config.company_name)} Team</p>"""

        return RenderedEmail(subject=subject, html=render_layout(content, config))


class ExperienceEmailTemplates(BookingEmailTemplates):
    product_label = "Experience"
    party_label = "Guests"
    duration_unit = "hours"
    accepted_status = "confirmed"
    accepted_verb = "confirmed"
    admin_subject = "New Experience Booking: {title} (Ref: {reference})"
    accepted_subject = "Booking Confirmed: {title}"
    accepted_cta = ("experiences", "Explore More Experiences")
    cancelled_cta = ("experiences", "Book Another Experience")

    def _extra_confirmation_sections(self, details: "BookingDetails") -> str:
        return ""


TEMPLATES: dict[str, BookingEmailTemplates] = {
    "tour": BookingEmailTemplates(),
    "experience": ExperienceEmailTemplates(),
}


def get_templates(product_type: str) -> BookingEmailTemplates:
    return TEMPLATES[product_type]
