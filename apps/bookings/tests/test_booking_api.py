"""API tests for tour bookings."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from smtplib import SMTPException
from unittest import mock

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings import services
from apps.bookings.models import Booking, BookingPayment
from apps.experiences.models import Experience
from apps.tours.models import Tour, TourItinerary
from apps.users.models import User


class TourBookingAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="traveller@example.com",
            username="Traveller",
            phone="+254711000111",
            password="TravelPass123",
        )
        self.other_user = User.objects.create_user(
            email="other@example.com",
            username="Other",
            password="OtherPass123",
        )
        self.admin = User.objects.create_user(
            email="admin@example.com",
            username="Admin",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.tour = Tour.objects.create(
            id=5,
            title="Masai Mara Safari",
            slug="masai-mara-safari",
            duration=3,
            price=Decimal("100.00"),
            discount_price=Decimal("80.00"),
        )
        TourItinerary.objects.create(tour=self.tour, day=1, title="Nairobi to the Mara")
        self.travel_date = date.today() + timedelta(days=30)

    def _payload(self, **overrides) -> dict:
        payload = {
            "tour_id": self.tour.id,
            "travel_date": self.travel_date.isoformat(),
            "number_of_travelers": 2,
            "payment_method": "online",
            "special_requests": "Vegetarian meals",
        }
        payload.update(overrides)
        return payload

    def _create_booking(self, user=None, **overrides) -> Booking:
        kwargs = {
            "product_type": "tour",
            "product_id": self.tour.id,
            "user": user or self.user,
            "travel_date": self.travel_date,
            "number_of_travelers": 2,
            "payment_method": "online",
        }
        kwargs.update(overrides)
        return services.create_booking(**kwargs)


class CreateTourBookingTests(TourBookingAPITestCase):
    def test_create_booking_prices_and_notifies(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(reverse("booking-list"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], "success")
        booking_data = response.data["data"]["booking"]
        self.assertEqual(booking_data["tour_id"], 5)
        self.assertEqual(booking_data["total_price"], "160.00")
        self.assertEqual(booking_data["status"], "pending")
        self.assertEqual(booking_data["payment_status"], "pending")
        self.assertEqual(booking_data["tour_duration"], 3)

        booking = Booking.objects.get(pk=booking_data["id"])
        self.assertEqual(booking.user, self.user)
        self.assertEqual(booking.status_logs.count(), 1)

        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ["admin@olosuashtours.com", "traveller@example.com"])
        confirmation = next(message for message in mail.outbox if message.to == ["traveller@example.com"])
        self.assertIn("Nairobi to the Mara", confirmation.alternatives[0][0])

    def test_whatsapp_payment_stores_admin_link(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(
            reverse("booking-list"),
            self._payload(payment_method="whatsapp", whatsapp_number="+254 733-000-333"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking_data = response.data["data"]["booking"]
        self.assertTrue(
            booking_data["whatsapp_url"].startswith("https://api.whatsapp.com/send?phone=254700000001&text=")
        )
        self.assertEqual(booking_data["payment_status"], "completed")
        booking = Booking.objects.get(pk=booking_data["id"])
        self.assertEqual(booking.whatsapp_number, "+254733000333")

        admin_email = next(message for message in mail.outbox if message.to == ["admin@olosuashtours.com"])
        html = admin_email.alternatives[0][0]
        self.assertIn("phone=254733000333", html)

    def test_whatsapp_payment_requires_number(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(reverse("booking-list"), self._payload(payment_method="whatsapp"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("whatsapp_number", response.data["errors"])

    def test_rejects_invalid_input(self) -> None:
        self.client.force_authenticate(self.user)
        yesterday = (date.today() - timedelta(days=1)).isoformat()

        cases = [
            ({"travel_date": yesterday}, "travel_date"),
            ({"number_of_travelers": 0}, "number_of_travelers"),
            ({"number_of_travelers": 21}, "number_of_travelers"),
            ({"payment_method": "bitcoin"}, "payment_method"),
        ]
        for overrides, field in cases:
            with self.subTest(field=field, overrides=overrides):
                response = self.client.post(reverse("booking-list"), self._payload(**overrides), format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
                self.assertEqual(response.data["status"], "fail")
                self.assertIn(field, response.data["errors"])

        self.assertEqual(
            str(
                self.client.post(
                    reverse("booking-list"), self._payload(number_of_travelers=25), format="json"
                ).data["errors"]["number_of_travelers"][0]
            ),
            "Number of travelers must be between 1 and 20",
        )
        self.assertFalse(Booking.objects.exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_unknown_tour_returns_404(self) -> None:
        self.client.force_authenticate(self.user)

        response = self.client.post(reverse("booking-list"), self._payload(tour_id=999), format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertEqual(response.data["message"], "Tour not found")
        self.assertFalse(Booking.objects.exists())

    def test_anonymous_user_cannot_book(self) -> None:
        response = self.client.post(reverse("booking-list"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(Booking.objects.exists())

    def test_mail_failure_does_not_fail_the_booking(self) -> None:
        self.client.force_authenticate(self.user)

        with mock.patch("apps.notifications.services.send_mail", side_effect=SMTPException("relay down")):
            response = self.client.post(reverse("booking-list"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Booking.objects.count(), 1)

    def test_failing_notification_step_does_not_block_the_others(self) -> None:
        self.client.force_authenticate(self.user)

        with mock.patch(
            "apps.notifications.services.send_booking_confirmation_email",
            side_effect=RuntimeError("template broke"),
        ):
            response = self.client.post(reverse("booking-list"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual([message.to for message in mail.outbox], [["admin@olosuashtours.com"]])


class ReadTourBookingTests(TourBookingAPITestCase):
    def test_owner_can_view_booking_without_admin_fields(self) -> None:
        booking = self._create_booking()
        booking.admin_notes = "VIP guest"
        booking.save(update_fields=["admin_notes"])
        self.client.force_authenticate(self.user)

        response = self.client.get(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.data["data"]["booking"]
        self.assertEqual(data["tour_title"], "Masai Mara Safari")
        self.assertEqual(data["tour_details"]["itinerary"][0]["title"], "Nairobi to the Mara")
        self.assertEqual(len(data["status_history"]), 1)
        self.assertNotIn("admin_notes", data)
        self.assertNotIn("user_phone", data)
        self.assertNotIn("payment_history", data)

    def test_admin_sees_admin_fields(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.data["data"]["booking"]
        self.assertEqual(data["user_phone"], "+254711000111")
        self.assertIn("admin_notes", data)
        self.assertEqual(data["payment_history"], [])

    def test_other_user_cannot_view_booking(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.other_user)

        response = self.client.get(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["message"], "Not authorized to view this booking")

    def test_missing_booking_returns_404(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-detail", args=[4242]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Booking not found")

    def test_list_is_limited_to_own_bookings_for_users(self) -> None:
        self._create_booking()
        self._create_booking()
        self._create_booking(user=self.other_user)
        self.client.force_authenticate(self.user)

        response = self.client.get(reverse("booking-list"), {"limit": 1})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["results"], 1)
        self.assertEqual(
            response.data["pagination"],
            {"total": 2, "totalPages": 2, "currentPage": 1, "limit": 1},
        )
        self.assertNotIn("user_name", response.data["data"]["bookings"][0])

    def test_admin_lists_and_filters_all_bookings(self) -> None:
        self._create_booking()
        cancelled = self._create_booking(user=self.other_user)
        services.cancel_booking(cancelled.pk, actor=self.other_user)
        self.client.force_authenticate(self.admin)

        everything = self.client.get(reverse("booking-list"))
        only_cancelled = self.client.get(reverse("booking-list"), {"status": "cancelled"})
        by_name = self.client.get(reverse("booking-list"), {"search": "other@"})

        self.assertEqual(everything.data["pagination"]["total"], 2)
        self.assertEqual(only_cancelled.data["pagination"]["total"], 1)
        self.assertEqual(only_cancelled.data["data"]["bookings"][0]["id"], cancelled.pk)
        self.assertEqual(only_cancelled.data["data"]["bookings"][0]["user_name"], "Other")
        self.assertEqual(by_name.data["pagination"]["total"], 1)

    def test_invalid_filter_returns_400(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-list"), {"start_date": "someday"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_my_bookings_returns_own_bookings_for_admins_too(self) -> None:
        self._create_booking()
        self._create_booking(user=self.admin)
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-my-bookings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["pagination"]["total"], 1)


class CancelTourBookingTests(TourBookingAPITestCase):
    def test_owner_cancels_once(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.user)

        first = self.client.delete(reverse("booking-detail", args=[booking.pk]))
        second = self.client.delete(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)
        self.assertEqual(first.data["data"]["booking"]["status"], "cancelled")
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST, second.data)
        self.assertEqual(second.data["message"], "Booking is already cancelled")
        self.assertTrue(Booking.objects.filter(pk=booking.pk).exists())
        self.assertEqual(booking.status_logs.count(), 2)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("cancelled", mail.outbox[0].body)

    def test_other_user_cannot_cancel(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.other_user)

        response = self.client.delete(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["message"], "Not authorized to cancel this booking")
        booking.refresh_from_db()
        self.assertEqual(booking.status, "pending")

    def test_cancelling_a_paid_booking_records_refund(self) -> None:
        booking = self._create_booking(payment_method="cash")
        self.client.force_authenticate(self.user)

        response = self.client.delete(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["booking"]["payment_status"], "refunded")
        self.assertEqual(BookingPayment.objects.filter(booking=booking).count(), 1)


class TourBookingStatusTests(TourBookingAPITestCase):
    def test_admin_approves_booking(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("booking-update-status", args=[booking.pk]),
            {"status": "approved", "admin_notes": "Deposit received"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.data["data"]["booking"]
        self.assertEqual(data["status"], "approved")
        self.assertEqual(data["admin_notes"], "Deposit received")
        self.assertEqual(booking.status_logs.count(), 2)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["traveller@example.com"])

    def test_repeating_the_current_status_sends_no_email(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("booking-update-status", args=[booking.pk]),
            {"status": "pending", "admin_notes": "Called the customer"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(booking.status_logs.count(), 2)
        self.assertEqual(len(mail.outbox), 0)

    def test_admin_cancel_of_completed_payment_refunds(self) -> None:
        booking = self._create_booking(payment_method="mpesa")
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("booking-update-status", args=[booking.pk]),
            {"status": "cancelled"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["booking"]["payment_status"], "refunded")
        refund = BookingPayment.objects.get(booking=booking)
        self.assertEqual(refund.amount, Decimal("160.00"))
        self.assertIn("refunded", mail.outbox[0].body)

    def test_experience_status_is_rejected_for_tours(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("booking-update-status", args=[booking.pk]),
            {"status": "confirmed"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(str(response.data["errors"]["status"][0]), "Please provide a valid status")

    def test_non_admin_cannot_change_status(self) -> None:
        booking = self._create_booking()
        self.client.force_authenticate(self.user)

        response = self.client.patch(
            reverse("booking-update-status", args=[booking.pk]),
            {"status": "approved"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        booking.refresh_from_db()
        self.assertEqual(booking.status, "pending")

    def test_reopening_a_cancelled_booking_is_rejected(self) -> None:
        booking = self._create_booking()
        services.cancel_booking(booking.pk, actor=self.user)
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("booking-update-status", args=[booking.pk]),
            {"status": "pending"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_stats_are_admin_only(self) -> None:
        self._create_booking()
        self.client.force_authenticate(self.user)
        self.assertEqual(self.client.get(reverse("booking-stats")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse("booking-stats"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        stats = response.data["data"]["stats"]
        self.assertEqual(stats["total_bookings"], 1)
        self.assertEqual(stats["pending_bookings"], 1)
        self.assertEqual(stats["approved_bookings"], 0)


class BookingRoutePathTests(TourBookingAPITestCase):
    """Routes are served without a trailing slash."""

    def test_create_and_update_on_literal_paths(self) -> None:
        tour = Tour.objects.create(title="Kilimanjaro Trek", slug="kilimanjaro", price=Decimal("100.00"), currency="TZS")
        self.client.force_authenticate(self.user)

        created = self.client.post("/api/bookings", self._payload(tour_id=tour.id), format="json")

        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        booking_id = created.data["data"]["booking"]["id"]
        self.assertEqual(Booking.objects.get(pk=booking_id).currency, "TZS")

        self.client.force_authenticate(self.admin)
        updated = self.client.patch(f"/api/bookings/{booking_id}/status", {"status": "approved"}, format="json")
        detail = self.client.get(f"/api/bookings/{booking_id}")
        stats = self.client.get("/api/bookings/stats/overview")

        self.assertEqual(updated.status_code, status.HTTP_200_OK, updated.data)
        self.assertEqual(detail.status_code, status.HTTP_200_OK, detail.data)
        self.assertEqual(stats.status_code, status.HTTP_200_OK, stats.data)
        self.assertEqual(reverse("booking-list"), "/api/bookings")

    def test_experience_booking_on_literal_path(self) -> None:
        experience = Experience.objects.create(title="Nairobi Food Walk", slug="food-walk", price=Decimal("45.00"))

        response = self.client.post(
            "/api/experiences/bookings",
            {
                "experience_id": experience.id,
                "full_name": "Jane Wanjiru",
                "email": "jane@example.com",
                "phone": "+254722000222",
                "booking_date": self.travel_date.isoformat(),
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(reverse("experience-booking-list"), "/api/experiences/bookings")
