"""Tests for the booking repository functions."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase

from apps.bookings import services
from apps.bookings.domain.status import InvalidTransition
from apps.bookings.models import Booking, BookingPayment, BookingStatusLog
from apps.experiences.models import Experience
from apps.tours.models import Service, Tour, TourIncludedService, TourItinerary
from apps.users.models import User


class BookingServiceTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="traveller@example.com",
            username="Traveller",
            phone="+254711000111",
            password="TravelPass123",
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
        self.experience = Experience.objects.create(
            title="Nairobi Food Walk",
            slug="nairobi-food-walk",
            duration=4,
            price=Decimal("45.00"),
        )
        self.travel_date = date.today() + timedelta(days=30)

    def _create_tour_booking(self, **overrides) -> Booking:
        kwargs = {
            "product_type": "tour",
            "product_id": self.tour.id,
            "user": self.user,
            "travel_date": self.travel_date,
            "number_of_travelers": 2,
            "payment_method": "online",
        }
        kwargs.update(overrides)
        return services.create_booking(**kwargs)

    def test_total_price_uses_discount_price_at_creation_time(self) -> None:
        booking = self._create_tour_booking()

        self.tour.discount_price = None
        self.tour.price = Decimal("500.00")
        self.tour.save()

        booking.refresh_from_db()
        self.assertEqual(booking.total_price, Decimal("160.00"))

    def test_total_price_falls_back_to_list_price(self) -> None:
        booking = services.create_booking(
            product_type="experience",
            product_id=self.experience.id,
            travel_date=self.travel_date,
            number_of_travelers=3,
            full_name="Guest Person",
            email="guest@example.com",
            phone="+254722000222",
        )

        self.assertEqual(booking.total_price, Decimal("135.00"))
        self.assertIsNone(booking.user)
        self.assertRegex(booking.booking_reference, r"^EXP-\d+-\d{1,3}$")
        self.assertEqual(booking.payment_status, "pending")

    def test_unknown_product_raises_and_writes_nothing(self) -> None:
        with self.assertRaises(services.ProductNotFound):
            self._create_tour_booking(product_id=999)

        self.assertEqual(Booking.objects.count(), 0)
        self.assertEqual(BookingStatusLog.objects.count(), 0)

    def test_failed_log_insert_rolls_back_booking(self) -> None:
        with mock.patch.object(BookingStatusLog.objects, "create", side_effect=DatabaseError("disk full")):
            with self.assertRaises(DatabaseError):
                self._create_tour_booking()

        self.assertEqual(Booking.objects.count(), 0)

    def test_offline_payment_is_recorded_as_completed(self) -> None:
        booking = self._create_tour_booking(payment_method="cash")
        self.assertEqual(booking.payment_status, "completed")

    def test_whatsapp_link_is_stored_for_whatsapp_payments_only(self) -> None:
        booking = self._create_tour_booking(
            payment_method="whatsapp",
            whatsapp_number="+254733000333",
            whatsapp_link=lambda created: f"https://wa.example/{created.pk}",
        )
        other = self._create_tour_booking(
            payment_method="online",
            whatsapp_number="+254733000333",
            whatsapp_link=lambda created: "unused",
        )

        booking.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual(booking.whatsapp_url, f"https://wa.example/{booking.pk}")
        self.assertEqual(booking.whatsapp_number, "+254733000333")
        self.assertEqual(other.whatsapp_url, "")
        self.assertEqual(other.whatsapp_number, "")

    def test_status_log_tracks_every_transition(self) -> None:
        booking = self._create_tour_booking()
        services.update_status(booking.id, "approved", actor=self.admin)
        services.update_status(booking.id, "pending", actor=self.admin, notes="Waiting for payment")
        details = services.cancel_booking(booking.id, actor=self.user)

        logs = list(booking.status_logs.all())
        self.assertEqual([log.status for log in logs], ["pending", "approved", "pending", "cancelled"])
        self.assertEqual(logs[-1].status, details.booking.status)
        self.assertEqual(logs[0].notes, "Booking created")
        self.assertEqual(logs[1].notes, "Status changed to approved")
        self.assertEqual(logs[2].notes, "Waiting for payment")

    def test_second_cancel_fails_and_leaves_booking_unchanged(self) -> None:
        booking = self._create_tour_booking()
        services.cancel_booking(booking.id, actor=self.user)
        booking.refresh_from_db()
        updated_at = booking.updated_at

        with self.assertRaises(InvalidTransition):
            services.cancel_booking(booking.id, actor=self.user)

        booking.refresh_from_db()
        self.assertEqual(booking.status, "cancelled")
        self.assertEqual(booking.updated_at, updated_at)
        self.assertEqual(booking.status_logs.count(), 2)

    def test_admin_cancel_of_completed_payment_records_one_refund(self) -> None:
        booking = self._create_tour_booking(payment_method="mpesa")
        self.assertEqual(booking.payment_status, "completed")

        details = services.update_status(booking.id, "cancelled", actor=self.admin)

        self.assertEqual(details.booking.payment_status, "refunded")
        refunds = BookingPayment.objects.filter(booking=booking)
        self.assertEqual(refunds.count(), 1)
        self.assertEqual(refunds.get().amount, booking.total_price)
        self.assertEqual(refunds.get().payment_method, "refund")
        self.assertEqual(len(details.payment_history), 1)

        with self.assertRaises(InvalidTransition):
            services.update_status(booking.id, "cancelled", actor=self.admin)
        self.assertEqual(BookingPayment.objects.filter(booking=booking).count(), 1)

    def test_user_cancel_of_completed_payment_also_refunds(self) -> None:
        booking = self._create_tour_booking(payment_method="cash")

        details = services.cancel_booking(booking.id, actor=self.user)

        self.assertEqual(details.booking.payment_status, "refunded")
        self.assertEqual(BookingPayment.objects.filter(booking=booking).count(), 1)

    def test_experience_payment_status_is_applied_before_refund_check(self) -> None:
        booking = services.create_booking(
            product_type="experience",
            product_id=self.experience.id,
            travel_date=self.travel_date,
            number_of_travelers=1,
            full_name="Guest Person",
            email="guest@example.com",
            phone="+254722000222",
        )

        details = services.update_status(booking.id, "confirmed", actor=self.admin, payment_status="paid")
        self.assertEqual(details.booking.payment_status, "paid")

        details = services.update_status(booking.id, "cancelled", actor=self.admin)
        self.assertEqual(details.booking.payment_status, "refunded")

    def test_update_status_of_unknown_booking(self) -> None:
        with self.assertRaises(services.BookingNotFound):
            services.update_status(12345, "approved", actor=self.admin)

    def test_booking_that_vanishes_after_update_raises_not_found(self) -> None:
        booking = self._create_tour_booking()

        with mock.patch("apps.bookings.services.get_booking", return_value=None):
            with self.assertRaises(services.BookingNotFound):
                services.update_status(booking.id, "approved", actor=self.admin)
            with self.assertRaises(services.BookingNotFound):
                services.cancel_booking(booking.id, actor=self.user)

    def test_product_priced_in_any_currency_can_be_booked(self) -> None:
        tour = Tour.objects.create(
            title="Serengeti Crossing",
            slug="serengeti-crossing",
            price=Decimal("100.00"),
            currency="TZS",
        )

        booking = self._create_tour_booking(product_id=tour.id, number_of_travelers=3)

        self.assertEqual(booking.currency, "TZS")
        self.assertEqual(booking.total_price, Decimal("300.00"))

    def test_end_to_end_create_then_approve(self) -> None:
        booking = self._create_tour_booking(number_of_travelers=2)

        self.assertEqual(booking.tour_id, 5)
        self.assertEqual(booking.total_price, Decimal("160.00"))
        self.assertEqual(booking.status, "pending")
        self.assertEqual(list(booking.status_logs.values_list("notes", flat=True)), ["Booking created"])

        details = services.update_status(booking.id, "approved", actor=self.admin)

        self.assertEqual(details.booking.status, "approved")
        self.assertEqual(booking.status_logs.count(), 2)
        self.assertFalse(BookingPayment.objects.filter(booking=booking).exists())
        self.assertEqual(details.booking.payment_status, "pending")


class GetBookingTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="traveller@example.com", username="Traveller", password="x")
        self.tour = Tour.objects.create(title="Amboseli", slug="amboseli", duration=2, price=Decimal("250.00"))
        TourItinerary.objects.create(tour=self.tour, day=2, title="Game drive")
        TourItinerary.objects.create(tour=self.tour, day=1, title="Arrival")
        meals = Service.objects.create(name="Meals")
        TourIncludedService.objects.create(tour=self.tour, service=meals, details="Full board")
        self.booking = services.create_booking(
            product_type="tour",
            product_id=self.tour.id,
            user=self.user,
            travel_date=date.today() + timedelta(days=10),
            number_of_travelers=1,
            payment_method="online",
        )

    def test_returns_none_for_missing_booking(self) -> None:
        self.assertIsNone(services.get_booking(98765))

    def test_collects_tour_details_and_history(self) -> None:
        details = services.get_booking(self.booking.id)

        assert details is not None
        self.assertEqual([item["day"] for item in details.itinerary], [1, 2])
        self.assertEqual(details.included_services, [{"name": "Meals", "details": "Full board"}])
        self.assertEqual(details.excluded_services, [])
        self.assertEqual(details.status_history[0]["status"], "pending")
        self.assertEqual(details.status_history[0]["changed_by"], "Traveller (user)")
        self.assertEqual(details.payment_history, [])

    def test_failing_secondary_lookup_degrades_to_empty_list(self) -> None:
        with mock.patch("apps.bookings.services._itinerary", side_effect=DatabaseError("boom")):
            details = services.get_booking(self.booking.id)

        assert details is not None
        self.assertEqual(details.itinerary, [])
        self.assertEqual(len(details.included_services), 1)
        self.assertEqual(len(details.status_history), 1)


class ListBookingsTests(TestCase):
    def setUp(self) -> None:
        self.alice = User.objects.create_user(email="alice@example.com", username="Alice", password="x")
        self.bob = User.objects.create_user(email="bob@example.com", username="Bob", password="x")
        self.mara = Tour.objects.create(title="Masai Mara", slug="mara", price=Decimal("100.00"))
        self.naivasha = Tour.objects.create(title="Lake Naivasha", slug="naivasha", price=Decimal("60.00"))
        today = date.today()
        for offset, (user, tour) in enumerate(
            [(self.alice, self.mara), (self.alice, self.naivasha), (self.bob, self.mara)], start=1
        ):
            services.create_booking(
                product_type="tour",
                product_id=tour.id,
                user=user,
                travel_date=today + timedelta(days=offset * 10),
                number_of_travelers=1,
                payment_method="online",
            )

    def test_pagination_metadata(self) -> None:
        page = services.list_bookings("tour", {}, page=2, limit=2)

        self.assertEqual(len(page.records), 1)
        self.assertEqual(page.pagination, {"total": 3, "totalPages": 2, "currentPage": 2, "limit": 2})

    def test_newest_first(self) -> None:
        page = services.list_bookings("tour", {})
        ids = [booking.id for booking in page.records]
        self.assertEqual(ids, sorted(ids, reverse=True))

    def test_filters_by_user_and_search(self) -> None:
        self.assertEqual(services.list_bookings("tour", {"user_id": self.alice.id}).pagination["total"], 2)
        self.assertEqual(services.list_bookings("tour", {"search": "naivasha"}).pagination["total"], 1)
        self.assertEqual(services.list_bookings("tour", {"search": "bob@"}).pagination["total"], 1)

    def test_filters_by_date_range(self) -> None:
        today = date.today()
        page = services.list_bookings(
            "tour",
            {"start_date": str(today + timedelta(days=15)), "end_date": str(today + timedelta(days=25))},
        )
        self.assertEqual(page.pagination["total"], 1)

    def test_product_types_are_listed_separately(self) -> None:
        self.assertEqual(services.list_bookings("experience", {}).pagination["total"], 0)

    def test_invalid_filter_value(self) -> None:
        with self.assertRaises(services.InvalidFilters):
            services.list_bookings("tour", {"start_date": "not-a-date"})


class BookingStatsTests(TestCase):
    def test_counts_and_revenue(self) -> None:
        user = User.objects.create_user(email="stats@example.com", password="x")
        tour = Tour.objects.create(title="Tsavo", slug="tsavo", price=Decimal("100.00"))
        travel_date = date.today() + timedelta(days=5)
        online = services.create_booking(
            product_type="tour", product_id=tour.id, user=user, travel_date=travel_date,
            number_of_travelers=1, payment_method="online",
        )
        cash = services.create_booking(
            product_type="tour", product_id=tour.id, user=user, travel_date=travel_date,
            number_of_travelers=2, payment_method="cash",
        )
        services.update_status(online.id, "approved")
        services.cancel_booking(cash.id)

        stats = services.get_booking_stats("tour")

        self.assertEqual(stats["total_bookings"], 2)
        self.assertEqual(stats["approved_bookings"], 1)
        self.assertEqual(stats["cancelled_bookings"], 1)
        self.assertEqual(stats["pending_bookings"], 0)
        self.assertEqual(stats["total_revenue"], Decimal("300.00"))
        self.assertEqual(stats["revenue_pending"], Decimal("100.00"))
        self.assertEqual(stats["revenue_refunded"], Decimal("200.00"))
        self.assertEqual(stats["revenue_completed"], 0)
        self.assertEqual(stats["earliest_booking"], travel_date)


class ProductCurrencyValidationTests(TestCase):
    def test_malformed_currency_codes_are_rejected(self) -> None:
        for code in ("usd", "US", "U$D"):
            with self.subTest(code=code):
                tour = Tour(title="Tsavo", slug="tsavo", price=Decimal("10.00"), currency=code)
                with self.assertRaises(ValidationError) as ctx:
                    tour.full_clean()
                self.assertIn("currency", ctx.exception.message_dict)

    def test_iso_codes_outside_the_common_set_are_accepted(self) -> None:
        experience = Experience(title="Zanzibar Spice Tour", slug="spice-tour", price=Decimal("25.00"), currency="TZS")
        experience.full_clean()
