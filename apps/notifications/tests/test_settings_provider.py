"""Tests for notification settings providers."""

from __future__ import annotations

from django.test import TestCase, override_settings

from apps.notifications.models import SystemSetting
from apps.notifications.settings_provider import DatabaseSettingsProvider, StaticSettingsProvider


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class StaticSettingsProviderTests(TestCase):
    def test_reads_product_specific_company_settings(self) -> None:
        provider = StaticSettingsProvider()

        tour = provider.get("tour")
        experience = provider.get("experience")

        self.assertEqual(tour.admin_email, "admin@olosuashtours.com")
        self.assertEqual(experience.admin_email, "admin@olosuashi.com")
        self.assertEqual(experience.booking_approval_subject, "Experience Booking Confirmed")
        self.assertEqual(tour.admin_whatsapp_number, "+254700000001")

    @override_settings(WHATSAPP={"API_URL": "https://wa.example/send", "ADMIN_NUMBER": "+1555"})
    def test_follows_settings_changes(self) -> None:
        config = StaticSettingsProvider().get("tour")

        self.assertEqual(config.whatsapp_api_url, "https://wa.example/send")
        self.assertEqual(config.admin_whatsapp_number, "+1555")


class DatabaseSettingsProviderTests(TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.provider = DatabaseSettingsProvider(ttl=60, clock=self.clock)

    def test_rows_override_static_values(self) -> None:
        SystemSetting.objects.create(key="admin_email", value="ops@example.com")
        SystemSetting.objects.create(key="experience.company_name", value="Olosuashi Experiences")
        SystemSetting.objects.create(key="unrelated_flag", value="1")

        tour = self.provider.get("tour")
        experience = self.provider.get("experience")

        self.assertEqual(tour.admin_email, "ops@example.com")
        self.assertEqual(experience.admin_email, "ops@example.com")
        self.assertEqual(experience.company_name, "Olosuashi Experiences")
        self.assertNotEqual(tour.company_name, "Olosuashi Experiences")

    def test_scoped_key_wins_over_plain_key(self) -> None:
        SystemSetting.objects.create(key="tour.admin_email", value="tours@example.com")
        SystemSetting.objects.create(key="admin_email", value="ops@example.com")

        self.assertEqual(self.provider.get("tour").admin_email, "tours@example.com")

    def test_rows_are_cached_until_ttl_expires(self) -> None:
        SystemSetting.objects.create(key="admin_email", value="first@example.com")
        self.assertEqual(self.provider.get("tour").admin_email, "first@example.com")

        SystemSetting.objects.filter(key="admin_email").update(value="second@example.com")
        self.clock.now += 30
        self.assertEqual(self.provider.get("tour").admin_email, "first@example.com")

        self.clock.now += 31
        self.assertEqual(self.provider.get("tour").admin_email, "second@example.com")

    def test_refresh_reloads_immediately(self) -> None:
        self.assertEqual(self.provider.get("tour").admin_email, "admin@olosuashtours.com")

        SystemSetting.objects.create(key="admin_email", value="new@example.com")
        self.provider.refresh()

        self.assertEqual(self.provider.get("tour").admin_email, "new@example.com")
