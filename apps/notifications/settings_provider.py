"""
Where notification settings come from.

The dispatcher is handed a ``SettingsProvider`` when it is built and asks it
for a ``NotificationSettings`` snapshot per product type on every dispatch.

* ``StaticSettingsProvider`` reads ``TOURING_COMPANY``, ``WHATSAPP`` and the
  URL settings from Django settings on each call.
* ``DatabaseSettingsProvider`` overlays rows of the ``SystemSetting`` table on
  top of the static values. Rows are loaded once and reloaded when the
  snapshot is older than ``BOOKING_SETTINGS_TTL`` seconds or when
  ``refresh()`` is called. A key may be scoped to one product type as
  ``"<product_type>.<key>"``; scoped keys win over plain ones.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from functools import lru_cache
from typing import Callable

from django.conf import settings  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationSettings:
    company_name: str
    company_email: str
    company_phone: str
    admin_email: str
    mpesa_paybill: str
    website_url: str
    frontend_url: str
    admin_base_url: str
    whatsapp_api_url: str
    admin_whatsapp_number: str
    booking_email_subject: str = ""
    booking_approval_subject: str = ""
    booking_cancellation_subject: str = ""


OVERRIDABLE_KEYS = frozenset(f.name for f in fields(NotificationSettings))


class SettingsProvider(ABC):
    """Source of ``NotificationSettings`` for a product type."""

    @abstractmethod
    def get(self, product_type: str) -> NotificationSettings:
        raise NotImplementedError

    def refresh(self) -> None:
        """Reload settings from the backing store, if there is one."""


class StaticSettingsProvider(SettingsProvider):
    def get(self, product_type: str) -> NotificationSettings:
        company = settings.TOURING_COMPANY.get(product_type) or settings.TOURING_COMPANY["tour"]
        whatsapp = settings.WHATSAPP
        return NotificationSettings(
            company_name=company.get("company_name", ""),
            company_email=company.get("company_email", ""),
            company_phone=company.get("company_phone", ""),
            admin_email=company.get("admin_email", ""),
            mpesa_paybill=company.get("mpesa_paybill", ""),
            website_url=company.get("website_url", ""),
            frontend_url=settings.FRONTEND_URL,
            admin_base_url=settings.ADMIN_BASE_URL,
            whatsapp_api_url=whatsapp.get("API_URL", "https://api.whatsapp.com/send"),
            admin_whatsapp_number=whatsapp.get("ADMIN_NUMBER", ""),
            booking_email_subject=company.get("booking_email_subject", ""),
            booking_approval_subject=company.get("booking_approval_subject", ""),
            booking_cancellation_subject=company.get("booking_cancellation_subject", ""),
        )


class DatabaseSettingsProvider(SettingsProvider):
    """Static settings overlaid with ``SystemSetting`` rows, reloaded every ``ttl`` seconds."""

    def __init__(
        self,
        fallback: SettingsProvider | None = None,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fallback = fallback or StaticSettingsProvider()
        self.ttl = settings.BOOKING_SETTINGS_TTL if ttl is None else ttl
        self._clock = clock
        self._rows: dict[str, str] | None = None
        self._loaded_at = 0.0

    def refresh(self) -> None:
        from .models import SystemSetting

        try:
            self._rows = dict(SystemSetting.objects.values_list("key", "value"))
        except DatabaseError as exc:
            logger.error(f"Could not load system settings, using static values: {exc}")
            self._rows = {}
        self._loaded_at = self._clock()
        logger.info(f"System settings refreshed from database ({len(self._rows)} rows)")

    def _is_stale(self) -> bool:
        return self._rows is None or (self._clock() - self._loaded_at) > self.ttl

    def get(self, product_type: str) -> NotificationSettings:
        if self._is_stale():
            self.refresh()

        overrides: dict[str, str] = {}
        scoped_prefix = f"{product_type}."
        for key, value in (self._rows or {}).items():
            if key in OVERRIDABLE_KEYS:
                overrides[key] = value
        for key, value in (self._rows or {}).items():
            if key.startswith(scoped_prefix) and key[len(scoped_prefix):] in OVERRIDABLE_KEYS:
                overrides[key[len(scoped_prefix):]] = value

        base = self.fallback.get(product_type)
        return replace(base, **overrides) if overrides else base


@lru_cache(maxsize=1)
def get_settings_provider() -> SettingsProvider:
    """Provider named by ``BOOKING_SETTINGS_PROVIDER``, built once per process."""

    return import_string(settings.BOOKING_SETTINGS_PROVIDER)()
