"""Abstract models shared by bookable products (tours and experiences)."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import CURRENCY_CODE_PATTERN, Money

CURRENCY_VALIDATOR = RegexValidator(
    regex=CURRENCY_CODE_PATTERN,
    message=_("Use a three-letter ISO 4217 code in capitals, e.g. USD."),
)


class PricedProduct(models.Model):
    """A catalogue item that can be booked per person."""

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    duration = models.PositiveSmallIntegerField(
        default=1,
        help_text=_("Duration in days for tours, in hours for experiences."),
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    discount_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default="USD", validators=[CURRENCY_VALIDATOR])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def __str__(self) -> str:
        return self.title

    @property
    def effective_unit_price(self) -> Money:
        """Discount price when one is set, list price otherwise."""
        amount = self.discount_price if self.discount_price else self.price
        return Money(amount, self.currency)
