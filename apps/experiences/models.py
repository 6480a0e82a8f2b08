"""Experience catalogue models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.models import PricedProduct


class Experience(PricedProduct):
    """Short activity (a few hours) priced per guest."""

    class Difficulty(models.TextChoices):
        EASY = "easy", _("Easy")
        MODERATE = "moderate", _("Moderate")
        CHALLENGING = "challenging", _("Challenging")

    short_description = models.CharField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    min_group_size = models.PositiveSmallIntegerField(default=1)
    max_group_size = models.PositiveSmallIntegerField(default=10)
    difficulty = models.CharField(
        max_length=20,
        choices=Difficulty.choices,
        default=Difficulty.EASY,
    )
    is_featured = models.BooleanField(default=False)

    class Meta:
        verbose_name = _("Experience")
        verbose_name_plural = _("Experiences")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_group_size__gte=models.F("min_group_size")),
                name="experience_valid_group_size",
            ),
        ]
