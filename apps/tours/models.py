"""Tour catalogue models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.models import PricedProduct


class Tour(PricedProduct):
    """Multi-day guided tour, priced per traveller."""

    class Difficulty(models.TextChoices):
        EASY = "easy", _("Easy")
        MEDIUM = "medium", _("Medium")
        DIFFICULT = "difficult", _("Difficult")

    summary = models.CharField(max_length=500, blank=True)
    description = models.TextField(blank=True)
    max_group_size = models.PositiveSmallIntegerField(default=10)
    difficulty = models.CharField(
        max_length=20,
        choices=Difficulty.choices,
        default=Difficulty.MEDIUM,
    )
    featured = models.BooleanField(default=False)
    included_services = models.ManyToManyField(
        "Service",
        through="TourIncludedService",
        related_name="included_in_tours",
        blank=True,
    )
    excluded_services = models.ManyToManyField(
        "Service",
        through="TourExcludedService",
        related_name="excluded_from_tours",
        blank=True,
    )

    class Meta:
        verbose_name = _("Tour")
        verbose_name_plural = _("Tours")
        ordering = ["-created_at"]


class TourItinerary(models.Model):
    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="itinerary")
    day = models.PositiveSmallIntegerField()
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name = _("Itinerary day")
        verbose_name_plural = _("Itinerary")
        ordering = ["tour", "day"]
        constraints = [
            models.UniqueConstraint(fields=["tour", "day"], name="tour_itinerary_unique_day"),
        ]

    def __str__(self) -> str:
        return f"Day {self.day}: {self.title}"


class Service(models.Model):
    """Something a tour includes or leaves out (meals, park fees, transport)."""

    name = models.CharField(max_length=150, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class TourIncludedService(models.Model):
    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="included_service_links")
    service = models.ForeignKey(Service, on_delete=models.CASCADE)
    details = models.CharField(max_length=255, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tour", "service"], name="tour_included_service_unique"),
        ]


class TourExcludedService(models.Model):
    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="excluded_service_links")
    service = models.ForeignKey(Service, on_delete=models.CASCADE)
    details = models.CharField(max_length=255, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tour", "service"], name="tour_excluded_service_unique"),
        ]
