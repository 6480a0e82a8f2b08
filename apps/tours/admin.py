"""Admin registrations for the tours catalogue."""

from __future__ import annotations

from django.contrib import admin

from .models import Service, Tour, TourExcludedService, TourIncludedService, TourItinerary


class TourItineraryInline(admin.TabularInline):
    model = TourItinerary
    extra = 0


class TourIncludedServiceInline(admin.TabularInline):
    model = TourIncludedService
    extra = 0


class TourExcludedServiceInline(admin.TabularInline):
    model = TourExcludedService
    extra = 0


@admin.register(Tour)
class TourAdmin(admin.ModelAdmin):
    list_display = ("title", "duration", "difficulty", "price", "discount_price", "featured", "created_at")
    list_filter = ("difficulty", "featured")
    search_fields = ("title", "summary")
    prepopulated_fields = {"slug": ("title",)}
    inlines = [TourItineraryInline, TourIncludedServiceInline, TourExcludedServiceInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    search_fields = ("name",)
