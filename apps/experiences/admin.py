"""Admin registration for experiences."""

from __future__ import annotations

from django.contrib import admin

from .models import Experience


@admin.register(Experience)
class ExperienceAdmin(admin.ModelAdmin):
    list_display = ("title", "duration", "price", "discount_price", "min_group_size", "max_group_size", "is_featured")
    list_filter = ("difficulty", "is_featured")
    search_fields = ("title", "short_description")
    prepopulated_fields = {"slug": ("title",)}
