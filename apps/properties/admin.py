"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin
from mptt.admin import MPTTModelAdmin

from .models import Accommodation, AccommodationGroup, Division, Property


class AccommodationGroupInline(admin.TabularInline):
    model = AccommodationGroup
    extra = 0
    fields = ("title",)


class AccommodationInline(admin.TabularInline):
    model = Accommodation
    extra = 0
    fields = ("title", "group", "type", "price_per_night", "maximum_guest")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "page_name",
        "province",
        "district",
        "is_closed",
        "score",
        "review_count",
        "owner",
    )
    list_filter = ("is_closed", "province")
    search_fields = ("title", "page_name", "owner__username")
    inlines = (AccommodationGroupInline, AccommodationInline)
    readonly_fields = ("score", "sum_score", "review_count", "created_at", "updated_at")


@admin.register(Accommodation)
class AccommodationAdmin(admin.ModelAdmin):
    list_display = ("title", "property", "group", "type", "price_per_night", "maximum_guest")
    list_filter = ("type",)
    search_fields = ("title", "property__title")
    # Booked stays are written only through the reservation service.
    readonly_fields = ("current_booking_dates", "created_at", "updated_at")


@admin.register(Division)
class DivisionAdmin(MPTTModelAdmin):
    list_display = ("name", "code", "parent", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    prepopulated_fields = {"code": ("name",)}
    mptt_level_indent = 20
