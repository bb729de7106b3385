"""Property domain models for StayNest.

A property is a listing owned by a host. It owns its accommodations (the
bookable units) and accommodation groups. Booked stays are kept on each
accommodation as a sorted list of disjoint intervals, see
``Accommodation.booking_intervals``.
"""

from __future__ import annotations

import builtins

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import BookingInterval

from .models_location import Division


class Property(models.Model):
    """Listing published by a host for nightly rental."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    is_closed = models.BooleanField(
        default=False,
        help_text=_("Closed properties are hidden from search."),
    )
    page_name = models.SlugField(
        max_length=100,
        unique=True,
        help_text=_("Public page name used in property URLs."),
    )
    description = models.TextField(blank=True)
    facility_codes = models.JSONField(default=list, blank=True)
    province = models.ForeignKey(
        Division,
        on_delete=models.PROTECT,
        related_name="properties_in_province",
        limit_choices_to={"parent__isnull": True},
    )
    district = models.ForeignKey(
        Division,
        on_delete=models.PROTECT,
        related_name="properties_in_district",
        limit_choices_to={"parent__isnull": False},
    )
    address_line = models.CharField(max_length=255, blank=True, help_text=_("Street and house number"))
    score = models.FloatField(null=True, blank=True, help_text=_("Average review score, empty until reviewed."))
    sum_score = models.FloatField(default=0)
    review_count = models.PositiveIntegerField(default=0)
    thumbnail = models.CharField(max_length=255, blank=True)
    images = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_closed", "score"]),
            models.Index(fields=["owner", "is_closed"]),
        ]

    def __str__(self) -> str:
        return self.title


class AccommodationGroup(models.Model):
    """Labeled set of accommodations inside a property."""

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="accommodation_groups",
    )
    title = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Accommodation group")
        verbose_name_plural = _("Accommodation groups")
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.property.title}: {self.title}"


class Accommodation(models.Model):
    """Bookable unit of a property: a specific room or the entire house."""

    class Type(models.TextChoices):
        ENTIRE_HOUSE = "entire-house", _("Entire house")
        SPECIFIC_ROOM = "specific-room", _("Specific room")

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="accommodations",
    )
    group = models.ForeignKey(
        AccommodationGroup,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="accommodations",
    )
    title = models.CharField(max_length=255)
    price_per_night = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    maximum_guest = models.PositiveSmallIntegerField(default=1)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.SPECIFIC_ROOM)
    bed = models.JSONField(default=dict, blank=True)
    rooms = models.JSONField(default=list, blank=True)
    current_booking_dates = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Booked stays sorted by book-in date, never overlapping."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Accommodation")
        verbose_name_plural = _("Accommodations")
        ordering = ["id"]

    def __str__(self) -> str:
        return self.title

    # ``property`` here is the foreign key above
    @builtins.property
    def booking_intervals(self) -> list[BookingInterval]:
        return [BookingInterval.from_dict(item) for item in self.current_booking_dates or []]

    @booking_intervals.setter
    def booking_intervals(self, intervals: list[BookingInterval]) -> None:
        self.current_booking_dates = [interval.to_dict() for interval in intervals]
