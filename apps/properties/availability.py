"""Availability checks over accommodation booking intervals.

Every accommodation keeps its booked stays as a list of ``BookingInterval``
sorted by ``book_in`` with no two intervals overlapping. The checks below rely
on that invariant: a candidate stay is free when it fits before the first
interval, after the last one, or in the gap between two neighbours.

Intervals are half-open, so a stay ending on the day another one starts does
not conflict with it.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List

from shared.domain.value_objects import BookingInterval


def is_accommodation_available(accommodation: Any, book_in: date, book_out: date) -> bool:
    """Check the accommodation is free from ``book_in`` to ``book_out``."""
    intervals = accommodation.booking_intervals

    if (
        not intervals
        or book_out <= intervals[0].book_in
        or book_in >= intervals[-1].book_out
    ):
        return True

    for i in range(1, len(intervals)):
        if book_out <= intervals[i].book_in:
            return book_in >= intervals[i - 1].book_out
    return False


def is_property_available(property_obj: Any, book_in: date, book_out: date) -> bool:
    """True when at least one accommodation of the property is free."""
    for accommodation in _accommodations(property_obj):
        if is_accommodation_available(accommodation, book_in, book_out):
            return True
    return False


def set_availability_fields(property_obj: Any, book_in: date, book_out: date) -> None:
    """Annotate the property and each of its accommodations with ``is_available``."""
    property_obj.is_available = False

    for accommodation in _accommodations(property_obj):
        accommodation.is_available = is_accommodation_available(accommodation, book_in, book_out)
        if accommodation.is_available:
            property_obj.is_available = True


def add_current_booking_date(intervals: List[BookingInterval], new_interval: BookingInterval) -> None:
    """
    Insert a booked stay keeping the list sorted by book-in date.

    The caller has already checked that the new interval does not overlap any
    existing one.
    """
    intervals.append(new_interval)
    intervals.sort(key=lambda interval: interval.book_in)


def _accommodations(property_obj: Any):
    accommodations = getattr(property_obj, "accommodations", None)
    if accommodations is None:
        return []
    # Model instances expose a related manager; prefetched rows come back from .all()
    if hasattr(accommodations, "all"):
        return accommodations.all()
    return accommodations
