"""Property search with an optional availability window.

Without dates the database paginates the search queryset directly. With dates
availability depends on the booking intervals stored on each accommodation,
which the database cannot filter on, so candidates are streamed through a
server-side cursor in score order and paginated here.
"""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Iterable, Iterator, List, Optional

import structlog  # type: ignore
from django.conf import settings  # type: ignore
from django.core.paginator import EmptyPage, Paginator  # type: ignore
from django.db.models import F, QuerySet  # type: ignore

from .availability import is_property_available, set_availability_fields
from .models import Property

logger = structlog.get_logger(__name__)

SUMMARY_DEFERRED_FIELDS = ("images", "description", "facility_codes")


@dataclass(frozen=True)
class SearchCriteria:
    """Filters and page request for :func:`search_properties`."""

    district_id: Optional[int] = None
    province_id: Optional[int] = None
    book_in: Optional[date] = None
    book_out: Optional[date] = None
    page: int = 1
    limit: Optional[int] = None

    def __post_init__(self):
        if (self.book_in is None) != (self.book_out is None):
            raise ValueError("book_in and book_out must be given together")
        if self.has_dates and self.book_in >= self.book_out:
            raise ValueError("book_in must be before book_out")
        if self.page < 1:
            raise ValueError("page must be at least 1")
        if self.limit is None:
            object.__setattr__(self, "limit", settings.DEFAULT_PAGE_LIMIT)
        elif self.limit < 0:
            raise ValueError("limit cannot be negative")

    @property
    def has_dates(self) -> bool:
        return self.book_in is not None and self.book_out is not None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageWindow:
    """How many available candidates are still to skip and to collect."""

    skip: int
    limit: int

    @property
    def is_filled(self) -> bool:
        return self.skip == 0 and self.limit == 0

    def advance(self, available: bool) -> "PageWindow":
        """Count one streamed candidate; unavailable ones leave the window unchanged."""
        if not available:
            return self
        if self.skip > 0:
            return replace(self, skip=self.skip - 1)
        return replace(self, limit=self.limit - 1)


@dataclass
class PropertyPage:
    results: List[Any]
    page: int
    limit: int
    total_pages: int
    total_results: int


def build_search_queryset(criteria: SearchCriteria) -> QuerySet:
    """Open properties matching the location filters, best score first."""
    qs = (
        Property.objects.filter(is_closed=False)
        .select_related("province", "district")
        .prefetch_related("accommodations")
        .defer(*SUMMARY_DEFERRED_FIELDS)
        .order_by(F("score").desc(nulls_last=True), "id")
    )
    if criteria.district_id:
        qs = qs.filter(district_id=criteria.district_id)
    if criteria.province_id:
        qs = qs.filter(province_id=criteria.province_id)
    return qs


def iter_available_properties(
    candidates: Iterable[Any],
    book_in: date,
    book_out: date,
    skip: int,
    limit: int,
) -> Iterator[Any]:
    """
    Yield one page of available properties from ``candidates``.

    Only available candidates count toward ``skip``. Collected properties carry
    ``is_available`` on themselves and on every accommodation. No candidate is
    pulled after the page is complete.
    """
    window = PageWindow(skip=skip, limit=limit)
    if window.limit <= 0:
        return

    for candidate in candidates:
        if window.skip > 0:
            window = window.advance(is_property_available(candidate, book_in, book_out))
            continue

        set_availability_fields(candidate, book_in, book_out)
        window = window.advance(candidate.is_available)
        if candidate.is_available:
            yield candidate
        if window.is_filled:
            return


def search_properties(criteria: SearchCriteria) -> List[Property]:
    """Return the requested page of open properties, restricted to available ones when dates are given."""
    if criteria.limit == 0:
        return []

    qs = build_search_queryset(criteria)

    if not criteria.has_dates:
        properties = list(qs[criteria.skip:criteria.skip + criteria.limit])
    else:
        cursor = qs.iterator(chunk_size=settings.PROPERTY_SEARCH_CHUNK_SIZE)
        with closing(cursor):
            properties = list(
                iter_available_properties(
                    cursor,
                    criteria.book_in,
                    criteria.book_out,
                    skip=criteria.skip,
                    limit=criteria.limit,
                )
            )

    logger.info(
        "property_search",
        with_dates=criteria.has_dates,
        page=criteria.page,
        limit=criteria.limit,
        returned=len(properties),
    )
    return properties


def paginate_properties(queryset: QuerySet, page: int = 1, limit: Optional[int] = None) -> PropertyPage:
    """Paginate any property queryset, reporting totals."""
    if limit is None:
        limit = settings.DEFAULT_PAGE_LIMIT
    paginator = Paginator(queryset, limit)
    try:
        results = list(paginator.page(page).object_list)
    except EmptyPage:
        results = []
    return PropertyPage(
        results=results,
        page=page,
        limit=limit,
        total_pages=paginator.num_pages,
        total_results=paginator.count,
    )
