"""Tests for the availability-aware property search."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.db.models import QuerySet

from apps.properties.models import Accommodation, Division, Property
from apps.properties.search import (
    PageWindow,
    SearchCriteria,
    build_search_queryset,
    iter_available_properties,
    paginate_properties,
    search_properties,
)
from shared.domain.value_objects import BookingInterval

BOOK_IN = date(2024, 1, 12)
BOOK_OUT = date(2024, 1, 14)


def _candidate(index: int, available: bool) -> SimpleNamespace:
    booked = [] if available else [BookingInterval(date(2024, 1, 10), date(2024, 1, 15))]
    return SimpleNamespace(id=index, accommodations=[SimpleNamespace(booking_intervals=booked)])


class CountingCandidates:
    """Iterable that records how many candidates were pulled."""

    def __init__(self, candidates):
        self.candidates = candidates
        self.pulled = 0

    def __iter__(self):
        for candidate in self.candidates:
            self.pulled += 1
            yield candidate


@pytest.fixture
def every_third_available():
    return CountingCandidates([_candidate(i, available=i % 3 == 0) for i in range(10)])


def test_page_window_counts_only_available() -> None:
    window = PageWindow(skip=1, limit=1)
    assert window.advance(False) == window
    window = window.advance(True)
    assert window == PageWindow(skip=0, limit=1)
    window = window.advance(True)
    assert window.is_filled


def test_first_page_stops_pulling_once_full(every_third_available) -> None:
    page = list(iter_available_properties(every_third_available, BOOK_IN, BOOK_OUT, skip=0, limit=2))

    assert [candidate.id for candidate in page] == [0, 3]
    assert every_third_available.pulled == 4
    assert all(candidate.is_available for candidate in page)
    assert all(acc.is_available for candidate in page for acc in candidate.accommodations)


def test_second_page_skips_available_candidates(every_third_available) -> None:
    page = list(iter_available_properties(every_third_available, BOOK_IN, BOOK_OUT, skip=2, limit=2))

    assert [candidate.id for candidate in page] == [6, 9]
    assert every_third_available.pulled == 10


def test_short_last_page_when_candidates_run_out(every_third_available) -> None:
    page = list(iter_available_properties(every_third_available, BOOK_IN, BOOK_OUT, skip=0, limit=10))

    assert [candidate.id for candidate in page] == [0, 3, 6, 9]


def test_page_past_the_end_is_empty(every_third_available) -> None:
    page = list(iter_available_properties(every_third_available, BOOK_IN, BOOK_OUT, skip=4, limit=2))

    assert page == []


def test_zero_limit_pulls_nothing(every_third_available) -> None:
    page = list(iter_available_properties(every_third_available, BOOK_IN, BOOK_OUT, skip=0, limit=0))

    assert page == []
    assert every_third_available.pulled == 0


def test_search_criteria_requires_both_dates() -> None:
    with pytest.raises(ValueError):
        SearchCriteria(book_in=BOOK_IN)
    with pytest.raises(ValueError):
        SearchCriteria(book_out=BOOK_OUT)


def test_search_criteria_rejects_reversed_dates() -> None:
    with pytest.raises(ValueError):
        SearchCriteria(book_in=BOOK_OUT, book_out=BOOK_IN)


def test_search_criteria_skip(settings) -> None:
    settings.DEFAULT_PAGE_LIMIT = 20
    assert SearchCriteria(page=3).limit == 20
    assert SearchCriteria(page=3).skip == 40
    assert SearchCriteria(page=2, limit=5).skip == 5


@pytest.fixture
def owner(db):
    return get_user_model().objects.create_user(username="host", password="StrongPass123")


@pytest.fixture
def province(db):
    return Division.objects.create(name="Ha Noi", code="ha-noi")


@pytest.fixture
def district(province):
    return Division.objects.create(name="Ba Dinh", code="ha-noi-ba-dinh", parent=province)


@pytest.fixture
def other_district(province):
    return Division.objects.create(name="Tay Ho", code="ha-noi-tay-ho", parent=province)


def _property(owner, province, district, index: int, score=None, is_closed=False) -> Property:
    return Property.objects.create(
        owner=owner,
        title=f"Home {index}",
        page_name=f"home-{index}",
        province=province,
        district=district,
        score=score,
        is_closed=is_closed,
    )


def _accommodation(property_obj: Property, *intervals: BookingInterval) -> Accommodation:
    accommodation = Accommodation(property=property_obj, title="Room", price_per_night=Decimal("50.00"))
    accommodation.booking_intervals = list(intervals)
    accommodation.save()
    return accommodation


@pytest.mark.django_db
def test_search_without_dates_matches_queryset_slice(owner, province, district) -> None:
    for index in range(25):
        _property(owner, province, district, index, score=float(index % 7))

    criteria = SearchCriteria(page=2, limit=10)
    results = search_properties(criteria)

    expected = list(build_search_queryset(criteria)[10:20])
    assert [p.id for p in results] == [p.id for p in expected]


@pytest.mark.django_db
def test_search_orders_by_score_with_unscored_last(owner, province, district) -> None:
    unscored = _property(owner, province, district, 1)
    low = _property(owner, province, district, 2, score=3.5)
    high = _property(owner, province, district, 3, score=4.8)

    results = search_properties(SearchCriteria())

    assert [p.id for p in results] == [high.id, low.id, unscored.id]


@pytest.mark.django_db
def test_search_excludes_closed_and_filters_district(owner, province, district, other_district) -> None:
    visible = _property(owner, province, district, 1, score=4.0)
    _property(owner, province, district, 2, score=5.0, is_closed=True)
    _property(owner, province, other_district, 3, score=4.5)

    results = search_properties(SearchCriteria(district_id=district.id))

    assert [p.id for p in results] == [visible.id]


@pytest.mark.django_db
def test_search_with_zero_limit_returns_nothing(owner, province, district) -> None:
    _property(owner, province, district, 1)

    assert search_properties(SearchCriteria(limit=0)) == []
    assert search_properties(SearchCriteria(book_in=BOOK_IN, book_out=BOOK_OUT, limit=0)) == []


@pytest.mark.django_db
def test_search_with_dates_returns_available_only(owner, province, district) -> None:
    booked = _property(owner, province, district, 1, score=5.0)
    _accommodation(booked, BookingInterval(date(2024, 1, 10), date(2024, 1, 15)))
    free = _property(owner, province, district, 2, score=4.0)
    taken_room = _accommodation(free, BookingInterval(date(2024, 1, 13), date(2024, 1, 16)))
    free_room = _accommodation(free, BookingInterval(date(2024, 1, 14), date(2024, 1, 20)))

    results = search_properties(SearchCriteria(book_in=BOOK_IN, book_out=BOOK_OUT))

    assert [p.id for p in results] == [free.id]
    assert results[0].is_available is True
    flags = {acc.id: acc.is_available for acc in results[0].accommodations.all()}
    assert flags == {taken_room.id: False, free_room.id: True}


@pytest.mark.django_db
def test_search_with_dates_pages_over_available(owner, province, district) -> None:
    available_ids = []
    for index in range(9):
        property_obj = _property(owner, province, district, index, score=float(100 - index))
        if index % 3 == 0:
            _accommodation(property_obj)
            available_ids.append(property_obj.id)
        else:
            _accommodation(property_obj, BookingInterval(date(2024, 1, 1), date(2024, 2, 1)))

    first = search_properties(SearchCriteria(book_in=BOOK_IN, book_out=BOOK_OUT, page=1, limit=2))
    second = search_properties(SearchCriteria(book_in=BOOK_IN, book_out=BOOK_OUT, page=2, limit=2))

    assert [p.id for p in first] == available_ids[:2]
    assert [p.id for p in second] == available_ids[2:]


@pytest.mark.django_db
def test_paginate_properties_reports_totals(owner, province, district) -> None:
    for index in range(5):
        _property(owner, province, district, index)

    page = paginate_properties(Property.objects.order_by("id"), page=2, limit=2)

    assert page.total_results == 5
    assert page.total_pages == 3
    assert len(page.results) == 2


@pytest.mark.django_db
def test_paginate_properties_past_last_page(owner, province, district) -> None:
    _property(owner, province, district, 1)

    page = paginate_properties(Property.objects.order_by("id"), page=4, limit=2)

    assert page.results == []
    assert page.total_results == 1


class TrackedCursor:
    """Stands in for ``QuerySet.iterator``, recording how the stream ended."""

    def __init__(self, fail_after=None):
        self.fail_after = fail_after
        self.pulled = 0
        self.closed_early = False

    def open(self, queryset, chunk_size=None):
        return self._stream(list(queryset))

    def _stream(self, rows):
        try:
            for row in rows:
                if self.fail_after is not None and self.pulled == self.fail_after:
                    raise RuntimeError("connection lost")
                self.pulled += 1
                yield row
        except GeneratorExit:
            self.closed_early = True
            raise


@pytest.mark.django_db
def test_search_with_dates_closes_cursor_when_page_fills(monkeypatch, owner, province, district) -> None:
    for index in range(5):
        _accommodation(_property(owner, province, district, index, score=float(10 - index)))
    cursor = TrackedCursor()
    monkeypatch.setattr(QuerySet, "iterator", lambda queryset, chunk_size=None: cursor.open(queryset, chunk_size))

    results = search_properties(SearchCriteria(book_in=BOOK_IN, book_out=BOOK_OUT, limit=1))

    assert len(results) == 1
    assert cursor.pulled == 1
    assert cursor.closed_early is True


@pytest.mark.django_db
def test_search_with_dates_propagates_store_errors(monkeypatch, owner, province, district) -> None:
    for index in range(3):
        _accommodation(_property(owner, province, district, index, score=float(10 - index)))
    cursor = TrackedCursor(fail_after=2)
    monkeypatch.setattr(QuerySet, "iterator", lambda queryset, chunk_size=None: cursor.open(queryset, chunk_size))

    with pytest.raises(RuntimeError, match="connection lost"):
        search_properties(SearchCriteria(book_in=BOOK_IN, book_out=BOOK_OUT, limit=5))
