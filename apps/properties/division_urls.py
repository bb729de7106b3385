"""URL routing for administrative divisions."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import DistrictListView, ProvinceListView

urlpatterns = [
    path("provinces/", ProvinceListView.as_view(), name="division-provinces"),
    path("districts/", DistrictListView.as_view(), name="division-districts"),
]
