"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    AccommodationBookingsView,
    AccommodationCreateView,
    AccommodationDetailView,
    AccommodationGroupCreateView,
    AccommodationGroupDetailView,
    MyPropertiesView,
    PropertyByPageNameView,
    PropertyDetailView,
    PropertyImagesView,
    PropertyListCreateView,
    PropertyThumbnailView,
)

urlpatterns = [
    path("", PropertyListCreateView.as_view(), name="property-list"),
    path("mine/", MyPropertiesView.as_view(), name="property-mine"),
    path("page-name/<slug:page_name>/", PropertyByPageNameView.as_view(), name="property-page-name"),
    path("<int:property_id>/", PropertyDetailView.as_view(), name="property-detail"),
    path("<int:property_id>/thumbnails/", PropertyThumbnailView.as_view(), name="property-thumbnail"),
    path("<int:property_id>/images/", PropertyImagesView.as_view(), name="property-images"),
    # Accommodation groups
    path(
        "<int:property_id>/accom-groups/",
        AccommodationGroupCreateView.as_view(),
        name="accommodation-group-list",
    ),
    path(
        "<int:property_id>/accom-groups/<int:group_id>/",
        AccommodationGroupDetailView.as_view(),
        name="accommodation-group-detail",
    ),
    # Accommodations
    path(
        "<int:property_id>/accom-groups/<int:group_id>/accoms/",
        AccommodationCreateView.as_view(),
        name="accommodation-list",
    ),
    path(
        "<int:property_id>/accom-groups/<int:group_id>/accoms/<int:accommodation_id>/",
        AccommodationDetailView.as_view(),
        name="accommodation-detail",
    ),
    path(
        "<int:property_id>/accom-groups/<int:group_id>/accoms/<int:accommodation_id>/bookings/",
        AccommodationBookingsView.as_view(),
        name="accommodation-bookings",
    ),
]
