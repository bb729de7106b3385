"""FilterSet definitions for property listings and divisions."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Division, Property


class PropertyFilterSet(django_filters.FilterSet):
    """Filters for the host's own property listing."""

    title = django_filters.CharFilter(field_name="title", lookup_expr="icontains")
    province_id = django_filters.NumberFilter(field_name="province_id", lookup_expr="exact")
    district_id = django_filters.NumberFilter(field_name="district_id", lookup_expr="exact")

    class Meta:
        model = Property
        fields = [
            "title",
            "is_closed",
            "province_id",
            "district_id",
        ]


class DistrictFilterSet(django_filters.FilterSet):
    """Districts of a province, selected by province id or province code."""

    province_id = django_filters.NumberFilter(field_name="parent_id", lookup_expr="exact")
    province_code = django_filters.CharFilter(field_name="parent__code", lookup_expr="exact")

    class Meta:
        model = Division
        fields = ["province_id", "province_code"]
