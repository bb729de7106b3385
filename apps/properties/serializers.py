"""Serializers for the properties domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import Accommodation, AccommodationGroup, Division, Property
from .search import SearchCriteria
from .storage import image_url


class DivisionSerializer(serializers.ModelSerializer):
    parent_id = serializers.ReadOnlyField()

    class Meta:
        model = Division
        fields = ["id", "name", "code", "parent_id"]


class BookingIntervalSerializer(serializers.Serializer):
    book_in = serializers.DateField()
    book_out = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["book_in"] >= attrs["book_out"]:
            raise serializers.ValidationError("book_out must be after book_in.")
        return attrs


class AccommodationSerializer(serializers.ModelSerializer):
    group_id = serializers.ReadOnlyField()
    is_available = serializers.SerializerMethodField()

    class Meta:
        model = Accommodation
        fields = [
            "id",
            "group_id",
            "title",
            "price_per_night",
            "maximum_guest",
            "type",
            "bed",
            "rooms",
            "current_booking_dates",
            "is_available",
        ]

    def get_is_available(self, obj: Accommodation) -> bool | None:
        return getattr(obj, "is_available", None)


class AccommodationWriteSerializer(serializers.ModelSerializer):
    bed = serializers.DictField(required=False)
    rooms = serializers.ListField(required=False)

    class Meta:
        model = Accommodation
        fields = [
            "title",
            "price_per_night",
            "maximum_guest",
            "type",
            "bed",
            "rooms",
        ]


class AccommodationGroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccommodationGroup
        fields = ["id", "title", "created_at", "updated_at"]


class AccommodationGroupWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    accommodations = AccommodationWriteSerializer(many=True, required=False)


class AccommodationListWriteSerializer(serializers.Serializer):
    accommodations = AccommodationWriteSerializer(many=True, allow_empty=False)


class PropertySummarySerializer(serializers.ModelSerializer):
    """Search result projection; never touches the deferred heavy fields."""

    owner_id = serializers.ReadOnlyField()
    province = DivisionSerializer(read_only=True)
    district = DivisionSerializer(read_only=True)
    thumbnail = serializers.SerializerMethodField()
    accommodations = AccommodationSerializer(many=True, read_only=True)
    is_available = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "owner_id",
            "title",
            "page_name",
            "is_closed",
            "province",
            "district",
            "address_line",
            "score",
            "review_count",
            "thumbnail",
            "accommodations",
            "is_available",
        ]

    def get_thumbnail(self, obj: Property) -> str | None:
        return image_url(obj.thumbnail)

    def get_is_available(self, obj: Property) -> bool | None:
        return getattr(obj, "is_available", None)


class PropertySerializer(PropertySummarySerializer):
    """Read serializer with images, description and nested accommodations."""

    images = serializers.SerializerMethodField()
    accommodation_groups = AccommodationGroupSerializer(many=True, read_only=True)

    class Meta(PropertySummarySerializer.Meta):
        fields = PropertySummarySerializer.Meta.fields + [
            "description",
            "facility_codes",
            "sum_score",
            "images",
            "accommodation_groups",
            "created_at",
            "updated_at",
        ]

    def get_images(self, obj: Property) -> list[str | None]:
        return [image_url(name) for name in obj.images]


class PropertyWriteSerializer(serializers.ModelSerializer):
    """Serializer for property creation."""

    facility_codes = serializers.ListField(child=serializers.CharField(max_length=32), required=False)
    province = serializers.PrimaryKeyRelatedField(queryset=Division.objects.filter(parent__isnull=True))
    district = serializers.PrimaryKeyRelatedField(queryset=Division.objects.filter(parent__isnull=False))
    accommodations = AccommodationWriteSerializer(many=True, required=False)

    class Meta:
        model = Property
        fields = [
            "title",
            "is_closed",
            "page_name",
            "description",
            "facility_codes",
            "province",
            "district",
            "address_line",
            "accommodations",
        ]

    def validate(self, attrs):  # type: ignore
        if attrs["district"].parent_id != attrs["province"].id:
            raise serializers.ValidationError({"district": "District does not belong to the province."})
        return attrs


class PropertyUpdateSerializer(serializers.ModelSerializer):
    facility_codes = serializers.ListField(child=serializers.CharField(max_length=32), required=False)

    class Meta:
        model = Property
        fields = [
            "title",
            "is_closed",
            "page_name",
            "description",
            "facility_codes",
        ]


class ImageDeleteSerializer(serializers.Serializer):
    deleted_indexes = serializers.ListField(child=serializers.IntegerField(min_value=0), allow_empty=False)


class PropertySearchQuerySerializer(serializers.Serializer):
    district_id = serializers.IntegerField(required=False, min_value=1)
    province_id = serializers.IntegerField(required=False, min_value=1)
    book_in = serializers.DateField(required=False)
    book_out = serializers.DateField(required=False)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=settings.MAX_PAGE_LIMIT)

    def validate(self, attrs):  # type: ignore
        book_in = attrs.get("book_in")
        book_out = attrs.get("book_out")
        if (book_in is None) != (book_out is None):
            raise serializers.ValidationError("book_in and book_out must be provided together.")
        if book_in is not None and book_in >= book_out:
            raise serializers.ValidationError({"book_out": "book_out must be after book_in."})
        return attrs

    def to_criteria(self) -> SearchCriteria:
        return SearchCriteria(**self.validated_data)
