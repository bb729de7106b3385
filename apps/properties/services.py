"""Service functions for properties, their images and accommodations."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

import structlog  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework.exceptions import NotFound, ValidationError  # type: ignore

from shared.domain.value_objects import BookingInterval

from .availability import add_current_booking_date, is_accommodation_available
from .models import Accommodation, AccommodationGroup, Property
from .storage import delete_files, store_image
from .tasks import delete_stored_files

logger = structlog.get_logger(__name__)

PROPERTY_CREATE_FIELDS = (
    "title",
    "is_closed",
    "page_name",
    "description",
    "facility_codes",
    "province",
    "district",
    "address_line",
)
PROPERTY_UPDATE_FIELDS = ("title", "is_closed", "page_name", "description", "facility_codes")
ACCOMMODATION_FIELDS = ("title", "price_per_night", "maximum_guest", "type", "bed", "rooms")
ACCOMMODATION_UPDATE_FIELDS = ("title", "price_per_night", "maximum_guest", "bed", "rooms")
MAX_DELETED_IMAGES = 100


class AccommodationUnavailableError(Exception):
    """Raised when requested dates overlap a stay already booked on the accommodation."""


def _pick(data: Mapping[str, Any], fields: Sequence[str]) -> dict[str, Any]:
    return {key: data[key] for key in fields if key in data}


def _delete_files_on_commit(names: Iterable[str]) -> None:
    names = [name for name in names if name]
    if names:
        transaction.on_commit(lambda: delete_stored_files.delay(names))


@transaction.atomic
def create_property(owner, data: Mapping[str, Any], accommodations: Iterable[Mapping[str, Any]] = ()) -> Property:
    """Create a property with its initial accommodations. Review stats start empty."""
    property_obj = Property(owner=owner, **_pick(data, PROPERTY_CREATE_FIELDS))
    property_obj.score = None
    property_obj.sum_score = 0
    property_obj.review_count = 0
    property_obj.save()

    for accommodation_data in accommodations:
        Accommodation.objects.create(property=property_obj, **_pick(accommodation_data, ACCOMMODATION_FIELDS))

    logger.info("property_created", property_id=property_obj.pk, owner_id=owner.pk)
    return property_obj


def update_property(property_obj: Property, data: Mapping[str, Any]) -> Property:
    for attr, value in _pick(data, PROPERTY_UPDATE_FIELDS).items():
        setattr(property_obj, attr, value)
    property_obj.save()
    return property_obj


def get_one_property(**filters: Any) -> Property:
    """Get one property by ``pk`` or ``page_name``."""
    property_obj = (
        Property.objects.select_related("province", "district")
        .prefetch_related("accommodations", "accommodation_groups")
        .filter(**filters)
        .first()
    )
    if property_obj is None:
        raise NotFound("Property not found")
    return property_obj


def replace_thumbnail(property_obj: Property, thumbnail_file) -> str:
    """Store the new thumbnail and drop the old file once the change is committed."""
    if thumbnail_file is None:
        raise ValidationError("Thumbnail is required")
    old_thumbnail = property_obj.thumbnail
    with transaction.atomic():
        property_obj.thumbnail = store_image(thumbnail_file)
        property_obj.save(update_fields=["thumbnail", "updated_at"])
        _delete_files_on_commit([old_thumbnail])
    return property_obj.thumbnail


def add_images(property_obj: Property, image_files) -> list[str]:
    """Store uploaded images and append them to the gallery; nothing is kept when any step fails."""
    if not image_files:
        raise ValidationError("Images are required")
    previous_images = property_obj.images
    new_images: list[str] = []
    try:
        for image_file in image_files:
            new_images.append(store_image(image_file))
        property_obj.images = [*property_obj.images, *new_images]
        property_obj.save(update_fields=["images", "updated_at"])
    except Exception:
        property_obj.images = previous_images
        delete_files(new_images)
        raise
    return new_images


def delete_images(property_obj: Property, deleted_indexes: Sequence[int]) -> list[str]:
    """Remove images by their position in the gallery and return the remaining ones."""
    if len(deleted_indexes) > MAX_DELETED_IMAGES:
        raise ValidationError(f"deleted_indexes length exceeds {MAX_DELETED_IMAGES}")
    indexes = set(deleted_indexes)
    kept, deleted = [], []
    for index, image in enumerate(property_obj.images):
        (deleted if index in indexes else kept).append(image)

    with transaction.atomic():
        property_obj.images = kept
        property_obj.save(update_fields=["images", "updated_at"])
        _delete_files_on_commit(deleted)
    return property_obj.images


@transaction.atomic
def add_accommodation_group(
    property_obj: Property,
    title: str,
    accommodations: Iterable[Mapping[str, Any]] = (),
) -> AccommodationGroup:
    group = AccommodationGroup.objects.create(property=property_obj, title=title)
    add_accommodations(property_obj, group, accommodations)
    return group


def update_accommodation_group(group: AccommodationGroup, data: Mapping[str, Any]) -> AccommodationGroup:
    if "title" in data:
        group.title = data["title"]
        group.save(update_fields=["title", "updated_at"])
    return group


def delete_accommodation_group(group: AccommodationGroup) -> None:
    """Delete the group together with the accommodations it contains."""
    group.delete()


def add_accommodation(
    property_obj: Property,
    data: Optional[Mapping[str, Any]],
    group: Optional[AccommodationGroup] = None,
) -> Accommodation:
    if not data:
        raise ValidationError("Accommodation is required")
    return Accommodation.objects.create(property=property_obj, group=group, **_pick(data, ACCOMMODATION_FIELDS))


@transaction.atomic
def add_accommodations(
    property_obj: Property,
    group: AccommodationGroup,
    accommodations: Iterable[Mapping[str, Any]],
) -> list[Accommodation]:
    return [add_accommodation(property_obj, data, group=group) for data in accommodations]


def get_accommodation_by_id(property_obj: Property, accommodation_id: int) -> Accommodation:
    accommodation = property_obj.accommodations.filter(pk=accommodation_id).first()
    if accommodation is None:
        raise NotFound("Accommodation not found")
    return accommodation


def delete_accommodation(property_id: int, accommodation_id: int) -> None:
    Accommodation.objects.filter(property_id=property_id, pk=accommodation_id).delete()


def update_accommodation(accommodation: Accommodation, data: Mapping[str, Any]) -> Accommodation:
    for attr, value in _pick(data, ACCOMMODATION_UPDATE_FIELDS).items():
        setattr(accommodation, attr, value)
    accommodation.save()
    return accommodation


def get_property_and_accommodation(
    property_id: int, accommodation_id: int
) -> tuple[Optional[Property], Optional[Accommodation]]:
    property_obj = Property.objects.filter(pk=property_id).first()
    accommodation = None
    if property_obj is not None:
        accommodation = property_obj.accommodations.filter(pk=accommodation_id).first()
    return property_obj, accommodation


@transaction.atomic
def reserve_accommodation_dates(accommodation_id: int, book_in: date, book_out: date) -> Accommodation:
    """
    Record a booked stay on the accommodation.

    The row is locked and re-read so concurrent reservations see each other's
    intervals before the overlap check.
    """
    requested = BookingInterval(book_in=book_in, book_out=book_out)
    accommodation = Accommodation.objects.select_for_update().get(pk=accommodation_id)
    if not is_accommodation_available(accommodation, book_in, book_out):
        logger.warning(
            "accommodation_dates_conflict",
            accommodation_id=accommodation_id,
            book_in=book_in.isoformat(),
            book_out=book_out.isoformat(),
        )
        raise AccommodationUnavailableError(f"Accommodation is not available for {requested}")

    intervals = accommodation.booking_intervals
    add_current_booking_date(intervals, requested)
    accommodation.booking_intervals = intervals
    accommodation.save(update_fields=["current_booking_dates", "updated_at"])
    logger.info("accommodation_dates_reserved", accommodation_id=accommodation_id)
    return accommodation
