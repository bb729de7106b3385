"""Image file storage for property thumbnails and galleries."""

from __future__ import annotations

import uuid

import structlog  # type: ignore
from django.conf import settings  # type: ignore
from django.core.files.storage import default_storage  # type: ignore
from PIL import Image, UnidentifiedImageError  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

logger = structlog.get_logger(__name__)

ALLOWED_IMAGE_FORMATS = {"JPEG": "jpg", "PNG": "png", "WEBP": "webp"}


def _validate_image(file_obj) -> str:
    """Check size and format, return the file extension to store the image with."""
    max_size = settings.PROPERTY_IMAGE_MAX_SIZE
    size = getattr(file_obj, "size", None)
    if size is not None and size > max_size:
        raise ValidationError(f"Image is too large. Maximum is {max_size / 1024 / 1024:.1f} MB")

    try:
        file_obj.seek(0)
        with Image.open(file_obj) as img:
            img.verify()
            image_format = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError(f"Invalid image: {exc}") from exc

    if image_format not in ALLOWED_IMAGE_FORMATS:
        raise ValidationError(f"Unsupported image format: {image_format}")
    file_obj.seek(0)
    return ALLOWED_IMAGE_FORMATS[image_format]


def store_image(file_obj) -> str:
    """Validate and save an uploaded image, returning its storage name."""
    ext = _validate_image(file_obj)
    name = f"{settings.PROPERTY_IMAGE_DIR}/{uuid.uuid4().hex}.{ext}"
    saved_name = default_storage.save(name, file_obj)
    logger.info("image_stored", name=saved_name)
    return saved_name


def image_url(name: str) -> str | None:
    if not name:
        return None
    return default_storage.url(name)


def delete_files(names) -> int:
    """Remove stored files, skipping names that are already gone. Returns the number removed."""
    deleted = 0
    for name in names:
        if not name or not default_storage.exists(name):
            continue
        default_storage.delete(name)
        deleted += 1
        logger.info("image_deleted", name=name)
    return deleted
