"""Celery tasks for the properties domain."""

from __future__ import annotations

from typing import List

from celery import shared_task  # type: ignore

from .storage import delete_files


@shared_task(name="properties.delete_stored_files")
def delete_stored_files(names: List[str]) -> dict[str, int]:
    """
    Remove image files that are no longer referenced by a property.

    Scheduled after the database commit that dropped the references, so a
    failed save never loses a file that is still in use.

    Returns:
        dict: {"deleted": number of removed files}
    """
    return {"deleted": delete_files(names)}
