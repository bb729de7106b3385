"""Tests for the properties admin configuration."""

from __future__ import annotations

import pytest
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory

from apps.properties.models import Accommodation


@pytest.mark.django_db
def test_accommodation_admin_does_not_edit_booked_stays() -> None:
    staff = get_user_model().objects.create_superuser(username="admin", password="StrongPass123")
    request = RequestFactory().get("/admin/properties/accommodation/add/")
    request.user = staff
    model_admin = admin.site._registry[Accommodation]

    form_class = model_admin.get_form(request)

    assert "current_booking_dates" not in form_class.base_fields
    assert "current_booking_dates" in model_admin.get_readonly_fields(request)
    assert "title" in form_class.base_fields
