"""Tests for accommodation groups, accommodations and booked dates API."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.properties.models import Accommodation, AccommodationGroup, Division, Property

User = get_user_model()


class AccommodationAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(username="host", password="StrongPass123")
        self.stranger = User.objects.create_user(username="stranger", password="StrongPass123")
        province = Division.objects.create(name="Ha Noi", code="ha-noi")
        district = Division.objects.create(name="Tay Ho", code="ha-noi-tay-ho", parent=province)
        self.property = Property.objects.create(
            owner=self.owner,
            title="Garden homestay",
            page_name="garden-homestay",
            province=province,
            district=district,
        )
        self.group = AccommodationGroup.objects.create(property=self.property, title="Ground floor")
        self.room = Accommodation.objects.create(
            property=self.property,
            group=self.group,
            title="Room 1",
            price_per_night=Decimal("30.00"),
        )
        self.client.force_authenticate(self.owner)

    def _group_url(self, group_id=None):
        return reverse(
            "accommodation-group-detail",
            kwargs={"property_id": self.property.id, "group_id": group_id or self.group.id},
        )

    def _accommodation_url(self, name="accommodation-detail", accommodation_id=None, group_id=None):
        return reverse(
            name,
            kwargs={
                "property_id": self.property.id,
                "group_id": group_id or self.group.id,
                "accommodation_id": accommodation_id or self.room.id,
            },
        )

    def _bookings_url(self):
        return self._accommodation_url(name="accommodation-bookings")

    def test_create_group_with_accommodations(self) -> None:
        payload = {
            "title": "First floor",
            "accommodations": [
                {"title": "Room 2", "price_per_night": "35.00", "maximum_guest": 2},
                {"title": "Room 3", "price_per_night": "40.00", "maximum_guest": 3},
            ],
        }
        response = self.client.post(
            reverse("accommodation-group-list", kwargs={"property_id": self.property.id}),
            payload,
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        group = AccommodationGroup.objects.get(pk=response.data["id"])
        self.assertEqual(group.accommodations.count(), 2)
        self.assertTrue(all(acc.property_id == self.property.id for acc in group.accommodations.all()))

    def test_update_group_title(self) -> None:
        response = self.client.patch(self._group_url(), {"title": "Garden wing"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.group.refresh_from_db()
        self.assertEqual(self.group.title, "Garden wing")

    def test_delete_group_removes_its_accommodations(self) -> None:
        response = self.client.delete(self._group_url())
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Accommodation.objects.filter(pk=self.room.pk).exists())

    def test_group_of_other_property_not_found(self) -> None:
        other = Property.objects.create(
            owner=self.owner,
            title="Other",
            page_name="other",
            province=self.property.province,
            district=self.property.district,
        )
        other_group = AccommodationGroup.objects.create(property=other, title="Other group")
        response = self.client.patch(self._group_url(group_id=other_group.id), {"title": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_accommodations_to_group(self) -> None:
        response = self.client.post(
            reverse(
                "accommodation-list",
                kwargs={"property_id": self.property.id, "group_id": self.group.id},
            ),
            {"accommodations": [{"title": "Attic", "price_per_night": "25.00"}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(self.group.accommodations.count(), 2)

    def test_add_accommodations_requires_items(self) -> None:
        response = self.client.post(
            reverse(
                "accommodation-list",
                kwargs={"property_id": self.property.id, "group_id": self.group.id},
            ),
            {"accommodations": []},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_update_accommodation_keeps_type(self) -> None:
        response = self.client.patch(
            self._accommodation_url(),
            {"title": "Room 1 deluxe", "price_per_night": "55.00", "type": Accommodation.Type.ENTIRE_HOUSE},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.room.refresh_from_db()
        self.assertEqual(self.room.title, "Room 1 deluxe")
        self.assertEqual(self.room.price_per_night, Decimal("55.00"))
        self.assertEqual(self.room.type, Accommodation.Type.SPECIFIC_ROOM)

    def test_delete_accommodation(self) -> None:
        response = self.client.delete(self._accommodation_url())
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Accommodation.objects.filter(pk=self.room.pk).exists())

    def test_accommodation_not_found(self) -> None:
        response = self.client.delete(self._accommodation_url(accommodation_id=9999))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(str(response.data["detail"]), "Accommodation not found")

    def test_reserve_dates_and_list_them(self) -> None:
        response = self.client.post(
            self._bookings_url(), {"book_in": "2024-01-10", "book_out": "2024-01-15"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        response = self.client.post(
            self._bookings_url(), {"book_in": "2024-01-01", "book_out": "2024-01-05"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        response = self.client.get(self._bookings_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(
            response.data,
            [
                {"book_in": "2024-01-01", "book_out": "2024-01-05"},
                {"book_in": "2024-01-10", "book_out": "2024-01-15"},
            ],
        )

    def test_reserve_overlapping_dates_is_rejected(self) -> None:
        self.client.post(self._bookings_url(), {"book_in": "2024-01-10", "book_out": "2024-01-15"}, format="json")

        response = self.client.post(
            self._bookings_url(), {"book_in": "2024-01-12", "book_out": "2024-01-14"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.room.refresh_from_db()
        self.assertEqual(len(self.room.booking_intervals), 1)

    def test_reserve_stay_starting_on_checkout_day(self) -> None:
        self.client.post(self._bookings_url(), {"book_in": "2024-01-10", "book_out": "2024-01-15"}, format="json")

        response = self.client.post(
            self._bookings_url(), {"book_in": "2024-01-15", "book_out": "2024-01-18"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_reserve_requires_book_out_after_book_in(self) -> None:
        response = self.client.post(
            self._bookings_url(), {"book_in": "2024-01-15", "book_out": "2024-01-15"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_stranger_cannot_manage_accommodations(self) -> None:
        self.client.force_authenticate(self.stranger)
        response = self.client.delete(self._accommodation_url())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(self._bookings_url())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
