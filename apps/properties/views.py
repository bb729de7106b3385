"""Property API views."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from django_filters import utils  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import generics, permissions, status  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from . import services
from .filters import DistrictFilterSet, PropertyFilterSet
from .models import Accommodation, AccommodationGroup, Division, Property
from .search import paginate_properties, search_properties
from .serializers import (
    AccommodationGroupSerializer,
    AccommodationGroupWriteSerializer,
    AccommodationListWriteSerializer,
    AccommodationSerializer,
    AccommodationWriteSerializer,
    BookingIntervalSerializer,
    DivisionSerializer,
    ImageDeleteSerializer,
    PropertySearchQuerySerializer,
    PropertySerializer,
    PropertySummarySerializer,
    PropertyUpdateSerializer,
    PropertyWriteSerializer,
)
from .storage import image_url


class IsPropertyOwner(permissions.BasePermission):
    """Allows changes to a property only to its owner and staff."""

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        if request.method in permissions.SAFE_METHODS and getattr(view, "public_read", False):
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.owner_id == user.id


def _page_payload(page) -> dict:
    return {
        "page": page.page,
        "limit": page.limit,
        "total_pages": page.total_pages,
        "total_results": page.total_results,
    }


class PropertyListCreateView(APIView):
    """Availability-aware search (GET) and property creation (POST)."""

    def get_permissions(self):  # type: ignore
        if self.request.method == "POST":
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get(self, request):  # type: ignore
        query = PropertySearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        criteria = query.to_criteria()
        results = search_properties(criteria)
        serializer = PropertySummarySerializer(results, many=True, context={"request": request})
        return Response(
            {
                "page": criteria.page,
                "limit": criteria.limit,
                "results": serializer.data,
            }
        )

    def post(self, request):  # type: ignore
        serializer = PropertyWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        accommodations = data.pop("accommodations", [])
        property_obj = services.create_property(request.user, data, accommodations)
        read_serializer = PropertySerializer(
            services.get_one_property(pk=property_obj.pk),
            context={"request": request},
        )
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)


class MyPropertiesView(APIView):
    """Paginated listing of the authenticated host's properties."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        query = PropertySearchQuerySerializer(
            data={key: request.query_params[key] for key in ("page", "limit") if key in request.query_params}
        )
        query.is_valid(raise_exception=True)
        queryset = (
            Property.objects.filter(owner=request.user)
            .select_related("province", "district")
            .prefetch_related("accommodations")
        )
        filterset = PropertyFilterSet(request.query_params, queryset=queryset, request=request)
        if not filterset.is_valid():
            raise utils.translate_validation(filterset.errors)
        page = paginate_properties(
            filterset.qs,
            page=query.validated_data["page"],
            limit=query.validated_data.get("limit"),
        )
        serializer = PropertySummarySerializer(page.results, many=True, context={"request": request})
        return Response({**_page_payload(page), "results": serializer.data})


class PropertyByPageNameView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, page_name: str):  # type: ignore
        property_obj = services.get_one_property(page_name=page_name)
        return Response(PropertySerializer(property_obj, context={"request": request}).data)


class PropertyOwnerMixin:
    """Loads the property from the URL and checks object permissions."""

    property_lookup_url_kwarg = "property_id"
    permission_classes = [IsPropertyOwner]
    public_read = False

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        property_id = kwargs.get(self.property_lookup_url_kwarg)
        self.property_object = services.get_one_property(pk=property_id)
        self.check_object_permissions(request, self.property_object)

    def get_property(self) -> Property:
        return self.property_object

    def get_group(self, group_id: int) -> AccommodationGroup:
        return get_object_or_404(AccommodationGroup, pk=group_id, property=self.get_property())

    def get_accommodation(self, group_id: int, accommodation_id: int) -> Accommodation:
        accommodation = services.get_accommodation_by_id(self.get_property(), accommodation_id)
        if accommodation.group_id != group_id:
            raise NotFound("Accommodation not found")
        return accommodation


class PropertyDetailView(PropertyOwnerMixin, APIView):
    public_read = True

    def get(self, request, property_id: int):  # type: ignore
        return Response(PropertySerializer(self.get_property(), context={"request": request}).data)

    def patch(self, request, property_id: int):  # type: ignore
        property_obj = self.get_property()
        serializer = PropertyUpdateSerializer(property_obj, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_property(property_obj, serializer.validated_data)
        return Response(PropertySerializer(property_obj, context={"request": request}).data)


class PropertyThumbnailView(PropertyOwnerMixin, APIView):
    parser_classes = [MultiPartParser, FormParser]

    def put(self, request, property_id: int):  # type: ignore
        thumbnail = services.replace_thumbnail(self.get_property(), request.FILES.get("thumbnail"))
        return Response({"thumbnail": image_url(thumbnail)})


class PropertyImagesView(PropertyOwnerMixin, APIView):
    # DELETE sends the indexes to remove as JSON.
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request, property_id: int):  # type: ignore
        property_obj = self.get_property()
        services.add_images(property_obj, request.FILES.getlist("images"))
        images = [image_url(name) for name in property_obj.images]
        return Response({"images": images}, status=status.HTTP_201_CREATED)

    def delete(self, request, property_id: int):  # type: ignore
        serializer = ImageDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        property_obj = self.get_property()
        images = services.delete_images(property_obj, serializer.validated_data["deleted_indexes"])
        return Response({"images": [image_url(name) for name in images]})


class AccommodationGroupCreateView(PropertyOwnerMixin, APIView):
    def post(self, request, property_id: int):  # type: ignore
        serializer = AccommodationGroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        group = services.add_accommodation_group(
            self.get_property(),
            serializer.validated_data["title"],
            serializer.validated_data.get("accommodations", []),
        )
        return Response(AccommodationGroupSerializer(group).data, status=status.HTTP_201_CREATED)


class AccommodationGroupDetailView(PropertyOwnerMixin, APIView):
    def patch(self, request, property_id: int, group_id: int):  # type: ignore
        group = self.get_group(group_id)
        serializer = AccommodationGroupSerializer(group, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_accommodation_group(group, serializer.validated_data)
        return Response(AccommodationGroupSerializer(group).data)

    def delete(self, request, property_id: int, group_id: int):  # type: ignore
        services.delete_accommodation_group(self.get_group(group_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class AccommodationCreateView(PropertyOwnerMixin, APIView):
    def post(self, request, property_id: int, group_id: int):  # type: ignore
        group = self.get_group(group_id)
        serializer = AccommodationListWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = services.add_accommodations(
            self.get_property(), group, serializer.validated_data["accommodations"]
        )
        return Response(AccommodationSerializer(created, many=True).data, status=status.HTTP_201_CREATED)


class AccommodationDetailView(PropertyOwnerMixin, APIView):
    def patch(self, request, property_id: int, group_id: int, accommodation_id: int):  # type: ignore
        accommodation = self.get_accommodation(group_id, accommodation_id)
        serializer = AccommodationWriteSerializer(accommodation, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_accommodation(accommodation, serializer.validated_data)
        return Response(AccommodationSerializer(accommodation).data)

    def delete(self, request, property_id: int, group_id: int, accommodation_id: int):  # type: ignore
        self.get_accommodation(group_id, accommodation_id)
        services.delete_accommodation(property_id, accommodation_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AccommodationBookingsView(PropertyOwnerMixin, APIView):
    """Booked stays recorded on an accommodation."""

    def get(self, request, property_id: int, group_id: int, accommodation_id: int):  # type: ignore
        accommodation = self.get_accommodation(group_id, accommodation_id)
        return Response(BookingIntervalSerializer(accommodation.booking_intervals, many=True).data)

    def post(self, request, property_id: int, group_id: int, accommodation_id: int):  # type: ignore
        accommodation = self.get_accommodation(group_id, accommodation_id)
        serializer = BookingIntervalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            accommodation = services.reserve_accommodation_dates(
                accommodation.pk,
                serializer.validated_data["book_in"],
                serializer.validated_data["book_out"],
            )
        except services.AccommodationUnavailableError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            BookingIntervalSerializer(accommodation.booking_intervals, many=True).data,
            status=status.HTTP_201_CREATED,
        )


class ProvinceListView(generics.ListAPIView):
    serializer_class = DivisionSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return Division.objects.filter(parent__isnull=True, is_active=True)


class DistrictListView(generics.ListAPIView):
    serializer_class = DivisionSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_class = DistrictFilterSet

    def get_queryset(self):  # type: ignore
        return Division.objects.filter(parent__isnull=False, is_active=True)
