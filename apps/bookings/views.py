"""API views for tour and experience bookings."""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.notifications import whatsapp
from apps.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from apps.users.permissions import IsAdmin, user_is_admin
from shared.api.exceptions import InvalidBookingState, NotAuthorized, ResourceNotFound, ValidationFailed

from . import services
from .domain import status as machine
from .domain.status import InvalidTransition
from .models import Booking
from .serializers import (
    BookingStatusSerializer,
    BookingStatusUpdateSerializer,
    ExperienceBookingCreateSerializer,
    ExperienceBookingDetailSerializer,
    ExperienceBookingSerializer,
    ExperienceBookingStatusUpdateSerializer,
    TourBookingCreatedSerializer,
    TourBookingCreateSerializer,
    TourBookingDetailSerializer,
    TourBookingSerializer,
)

logger = logging.getLogger(__name__)


def success(data, *, http_status=status.HTTP_200_OK, **extra) -> Response:
    return Response({"status": "success", **extra, "data": data}, status=http_status)


class BaseBookingViewSet(viewsets.GenericViewSet):
    """Shared lifecycle endpoints; subclasses set the product type and serializers.

    Bookings are read and written only through ``services``; this layer does
    validation, ownership checks and response shaping, then hands the fresh
    booking to the notification dispatcher once the write has committed.
    """

    product_type: str = ""
    lookup_value_regex = r"\d+"
    queryset = Booking.objects.none()

    list_serializer_class = None
    detail_serializer_class = None
    create_serializer_class = None
    status_update_serializer_class = BookingStatusUpdateSerializer
    admin_list_filters: tuple[str, ...] = ()
    create_permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permission() for permission in self.create_permission_classes]
        if self.action in ("update_status", "stats"):
            return [permissions.IsAuthenticated(), IsAdmin()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return self.create_serializer_class
        if self.action == "update_status":
            return self.status_update_serializer_class
        if self.action == "retrieve":
            return self.detail_serializer_class
        return self.list_serializer_class

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["is_admin"] = self.is_admin
        context["product_type"] = self.product_type
        return context

    @property
    def is_admin(self) -> bool:
        return user_is_admin(self.request.user)

    def get_dispatcher(self) -> NotificationDispatcher:
        return get_dispatcher()

    # -- helpers -----------------------------------------------------------

    def load_details(self, pk) -> services.BookingDetails:
        details = services.get_booking(pk)
        if details is None or details.booking.product_type != self.product_type:
            raise ResourceNotFound("Booking not found")
        return details

    def ensure_can_access(self, booking: Booking, verb: str) -> None:
        if self.is_admin or booking.is_owned_by(self.request.user):
            return
        raise NotAuthorized(f"Not authorized to {verb} this booking")

    def list_filters(self) -> dict:
        """Query filters the caller is allowed to use; non-admins only see their own bookings."""
        params = self.request.query_params
        if self.is_admin:
            return {name: params[name] for name in self.admin_list_filters if params.get(name)}
        return {"user_id": self.request.user.id}

    def paginate_params(self) -> tuple[int, int]:
        try:
            page = int(self.request.query_params.get("page", 1))
            limit = int(self.request.query_params.get("limit", services.DEFAULT_PAGE_SIZE))
        except (TypeError, ValueError):
            raise ValidationFailed("page and limit must be integers")
        return page, limit

    def respond_with_page(self, filters: dict) -> Response:
        page, limit = self.paginate_params()
        try:
            result = services.list_bookings(self.product_type, filters, page=page, limit=limit)
        except services.InvalidFilters as exc:
            raise ValidationFailed(exc.errors)
        serializer = self.get_serializer(result.records, many=True)
        return success(
            {"bookings": serializer.data},
            results=len(result.records),
            pagination=result.pagination,
        )

    # -- endpoints ---------------------------------------------------------

    def list(self, request):  # type: ignore
        return self.respond_with_page(self.list_filters())

    def retrieve(self, request, pk=None):  # type: ignore
        details = self.load_details(pk)
        self.ensure_can_access(details.booking, "view")
        serializer = self.get_serializer(details)
        return success({"booking": serializer.data})

    def destroy(self, request, pk=None):  # type: ignore
        """Cancel the booking. The row is kept; only its status changes."""
        details = self.load_details(pk)
        self.ensure_can_access(details.booking, "cancel")
        previous_status = details.booking.status

        try:
            details = services.cancel_booking(pk, actor=request.user)
        except services.BookingNotFound:
            raise ResourceNotFound("Booking not found")
        except InvalidTransition as exc:
            raise InvalidBookingState(str(exc))

        self.get_dispatcher().status_changed(details, previous_status=previous_status)
        return success({"booking": BookingStatusSerializer(details.booking, context=self.get_serializer_context()).data})

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        details = self.load_details(pk)
        previous_status = details.booking.status

        try:
            details = services.update_status(
                pk,
                data["status"],
                actor=request.user,
                notes=data.get("admin_notes"),
                payment_status=data.get("payment_status"),
            )
        except services.BookingNotFound:
            raise ResourceNotFound("Booking not found")
        except InvalidTransition as exc:
            raise InvalidBookingState(str(exc))

        self.get_dispatcher().status_changed(details, previous_status=previous_status)
        return success({"booking": BookingStatusSerializer(details.booking, context=self.get_serializer_context()).data})

    @action(detail=False, methods=["get"], url_path="stats/overview")
    def stats(self, request):  # type: ignore
        return success({"stats": services.get_booking_stats(self.product_type)})


class TourBookingViewSet(BaseBookingViewSet):
    """Tour bookings at ``/api/bookings``; signed-in users book, admins manage."""

    product_type = machine.TOUR
    list_serializer_class = TourBookingSerializer
    detail_serializer_class = TourBookingDetailSerializer
    create_serializer_class = TourBookingCreateSerializer
    admin_list_filters = ("status", "search", "start_date", "end_date")

    def create(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dispatcher = self.get_dispatcher()
        config = dispatcher.settings_provider.get(self.product_type)

        try:
            booking = services.create_booking(
                product_type=self.product_type,
                product_id=data["tour_id"],
                user=request.user,
                travel_date=data["travel_date"],
                number_of_travelers=data["number_of_travelers"],
                payment_method=data["payment_method"],
                special_requests=data["special_requests"],
                whatsapp_number=data["whatsapp_number"],
                whatsapp_link=lambda created: whatsapp.admin_booking_link(created, config),
            )
        except services.ProductNotFound:
            raise ResourceNotFound("Tour not found")

        details = self.load_details(booking.pk)
        dispatcher.booking_created(details)
        return success(
            {"booking": TourBookingCreatedSerializer(details.booking).data},
            http_status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="my-bookings")
    def my_bookings(self, request):  # type: ignore
        filters = {"user_id": request.user.id}
        if request.query_params.get("status"):
            filters["status"] = request.query_params["status"]
        return self.respond_with_page(filters)


class ExperienceBookingViewSet(BaseBookingViewSet):
    """Experience bookings at ``/api/experiences/bookings``; anyone may book."""

    product_type = machine.EXPERIENCE
    list_serializer_class = ExperienceBookingSerializer
    detail_serializer_class = ExperienceBookingDetailSerializer
    create_serializer_class = ExperienceBookingCreateSerializer
    status_update_serializer_class = ExperienceBookingStatusUpdateSerializer
    admin_list_filters = ("status", "payment_status", "experience_id", "user_id", "search", "start_date", "end_date")
    create_permission_classes = [permissions.AllowAny]

    def list_filters(self) -> dict:
        filters = super().list_filters()
        if not self.is_admin:
            params = self.request.query_params
            filters.update(
                {name: params[name] for name in ("status", "payment_status", "experience_id", "search") if params.get(name)}
            )
        return filters

    def create(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            booking = services.create_booking(
                product_type=self.product_type,
                product_id=data["experience_id"],
                user=request.user if request.user.is_authenticated else None,
                travel_date=data["booking_date"],
                number_of_travelers=data["number_of_guests"],
                special_requests=data["special_requests"],
                full_name=data["full_name"],
                email=data["email"],
                phone=data["phone"],
            )
        except services.ProductNotFound:
            raise ResourceNotFound("Experience not found")

        details = self.load_details(booking.pk)
        self.get_dispatcher().booking_created(details)
        return success(
            {"booking": ExperienceBookingSerializer(details.booking, context=self.get_serializer_context()).data},
            http_status=status.HTTP_201_CREATED,
        )
