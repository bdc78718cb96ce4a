"""REST endpoints for venues: search, availability, quotes and reviews."""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import availability, pricing, reviews
from .models import Review, Venue
from .serializers import (
    AvailabilityQuerySerializer,
    BlockedSlotSerializer,
    PromotionSerializer,
    QuoteQuerySerializer,
    ReviewResponseSerializer,
    ReviewSerializer,
    VenueDetailSerializer,
    VenueListSerializer,
)

PUBLIC_ACTIONS = {
    "list",
    "retrieve",
    "by_slug",
    "popular",
    "featured",
    "promotions",
    "availability",
    "quote",
    "schedule",
}


class VenueViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = VenueListSerializer

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS or (self.action == "reviews" and self.request.method == "GET"):
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = Venue.objects.active().prefetch_related("pitch_sizes")
        if self.action != "list":
            return queryset
        params = self.request.query_params
        if params.get("city"):
            queryset = queryset.in_city(params["city"])
        if params.get("surface"):
            queryset = queryset.filter(surface=params["surface"])
        if params.get("size"):
            queryset = queryset.filter(pitch_sizes__name=params["size"]).distinct()
        return queryset

    def get_serializer_class(self):
        if self.action == "retrieve":
            return VenueDetailSerializer
        return VenueListSerializer

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[-\w]+)")
    def by_slug(self, request, slug=None):
        venue = get_object_or_404(Venue.objects.active(), slug=slug)
        return Response(VenueDetailSerializer(venue).data)

    @action(detail=False, methods=["get"])
    def popular(self, request):
        venues = Venue.objects.popular(city=request.query_params.get("city"))
        return Response(VenueListSerializer(venues, many=True).data)

    @action(detail=False, methods=["get"])
    def featured(self, request):
        return Response(VenueListSerializer(Venue.objects.featured(), many=True).data)

    @action(detail=False, methods=["get"])
    def promotions(self, request):
        venues = Venue.objects.with_promotions(city=request.query_params.get("city"))
        payload = []
        for venue in venues:
            data = VenueListSerializer(venue).data
            data["promotions"] = PromotionSerializer(
                venue.promotions.filter(is_active=True), many=True
            ).data
            payload.append(data)
        return Response(payload)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        venue = self.get_object()
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        slots = availability.available_slots(venue, params["date"], params["duration"], params["size"])
        return Response({"date": params["date"], "size": params["size"], "slots": slots})

    @action(detail=True, methods=["get"])
    def quote(self, request, pk=None):
        venue = self.get_object()
        query = QuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        slot = availability.check_availability(venue, params["start"], params["duration"], params["size"])
        quote = pricing.calculate_price(
            venue,
            params["size"],
            params["start"],
            params["duration"],
            user=request.user if request.user.is_authenticated else None,
        )
        return Response({**quote.as_dict(), **slot.as_dict()})

    @action(detail=True, methods=["get"])
    def schedule(self, request, pk=None):
        venue = self.get_object()
        return Response(
            {"is_open": availability.is_open(venue), "days": availability.weekly_schedule(venue)}
        )

    @action(detail=True, methods=["post"], url_path="blocked-slots")
    def blocked_slots(self, request, pk=None):
        venue = self.get_object()
        serializer = BlockedSlotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        block = availability.add_blocked_slot(venue, user=request.user, **serializer.validated_data)
        return Response(BlockedSlotSerializer(block).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"])
    def reviews(self, request, pk=None):
        venue = self.get_object()
        if request.method == "GET":
            visible = venue.reviews.filter(is_visible=True).select_related("user")
            return Response(ReviewSerializer(visible, many=True).data)

        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        game = data.pop("game")
        review = reviews.add_review(venue, request.user, game, **data)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path=r"reviews/(?P<review_id>\d+)/respond")
    def respond(self, request, pk=None, review_id=None):
        venue = self.get_object()
        review = get_object_or_404(Review, pk=review_id, venue=venue)
        serializer = ReviewResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = reviews.respond_to_review(review, serializer.validated_data["text"], request.user)
        return Response(ReviewSerializer(review).data)
