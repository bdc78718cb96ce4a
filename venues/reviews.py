"""Venue reviews, rating aggregates and booking statistics."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from games.models import Attendance, Game

from .models import Review, Venue, VenueModerator

logger = logging.getLogger(__name__)

TENTH = Decimal("0.1")


def _one_decimal(value) -> Decimal:
    return Decimal(str(value)).quantize(TENTH, rounding=ROUND_HALF_UP)


@transaction.atomic
def add_review(venue: Venue, user, game: Game, **ratings) -> Review:
    """Store a verified review from a confirmed player of a completed game."""

    if Review.objects.filter(venue=venue, user=user, game=game).exists():
        raise ValidationError("You have already reviewed this game.")
    if game.venue_id != venue.pk:
        raise ValidationError("This game was not played at this venue.")
    if game.status != Game.Status.COMPLETED:
        raise ValidationError("Only completed games can be reviewed.")
    if not Attendance.objects.filter(
        game=game, user=user, status=Attendance.Status.CONFIRMED
    ).exists():
        raise ValidationError("Only players who took part can review this game.")

    review = Review(venue=venue, user=user, game=game, verified_booking=True, **ratings)
    review.full_clean()
    review.save()
    recalculate_rating(venue)
    return review


def recalculate_rating(venue: Venue) -> Venue:
    reviews = venue.reviews.all()
    if not reviews.exists():
        venue.rating_average = Decimal("0")
        venue.rating_count = 0
        venue.rating_distribution = {}
        venue.rating_aspects = {}
    else:
        visible = list(reviews.filter(is_visible=True))
        if not visible:
            return venue

        overall = [review.overall for review in visible]
        venue.rating_average = _one_decimal(sum(overall) / len(overall))
        venue.rating_count = len(visible)
        distribution = Counter(round(value) for value in overall)
        venue.rating_distribution = {str(star): distribution.get(star, 0) for star in range(1, 6)}

        aspects = {}
        for aspect in Review.ASPECTS:
            values = [getattr(review, aspect) for review in visible if getattr(review, aspect)]
            if values:
                aspects[aspect] = {
                    "average": float(_one_decimal(sum(values) / len(values))),
                    "count": len(values),
                }
        venue.rating_aspects = aspects

    venue.rating_calculated_at = timezone.now()
    venue.save(
        update_fields=[
            "rating_average",
            "rating_count",
            "rating_distribution",
            "rating_aspects",
            "rating_calculated_at",
        ]
    )
    return venue


def respond_to_review(review: Review, text: str, responder) -> Review:
    if not review.venue.has_permission(responder, VenueModerator.RESPOND_REVIEWS):
        raise PermissionDenied("You cannot respond to reviews for this venue.")
    if review.responded_at is not None:
        raise ValidationError("This review already has a response.")
    text = (text or "").strip()
    if not text:
        raise ValidationError("Response text is required.")

    review.response_text = text
    review.responded_by = responder
    review.responded_at = timezone.now()
    review.save(update_fields=["response_text", "responded_by", "responded_at"])
    return review


def update_stats(venue: Venue, today: date | None = None) -> Venue:
    today = today or timezone.localdate()
    booked = Game.objects.filter(
        venue=venue,
        status__in=[Game.Status.COMPLETED, Game.Status.CONFIRMED, Game.Status.SCHEDULED],
    )
    total = booked.count()
    cancelled = Game.objects.filter(venue=venue, status=Game.Status.CANCELLED).count()

    venue.total_bookings = total
    venue.current_month_bookings = booked.filter(
        starts_at__year=today.year, starts_at__month=today.month
    ).count()
    venue.cancellation_rate = (
        _one_decimal(cancelled / (total + cancelled) * 100) if total else Decimal("0")
    )
    venue.save(update_fields=["total_bookings", "current_month_bookings", "cancellation_rate"])
    logger.debug("Venue %s stats: %s bookings, %s%% cancelled", venue.pk, total, venue.cancellation_rate)
    return venue
