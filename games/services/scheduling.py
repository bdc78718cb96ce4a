"""Creating, repeating and cancelling games."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from footychat.exceptions import SlotUnavailable
from notifications.models import Notification
from notifications.services import create_game_notifications
from squads.models import Squad
from venues.availability import add_months, check_availability
from venues.pricing import calculate_price, redeem_promotion

from ..models import AdditionalCost, Attendance, Game, Payment
from .attendance import recalculate_cost

logger = logging.getLogger(__name__)

__all__ = [
    "create_game",
    "create_recurring_games",
    "next_occurrence",
    "can_be_cancelled",
    "cancel_game",
    "upcoming_games",
    "refresh_status",
    "add_additional_cost",
    "record_payment",
]


@transaction.atomic
def create_game(
    squad: Squad,
    venue,
    creator,
    starts_at: datetime,
    duration_minutes: int | None = None,
    min_players: int | None = None,
    max_players: int | None = None,
    pitch_size: str | None = None,
    notes: str = "",
    **extra,
) -> Game:
    """Schedule a game for ``squad`` and invite every member.

    The creator is confirmed straight away; everyone else gets a pending
    attendance row and a ``game_invitation`` notification.
    """

    if not squad.is_admin(creator):
        raise PermissionDenied("Only group admins can create games.")

    duration = duration_minutes or squad.default_game_duration or getattr(settings, "GAME_DEFAULT_DURATION", 90)
    min_players = min_players or getattr(settings, "GAME_DEFAULT_MIN_PLAYERS", 10)
    max_players = max_players or getattr(settings, "GAME_DEFAULT_MAX_PLAYERS", 14)
    size = pitch_size or getattr(settings, "GAME_DEFAULT_PITCH_SIZE", "7v7")

    if not 30 <= duration <= 180:
        raise ValidationError("Game duration must be between 30 and 180 minutes.")
    if min_players > max_players:
        raise ValidationError("Minimum players cannot exceed maximum players.")

    field_price = Decimal("0")
    currency = "EUR"
    promotion = None
    if venue is not None:
        slot = check_availability(venue, starts_at, duration, size)
        if not slot.available:
            raise SlotUnavailable(slot.reason)
        quote = calculate_price(venue, size, starts_at, duration, user=creator)
        field_price, currency, promotion = quote.final_price, quote.currency, quote.promotion

    game = Game(
        squad=squad,
        venue=venue,
        pitch_size=size,
        starts_at=starts_at,
        duration_minutes=duration,
        min_players=min_players,
        max_players=max_players,
        field_price=field_price,
        currency=currency,
        promotion_title=promotion.title if promotion else "",
        notes=notes,
        created_by=creator,
        **extra,
    )
    game.full_clean(exclude=["squad", "venue", "created_by", "parent_game", "mvp", "cancelled_by"])
    game.save()

    now = timezone.now()
    members = [m.user for m in squad.memberships.select_related("user")]
    Attendance.objects.bulk_create(
        [
            Attendance(
                game=game,
                user=member,
                status=Attendance.Status.CONFIRMED if member.pk == creator.pk else Attendance.Status.PENDING,
                responded_at=now if member.pk == creator.pk else None,
            )
            for member in members
        ]
    )
    invited = [member for member in members if member.pk != creator.pk]
    create_game_notifications(Notification.Kind.GAME_INVITATION, game, invited, sender=creator)

    if promotion is not None:
        redeem_promotion(promotion, creator, game)

    Squad.objects.filter(pk=squad.pk).update(total_games=F("total_games") + 1)
    squad.save(update_fields=["updated_at"])
    recalculate_cost(game)

    logger.info(
        "Game %s created for squad %s at %s (%s %s)",
        game.pk,
        squad.pk,
        starts_at.isoformat(),
        field_price,
        currency,
    )
    return game


def next_occurrence(starts_at: datetime, frequency: str, step: int = 1) -> datetime:
    """Kickoff of the ``step``-th repetition after ``starts_at`` in local time."""

    local = timezone.localtime(starts_at)
    if frequency == Game.Frequency.WEEKLY:
        day = local.date() + timedelta(days=7 * step)
    elif frequency == Game.Frequency.BIWEEKLY:
        day = local.date() + timedelta(days=14 * step)
    elif frequency == Game.Frequency.MONTHLY:
        day = add_months(local.date(), step)
    else:
        raise ValidationError(f"Unknown recurrence frequency: {frequency}")
    return timezone.make_aware(datetime.combine(day, local.time()))


def create_recurring_games(template_kwargs: dict, frequency: str, end_date: date) -> list[Game]:
    """Create a series from ``template_kwargs["starts_at"]`` until ``end_date``.

    Occurrences the venue cannot host are skipped.
    """

    kwargs = dict(template_kwargs)
    first_start = kwargs.pop("starts_at")
    recurrence = {"is_recurring": True, "recurrence_frequency": frequency, "recurrence_end": end_date}
    if timezone.localtime(first_start).date() > end_date:
        raise ValidationError("The recurrence must end on or after the first game.")

    first = create_game(starts_at=first_start, **kwargs, **recurrence)
    games = [first]

    step = 1
    while True:
        starts_at = next_occurrence(first_start, frequency, step)
        if timezone.localtime(starts_at).date() > end_date:
            break
        step += 1
        try:
            games.append(create_game(starts_at=starts_at, parent_game=first, **kwargs, **recurrence))
        except SlotUnavailable as exc:
            logger.warning("Skipping recurring game at %s: %s", starts_at.isoformat(), exc.reason)
    return games


def can_be_cancelled(game: Game, now: datetime | None = None) -> bool:
    cutoff = getattr(settings, "GAME_CANCELLATION_CUTOFF_HOURS", 2)
    now = now or timezone.now()
    return game.starts_at - now > timedelta(hours=cutoff)


@transaction.atomic
def cancel_game(game: Game, actor, reason: str = "", now: datetime | None = None) -> Game:
    if not game.squad.is_admin(actor):
        raise PermissionDenied("Only group admins can cancel games.")
    if game.status in (Game.Status.CANCELLED, Game.Status.COMPLETED):
        raise ValidationError(f"This game is already {game.status}.")
    if not can_be_cancelled(game, now):
        cutoff = getattr(settings, "GAME_CANCELLATION_CUTOFF_HOURS", 2)
        raise ValidationError(f"Games can only be cancelled more than {cutoff} hours before kickoff.")

    game.status = Game.Status.CANCELLED
    game.cancel_reason = (reason or "")[:200]
    game.cancelled_by = actor
    game.cancelled_at = now or timezone.now()
    game.save(update_fields=["status", "cancel_reason", "cancelled_by", "cancelled_at", "updated_at"])

    create_game_notifications(
        Notification.Kind.GAME_CANCELLED, game, game.confirmed_players, sender=actor
    )
    logger.info("Game %s cancelled by %s: %s", game.pk, actor.pk, game.cancel_reason or "no reason")
    return game


def upcoming_games(squad: Squad, limit: int = 5, now: datetime | None = None):
    return squad.games.upcoming(now)[:limit]


def refresh_status(game: Game, now: datetime | None = None) -> Game:
    now = now or timezone.now()
    if game.status == Game.Status.SCHEDULED and game.starts_at < now:
        game.status = Game.Status.COMPLETED
        game.save(update_fields=["status", "updated_at"])
    return game


@transaction.atomic
def add_additional_cost(game: Game, description: str, amount) -> AdditionalCost:
    amount = Decimal(str(amount))
    if amount < 0:
        raise ValidationError("Amount cannot be negative.")
    cost = AdditionalCost.objects.create(game=game, description=description, amount=amount)
    recalculate_cost(game)
    return cost


@transaction.atomic
def record_payment(game: Game, user, amount, method: str = Payment.Method.CASH) -> Payment:
    attendance = Attendance.objects.filter(game=game, user=user).first()
    if attendance is None:
        raise ValidationError("This player is not part of the game.")
    if method not in Payment.Method.values:
        raise ValidationError("Unknown payment method.")

    payment = Payment.objects.create(game=game, user=user, amount=Decimal(str(amount)), method=method)
    attendance.is_paid = True
    attendance.save(update_fields=["is_paid"])
    return payment
