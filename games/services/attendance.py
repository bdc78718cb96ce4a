"""Attendance and waitlist rules for a single game."""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from notifications.models import Notification
from notifications.services import create_game_notifications

from ..models import Attendance, Game

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"
WAITLISTED = "waitlisted"

__all__ = ["confirm_player", "cancel_player", "recalculate_cost", "CONFIRMED", "WAITLISTED"]

CLOSED_STATUSES = (Game.Status.CANCELLED, Game.Status.COMPLETED)


def _locked(game: Game) -> Game:
    return Game.objects.select_for_update().get(pk=game.pk)


def recalculate_cost(game: Game) -> Decimal:
    """Split the total cost over confirmed players, rounded up to whole units."""

    players = max(game.confirmed_count, 1)
    share = (game.total_cost / Decimal(players)).quantize(Decimal("1"), rounding=ROUND_CEILING)
    game.per_player_cost = share
    Game.objects.filter(pk=game.pk).update(per_player_cost=share)
    return share


@transaction.atomic
def confirm_player(game: Game, user) -> str:
    """Confirm ``user`` or append them to the waitlist when the game is full.

    Returns ``"confirmed"`` or ``"waitlisted"``.
    """

    game = _locked(game)
    if game.status in CLOSED_STATUSES:
        raise ValidationError(f"This game is {game.status}.")

    attendance = Attendance.objects.filter(game=game, user=user).first()
    if attendance is not None and attendance.status == Attendance.Status.CONFIRMED:
        raise ValidationError("You are already confirmed for this game.")

    now = timezone.now()
    if game.is_full:
        if attendance is not None and attendance.status == Attendance.Status.WAITLISTED:
            raise ValidationError("You are already on the waitlist.")
        Attendance.objects.update_or_create(
            game=game,
            user=user,
            defaults={"status": Attendance.Status.WAITLISTED, "responded_at": now, "decline_reason": ""},
        )
        logger.info("Game %s: user %s waitlisted", game.pk, user.pk)
        return WAITLISTED

    Attendance.objects.update_or_create(
        game=game,
        user=user,
        defaults={"status": Attendance.Status.CONFIRMED, "responded_at": now, "decline_reason": ""},
    )
    recalculate_cost(game)
    return CONFIRMED


def _promote_waitlist(game: Game) -> list:
    promoted = []
    spots = game.available_spots
    if not spots:
        return promoted

    for attendance in game.waitlist.select_related("user")[:spots]:
        attendance.status = Attendance.Status.CONFIRMED
        attendance.responded_at = timezone.now()
        attendance.save(update_fields=["status", "responded_at"])
        promoted.append(attendance.user)

    if promoted:
        create_game_notifications(Notification.Kind.GAME_CONFIRMED, game, promoted)
        logger.info(
            "Game %s: promoted %s from the waitlist",
            game.pk,
            ", ".join(str(user.pk) for user in promoted),
        )
    return promoted


@transaction.atomic
def cancel_player(game: Game, user, reason: str | None = None) -> list:
    """Withdraw ``user`` and fill any freed spot from the waitlist.

    Returns the users promoted from the waitlist.
    """

    game = _locked(game)
    attendance = Attendance.objects.filter(game=game, user=user).first()
    if attendance is None or attendance.status not in (
        Attendance.Status.CONFIRMED,
        Attendance.Status.WAITLISTED,
    ):
        raise ValidationError("You are not signed up for this game.")

    was_confirmed = attendance.status == Attendance.Status.CONFIRMED
    if reason:
        attendance.status = Attendance.Status.DECLINED
        attendance.decline_reason = reason[:200]
        attendance.team = None
        attendance.responded_at = timezone.now()
        attendance.save(update_fields=["status", "decline_reason", "team", "responded_at"])
    else:
        attendance.delete()

    promoted = _promote_waitlist(game) if was_confirmed else []
    recalculate_cost(game)
    return promoted
