"""Recording final scores and updating player and squad stats."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Avg, Count, F, Q, Sum

from squads.models import Squad

from ..models import AssistRecord, Attendance, CardRecord, Game, GoalRecord

logger = logging.getLogger(__name__)


def _winning_team(score_a: int, score_b: int) -> str | None:
    if score_a > score_b:
        return Attendance.Team.A
    if score_b > score_a:
        return Attendance.Team.B
    return None


def _refresh_player_stats(user_ids: Iterable[int]) -> None:
    User = get_user_model()
    for user in User.objects.filter(pk__in=list(user_ids)):
        played = Attendance.objects.filter(
            user=user, status=Attendance.Status.CONFIRMED, game__status=Game.Status.COMPLETED
        )
        games_played = played.count()
        wins = 0
        for attendance in played.exclude(team__isnull=True).select_related("game"):
            game = attendance.game
            if game.score_a is not None and game.score_b is not None:
                if _winning_team(game.score_a, game.score_b) == attendance.team:
                    wins += 1

        user.games_played = games_played
        user.wins = wins
        user.win_rate = (
            (Decimal(wins) * 100 / games_played).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            if games_played
            else Decimal("0")
        )
        user.goals = GoalRecord.objects.filter(player=user).aggregate(total=Sum("goals"))["total"] or 0
        user.assists = (
            AssistRecord.objects.filter(player=user).aggregate(total=Sum("assists"))["total"] or 0
        )
        user.yellow_cards = CardRecord.objects.filter(player=user, kind=CardRecord.Kind.YELLOW).count()
        user.red_cards = CardRecord.objects.filter(player=user, kind=CardRecord.Kind.RED).count()
        user.save(
            update_fields=[
                "games_played",
                "wins",
                "win_rate",
                "goals",
                "assists",
                "yellow_cards",
                "red_cards",
            ]
        )


def _refresh_squad_stats(squad: Squad) -> None:
    completed = squad.games.filter(status=Game.Status.COMPLETED)
    goals = completed.aggregate(total=Sum(F("score_a") + F("score_b")))["total"]
    per_game = completed.annotate(
        players=Count("attendances", filter=Q(attendances__status=Attendance.Status.CONFIRMED))
    ).aggregate(average=Avg("players"))["average"]

    squad.total_goals = goals or 0
    squad.average_attendance = Decimal(str(per_game or 0)).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    squad.save(update_fields=["total_goals", "average_attendance"])


@transaction.atomic
def record_result(
    game: Game,
    score_a: int,
    score_b: int,
    scorers: Mapping[int, int] | None = None,
    assists: Mapping[int, int] | None = None,
    cards: Iterable[Mapping] | None = None,
    mvp=None,
) -> Game:
    """Store the score and individual records, then mark the game completed.

    ``scorers`` and ``assists`` map user ids to counts. ``cards`` is a list
    of ``{"player": id, "kind": "yellow"|"red", "minute": int}``.
    """

    if game.status == Game.Status.CANCELLED:
        raise ValidationError("Cannot record a result for a cancelled game.")
    if score_a < 0 or score_b < 0:
        raise ValidationError("Scores cannot be negative.")

    confirmed = dict(
        game.attendances.filter(status=Attendance.Status.CONFIRMED).values_list("user_id", "team")
    )
    scorers = {int(k): int(v) for k, v in (scorers or {}).items()}
    assists = {int(k): int(v) for k, v in (assists or {}).items()}
    cards = list(cards or [])
    if any(card.get("kind") not in CardRecord.Kind.values for card in cards):
        raise ValidationError("Cards must be yellow or red.")

    mentioned = set(scorers) | set(assists) | {int(card["player"]) for card in cards}
    mvp_id = getattr(mvp, "pk", mvp)
    if mvp_id is not None:
        mentioned.add(int(mvp_id))
    strangers = mentioned - set(confirmed)
    if strangers:
        raise ValidationError("Only confirmed players can appear in the result.")

    game.goals.all().delete()
    game.assists.all().delete()
    game.cards.all().delete()

    GoalRecord.objects.bulk_create(
        [
            GoalRecord(game=game, player_id=user_id, goals=count, team=confirmed[user_id] or "")
            for user_id, count in scorers.items()
            if count > 0
        ]
    )
    AssistRecord.objects.bulk_create(
        [
            AssistRecord(game=game, player_id=user_id, assists=count)
            for user_id, count in assists.items()
            if count > 0
        ]
    )
    CardRecord.objects.bulk_create(
        [
            CardRecord(
                game=game,
                player_id=int(card["player"]),
                kind=card["kind"],
                minute=card.get("minute"),
            )
            for card in cards
        ]
    )

    game.score_a = score_a
    game.score_b = score_b
    game.mvp_id = mvp_id
    game.status = Game.Status.COMPLETED
    game.save(update_fields=["score_a", "score_b", "mvp", "status", "updated_at"])

    _refresh_player_stats(confirmed)
    _refresh_squad_stats(game.squad)
    logger.info("Game %s finished %s-%s", game.pk, score_a, score_b)
    return game
