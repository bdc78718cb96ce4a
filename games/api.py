"""REST endpoints for games: scheduling, attendance, teams and results."""

from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from footychat.realtime import broadcast_to_squad
from players.models import User
from squads.models import Squad

from .models import Game
from .serializers import (
    AdditionalCostSerializer,
    GameCreateSerializer,
    GameSerializer,
    PaymentSerializer,
    ReasonSerializer,
    ResultSerializer,
)
from .services import attendance, results, scheduling, teams

logger = logging.getLogger(__name__)


def _player(user) -> dict:
    return {"id": user.pk, "name": user.display_name, "avatar": user.avatar}


class GameViewSet(viewsets.GenericViewSet):
    serializer_class = GameSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Game.objects.select_related("squad", "venue").prefetch_related(
            "attendances__user", "additional_costs"
        )

    def _game(self, request, pk, *, admin: bool = False) -> Game:
        game = get_object_or_404(self.get_queryset(), pk=pk)
        if admin and not game.squad.is_admin(request.user):
            raise PermissionDenied("Only group admins can do that.")
        if not game.squad.is_member(request.user):
            raise PermissionDenied("You are not a member of this group.")
        return game

    def _fresh(self, game: Game) -> dict:
        return GameSerializer(self.get_queryset().get(pk=game.pk)).data

    def list(self, request):
        games = self.get_queryset()
        params = request.query_params
        group_id = params.get("group")
        if group_id:
            squad = get_object_or_404(Squad, pk=group_id)
            if not squad.is_member(request.user):
                raise PermissionDenied("You are not a member of this group.")
            games = games.filter(squad=squad)
        else:
            games = games.for_user(request.user)
        if params.get("status"):
            games = games.filter(status=params["status"])
        if params.get("upcoming") == "true":
            games = games.filter(starts_at__gte=timezone.now()).exclude(status=Game.Status.CANCELLED)
        games = games.order_by("starts_at").distinct()
        serializer = GameSerializer(games, many=True)
        return Response({"count": len(serializer.data), "games": serializer.data})

    def create(self, request):
        serializer = GameCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        kwargs = {
            "squad": data["group"],
            "venue": data.get("field"),
            "creator": request.user,
            "starts_at": data["starts_at"],
            "duration_minutes": data.get("duration"),
            "min_players": data.get("min_players"),
            "max_players": data.get("max_players"),
            "pitch_size": data.get("pitch_size"),
            "notes": data.get("notes", ""),
        }
        if data.get("frequency"):
            games = scheduling.create_recurring_games(kwargs, data["frequency"], data["recurrence_end"])
        else:
            games = [scheduling.create_game(**kwargs)]

        game = games[0]
        broadcast_to_squad(
            game.squad_id,
            "game_created",
            {"game": game.pk, "starts_at": game.starts_at.isoformat(), "created_by": _player(request.user)},
        )
        payload = self._fresh(game)
        if len(games) > 1:
            payload["series"] = [item.pk for item in games]
        return Response(payload, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        game = self._game(request, pk)
        scheduling.refresh_status(game)
        return Response(self._fresh(game))

    def destroy(self, request, pk=None):
        game = self._game(request, pk)
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        scheduling.cancel_game(game, request.user, serializer.validated_data["reason"])
        broadcast_to_squad(
            game.squad_id,
            "game_cancelled",
            {"game": game.pk, "reason": game.cancel_reason},
        )
        return Response({"detail": "Game cancelled."})

    @action(detail=True, methods=["post", "delete"])
    def confirm(self, request, pk=None):
        game = self._game(request, pk)
        if request.method == "POST":
            outcome = attendance.confirm_player(game, request.user)
            event = "player_confirmed" if outcome == attendance.CONFIRMED else "player_waitlisted"
            broadcast_to_squad(game.squad_id, event, {"game": game.pk, "user": _player(request.user)})
            return Response({"status": outcome, "game": self._fresh(game)})

        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        promoted = attendance.cancel_player(game, request.user, serializer.validated_data["reason"] or None)
        broadcast_to_squad(
            game.squad_id,
            "player_cancelled",
            {
                "game": game.pk,
                "user": _player(request.user),
                "promoted": [_player(user) for user in promoted],
            },
        )
        return Response({"promoted": [user.pk for user in promoted], "game": self._fresh(game)})

    @action(detail=True, methods=["post"])
    def teams(self, request, pk=None):
        game = self._game(request, pk, admin=True)
        team_a, team_b = teams.generate_teams(game)
        payload = {
            "team_a": [_player(user) for user in team_a],
            "team_b": [_player(user) for user in team_b],
        }
        broadcast_to_squad(game.squad_id, "teams_generated", {"game": game.pk, **payload})
        return Response(payload)

    @action(detail=True, methods=["post"])
    def result(self, request, pk=None):
        game = self._game(request, pk, admin=True)
        serializer = ResultSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        results.record_result(
            game,
            data["score_a"],
            data["score_b"],
            scorers=data.get("scorers"),
            assists=data.get("assists"),
            cards=data.get("cards"),
            mvp=data.get("mvp"),
        )
        return Response(self._fresh(game))

    @action(detail=True, methods=["post"])
    def costs(self, request, pk=None):
        game = self._game(request, pk, admin=True)
        serializer = AdditionalCostSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        scheduling.add_additional_cost(game, **serializer.validated_data)
        return Response(self._fresh(game), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def payments(self, request, pk=None):
        game = self._game(request, pk)
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payer = request.user
        if data.get("user_id") and data["user_id"] != request.user.pk:
            if not game.squad.is_admin(request.user):
                raise PermissionDenied("Only group admins can record payments for others.")
            payer = get_object_or_404(User, pk=data["user_id"])

        payment = scheduling.record_payment(
            game, payer, data["amount"], data.get("method", "cash")
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
