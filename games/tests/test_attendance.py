from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from footychat.testing import make_squad, make_user
from games.models import AdditionalCost, Attendance, Game
from games.services.attendance import (
    CONFIRMED,
    WAITLISTED,
    cancel_player,
    confirm_player,
    recalculate_cost,
)
from games.services.teams import generate_teams
from notifications.models import Notification


class AttendanceTests(TestCase):
    def setUp(self) -> None:
        self.players = [make_user(f"player{index}") for index in range(7)]
        self.squad = make_squad(self.players[0], *self.players[1:])
        self.game = Game.objects.create(
            squad=self.squad,
            created_by=self.players[0],
            starts_at=timezone.now() + timedelta(days=3),
            min_players=4,
            max_players=4,
            field_price=Decimal("50.00"),
        )

    def status_of(self, user) -> str:
        return Attendance.objects.get(game=self.game, user=user).status

    def fill(self):
        for player in self.players[:4]:
            self.assertEqual(confirm_player(self.game, player), CONFIRMED)

    def test_confirm_until_full_then_waitlist(self):
        self.fill()
        self.assertEqual(confirm_player(self.game, self.players[4]), WAITLISTED)
        self.assertEqual(confirm_player(self.game, self.players[5]), WAITLISTED)
        self.assertEqual(self.game.confirmed_count, 4)
        self.assertTrue(self.game.is_full)
        self.assertEqual(self.game.available_spots, 0)
        self.assertEqual(
            [attendance.user for attendance in self.game.waitlist], self.players[4:6]
        )

    def test_double_confirmation_is_rejected(self):
        confirm_player(self.game, self.players[0])
        with self.assertRaises(ValidationError):
            confirm_player(self.game, self.players[0])

    def test_double_waitlisting_is_rejected(self):
        self.fill()
        confirm_player(self.game, self.players[4])
        with self.assertRaises(ValidationError):
            confirm_player(self.game, self.players[4])

    def test_closed_games_reject_confirmations(self):
        self.game.status = Game.Status.CANCELLED
        self.game.save()
        with self.assertRaises(ValidationError):
            confirm_player(self.game, self.players[0])

    def test_pending_and_declined_rows_become_confirmed(self):
        Attendance.objects.create(
            game=self.game, user=self.players[1], status=Attendance.Status.DECLINED, decline_reason="Injured"
        )
        self.assertEqual(confirm_player(self.game, self.players[1]), CONFIRMED)
        attendance = Attendance.objects.get(game=self.game, user=self.players[1])
        self.assertEqual(attendance.status, Attendance.Status.CONFIRMED)
        self.assertEqual(attendance.decline_reason, "")

    def test_cancel_promotes_head_of_waitlist(self):
        self.fill()
        confirm_player(self.game, self.players[4])
        confirm_player(self.game, self.players[5])

        promoted = cancel_player(self.game, self.players[1])

        self.assertEqual(promoted, [self.players[4]])
        self.assertEqual(self.status_of(self.players[4]), Attendance.Status.CONFIRMED)
        self.assertEqual(self.status_of(self.players[5]), Attendance.Status.WAITLISTED)
        self.assertFalse(Attendance.objects.filter(game=self.game, user=self.players[1]).exists())
        notification = Notification.objects.get(recipient=self.players[4])
        self.assertEqual(notification.kind, Notification.Kind.GAME_CONFIRMED)
        self.assertEqual(notification.game, self.game)

    def test_cancel_with_reason_keeps_declined_row(self):
        self.fill()
        cancel_player(self.game, self.players[2], reason="Work trip")
        attendance = Attendance.objects.get(game=self.game, user=self.players[2])
        self.assertEqual(attendance.status, Attendance.Status.DECLINED)
        self.assertEqual(attendance.decline_reason, "Work trip")

    def test_waitlisted_cancel_does_not_promote(self):
        self.fill()
        confirm_player(self.game, self.players[4])
        confirm_player(self.game, self.players[5])

        self.assertEqual(cancel_player(self.game, self.players[4]), [])
        self.assertEqual(self.status_of(self.players[5]), Attendance.Status.WAITLISTED)
        self.assertEqual(self.game.confirmed_count, 4)

    def test_cancel_without_signup_is_rejected(self):
        with self.assertRaises(ValidationError):
            cancel_player(self.game, self.players[6])

    def test_cost_is_split_and_rounded_up(self):
        confirm_player(self.game, self.players[0])
        self.game.refresh_from_db()
        self.assertEqual(self.game.per_player_cost, Decimal("50"))

        confirm_player(self.game, self.players[1])
        confirm_player(self.game, self.players[2])
        self.game.refresh_from_db()
        self.assertEqual(self.game.per_player_cost, Decimal("17"))

        AdditionalCost.objects.create(game=self.game, description="Bibs", amount=Decimal("10"))
        self.assertEqual(recalculate_cost(self.game), Decimal("20"))

    def test_cost_with_nobody_confirmed(self):
        self.assertEqual(recalculate_cost(self.game), Decimal("50"))


class TeamGenerationTests(TestCase):
    def setUp(self) -> None:
        self.players = [make_user(f"player{index}") for index in range(5)]
        self.squad = make_squad(self.players[0], *self.players[1:])
        self.game = Game.objects.create(
            squad=self.squad, created_by=self.players[0], starts_at=timezone.now() + timedelta(days=1)
        )

    def test_needs_two_players(self):
        Attendance.objects.create(game=self.game, user=self.players[0], status=Attendance.Status.CONFIRMED)
        with self.assertRaises(ValidationError):
            generate_teams(self.game)

    def test_teams_split_larger_half_first(self):
        for player in self.players:
            Attendance.objects.create(game=self.game, user=player, status=Attendance.Status.CONFIRMED)

        team_a, team_b = generate_teams(self.game, random.Random(7))

        self.assertEqual(len(team_a), 3)
        self.assertEqual(len(team_b), 2)
        self.assertEqual(set(team_a) | set(team_b), set(self.players))
        stored_a = set(
            Attendance.objects.filter(game=self.game, team=Attendance.Team.A).values_list("user_id", flat=True)
        )
        self.assertEqual(stored_a, {user.pk for user in team_a})

    def test_same_seed_gives_same_teams(self):
        for player in self.players:
            Attendance.objects.create(game=self.game, user=player, status=Attendance.Status.CONFIRMED)
        first = generate_teams(self.game, random.Random(42))
        second = generate_teams(self.game, random.Random(42))
        self.assertEqual(first, second)

    def test_only_confirmed_players_are_picked(self):
        Attendance.objects.create(game=self.game, user=self.players[0], status=Attendance.Status.CONFIRMED)
        Attendance.objects.create(game=self.game, user=self.players[1], status=Attendance.Status.CONFIRMED)
        Attendance.objects.create(game=self.game, user=self.players[2], status=Attendance.Status.WAITLISTED)
        team_a, team_b = generate_teams(self.game)
        self.assertEqual(len(team_a) + len(team_b), 2)
        self.assertIsNone(Attendance.objects.get(game=self.game, user=self.players[2]).team)
