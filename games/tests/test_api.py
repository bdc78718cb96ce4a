from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from footychat.testing import local_dt, make_squad, make_user, make_venue, next_weekday
from games.models import Attendance, Game, Payment
from venues.models import BlockedSlot


@mock.patch("games.api.broadcast_to_squad")
class GameAPITests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.admin = make_user("admin")
        self.member = make_user("member")
        self.outsider = make_user("outsider")
        self.squad = make_squad(self.admin, self.member)
        self.venue = make_venue()
        self.monday = next_weekday(0)

    def create_game(self, **extra) -> Game:
        fields = {
            "squad": self.squad,
            "created_by": self.admin,
            "starts_at": timezone.now() + timedelta(days=2),
        }
        fields.update(extra)
        return Game.objects.create(**fields)

    def test_create_game(self, broadcast):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/games/",
            {
                "group": self.squad.pk,
                "field": self.venue.pk,
                "starts_at": local_dt(self.monday, 19).isoformat(),
                "duration": 60,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["group"], self.squad.pk)
        self.assertEqual(data["field_name"], "Campo Central")
        self.assertEqual(data["field_price"], "80.00")
        self.assertEqual(data["confirmed_count"], 1)
        broadcast.assert_called_once()
        self.assertEqual(broadcast.call_args[0][:2], (self.squad.pk, "game_created"))

    def test_create_game_requires_admin(self, broadcast):
        self.client.force_authenticate(self.member)
        response = self.client.post(
            "/api/games/",
            {"group": self.squad.pk, "starts_at": local_dt(self.monday, 19).isoformat()},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        broadcast.assert_not_called()

    def test_unavailable_slot_is_a_conflict(self, broadcast):
        BlockedSlot.objects.create(
            venue=self.venue,
            starts_at=local_dt(self.monday, 18),
            ends_at=local_dt(self.monday, 22),
            reason="Tournament",
        )
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/games/",
            {"group": self.squad.pk, "field": self.venue.pk, "starts_at": local_dt(self.monday, 19).isoformat()},
            format="json",
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {"detail": "Tournament"})

    def test_create_recurring_series(self, broadcast):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/games/",
            {
                "group": self.squad.pk,
                "field": self.venue.pk,
                "starts_at": local_dt(self.monday, 19).isoformat(),
                "frequency": "weekly",
                "recurrence_end": (self.monday + timedelta(days=14)).isoformat(),
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["series"]), 3)

    def test_recurring_series_needs_end_date(self, broadcast):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            "/api/games/",
            {"group": self.squad.pk, "starts_at": local_dt(self.monday, 19).isoformat(), "frequency": "weekly"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_list_my_games(self, broadcast):
        game = self.create_game()
        other_squad = make_squad(self.outsider, name="Other")
        Game.objects.create(
            squad=other_squad, created_by=self.outsider, starts_at=timezone.now() + timedelta(days=1)
        )
        self.client.force_authenticate(self.member)

        response = self.client.get("/api/games/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["games"][0]["id"], game.pk)

        response = self.client.get("/api/games/", {"group": other_squad.pk})
        self.assertEqual(response.status_code, 403)

    def test_list_upcoming_filter(self, broadcast):
        self.create_game()
        self.create_game(starts_at=timezone.now() - timedelta(days=2))
        self.create_game(status=Game.Status.CANCELLED)
        self.client.force_authenticate(self.member)
        response = self.client.get("/api/games/", {"upcoming": "true", "group": self.squad.pk})
        self.assertEqual(response.json()["count"], 1)

    def test_retrieve_is_members_only(self, broadcast):
        game = self.create_game()
        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(f"/api/games/{game.pk}/").status_code, 403)
        self.client.force_authenticate(self.member)
        self.assertEqual(self.client.get(f"/api/games/{game.pk}/").status_code, 200)
        self.assertEqual(self.client.get("/api/games/999999/").status_code, 404)

    def test_retrieve_completes_past_games(self, broadcast):
        game = self.create_game(starts_at=timezone.now() - timedelta(hours=3))
        self.client.force_authenticate(self.member)
        response = self.client.get(f"/api/games/{game.pk}/")
        self.assertEqual(response.json()["status"], "completed")

    def test_confirm_and_withdraw(self, broadcast):
        game = self.create_game(min_players=4, max_players=4)
        self.client.force_authenticate(self.member)

        response = self.client.post(f"/api/games/{game.pk}/confirm/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "confirmed")
        self.assertEqual(response.json()["game"]["confirmed_count"], 1)
        self.assertEqual(broadcast.call_args[0][1], "player_confirmed")

        response = self.client.post(f"/api/games/{game.pk}/confirm/")
        self.assertEqual(response.status_code, 400)

        response = self.client.delete(f"/api/games/{game.pk}/confirm/", {"reason": "Sick"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["promoted"], [])
        self.assertEqual(Attendance.objects.get(game=game, user=self.member).status, "declined")
        self.assertEqual(broadcast.call_args[0][1], "player_cancelled")

    def test_full_game_waitlists(self, broadcast):
        game = self.create_game(min_players=4, max_players=4)
        for index in range(4):
            Attendance.objects.create(
                game=game, user=make_user(f"filler{index}"), status=Attendance.Status.CONFIRMED
            )
        self.client.force_authenticate(self.member)
        response = self.client.post(f"/api/games/{game.pk}/confirm/")
        self.assertEqual(response.json()["status"], "waitlisted")
        self.assertEqual(broadcast.call_args[0][1], "player_waitlisted")

    def test_cancel_game(self, broadcast):
        game = self.create_game()
        self.client.force_authenticate(self.member)
        self.assertEqual(self.client.delete(f"/api/games/{game.pk}/").status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.delete(f"/api/games/{game.pk}/", {"reason": "Rain"}, format="json")
        self.assertEqual(response.status_code, 200)
        game.refresh_from_db()
        self.assertEqual(game.status, Game.Status.CANCELLED)
        self.assertEqual(game.cancel_reason, "Rain")
        self.assertEqual(broadcast.call_args[0][1], "game_cancelled")

    def test_teams_and_result(self, broadcast):
        game = self.create_game()
        for user in (self.admin, self.member):
            Attendance.objects.create(game=game, user=user, status=Attendance.Status.CONFIRMED)

        self.client.force_authenticate(self.member)
        self.assertEqual(self.client.post(f"/api/games/{game.pk}/teams/").status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post(f"/api/games/{game.pk}/teams/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["team_a"]), 1)
        self.assertEqual(len(response.json()["team_b"]), 1)
        self.assertEqual(broadcast.call_args[0][1], "teams_generated")

        response = self.client.post(
            f"/api/games/{game.pk}/result/",
            {
                "score_a": 5,
                "score_b": 4,
                "scorers": {str(self.member.pk): 3},
                "cards": [{"player": self.admin.pk, "kind": "red"}],
                "mvp": self.member.pk,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "completed")
        self.assertEqual(response.json()["mvp"], self.member.pk)

    def test_costs_and_payments(self, broadcast):
        game = self.create_game(field_price=Decimal("30"))
        for user in (self.admin, self.member):
            Attendance.objects.create(game=game, user=user, status=Attendance.Status.CONFIRMED)

        self.client.force_authenticate(self.admin)
        response = self.client.post(
            f"/api/games/{game.pk}/costs/", {"description": "Balls", "amount": "10.00"}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["total_cost"], "40.00")
        self.assertEqual(response.json()["per_player_cost"], "20.00")

        self.client.force_authenticate(self.member)
        response = self.client.post(
            f"/api/games/{game.pk}/payments/", {"amount": "20.00", "method": "mbway"}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"], self.member.pk)

        response = self.client.post(
            f"/api/games/{game.pk}/payments/",
            {"user": self.admin.pk, "amount": "20.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post(
            f"/api/games/{game.pk}/payments/",
            {"user": self.member.pk, "amount": "5.00", "method": "cash"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Payment.objects.filter(game=game, user=self.member).count(), 2)

    def test_requires_authentication(self, broadcast):
        self.assertEqual(self.client.get("/api/games/").status_code, 403)
