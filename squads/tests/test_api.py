from __future__ import annotations

from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from players.models import User
from squads import services
from squads.models import Membership


class SquadAPITests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            username="owner", password="pass1234", name="Owner", phone_number="912345670"
        )
        self.friend = User.objects.create_user(
            username="friend", password="pass1234", name="Friend", phone_number="912345671"
        )
        self.squad = services.create_squad(self.owner, "Quinta Feira")
        self.client = APIClient()
        self.client.force_authenticate(self.owner)

        patcher = mock.patch("squads.api.broadcast_to_squad")
        self.broadcast = patcher.start()
        self.addCleanup(patcher.stop)

    def test_list_returns_my_squads(self):
        services.create_squad(self.friend, "Not Mine")
        response = self.client.get("/api/groups/")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["count"], 1)
        self.assertEqual(payload["groups"][0]["name"], "Quinta Feira")

    def test_create_squad(self):
        response = self.client.post("/api/groups/", {"name": "Sunday League"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["member_count"], 1)
        self.assertEqual(response.json()["members"][0]["role"], "admin")

    def test_retrieve_requires_membership(self):
        self.client.force_authenticate(self.friend)
        response = self.client.get(f"/api/groups/{self.squad.pk}/")
        self.assertEqual(response.status_code, 403)

    def test_add_member_by_phone(self):
        response = self.client.post(
            f"/api/groups/{self.squad.pk}/members/", {"phone_number": "912 345 671"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(self.squad.is_member(self.friend))
        self.broadcast.assert_called_once()
        self.assertEqual(self.broadcast.call_args.args[1], "member_added")

    def test_add_member_unknown_phone(self):
        response = self.client.post(
            f"/api/groups/{self.squad.pk}/members/", {"phone_number": "969999999"}, format="json"
        )
        self.assertEqual(response.status_code, 404)

    def test_add_member_requires_admin(self):
        services.add_member(self.squad, self.friend)
        self.client.force_authenticate(self.friend)
        response = self.client.post(
            f"/api/groups/{self.squad.pk}/members/", {"phone_number": "912345670"}, format="json"
        )
        self.assertEqual(response.status_code, 403)

    def test_add_existing_member_is_bad_request(self):
        services.add_member(self.squad, self.friend)
        response = self.client.post(
            f"/api/groups/{self.squad.pk}/members/", {"phone_number": "912345671"}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_sole_admin_cannot_leave(self):
        response = self.client.delete(f"/api/groups/{self.squad.pk}/leave/")
        self.assertEqual(response.status_code, 400)
        self.assertIn("only admin", response.json()["detail"])

    def test_invite_code_and_join(self):
        response = self.client.post(f"/api/groups/{self.squad.pk}/invite-code/")
        self.assertEqual(response.status_code, 200)
        code = response.json()["invite_code"]

        self.client.force_authenticate(self.friend)
        response = self.client.post("/api/groups/join/", {"code": code}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(self.squad.is_member(self.friend))

    def test_join_with_bad_code(self):
        self.client.force_authenticate(self.friend)
        response = self.client.post("/api/groups/join/", {"code": "NOPE00"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_change_role(self):
        services.add_member(self.squad, self.friend)
        response = self.client.post(
            f"/api/groups/{self.squad.pk}/members/{self.friend.pk}/role/",
            {"role": "moderator"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            Membership.objects.get(squad=self.squad, user=self.friend).role, "moderator"
        )
