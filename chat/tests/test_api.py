from __future__ import annotations

from unittest import mock

from django.test import TestCase
from rest_framework.test import APIClient

from chat import services
from chat.models import Message, PollOption
from footychat.testing import make_squad, make_user


@mock.patch("chat.api.broadcast_to_squad")
class ChatAPITests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.admin = make_user("admin")
        self.member = make_user("member")
        self.outsider = make_user("outsider")
        self.squad = make_squad(self.admin, self.member)
        self.url = f"/api/groups/{self.squad.pk}/messages/"

    def test_post_and_list_messages(self, broadcast):
        self.client.force_authenticate(self.member)
        response = self.client.post(self.url, {"text": "Who's bringing the ball?"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["sender"]["id"], self.member.pk)
        broadcast.assert_called_once()
        self.assertEqual(broadcast.call_args[0][:2], (self.squad.pk, "new_message"))

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["page"], 1)
        self.assertEqual(response.json()["messages"][0]["text"], "Who's bringing the ball?")

    def test_outsiders_are_forbidden(self, broadcast):
        self.client.force_authenticate(self.outsider)
        self.assertEqual(self.client.get(self.url).status_code, 403)
        self.assertEqual(self.client.post(self.url, {"text": "Hi"}, format="json").status_code, 403)

    def test_anonymous_is_rejected(self, broadcast):
        self.assertEqual(self.client.get(self.url).status_code, 403)

    def test_empty_text_is_rejected(self, broadcast):
        self.client.force_authenticate(self.member)
        response = self.client.post(self.url, {"text": ""}, format="json")
        self.assertEqual(response.status_code, 400)
        broadcast.assert_not_called()

    def test_poll_creation_and_vote(self, broadcast):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            self.url,
            {"kind": "poll", "poll_question": "Which day?", "options": ["Tue", "Thu"]},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["poll_options"]), 2)

        option = PollOption.objects.get(text="Thu")
        self.client.force_authenticate(self.member)
        response = self.client.post(
            f"/api/messages/{option.message_id}/vote/", {"options": [option.pk]}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        votes = {item["text"]: item["votes"] for item in response.json()["poll_options"]}
        self.assertEqual(votes, {"Tue": 0, "Thu": 1})

    def test_reply_to_unknown_message(self, broadcast):
        self.client.force_authenticate(self.member)
        response = self.client.post(self.url, {"text": "Reply", "reply_to": 999999}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_edit_and_delete(self, broadcast):
        message = services.post_message(self.squad, self.member, "Kickoff 20:00")
        self.client.force_authenticate(self.member)

        response = self.client.patch(f"/api/messages/{message.pk}/", {"text": "Kickoff 20:30"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_edited"])
        self.assertEqual(broadcast.call_args[0][1], "message_edited")

        self.client.force_authenticate(self.admin)
        response = self.client.patch(f"/api/messages/{message.pk}/", {"text": "No"}, format="json")
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(f"/api/messages/{message.pk}/?type=hard")
        self.assertEqual(response.status_code, 200)
        message.refresh_from_db()
        self.assertEqual(message.delete_type, Message.DeleteType.HARD)
        self.assertEqual(broadcast.call_args[0][1], "message_deleted")

    def test_pin_and_list_pinned(self, broadcast):
        message = services.post_message(self.squad, self.member, "Pay before Friday")
        self.client.force_authenticate(self.member)
        self.assertEqual(self.client.post(f"/api/messages/{message.pk}/pin/").status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post(f"/api/messages/{message.pk}/pin/", {"pinned": True}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_pinned"])

        response = self.client.get(f"{self.url}pinned/")
        self.assertEqual([item["id"] for item in response.json()], [message.pk])

    def test_stats(self, broadcast):
        services.post_message(self.squad, self.member, "One")
        services.post_message(self.squad, self.admin, "Two")
        self.client.force_authenticate(self.member)
        response = self.client.get(f"{self.url}stats/", {"days": 7})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["days"], 7)
        self.assertEqual(response.json()["stats"][0]["total"], 2)
