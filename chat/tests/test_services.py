from __future__ import annotations

from datetime import timedelta

from django.core.exceptions import PermissionDenied, ValidationError
from django.test import TestCase
from django.utils import timezone

from chat import services
from chat.models import DELETED_PLACEHOLDER, Message, PollOption, PollVote, Receipt
from footychat.testing import make_squad, make_user
from squads.models import Membership
from squads.services import set_member_role


class PostMessageTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.member = make_user("member")
        self.outsider = make_user("outsider")
        self.squad = make_squad(self.admin, self.member)

    def test_member_posts_text(self):
        message = services.post_message(self.squad, self.member, "  Who's in tonight?  ")
        self.assertEqual(message.text, "Who's in tonight?")
        self.assertEqual(message.kind, Message.Kind.TEXT)
        payload = services.serialize_message(message)
        self.assertEqual(payload["group"], self.squad.pk)
        self.assertEqual(payload["sender"]["id"], self.member.pk)

    def test_outsiders_cannot_post(self):
        with self.assertRaises(PermissionDenied):
            services.post_message(self.squad, self.outsider, "Hi")

    def test_text_rules(self):
        with self.assertRaises(ValidationError):
            services.post_message(self.squad, self.member, "   ")
        with self.assertRaises(ValidationError):
            services.post_message(self.squad, self.member, "x" * 1001)
        self.assertEqual(len(services.post_message(self.squad, self.member, "x" * 1000).text), 1000)

    def test_reply_must_stay_in_squad(self):
        other = make_squad(self.member, name="Other")
        original = services.post_message(other, self.member, "Elsewhere")
        with self.assertRaises(ValidationError):
            services.post_message(self.squad, self.member, "Reply", reply_to=original)
        local = services.post_message(self.squad, self.admin, "Here")
        reply = services.post_message(self.squad, self.member, "Reply", reply_to=local)
        self.assertEqual(reply.reply_to, local)

    def test_poll_needs_two_options(self):
        with self.assertRaises(ValidationError):
            services.post_message(
                self.squad, self.admin, "", kind=Message.Kind.POLL, poll_options=["Tuesday", " "],
                poll_question="Which day?",
            )
        self.assertFalse(Message.objects.exists())

        poll = services.post_message(
            self.squad, self.admin, "", kind=Message.Kind.POLL, poll_options=["Tuesday", "Thursday"],
            poll_question="Which day?",
        )
        self.assertEqual(list(poll.poll_options.values_list("text", flat=True)), ["Tuesday", "Thursday"])


class MessageActionTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.member = make_user("member")
        self.other = make_user("other")
        self.squad = make_squad(self.admin, self.member, self.other)
        self.message = services.post_message(self.squad, self.member, "Kickoff at 8")

    def test_edit_keeps_history(self):
        services.edit_message(self.message, self.member, "Kickoff at 9")
        self.message.refresh_from_db()
        self.assertTrue(self.message.is_edited)
        self.assertEqual(self.message.text, "Kickoff at 9")
        self.assertEqual(self.message.edit_history[0]["text"], "Kickoff at 8")

    def test_only_sender_edits(self):
        with self.assertRaises(PermissionDenied):
            services.edit_message(self.message, self.admin, "Hijacked")

    def test_soft_delete_hides_message(self):
        services.delete_message(self.message, self.member)
        self.assertTrue(self.message.is_deleted)
        self.assertEqual(self.message.text, "Kickoff at 8")
        self.assertEqual(list(services.squad_messages(self.squad)), [])

    def test_admin_hard_deletes(self):
        services.delete_message(self.message, self.admin, Message.DeleteType.HARD)
        self.message.refresh_from_db()
        self.assertEqual(self.message.text, DELETED_PLACEHOLDER)
        self.assertEqual(self.message.deleted_by, self.admin)
        self.assertEqual(self.message.delete_type, Message.DeleteType.HARD)

    def test_members_cannot_delete_others_messages(self):
        with self.assertRaises(PermissionDenied):
            services.delete_message(self.message, self.other)
        with self.assertRaises(ValidationError):
            services.delete_message(self.message, self.member, "shred")

    def test_reactions_toggle(self):
        self.assertTrue(services.toggle_reaction(self.message, self.other, "⚽"))
        self.assertEqual(self.message.reactions.count(), 1)
        self.assertFalse(services.toggle_reaction(self.message, self.other, "⚽"))
        self.assertEqual(self.message.reactions.count(), 0)

    def test_receipts(self):
        delivered = services.mark_delivered(self.message, self.other)
        self.assertIsNotNone(delivered.delivered_at)
        self.assertIsNone(delivered.read_at)
        read = services.mark_read(self.message, self.other)
        self.assertIsNotNone(read.read_at)
        self.assertEqual(Receipt.objects.filter(message=self.message).count(), 1)

    def test_unread_messages(self):
        second = services.post_message(self.squad, self.admin, "Bring bibs")
        self.assertEqual(list(services.unread_messages(self.squad, self.other)), [self.message, second])
        services.mark_read(self.message, self.other)
        self.assertEqual(list(services.unread_messages(self.squad, self.other)), [second])
        services.mark_delivered(second, self.other)
        self.assertEqual(list(services.unread_messages(self.squad, self.other)), [second])

    def test_pinning_needs_admin_or_moderator(self):
        with self.assertRaises(PermissionDenied):
            services.pin_message(self.message, self.other)

        services.pin_message(self.message, self.admin)
        self.assertEqual(list(services.pinned_messages(self.squad)), [self.message])

        set_member_role(self.squad, self.admin, self.other, Membership.Role.MODERATOR)
        services.pin_message(self.message, self.other, pinned=False)
        self.assertIsNone(self.message.pinned_by)
        self.assertEqual(list(services.pinned_messages(self.squad)), [])

    def test_paging(self):
        for index in range(4):
            services.post_message(self.squad, self.member, f"Message {index}")
        page = list(services.squad_messages(self.squad, page=1, limit=2))
        self.assertEqual([message.text for message in page], ["Message 3", "Message 2"])
        page = list(services.squad_messages(self.squad, page=3, limit=2))
        self.assertEqual([message.text for message in page], ["Kickoff at 8"])

    def test_stats(self):
        services.post_message(self.squad, self.admin, "Second")
        stats = services.message_stats(self.squad)
        self.assertEqual(len(stats), 1)
        self.assertEqual(stats[0]["total"], 2)
        self.assertEqual(stats[0]["active_users"], 2)


class PollVoteTests(TestCase):
    def setUp(self) -> None:
        self.admin = make_user("admin")
        self.member = make_user("member")
        self.squad = make_squad(self.admin, self.member)
        self.poll = services.post_message(
            self.squad, self.admin, "", kind=Message.Kind.POLL,
            poll_options=["Tuesday", "Thursday", "Friday"], poll_question="Which day?",
        )
        self.tuesday, self.thursday, self.friday = PollOption.objects.filter(message=self.poll)

    def test_single_choice_vote_replaces_previous(self):
        services.vote_in_poll(self.poll, self.member, [self.tuesday.pk])
        services.vote_in_poll(self.poll, self.member, [self.thursday.pk])
        self.assertEqual(
            list(PollVote.objects.filter(user=self.member).values_list("option_id", flat=True)),
            [self.thursday.pk],
        )

    def test_single_choice_poll_rejects_many(self):
        with self.assertRaises(ValidationError):
            services.vote_in_poll(self.poll, self.member, [self.tuesday.pk, self.friday.pk])

    def test_multiple_choice(self):
        self.poll.poll_allow_multiple = True
        self.poll.save()
        votes = services.vote_in_poll(self.poll, self.member, [self.tuesday.pk, self.friday.pk])
        self.assertEqual(len(votes), 2)

    def test_closed_poll(self):
        self.poll.poll_expires_at = timezone.now() - timedelta(minutes=1)
        self.poll.save()
        with self.assertRaises(ValidationError):
            services.vote_in_poll(self.poll, self.member, [self.tuesday.pk])

    def test_unknown_option_and_non_poll(self):
        with self.assertRaises(ValidationError):
            services.vote_in_poll(self.poll, self.member, [999999])
        text = services.post_message(self.squad, self.member, "Not a poll")
        with self.assertRaises(ValidationError):
            services.vote_in_poll(text, self.member, [self.tuesday.pk])
