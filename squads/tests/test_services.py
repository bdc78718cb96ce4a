from __future__ import annotations

from django.core.exceptions import PermissionDenied, ValidationError
from django.test import TestCase, override_settings

from players.models import User
from squads import services
from squads.models import Membership, Squad


def make_user(username: str, phone: str) -> User:
    return User.objects.create_user(
        username=username, password="pass1234", name=username.title(), phone_number=phone
    )


class SquadServiceTests(TestCase):
    def setUp(self) -> None:
        self.owner = make_user("owner", "912345670")
        self.player = make_user("player", "912345671")
        self.squad = services.create_squad(self.owner, "Tuesday Five", "Weekly kickabout")

    def test_creator_is_sole_admin(self):
        self.assertTrue(self.squad.is_admin(self.owner))
        self.assertEqual(self.squad.member_count, 1)
        self.assertEqual(list(self.squad.admins.values_list("user_id", flat=True)), [self.owner.pk])

    def test_add_member_rejects_duplicates(self):
        services.add_member(self.squad, self.player)
        with self.assertRaises(ValidationError):
            services.add_member(self.squad, self.player)

    def test_add_member_rejects_full_squad(self):
        self.squad.max_members = 10
        self.squad.save()
        for index in range(9):
            services.add_member(self.squad, make_user(f"extra{index}", f"91300000{index}"))
        with self.assertRaises(ValidationError):
            services.add_member(self.squad, self.player)

    def test_sole_admin_cannot_leave(self):
        services.add_member(self.squad, self.player)
        with self.assertRaises(ValidationError):
            services.leave_squad(self.squad, self.owner)

        services.set_member_role(self.squad, self.owner, self.player, Membership.Role.ADMIN)
        services.leave_squad(self.squad, self.owner)
        self.assertFalse(self.squad.is_member(self.owner))

    def test_member_can_leave(self):
        services.add_member(self.squad, self.player)
        services.leave_squad(self.squad, self.player)
        self.assertFalse(self.squad.is_member(self.player))

    def test_set_member_role_requires_admin(self):
        services.add_member(self.squad, self.player)
        with self.assertRaises(PermissionDenied):
            services.set_member_role(self.squad, self.player, self.player, Membership.Role.ADMIN)

    def test_last_admin_cannot_be_demoted(self):
        with self.assertRaises(ValidationError):
            services.set_member_role(self.squad, self.owner, self.owner, Membership.Role.MEMBER)

    @override_settings(SQUAD_INVITE_CODE_LENGTH=8)
    def test_invite_code_join_is_case_insensitive(self):
        code = self.squad.generate_invite_code()
        self.squad.save()
        self.assertEqual(len(code), 8)
        self.assertEqual(code, code.upper())

        joined = services.join_with_invite_code(self.player, code.lower())
        self.assertEqual(joined, self.squad)
        self.assertTrue(self.squad.is_member(self.player))

    def test_inactive_squad_is_not_found_by_code(self):
        self.squad.generate_invite_code()
        self.squad.is_active = False
        self.squad.save()
        self.assertIsNone(services.find_by_invite_code(self.squad.invite_code))
        with self.assertRaises(ValidationError):
            services.join_with_invite_code(self.player, self.squad.invite_code)

    def test_save_touches_last_activity(self):
        before = self.squad.last_activity
        self.squad.save(update_fields=["name"])
        self.squad.refresh_from_db()
        self.assertGreaterEqual(self.squad.last_activity, before)

    def test_for_user_lists_memberships(self):
        other = services.create_squad(self.player, "Other")
        self.assertEqual(list(Squad.objects.for_user(self.owner)), [self.squad])
        self.assertEqual(list(Squad.objects.for_user(self.player)), [other])
