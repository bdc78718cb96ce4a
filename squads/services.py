"""Membership rules for squads."""

from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from .models import Membership, Squad

logger = logging.getLogger(__name__)

__all__ = [
    "create_squad",
    "add_member",
    "remove_member",
    "leave_squad",
    "join_with_invite_code",
    "find_by_invite_code",
    "set_member_role",
]


@transaction.atomic
def create_squad(user, name: str, description: str = "", **settings_fields) -> Squad:
    """Create a squad with ``user`` as its only admin."""

    squad = Squad(name=name, description=description, created_by=user, **settings_fields)
    squad.full_clean(exclude=["created_by", "invite_code"])
    squad.save()
    Membership.objects.create(squad=squad, user=user, role=Membership.Role.ADMIN)
    return squad


def add_member(squad: Squad, user, role: str = Membership.Role.MEMBER) -> Membership:
    if squad.is_member(user):
        raise ValidationError("User is already a member of this group.")
    if squad.member_count >= squad.max_members:
        raise ValidationError("This group is full.")

    membership = Membership.objects.create(squad=squad, user=user, role=role)
    squad.save(update_fields=["updated_at"])
    return membership


def remove_member(squad: Squad, user) -> None:
    Membership.objects.filter(squad=squad, user=user).delete()
    squad.save(update_fields=["updated_at"])


def leave_squad(squad: Squad, user) -> None:
    """Remove ``user`` unless they are the last admin standing."""

    admins = list(squad.admins.values_list("user_id", flat=True))
    if admins == [user.pk]:
        raise ValidationError(
            "You cannot leave while you are the only admin. Promote another member first."
        )
    remove_member(squad, user)


def find_by_invite_code(code: str) -> Squad | None:
    code = (code or "").strip()
    if not code:
        return None
    return Squad.objects.active().filter(invite_code__iexact=code).first()


def join_with_invite_code(user, code: str) -> Squad:
    squad = find_by_invite_code(code)
    if squad is None:
        raise ValidationError("Invalid invite code.")
    add_member(squad, user)
    return squad


@transaction.atomic
def set_member_role(squad: Squad, actor, user, role: str) -> Membership:
    if not squad.is_admin(actor):
        raise PermissionDenied("Only admins can change member roles.")
    if role not in Membership.Role.values:
        raise ValidationError("Unknown role.")

    membership = squad.membership_for(user)
    if membership is None:
        raise ValidationError("User is not a member of this group.")

    demoting_admin = membership.role == Membership.Role.ADMIN and role != Membership.Role.ADMIN
    if demoting_admin and squad.admins.count() == 1:
        raise ValidationError("A group needs at least one admin.")

    membership.role = role
    membership.save(update_fields=["role"])
    logger.info("Squad %s: %s is now %s", squad.pk, user.pk, role)
    return membership
