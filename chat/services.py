"""Chat rules shared by the websocket consumer and the REST API."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from squads.models import Membership, Squad

from .models import DELETED_PLACEHOLDER, Message, PollOption, PollVote, Reaction, Receipt

logger = logging.getLogger(__name__)

__all__ = [
    "post_message",
    "mark_read",
    "mark_delivered",
    "toggle_reaction",
    "edit_message",
    "delete_message",
    "vote_in_poll",
    "pin_message",
    "squad_messages",
    "pinned_messages",
    "unread_messages",
    "message_stats",
    "serialize_message",
]


def serialize_message(message: Message) -> dict:
    sender = message.sender
    return {
        "id": message.pk,
        "group": message.squad_id,
        "sender": (
            {"id": sender.pk, "name": sender.display_name, "avatar": sender.avatar} if sender else None
        ),
        "kind": message.kind,
        "text": message.text,
        "reply_to": message.reply_to_id,
        "game": message.game_id,
        "is_edited": message.is_edited,
        "is_pinned": message.is_pinned,
        "created_at": message.created_at.isoformat(),
    }


@transaction.atomic
def post_message(
    squad: Squad,
    sender,
    text: str,
    kind: str = Message.Kind.TEXT,
    reply_to: Message | None = None,
    *,
    poll_options: Iterable[str] = (),
    **extra,
) -> Message:
    """Store a message from a squad member and touch the squad's activity."""

    if not squad.is_member(sender):
        raise PermissionDenied("You are not a member of this group.")
    text = (text or "").strip()
    if kind == Message.Kind.TEXT and not text:
        raise ValidationError("Message text is required.")
    if len(text) > 1000:
        raise ValidationError("Messages are limited to 1000 characters.")
    if reply_to is not None and reply_to.squad_id != squad.pk:
        raise ValidationError("You can only reply to messages in the same group.")

    message = Message(squad=squad, sender=sender, kind=kind, text=text, reply_to=reply_to, **extra)
    message.full_clean(exclude=["squad", "sender", "reply_to", "game", "deleted_by", "pinned_by"])
    message.save()

    if kind == Message.Kind.POLL:
        options = [option.strip() for option in poll_options if option and option.strip()]
        if len(options) < 2:
            raise ValidationError("A poll needs at least two options.")
        PollOption.objects.bulk_create([PollOption(message=message, text=option) for option in options])

    squad.save(update_fields=["updated_at"])
    return message


def mark_read(message: Message, user) -> Receipt:
    now = timezone.now()
    receipt, created = Receipt.objects.get_or_create(
        message=message, user=user, defaults={"delivered_at": now, "read_at": now}
    )
    if not created and receipt.read_at is None:
        receipt.read_at = now
        receipt.delivered_at = receipt.delivered_at or now
        receipt.save(update_fields=["read_at", "delivered_at"])
    return receipt


def mark_delivered(message: Message, user) -> Receipt:
    receipt, _ = Receipt.objects.get_or_create(
        message=message, user=user, defaults={"delivered_at": timezone.now()}
    )
    return receipt


def toggle_reaction(message: Message, user, emoji: str) -> bool:
    """Add ``emoji`` for ``user``, or remove it if already there. Returns True when added."""

    if not message.squad.is_member(user):
        raise PermissionDenied("You are not a member of this group.")
    deleted, _ = Reaction.objects.filter(message=message, user=user, emoji=emoji).delete()
    if deleted:
        return False
    Reaction.objects.create(message=message, user=user, emoji=emoji)
    return True


def edit_message(message: Message, user, text: str) -> Message:
    if message.sender_id != user.pk:
        raise PermissionDenied("You can only edit your own messages.")
    if message.kind != Message.Kind.TEXT or message.is_deleted:
        raise ValidationError("Only text messages can be edited.")
    text = (text or "").strip()
    if not text:
        raise ValidationError("Message text is required.")
    if len(text) > 1000:
        raise ValidationError("Messages are limited to 1000 characters.")

    now = timezone.now()
    message.edit_history = [*message.edit_history, {"text": message.text, "edited_at": now.isoformat()}]
    message.text = text
    message.is_edited = True
    message.edited_at = now
    message.save(update_fields=["text", "is_edited", "edited_at", "edit_history"])
    return message


@transaction.atomic
def delete_message(message: Message, user, delete_type: str = Message.DeleteType.SOFT) -> Message:
    if message.sender_id != user.pk and not message.squad.is_admin(user):
        raise PermissionDenied("You can only delete your own messages.")
    if delete_type not in Message.DeleteType.values:
        raise ValidationError("Unknown delete type.")

    message.is_deleted = True
    message.deleted_at = timezone.now()
    message.deleted_by = user
    message.delete_type = delete_type
    fields = ["is_deleted", "deleted_at", "deleted_by", "delete_type"]

    if delete_type == Message.DeleteType.HARD:
        message.text = DELETED_PLACEHOLDER
        message.media_url = ""
        message.media_thumbnail = ""
        message.media_filename = ""
        message.media_size = None
        message.media_mime_type = ""
        message.game = None
        message.poll_options.all().delete()
        fields += ["text", "media_url", "media_thumbnail", "media_filename", "media_size", "media_mime_type", "game"]

    message.save(update_fields=fields)
    logger.info("Message %s %s-deleted by %s", message.pk, delete_type, user.pk)
    return message


@transaction.atomic
def vote_in_poll(message: Message, user, option_ids: Iterable[int]) -> list[PollVote]:
    if message.kind != Message.Kind.POLL:
        raise ValidationError("This message is not a poll.")
    if not message.poll_is_open:
        raise ValidationError("This poll has closed.")
    if not message.squad.is_member(user):
        raise PermissionDenied("You are not a member of this group.")

    option_ids = list(dict.fromkeys(int(option_id) for option_id in option_ids))
    if not option_ids:
        raise ValidationError("Choose at least one option.")
    if len(option_ids) > 1 and not message.poll_allow_multiple:
        raise ValidationError("This poll allows a single choice.")

    options = list(message.poll_options.filter(pk__in=option_ids))
    if len(options) != len(option_ids):
        raise ValidationError("Unknown poll option.")

    PollVote.objects.filter(option__message=message, user=user).delete()
    return PollVote.objects.bulk_create([PollVote(option=option, user=user) for option in options])


def pin_message(message: Message, user, pinned: bool = True) -> Message:
    membership = message.squad.membership_for(user)
    if membership is None or membership.role not in (Membership.Role.ADMIN, Membership.Role.MODERATOR):
        raise PermissionDenied("Only admins and moderators can pin messages.")

    message.is_pinned = pinned
    message.pinned_at = timezone.now() if pinned else None
    message.pinned_by = user if pinned else None
    message.save(update_fields=["is_pinned", "pinned_at", "pinned_by"])
    return message


def squad_messages(squad: Squad, page: int = 1, limit: int | None = None, before: datetime | None = None):
    limit = limit or getattr(settings, "CHAT_PAGE_SIZE", 50)
    page = max(page, 1)
    messages = squad.messages.visible().select_related("sender")
    if before is not None:
        messages = messages.filter(created_at__lt=before)
    offset = (page - 1) * limit
    return messages.order_by("-created_at", "-pk")[offset:offset + limit]


def pinned_messages(squad: Squad):
    return squad.messages.visible().filter(is_pinned=True).order_by("-pinned_at")


def unread_messages(squad: Squad, user, after: datetime | None = None):
    read = Receipt.objects.filter(user=user, read_at__isnull=False).values("message_id")
    messages = squad.messages.visible().exclude(pk__in=read)
    if after is not None:
        messages = messages.filter(created_at__gt=after)
    return messages.order_by("created_at", "pk")


def message_stats(squad: Squad, period_days: int = 30, now: datetime | None = None) -> list[dict]:
    now = now or timezone.now()
    rows = (
        squad.messages.visible()
        .filter(created_at__gte=now - timedelta(days=period_days))
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(total=Count("pk"), active_users=Count("sender", distinct=True))
        .order_by("day")
    )
    return [
        {"date": row["day"].isoformat(), "total": row["total"], "active_users": row["active_users"]}
        for row in rows
    ]
