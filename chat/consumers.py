"""Websocket consumer relaying squad chat events."""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError

from footychat.realtime import squad_group_name
from squads.models import Squad

from . import services
from .models import Message

logger = logging.getLogger(__name__)

UNAUTHENTICATED_CLOSE_CODE = 4401


def _error_text(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return exc.messages[0]
    if isinstance(exc, ObjectDoesNotExist):
        return "Not found."
    return str(exc) or "Not allowed."


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """One socket per user; the user joins as many squad rooms as they like."""

    async def connect(self):
        self.user = self.scope.get("user")
        self.joined: set[int] = set()
        if self.user is None or not self.user.is_authenticated:
            await self.close(code=UNAUTHENTICATED_CLOSE_CODE)
            return
        await self.accept()
        logger.info("Chat socket opened for user %s", self.user.pk)

    async def disconnect(self, code):
        for squad_id in list(self.joined):
            await self._leave(squad_id)
        if getattr(self, "user", None) is not None and self.user.is_authenticated:
            logger.info("Chat socket closed for user %s (%s)", self.user.pk, code)

    async def receive_json(self, content, **kwargs):
        frame_type = content.get("type") if isinstance(content, dict) else None
        handler = getattr(self, f"on_{frame_type}", None) if frame_type else None
        if handler is None:
            await self.send_json({"type": "error", "message": f"Unknown frame type: {frame_type}"})
            return
        try:
            await handler(content)
        except (ValidationError, PermissionDenied, ObjectDoesNotExist, KeyError, ValueError, TypeError) as exc:
            logger.info("Rejected %s from user %s: %s", frame_type, self.user.pk, exc)
            await self.send_json({"type": "error", "message": _error_text(exc)})

    async def broadcast(self, event):
        if event.get("exclude") == self.channel_name:
            return
        await self.send_json(event["event"])

    async def _send_to_room(self, squad_id: int, event: dict, *, include_self: bool = True):
        message = {"type": "broadcast", "event": event}
        if not include_self:
            message["exclude"] = self.channel_name
        await self.channel_layer.group_send(squad_group_name(squad_id), message)

    def _me(self) -> dict:
        return {"id": self.user.pk, "name": self.user.display_name}

    async def _join(self, squad_id: int):
        await self.channel_layer.group_add(squad_group_name(squad_id), self.channel_name)
        self.joined.add(squad_id)

    async def _leave(self, squad_id: int):
        await self._send_to_room(
            squad_id, {"type": "user_offline", "group": squad_id, "user": self._me()}, include_self=False
        )
        await self.channel_layer.group_discard(squad_group_name(squad_id), self.channel_name)
        self.joined.discard(squad_id)

    # Database access

    @database_sync_to_async
    def _squad_ids(self) -> list[int]:
        return list(Squad.objects.active().for_user(self.user).values_list("pk", flat=True))

    @database_sync_to_async
    def _membership_squad(self, squad_id) -> Squad:
        squad = Squad.objects.active().get(pk=int(squad_id))
        if not squad.is_member(self.user):
            raise PermissionDenied("You are not a member of this group.")
        return squad

    @database_sync_to_async
    def _post(self, squad_id, content) -> dict:
        squad = Squad.objects.active().get(pk=int(squad_id))
        reply_to = None
        if content.get("reply_to"):
            reply_to = Message.objects.get(pk=int(content["reply_to"]), squad=squad)
        message = services.post_message(
            squad,
            self.user,
            content.get("text", ""),
            kind=content.get("kind", Message.Kind.TEXT),
            reply_to=reply_to,
            poll_options=content.get("options", ()),
        )
        return services.serialize_message(message)

    @database_sync_to_async
    def _read(self, message_id) -> int:
        message = Message.objects.select_related("squad").get(pk=int(message_id))
        if not message.squad.is_member(self.user):
            raise PermissionDenied("You are not a member of this group.")
        services.mark_read(message, self.user)
        return message.squad_id

    @database_sync_to_async
    def _react(self, message_id, emoji) -> tuple[int, bool]:
        message = Message.objects.select_related("squad").get(pk=int(message_id))
        added = services.toggle_reaction(message, self.user, emoji)
        return message.squad_id, added

    # Client frames

    async def on_join_groups(self, content):
        squad_ids = await self._squad_ids()
        for squad_id in squad_ids:
            await self._join(squad_id)
        await self.send_json({"type": "groups_joined", "groups": squad_ids})

    async def on_join_group(self, content):
        squad = await self._membership_squad(content["group"])
        await self._join(squad.pk)
        await self._send_to_room(
            squad.pk, {"type": "user_online", "group": squad.pk, "user": self._me()}, include_self=False
        )

    async def on_leave_group(self, content):
        squad_id = int(content["group"])
        if squad_id in self.joined:
            await self._leave(squad_id)

    async def on_send_message(self, content):
        payload = await self._post(content["group"], content)
        await self._send_to_room(payload["group"], {"type": "new_message", "message": payload})

    async def on_mark_read(self, content):
        squad_id = await self._read(content["message"])
        await self._send_to_room(
            squad_id,
            {"type": "message_read", "message": int(content["message"]), "user": self._me()},
            include_self=False,
        )

    async def on_typing_start(self, content):
        squad_id = int(content["group"])
        if squad_id not in self.joined:
            raise PermissionDenied("Join the group first.")
        await self._send_to_room(
            squad_id, {"type": "user_typing", "group": squad_id, "user": self._me()}, include_self=False
        )

    async def on_typing_stop(self, content):
        squad_id = int(content["group"])
        if squad_id not in self.joined:
            raise PermissionDenied("Join the group first.")
        await self._send_to_room(
            squad_id,
            {"type": "user_stopped_typing", "group": squad_id, "user": self._me()},
            include_self=False,
        )

    async def on_add_reaction(self, content):
        emoji = str(content["emoji"])[:16]
        squad_id, added = await self._react(content["message"], emoji)
        await self._send_to_room(
            squad_id,
            {
                "type": "reaction_added" if added else "reaction_removed",
                "message": int(content["message"]),
                "emoji": emoji,
                "user": self._me(),
            },
        )
