"""REST endpoints for squad chat history and message moderation."""

from __future__ import annotations

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from footychat.realtime import broadcast_to_squad
from squads.models import Squad

from . import services
from .models import Message
from .serializers import (
    MessageCreateSerializer,
    MessageEditSerializer,
    MessageListQuerySerializer,
    MessageSerializer,
    PinSerializer,
    VoteSerializer,
)


class SquadMessageViewSet(viewsets.ViewSet):
    """Messages of one squad, nested under ``/api/groups/<squad_pk>/messages/``."""

    permission_classes = [permissions.IsAuthenticated]

    def _squad(self, request, squad_pk) -> Squad:
        squad = get_object_or_404(Squad.objects.active(), pk=squad_pk)
        if not squad.is_member(request.user):
            raise PermissionDenied("You are not a member of this group.")
        return squad

    def list(self, request, squad_pk=None):
        squad = self._squad(request, squad_pk)
        query = MessageListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        messages = services.squad_messages(
            squad, page=params["page"], limit=params.get("limit"), before=params.get("before")
        ).prefetch_related("poll_options__votes", "reactions")
        return Response(
            {"page": params["page"], "messages": MessageSerializer(messages, many=True).data}
        )

    def create(self, request, squad_pk=None):
        squad = self._squad(request, squad_pk)
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        reply_to_id = data.pop("reply_to", None)
        reply_to = get_object_or_404(Message, pk=reply_to_id, squad=squad) if reply_to_id else None
        message = services.post_message(
            squad,
            request.user,
            data.pop("text"),
            kind=data.pop("kind"),
            reply_to=reply_to,
            poll_options=data.pop("options", ()),
            **data,
        )
        broadcast_to_squad(squad.pk, "new_message", {"message": services.serialize_message(message)})
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def pinned(self, request, squad_pk=None):
        squad = self._squad(request, squad_pk)
        return Response(MessageSerializer(services.pinned_messages(squad), many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request, squad_pk=None):
        squad = self._squad(request, squad_pk)
        days = int(request.query_params.get("days", 30))
        return Response({"days": days, "stats": services.message_stats(squad, period_days=days)})


class MessageViewSet(viewsets.GenericViewSet):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MessageSerializer
    queryset = Message.objects.select_related("squad", "sender")

    def _message(self, request, pk) -> Message:
        message = get_object_or_404(self.get_queryset(), pk=pk)
        if not message.squad.is_member(request.user):
            raise PermissionDenied("You are not a member of this group.")
        return message

    def partial_update(self, request, pk=None):
        message = self._message(request, pk)
        serializer = MessageEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.edit_message(message, request.user, serializer.validated_data["text"])
        broadcast_to_squad(
            message.squad_id, "message_edited", {"message": services.serialize_message(message)}
        )
        return Response(MessageSerializer(message).data)

    def destroy(self, request, pk=None):
        message = self._message(request, pk)
        delete_type = request.query_params.get("type", Message.DeleteType.SOFT)
        services.delete_message(message, request.user, delete_type)
        broadcast_to_squad(
            message.squad_id, "message_deleted", {"message": message.pk, "delete_type": delete_type}
        )
        return Response({"detail": "Message deleted."})

    @action(detail=True, methods=["post"])
    def pin(self, request, pk=None):
        message = self._message(request, pk)
        serializer = PinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.pin_message(message, request.user, serializer.validated_data["pinned"])
        return Response(MessageSerializer(message).data)

    @action(detail=True, methods=["post"])
    def vote(self, request, pk=None):
        message = self._message(request, pk)
        serializer = VoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.vote_in_poll(message, request.user, serializer.validated_data["options"])
        return Response(MessageSerializer(message).data)
