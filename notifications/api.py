"""REST endpoints for a player's notifications."""

from __future__ import annotations

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import services
from .models import Notification
from .serializers import ActionSerializer, NotificationSerializer


class NotificationViewSet(viewsets.GenericViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def _owned(self, request, pk) -> Notification:
        notification = get_object_or_404(Notification, pk=pk)
        if notification.recipient_id != request.user.pk:
            raise PermissionDenied("This notification belongs to someone else.")
        return notification

    def list(self, request):
        notifications = services.unread_for(request.user)[:50]
        return Response(
            {
                "unread": services.count_unread(request.user),
                "notifications": NotificationSerializer(notifications, many=True).data,
            }
        )

    @action(detail=True, methods=["put"])
    def read(self, request, pk=None):
        notification = services.mark_read(self._owned(request, pk))
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        return Response({"updated": services.mark_all_read(request.user)})

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"count": services.count_unread(request.user)})

    @action(detail=True, methods=["post"], url_path="action")
    def take_action(self, request, pk=None):
        notification = self._owned(request, pk)
        serializer = ActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        notification = services.take_action(notification, serializer.validated_data["action"])
        return Response(NotificationSerializer(notification).data)
