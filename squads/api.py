"""REST endpoints for squads and their members."""

from __future__ import annotations

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from footychat.realtime import broadcast_to_squad
from players.models import User, normalise_phone_number

from . import services
from .models import Squad
from .serializers import (
    AddMemberSerializer,
    JoinSerializer,
    RoleSerializer,
    SquadCreateSerializer,
    SquadSerializer,
)


class SquadViewSet(viewsets.GenericViewSet):
    serializer_class = SquadSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Squad.objects.active().prefetch_related("memberships__user")

    def _member_squad(self, request, pk) -> Squad:
        squad = get_object_or_404(self.get_queryset(), pk=pk)
        if not squad.is_member(request.user):
            raise PermissionDenied("You are not a member of this group.")
        return squad

    def _admin_squad(self, request, pk, message: str) -> Squad:
        squad = get_object_or_404(self.get_queryset(), pk=pk)
        if not squad.is_admin(request.user):
            raise PermissionDenied(message)
        return squad

    def list(self, request):
        squads = self.get_queryset().for_user(request.user).order_by("-last_activity")
        serializer = SquadSerializer(squads, many=True)
        return Response({"count": len(serializer.data), "groups": serializer.data})

    def create(self, request):
        serializer = SquadCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        squad = services.create_squad(request.user, **serializer.validated_data)
        squad = self.get_queryset().get(pk=squad.pk)
        return Response(SquadSerializer(squad).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        squad = self._member_squad(request, pk)
        return Response(SquadSerializer(squad).data)

    @action(detail=True, methods=["post"])
    def members(self, request, pk=None):
        squad = self._admin_squad(request, pk, "Only admins can add members.")
        serializer = AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        phone = normalise_phone_number(serializer.validated_data["phone_number"])
        user = User.objects.filter(phone_number=phone).first()
        if user is None:
            return Response({"detail": "User not found."}, status=status.HTTP_404_NOT_FOUND)

        services.add_member(squad, user)
        broadcast_to_squad(
            squad.pk,
            "member_added",
            {"group": squad.pk, "user": {"id": user.pk, "name": user.display_name, "avatar": user.avatar}},
        )
        return Response({"detail": "Member added."})

    @action(detail=True, methods=["delete"])
    def leave(self, request, pk=None):
        squad = self._member_squad(request, pk)
        services.leave_squad(squad, request.user)
        return Response({"detail": "You left the group."})

    @action(detail=True, methods=["post"], url_path="invite-code")
    def invite_code(self, request, pk=None):
        squad = self._admin_squad(request, pk, "Only admins can create invite codes.")
        code = squad.generate_invite_code()
        squad.save(update_fields=["invite_code"])
        return Response({"invite_code": code})

    @action(detail=False, methods=["post"])
    def join(self, request):
        serializer = JoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        squad = services.join_with_invite_code(request.user, serializer.validated_data["code"])
        broadcast_to_squad(
            squad.pk,
            "member_added",
            {
                "group": squad.pk,
                "user": {"id": request.user.pk, "name": request.user.display_name, "avatar": request.user.avatar},
            },
        )
        squad = self.get_queryset().get(pk=squad.pk)
        return Response(SquadSerializer(squad).data)

    @action(detail=True, methods=["post"], url_path=r"members/(?P<user_id>\d+)/role")
    def role(self, request, pk=None, user_id=None):
        squad = self._member_squad(request, pk)
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = get_object_or_404(User, pk=user_id)
        membership = services.set_member_role(
            squad, request.user, user, serializer.validated_data["role"]
        )
        return Response({"user": user.pk, "role": membership.role})
