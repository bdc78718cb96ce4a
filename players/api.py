"""REST endpoints for player profiles."""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import User
from .serializers import ProfileSerializer, ProfileUpdateSerializer


class PlayerViewSet(viewsets.GenericViewSet):
    queryset = User.objects.filter(is_active=True)
    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def retrieve(self, request, pk=None):
        player = get_object_or_404(self.get_queryset(), pk=pk)
        return Response(ProfileSerializer(player).data)

    @action(detail=False, methods=["put", "patch"], url_path="profile")
    def profile(self, request):
        serializer = ProfileUpdateSerializer(
            request.user,
            data=request.data,
            partial=request.method == "PATCH",
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(ProfileSerializer(request.user).data)
