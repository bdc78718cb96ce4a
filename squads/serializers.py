from rest_framework import serializers

from players.serializers import PlayerSummarySerializer

from .models import Membership, RecurringSlot, Squad


class MembershipSerializer(serializers.ModelSerializer):
    user = PlayerSummarySerializer(read_only=True)

    class Meta:
        model = Membership
        fields = ["user", "role", "joined_at", "is_paying"]
        read_only_fields = fields


class RecurringSlotSerializer(serializers.ModelSerializer):
    class Meta:
        model = RecurringSlot
        fields = ["id", "day_of_week", "kickoff", "venue", "duration_minutes", "auto_create"]


class SquadSerializer(serializers.ModelSerializer):
    members = MembershipSerializer(source="memberships", many=True, read_only=True)
    member_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Squad
        fields = [
            "id",
            "name",
            "avatar",
            "description",
            "max_members",
            "is_private",
            "require_approval",
            "allow_guest_players",
            "default_venue",
            "default_game_duration",
            "total_games",
            "total_goals",
            "average_attendance",
            "invite_code",
            "last_activity",
            "member_count",
            "members",
        ]
        read_only_fields = [
            "total_games",
            "total_goals",
            "average_attendance",
            "invite_code",
            "last_activity",
        ]


class SquadCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class AddMemberSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)


class JoinSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=12)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Membership.Role.choices)
