from rest_framework import serializers

from players.serializers import PlayerSummarySerializer

from .models import Message, PollOption


class PollOptionSerializer(serializers.ModelSerializer):
    votes = serializers.SerializerMethodField()

    class Meta:
        model = PollOption
        fields = ["id", "text", "votes"]

    def get_votes(self, obj) -> int:
        return obj.votes.count()


class MessageSerializer(serializers.ModelSerializer):
    sender = PlayerSummarySerializer(read_only=True)
    group = serializers.IntegerField(source="squad_id", read_only=True)
    poll_options = PollOptionSerializer(many=True, read_only=True)
    reactions = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            "id",
            "group",
            "sender",
            "reply_to",
            "kind",
            "text",
            "media_url",
            "media_thumbnail",
            "game",
            "location_name",
            "latitude",
            "longitude",
            "is_edited",
            "edited_at",
            "is_pinned",
            "poll_question",
            "poll_allow_multiple",
            "poll_expires_at",
            "poll_options",
            "reactions",
            "created_at",
        ]
        read_only_fields = fields

    def get_reactions(self, obj) -> dict:
        counts: dict[str, int] = {}
        for reaction in obj.reactions.all():
            counts[reaction.emoji] = counts.get(reaction.emoji, 0) + 1
        return counts


class MessageCreateSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")
    kind = serializers.ChoiceField(choices=Message.Kind.choices, default=Message.Kind.TEXT)
    reply_to = serializers.IntegerField(required=False, allow_null=True)
    poll_question = serializers.CharField(max_length=200, required=False)
    poll_allow_multiple = serializers.BooleanField(required=False)
    poll_expires_at = serializers.DateTimeField(required=False, allow_null=True)
    options = serializers.ListField(child=serializers.CharField(max_length=100), required=False)


class MessageEditSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=1000)


class PinSerializer(serializers.Serializer):
    pinned = serializers.BooleanField(default=True)


class VoteSerializer(serializers.Serializer):
    options = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class MessageListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)
    before = serializers.DateTimeField(required=False)
