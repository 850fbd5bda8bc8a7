from rest_framework import serializers

from .models import ChatMessage, ChatSession

ROLE_CHOICES = ["system", "user", "assistant"]


class HistoryMessageSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=ROLE_CHOICES)
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    includeQuickQuestions = serializers.BooleanField(required=False, default=False)


class ChatRequestSerializer(serializers.Serializer):
    message = serializers.CharField()
    certificateText = serializers.CharField()
    stream = serializers.BooleanField(required=False, default=False)
    conversationHistory = HistoryMessageSerializer(many=True, required=False, default=list)


# ----- streaming delta schema (client side) -----

class StrictCharField(serializers.CharField):
    """CharField that refuses numbers and other non-string JSON values."""

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class DeltaSerializer(serializers.Serializer):
    role = StrictCharField(required=False)
    content = StrictCharField(
        required=False, allow_null=True, allow_blank=True, trim_whitespace=False
    )


class ChoiceSerializer(serializers.Serializer):
    delta = DeltaSerializer()


class StreamDeltaSerializer(serializers.Serializer):
    choices = ChoiceSerializer(many=True, allow_empty=False)


# ----- persistence -----

class ChatMessageSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    chatSessionId = serializers.UUIDField(source="session_id", read_only=True)

    class Meta:
        model = ChatMessage
        fields = ["id", "role", "content", "createdAt", "chatSessionId"]


class ChatSessionSerializer(serializers.ModelSerializer):
    certificateId = serializers.UUIDField(source="certificate_id", read_only=True)
    userId = serializers.UUIDField(source="user_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    messages = serializers.SerializerMethodField()

    class Meta:
        model = ChatSession
        fields = ["id", "certificateId", "userId", "createdAt", "updatedAt", "messages"]

    def get_messages(self, obj):
        return ChatMessageSerializer(obj.messages.order_by("created_at", "id"), many=True).data


class SessionMessageRequestSerializer(serializers.Serializer):
    certificateId = serializers.UUIDField()
    userId = serializers.UUIDField(required=False)
    message = serializers.CharField()


class AppendMessageSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=["user", "assistant"], default="user")
    content = serializers.CharField(trim_whitespace=False)
