# chat/views.py
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.utils import DEMO_COOKIE_NAME, current_user_id
from certificates.models import Certificate
from utils.errors import error_response, validation_error

from .llm import LLMConfigError, LLMError
from .models import ChatMessage, ChatSession
from .relay import relay_stream, sse_response
from .serializers import (
    AppendMessageSerializer,
    ChatMessageSerializer,
    ChatRequestSerializer,
    ChatSessionSerializer,
    SessionMessageRequestSerializer,
)
from . import service as chat_service

log = logging.getLogger(__name__)

UPSTREAM_ERROR = "Failed to get response from AI"


def _attach_demo_cookie_if_needed(request, resp, user_id):
    if getattr(request, "user", None) and getattr(request.user, "is_authenticated", False):
        return
    resp.set_cookie(DEMO_COOKIE_NAME, str(user_id), max_age=60 * 60 * 24 * 365 * 2, samesite="Lax")


@api_view(["POST"])
@permission_classes([AllowAny])
def chat(request):
    """
    Answer a follow-up question about a certificate.

    The whole conversation is sent on every call; nothing is stored here.
    With `stream` set the answer is relayed as `data:` events ending in
    `data: [DONE]`, otherwise it comes back as `{"response": ...}`.
    """
    ser = ChatRequestSerializer(data=request.data)
    if not ser.is_valid():
        return validation_error(ser.errors)

    data = ser.validated_data
    history = chat_service.history_as_dicts(data["conversationHistory"])

    try:
        svc = chat_service.get_chat_service()
        if data["stream"]:
            chunks = svc.stream_reply(data["message"], data["certificateText"], history)
            return sse_response(relay_stream(chunks))
        answer = svc.reply(data["message"], data["certificateText"], history)
    except LLMConfigError as e:
        log.error("LLM not configured: %s", e)
        return error_response(UPSTREAM_ERROR, 500, details=str(e))
    except LLMError as e:
        log.warning("chat request failed: %s", e)
        return error_response(UPSTREAM_ERROR, 500, details=str(e))

    return Response({"response": answer}, status=200)


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def sessions(request):
    """
    POST: find or create the session for (certificate, user) and store the
    user's message. GET: the session for (certificateId, userId) with its
    messages, oldest first.
    """
    if request.method == "POST":
        ser = SessionMessageRequestSerializer(data=request.data)
        if not ser.is_valid():
            return validation_error(ser.errors)
        data = ser.validated_data
        user_id = data.get("userId") or current_user_id(request)
        cert = get_object_or_404(Certificate, pk=data["certificateId"])

        with transaction.atomic():
            sess, created = ChatSession.objects.get_or_create(certificate=cert, user_id=user_id)
            ChatMessage.objects.create(session=sess, role="user", content=data["message"])
            if not created:
                sess.save(update_fields=["updated_at"])
        log.info("chat session %s %s", sess.id, "created" if created else "reused")

        resp = Response(ChatSessionSerializer(sess).data, status=201 if created else 200)
        _attach_demo_cookie_if_needed(request, resp, user_id)
        return resp

    certificate_id = request.query_params.get("certificateId")
    user_id = request.query_params.get("userId")
    if not certificate_id or not user_id:
        return error_response("Certificate ID and User ID are required", 400)
    try:
        sess = (
            ChatSession.objects.filter(certificate_id=certificate_id, user_id=user_id)
            .order_by("-updated_at")
            .first()
        )
    except (ValueError, ValidationError):
        return error_response("Certificate ID or User ID is invalid", 400)
    if sess is None:
        return error_response("Chat session not found", 404)
    return Response(ChatSessionSerializer(sess).data, status=200)


@api_view(["POST"])
@permission_classes([AllowAny])
def append_message(request, sid):
    sess = get_object_or_404(ChatSession, pk=sid)
    ser = AppendMessageSerializer(data=request.data)
    if not ser.is_valid():
        return validation_error(ser.errors)

    msg = ChatMessage.objects.create(session=sess, **ser.validated_data)
    sess.save(update_fields=["updated_at"])
    return Response(ChatMessageSerializer(msg).data, status=201)
