"""
Python client for the certificate chat endpoint.

Mirrors what the browser does: keeps the conversation, re-sends it in full
on every question, and folds the streamed answer into one message.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .conversation import (
    ConversationLog,
    IdGenerator,
    Message,
    StreamReconciler,
    apology,
)
from .prompts import QUICK_QUESTIONS, build_greeting, build_spec_preamble

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat/"
DEFAULT_TIMEOUT_S = 60
GREETING_ID = "initial"


@dataclass
class ChatTurn:
    message: Message
    completed: bool
    failed: bool = False


class CertificateChatClient:
    def __init__(
        self,
        base_url: str,
        certificate_text: str,
        specs: Optional[dict] = None,
        *,
        overview: str = "",
        session: Optional[requests.Session] = None,
        ids: Optional[IdGenerator] = None,
        timeout_s: int = DEFAULT_TIMEOUT_S,
    ):
        self.url = base_url.rstrip("/") + CHAT_PATH
        self.certificate_text = certificate_text
        self.session = session or requests.Session()
        self.ids = ids or IdGenerator()
        self.timeout_s = timeout_s
        self.log = ConversationLog()
        self.log.apply(Message("system", "system", build_spec_preamble(specs or {}, certificate_text)))
        self.log.apply(Message(GREETING_ID, "assistant", build_greeting(overview), include_quick_questions=True))

    @staticmethod
    def quick_questions(message: Message) -> list:
        """Suggestions to render under `message`, if it carries them."""
        return list(QUICK_QUESTIONS) if message.include_quick_questions else []

    def _payload(self, question: str, stream: bool) -> dict:
        # history is everything before the question just appended
        history = self.log.as_history()[:-1]
        return {
            "message": question,
            "certificateText": self.certificate_text,
            "stream": stream,
            "conversationHistory": history,
        }

    def _fail(self, reason) -> ChatTurn:
        logger.warning("chat request failed: %s", reason)
        msg = apology(self.ids())
        self.log.apply(msg)
        return ChatTurn(msg, completed=False, failed=True)

    def ask(self, question: str, *, stream: bool = True) -> ChatTurn:
        question = (question or "").strip()
        if not question:
            raise ValueError("question must not be empty")

        self.log.apply(Message(self.ids(), "user", question))
        payload = self._payload(question, stream)

        try:
            resp = self.session.post(self.url, json=payload, stream=stream, timeout=self.timeout_s)
        except requests.RequestException as e:
            return self._fail(e)

        if not resp.ok:
            resp.close()
            return self._fail(f"status={resp.status_code}")

        if not stream:
            try:
                text = resp.json()["response"]
            except (ValueError, KeyError, TypeError) as e:
                return self._fail(e)
            msg = Message(self.ids(), "assistant", text)
            self.log.apply(msg)
            return ChatTurn(msg, completed=True)

        return self._read_stream(resp)

    def _read_stream(self, resp) -> ChatTurn:
        message_id = self.ids()
        rec = StreamReconciler(self.log, message_id)
        try:
            for chunk in resp.iter_content(chunk_size=None):
                rec.feed(chunk)
                if rec.completed:
                    break
        except requests.RequestException as e:
            logger.warning("stream interrupted: %s", e)
        finally:
            resp.close()
        rec.finish()

        msg = rec.message
        if msg is None:
            if not rec.completed:
                return self._fail("stream closed before any content")
            msg = Message(message_id, "assistant", "")
            self.log.apply(msg)
        return ChatTurn(msg, completed=rec.completed)
