# chat/service.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .llm import LLMClient, build_client_from_settings, to_gemini_contents
from .prompts import build_system_message

log = logging.getLogger(__name__)


@dataclass
class ChatService:
    """Answers follow-up questions about one certificate."""
    llm: LLMClient

    def _prepare(self, message: str, certificate_text: str, history: Optional[Sequence[dict]]):
        extra_system, contents = to_gemini_contents(history or [], message)
        system = "\n\n".join([build_system_message(certificate_text)] + extra_system)
        log.debug("chat request: history=%d contents=%d", len(history or []), len(contents))
        return system, contents

    def reply(self, message: str, certificate_text: str, history: Optional[Sequence[dict]] = None) -> str:
        system, contents = self._prepare(message, certificate_text, history)
        return self.llm.complete(system, contents)

    def stream_reply(
        self, message: str, certificate_text: str, history: Optional[Sequence[dict]] = None
    ) -> Iterator[str]:
        system, contents = self._prepare(message, certificate_text, history)
        return self.llm.stream(system, contents)


def get_chat_service() -> ChatService:
    return ChatService(llm=build_client_from_settings())


def history_as_dicts(history: Optional[List[dict]]) -> List[dict]:
    return [{"role": h.get("role"), "content": h.get("content", "")} for h in history or []]
