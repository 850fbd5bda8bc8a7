# chat/llm.py

import os
import re
import json
import logging
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple

# Quiet down gRPC noise from the SDK
os.environ.setdefault("GRPC_VERBOSITY", "ERROR")
os.environ.setdefault("GRPC_TRACE", "")

from django.conf import settings
import google.generativeai as genai

logger = logging.getLogger(__name__)


# ===== Exceptions =====

class LLMError(RuntimeError):
    ...


class LLMBlocked(LLMError):
    ...


class LLMUnavailable(LLMError):
    ...


class LLMConfigError(LLMError):
    ...


class LLMResponseError(LLMError):
    ...


# ===== Base config =====

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_DEADLINE_S = 60

CHAT_GENCFG = {
    "temperature": 0.7,
    "max_output_tokens": 800,
}

JSON_GENCFG = {
    "temperature": 0.5,
    "max_output_tokens": 2000,
    "response_mime_type": "application/json",
}

GEMINI_ROLES = {"user": "user", "assistant": "model"}


# ===== Regex & JSON helpers =====

_CODEFENCE = re.compile(r"^\s*```(?:json)?\s*$|^\s*```\s*$", re.I | re.M)
_JSON_SLOP = re.compile(r"\{.*\}", re.S)
_TRAILING_COMMAS = re.compile(r",\s*([}\]])")


def strip_code_fences(text: str) -> str:
    """Drop markdown fences and anything outside the outermost {...}."""
    if not text:
        return ""
    t = _CODEFENCE.sub("", text).strip()
    m = _JSON_SLOP.search(t)
    return m.group(0).strip() if m else t


def try_parse_json(text: str):
    """Parse JSON; if it fails, strip fences, do light repair and try again."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        pass

    t = strip_code_fences(text)
    if not t:
        return None
    t = _TRAILING_COMMAS.sub(r"\1", t)

    try:
        return json.loads(t)
    except ValueError:
        return None


def _parts_text(resp) -> str:
    """Concatenate candidate part texts exactly as produced (no stripping)."""
    if isinstance(resp, str):
        return resp
    out = []
    for c in getattr(resp, "candidates", None) or []:
        content = getattr(c, "content", None)
        for p in getattr(content, "parts", None) or []:
            txt = getattr(p, "text", "") or ""
            if isinstance(txt, str):
                out.append(txt)
        if out:
            break
    if out:
        return "".join(out)
    if getattr(resp, "candidates", None):
        return ""
    try:
        t = getattr(resp, "text", "") or ""
    except ValueError:
        # SDK raises when the response carries no parts at all
        return ""
    return t if isinstance(t, str) else ""


def extract_text(resp) -> str:
    """
    Safely extract text from Gemini SDK / mock responses.

    Supports resp.candidates[..].content.parts[..].text, resp.text and plain
    strings. Always returns a str.
    """
    return _parts_text(resp).strip()


def check_blocked(resp) -> None:
    fb = getattr(resp, "prompt_feedback", None)
    if fb:
        br = getattr(fb, "block_reason", None)
        if br and str(br).upper() not in {"0", "BLOCK_REASON_UNSPECIFIED"}:
            raise LLMBlocked(f"blocked: {br}")

    candidates = getattr(resp, "candidates", None) or []
    if candidates:
        finish = getattr(candidates[0], "finish_reason", None)
        if isinstance(finish, str) and finish.lower() in {"safety", "blocked"}:
            raise LLMBlocked(f"finish_reason={finish}")


def to_gemini_contents(history: Sequence[dict], message: str) -> Tuple[List[str], List[dict]]:
    """
    Map an OpenAI-style message list onto Gemini contents.

    `system` entries are returned separately so they can be folded into the
    system instruction; `assistant` becomes `model`; blank messages are
    dropped. The new user message is appended last.
    """
    system_parts: List[str] = []
    contents: List[dict] = []
    for item in history or []:
        role = item.get("role")
        content = (item.get("content") or "").strip()
        if not content:
            continue
        if role == "system":
            system_parts.append(content)
            continue
        gemini_role = GEMINI_ROLES.get(role)
        if gemini_role is None:
            logger.warning("dropping history entry with unknown role=%s", role)
            continue
        contents.append({"role": gemini_role, "parts": [content]})

    contents.append({"role": "user", "parts": [str(message or "").strip()]})
    return system_parts, contents


# ===== Client =====

class LLMClient(Protocol):
    def complete(self, system: str, contents: Sequence[dict], *, json_mode: bool = False) -> str:
        ...

    def stream(self, system: str, contents: Sequence[dict]) -> Iterator[str]:
        ...


class GeminiChatClient:
    """Adapter over google.generativeai with the credential injected at construction."""

    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL, *, timeout_s: int = DEFAULT_DEADLINE_S):
        if not api_key:
            raise LLMConfigError("GEMINI_API_KEY missing")
        try:
            genai.configure(api_key=api_key)
        except Exception as e:
            raise LLMConfigError(f"gemini_config_error: {e}") from e
        self.model_name = model_name or DEFAULT_MODEL
        self.timeout_s = timeout_s

    def _model(self, system: Optional[str]):
        return genai.GenerativeModel(self.model_name, system_instruction=system or None)

    def complete(self, system: str, contents: Sequence[dict], *, json_mode: bool = False) -> str:
        try:
            resp = self._model(system).generate_content(
                list(contents),
                generation_config=JSON_GENCFG if json_mode else CHAT_GENCFG,
                request_options={"timeout": self.timeout_s},
            )
        except Exception as e:
            logger.warning("gemini_call_failed model=%s err=%s", self.model_name, e)
            raise LLMUnavailable(str(e)) from e

        check_blocked(resp)
        text = extract_text(resp)
        if not text:
            raise LLMResponseError("empty_response")
        return text

    def stream(self, system: str, contents: Sequence[dict]) -> Iterator[str]:
        """
        Start a streamed completion and return an iterator of text fragments.

        The upstream request is issued here, before the iterator is handed
        back, so connection and configuration failures surface to the caller
        while it can still answer with an error status.
        """
        try:
            resp = self._model(system).generate_content(
                list(contents),
                generation_config=CHAT_GENCFG,
                stream=True,
                request_options={"timeout": self.timeout_s},
            )
        except Exception as e:
            logger.warning("gemini_stream_failed model=%s err=%s", self.model_name, e)
            raise LLMUnavailable(str(e)) from e

        return self._fragments(resp)

    @staticmethod
    def _fragments(resp) -> Iterator[str]:
        for chunk in resp:
            check_blocked(chunk)
            text = _parts_text(chunk)
            if text:
                yield text


def build_client_from_settings() -> GeminiChatClient:
    api_key = getattr(settings, "GEMINI_API_KEY", None)
    if not api_key:
        raise LLMConfigError(
            "Gemini API key is not configured. Please set the GEMINI_API_KEY environment variable."
        )
    return GeminiChatClient(api_key, getattr(settings, "GEMINI_MODEL", None) or DEFAULT_MODEL)
