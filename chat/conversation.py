"""
Client-side conversation state and stream reconciliation.

A `ConversationLog` keeps messages in display order, keyed by id, so that a
streamed assistant answer can be re-applied many times under one id and
still show up as a single growing message.
"""
import codecs
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union

from .serializers import StreamDeltaSerializer

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_TOKEN = "[DONE]"
APOLOGY_MESSAGE = "Sorry, I encountered an error. Please try again."

DONE = object()


class StreamParseError(ValueError):
    ...


@dataclass(frozen=True)
class Message:
    id: str
    role: str
    content: str
    include_quick_questions: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "includeQuickQuestions": self.include_quick_questions,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            id=str(data["id"]),
            role=data["role"],
            content=data.get("content", ""),
            include_quick_questions=bool(data.get("includeQuickQuestions", False)),
        )


class IdGenerator:
    """Millisecond timestamps, bumped so every id is strictly greater than the last."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            now = int(self._clock() * 1000)
            self._last = now if now > self._last else self._last + 1
            return str(self._last)


class ConversationLog:
    """Insertion-ordered messages with at most one entry per id."""

    def __init__(self, messages: Optional[Iterable[Message]] = None):
        self._messages: "OrderedDict[str, Message]" = OrderedDict()
        for m in messages or []:
            self.apply(m)

    def apply(self, message: Message) -> None:
        # assigning to an existing key keeps its position
        self._messages[message.id] = message

    def get(self, message_id: str) -> Optional[Message]:
        return self._messages.get(message_id)

    def __contains__(self, message_id) -> bool:
        return message_id in self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages.values()))

    def messages(self) -> List[Message]:
        return list(self._messages.values())

    def visible(self) -> List[Message]:
        return [m for m in self._messages.values() if m.role != "system"]

    def as_history(self) -> List[dict]:
        return [{"role": m.role, "content": m.content} for m in self._messages.values()]


def parse_event_line(line: str):
    """
    Interpret one protocol line.

    Returns None for lines to ignore, DONE for the terminator, otherwise the
    (possibly empty) text fragment. Raises StreamParseError on a payload that
    is not valid JSON or does not match the delta schema.
    """
    line = line.rstrip("\r")
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.strip() == DONE_TOKEN:
        return DONE

    try:
        obj = json.loads(payload)
    except ValueError as e:
        raise StreamParseError(f"invalid json: {e}") from e

    ser = StreamDeltaSerializer(data=obj)
    if not ser.is_valid():
        raise StreamParseError(f"unexpected delta shape: {ser.errors}")
    return ser.validated_data["choices"][0]["delta"].get("content") or ""


class LineBuffer:
    """Reassembles complete lines from arbitrarily split byte or str chunks."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, chunk: Union[bytes, str]) -> List[str]:
        text = self._decoder.decode(chunk) if isinstance(chunk, (bytes, bytearray)) else chunk
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        return lines

    def flush(self) -> List[str]:
        rest = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return [rest] if rest else []


class StreamReconciler:
    """
    Folds a `data:` line stream into one assistant message of a fixed id.

    Feed it raw chunks as they arrive; the accumulated message is applied to
    the log after every non-empty fragment. `completed` turns true only when
    `[DONE]` has been read.
    """

    def __init__(self, log: ConversationLog, message_id: str):
        self.log = log
        self.message_id = message_id
        self.accumulated = ""
        self.completed = False
        self.skipped_lines = 0
        self._lines = LineBuffer()

    @property
    def message(self) -> Optional[Message]:
        return self.log.get(self.message_id)

    def feed(self, chunk: Union[bytes, str]) -> List[Message]:
        return self._consume(self._lines.feed(chunk))

    def finish(self) -> List[Message]:
        emitted = self._consume(self._lines.flush())
        if not self.completed:
            logger.warning("stream closed before [DONE] message_id=%s chars=%d",
                           self.message_id, len(self.accumulated))
        return emitted

    def _consume(self, lines: List[str]) -> List[Message]:
        emitted = []
        for line in lines:
            if self.completed:
                break
            try:
                fragment = parse_event_line(line)
            except StreamParseError as e:
                self.skipped_lines += 1
                logger.warning("skipping stream line: %s", e)
                continue
            if fragment is None:
                continue
            if fragment is DONE:
                self.completed = True
                break
            if not fragment:
                continue
            self.accumulated += fragment
            msg = Message(self.message_id, "assistant", self.accumulated, False)
            self.log.apply(msg)
            emitted.append(msg)
        return emitted


def reconcile(chunks: Iterable[Union[bytes, str]], log: ConversationLog, message_id: str) -> StreamReconciler:
    """Consume a whole chunk iterator and return the finished reconciler."""
    rec = StreamReconciler(log, message_id)
    for chunk in chunks:
        rec.feed(chunk)
        if rec.completed:
            break
    rec.finish()
    return rec


def apology(message_id: str) -> Message:
    return Message(message_id, "assistant", APOLOGY_MESSAGE, False)

