import json
import logging
from typing import Iterable, Iterator

from django.http import StreamingHttpResponse

logger = logging.getLogger(__name__)

DONE_EVENT = "data: [DONE]\n\n"


def encode_delta(fragment: str) -> str:
    payload = {"choices": [{"delta": {"content": fragment}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def relay_stream(chunks: Iterable[str]) -> Iterator[str]:
    """
    Forward upstream fragments as `data:` events, in arrival order.

    Each fragment is yielded as soon as it is received. `[DONE]` is only sent
    when the upstream finished normally; on an upstream failure the stream
    simply ends so the reader sees an unterminated response.
    """
    sent = 0
    try:
        for fragment in chunks:
            if not fragment:
                continue
            sent += 1
            yield encode_delta(fragment)
    except Exception:
        logger.exception("upstream stream failed after %d events", sent)
        return
    logger.debug("stream complete events=%d", sent)
    yield DONE_EVENT


def sse_response(events: Iterable[str]) -> StreamingHttpResponse:
    resp = StreamingHttpResponse(events, content_type="text/event-stream")
    resp["Cache-Control"] = "no-cache"
    resp["X-Accel-Buffering"] = "no"
    return resp
