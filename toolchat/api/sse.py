"""Server-Sent Events encoding for wire events."""

import json

from toolchat.models.events import WireEvent, event_payload

SSE_MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # Disable proxy buffering (nginx) so frames reach the browser immediately
    "X-Accel-Buffering": "no",
}


def encode_event(event: WireEvent) -> bytes:
    """Serialize one event as an SSE frame.

    The frame is ``event: <tag>`` followed by ``data: <json>`` and a blank
    line. The JSON body carries the event fields without the tag.
    """
    data = json.dumps(event_payload(event), ensure_ascii=False, separators=(",", ":"))
    return f"event: {event.type}\ndata: {data}\n\n".encode()
