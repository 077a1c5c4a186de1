"""Server-sent events helpers"""

import json
from typing import Any

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event_type: str, data: dict[str, Any]) -> str:
    """Format a single SSE event payload"""
    return f"event: {event_type}\ndata: {json.dumps(data, default=str)}\n\n"


def format_sse_comment(comment: str = "ping") -> str:
    """Comment line; keeps idle connections open through proxies"""
    return f": {comment}\n\n"
