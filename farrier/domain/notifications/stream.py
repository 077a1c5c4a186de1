"""Live notification stream for one recipient"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from ...services.notification_hub import NotificationHub
from ...utils.sse import format_sse, format_sse_comment

logger = logging.getLogger(__name__)


async def notification_events(
    hub: NotificationHub,
    recipient_id: str,
    heartbeat_seconds: float,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
) -> AsyncIterator[str]:
    """
    Yield an SSE event per published notification and a heartbeat comment
    whenever the stream has been idle for heartbeat_seconds.
    """
    queue = hub.subscribe(recipient_id)
    try:
        yield format_sse_comment("connected")
        while True:
            if is_disconnected is not None and await is_disconnected():
                logger.info(f"Notification stream closed by {recipient_id}")
                return
            try:
                payload = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield format_sse_comment("heartbeat")
                continue
            yield format_sse("notification", payload)
    finally:
        hub.unsubscribe(recipient_id, queue)
