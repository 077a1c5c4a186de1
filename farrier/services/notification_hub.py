"""
In-process publish/subscribe for new notifications

Subscribers get an asyncio.Queue keyed by recipient. The notification
stream endpoint drains it; services publish after their commit succeeds.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Optional

logger = logging.getLogger(__name__)


class NotificationHub:
    def __init__(self, max_queue_size: int = 100):
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._max_queue_size = max_queue_size

    def subscribe(self, recipient_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[recipient_id].add(queue)
        logger.info(f"📡 Notification subscriber added for {recipient_id}")
        return queue

    def unsubscribe(self, recipient_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(recipient_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            del self._subscribers[recipient_id]

    def subscriber_count(self, recipient_id: Optional[str] = None) -> int:
        if recipient_id is not None:
            return len(self._subscribers.get(recipient_id, ()))
        return sum(len(queues) for queues in self._subscribers.values())

    def publish(self, recipient_id: str, payload: dict) -> int:
        """Deliver to every open stream of the recipient; returns deliveries"""
        delivered = 0
        for queue in list(self._subscribers.get(recipient_id, ())):
            try:
                queue.put_nowait(payload)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"⚠️ Notification queue full for {recipient_id}, dropping event")
        return delivered


notification_hub = NotificationHub()


def get_notification_hub() -> NotificationHub:
    return notification_hub
