"""
backend/careslot/services/events.py

Notification sink: pushes notification events to a Redis queue consumed by
the delivery service.

- events:p2p: instant delivery to one user

Dispatch is fire-and-forget: a failed push is logged and never fails the
booking or transition that triggered it.
"""

import json
import logging
import time
from typing import Optional, Protocol

from redis import Redis

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"

APPOINTMENT_REQUESTED = "appointment-requested"
APPOINTMENT_CONFIRMED = "appointment-confirmed"
APPOINTMENT_REJECTED = "appointment-rejected"
APPOINTMENT_CANCELLED = "appointment-cancelled"
APPOINTMENT_REMINDER = "appointment-reminder"


class NotificationSink(Protocol):
    def enqueue_notification(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        related_entity_id: Optional[int] = None,
    ) -> None:
        ...


class RedisNotificationSink:
    """Notification sink backed by a Redis list."""

    def __init__(self, redis: Redis, queue: str = P2P_QUEUE):
        self.redis = redis
        self.queue = queue

    def enqueue_notification(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        related_entity_id: Optional[int] = None,
    ) -> None:
        event = {
            "type": type,
            "user_id": user_id,
            "title": title,
            "message": message,
            "related_entity_id": related_entity_id,
            "ts": int(time.time()),
        }
        self.redis.rpush(self.queue, json.dumps(event))
        logger.info(f"Notification emitted: {type} → {self.queue} (user={user_id})")


def dispatch(
    sink: NotificationSink,
    user_id: int,
    notification_type: str,
    title: str,
    message: str,
    related_entity_id: Optional[int] = None,
) -> bool:
    """Enqueue a notification, logging instead of raising on failure."""
    try:
        sink.enqueue_notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            related_entity_id=related_entity_id,
        )
        return True
    except Exception as e:
        logger.error(
            f"Failed to emit notification {notification_type} for user={user_id}: {e}"
        )
        return False


def get_notification_sink() -> NotificationSink:
    """FastAPI dependency: the process-wide Redis sink."""
    from ..redis_client import redis_client

    return RedisNotificationSink(redis_client)
