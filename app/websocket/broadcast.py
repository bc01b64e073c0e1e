# =============================================================================
# app/websocket/broadcast.py - Cross-Process Broadcasting
# =============================================================================
# Provides utilities for publishing events that get broadcast to a user's
# WebSocket clients.
#
# Uses Redis pub/sub for cross-process communication:
# - The API and Celery workers call publish_event() to send events
# - FastAPI subscribes and broadcasts to WebSocket clients
#
# Events:
#   - call_status: A call history row changed status
#   - sweep_complete: A scheduler sweep finished (service channel)
# =============================================================================

import json
import logging
from typing import Any

import redis

from app.config import settings

logger = logging.getLogger(__name__)

# Redis channel for WebSocket events
WEBSOCKET_CHANNEL = "yaad:websocket:events"


def get_redis_client() -> redis.Redis:
    """Get a Redis client for pub/sub operations."""
    return redis.from_url(settings.REDIS_URL)


def publish_event(user_id: str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Publish an event that will be broadcast to the user's WebSocket clients.

    Args:
        user_id: The user to broadcast to
        event_type: Event type (call_status)
        data: Event data to include

    Returns:
        bool: True if published successfully
    """
    try:
        client = get_redis_client()

        message = json.dumps({
            "user_id": str(user_id),
            "type": event_type,
            **data
        }, default=str)

        client.publish(WEBSOCKET_CHANNEL, message)

        logger.debug(f"Published {event_type} event for user {user_id}")
        return True

    except (redis.RedisError, TypeError, ValueError) as e:
        logger.error(f"Failed to publish event: {e}")
        return False


def publish_call_status(
    user_id: str,
    call_history_id: str,
    status: str,
    reminder_id: str | None = None,
    call_sid: str | None = None,
    duration_seconds: int | None = None,
) -> bool:
    """
    Publish a call_status event.

    Called when the Twilio status callback settles a call.
    """
    return publish_event(
        user_id=user_id,
        event_type="call_status",
        data={
            "call_history_id": call_history_id,
            "reminder_id": reminder_id,
            "status": status,
            "call_sid": call_sid,
            "duration_seconds": duration_seconds,
        }
    )
