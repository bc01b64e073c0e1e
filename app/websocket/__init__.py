# =============================================================================
# app/websocket/__init__.py - WebSocket Module
# =============================================================================
# Provides real-time call status updates and the transcription relay.
#
# Usage:
#   # Broadcast an event to all connections for a user (from FastAPI)
#   from app.websocket import websocket_manager
#
#   await websocket_manager.broadcast(user_id, {
#       "type": "call_status",
#       "status": "completed"
#   })
#
#   # Publish events from anywhere (API handlers, Celery workers)
#   from app.websocket.broadcast import publish_call_status
#
#   publish_call_status(user_id, call_history_id, "completed")
# =============================================================================

from app.websocket.manager import websocket_manager
from app.websocket.broadcast import (
    publish_event,
    publish_call_status,
    WEBSOCKET_CHANNEL,
)

__all__ = [
    "websocket_manager",
    "publish_event",
    "publish_call_status",
    "WEBSOCKET_CHANNEL",
]
