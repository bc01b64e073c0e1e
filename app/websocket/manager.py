# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Tracks call-status WebSocket connections per user and fans events out to
# every open tab of that user.
#
# Usage:
#   from app.websocket import websocket_manager
#
#   await websocket_manager.connect(user_id, websocket)
#   await websocket_manager.broadcast(user_id, {"type": "call_status", ...})
#   websocket_manager.disconnect(user_id, websocket)
# =============================================================================

import logging
from typing import Dict, Set
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Registry of WebSocket connections keyed by user ID.

    Single-process: each API worker keeps its own registry and receives
    every event through the Redis listener in app.main.
    """

    def __init__(self):
        # user_id -> open connections
        self.connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        """Accept the socket and register it under `user_id`."""
        await websocket.accept()
        self.connections.setdefault(user_id, set()).add(websocket)

        logger.info(
            f"Call status socket opened for user {user_id} "
            f"({self.get_connection_count()} open)"
        )

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self.connections.get(user_id)
        if sockets is None:
            return

        sockets.discard(websocket)
        if not sockets:
            del self.connections[user_id]

        logger.info(
            f"Call status socket closed for user {user_id} "
            f"({self.get_connection_count()} open)"
        )

    async def broadcast(self, user_id: str, message: dict) -> int:
        """
        Send `message` to every socket of a user.

        Sockets that fail to receive are dropped from the registry.

        Returns:
            int: Number of sockets the message reached
        """
        sockets = self.connections.get(user_id)
        if not sockets:
            logger.debug(f"No sockets for user {user_id}, skipping {message.get('type')}")
            return 0

        sent_count = 0
        for websocket in list(sockets):
            try:
                await websocket.send_json(message)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Dropping dead call status socket: {e}")
                self.disconnect(user_id, websocket)

        logger.debug(f"Sent {message.get('type')} to {sent_count} sockets of user {user_id}")
        return sent_count

    def get_connection_count(self, user_id: str | None = None) -> int:
        if user_id:
            return len(self.connections.get(user_id, ()))
        return sum(len(sockets) for sockets in self.connections.values())

    def get_active_users(self) -> list[str]:
        return list(self.connections.keys())


# Global singleton instance
websocket_manager = ConnectionManager()
