# =============================================================================
# app/websocket/routes.py - WebSocket Routes
# =============================================================================
# WebSocket endpoint for real-time call status updates.
#
# Connect: ws://host/ws/calls?token={jwt}
#
# Events:
#   - {"type": "connected", "user_id": "..."}
#   - {"type": "call_status", "call_history_id": "...", "status": "completed", ...}
# =============================================================================

import logging
from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from app.auth.dependencies import verify_access_token
from app.websocket.manager import websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/calls")
async def call_status_websocket(
    websocket: WebSocket,
    token: str = Query(..., description="JWT token for authentication")
):
    """
    WebSocket endpoint for call status updates.

    Authentication is required via the `token` query parameter. Only the
    user's own calls are pushed.

    Example event:
        {
            "type": "call_status",
            "call_history_id": "550e8400-...",
            "reminder_id": "7c9e6679-...",
            "status": "voicemail",
            "duration_seconds": 23
        }
    """
    try:
        user = verify_access_token(token)
    except HTTPException as e:
        logger.warning(f"WebSocket auth failed: {e.detail}")
        await websocket.close(code=4001, reason="Invalid token")
        return

    user_id = str(user.id)
    await websocket_manager.connect(user_id, websocket)

    try:
        await websocket.send_json({
            "type": "connected",
            "user_id": user_id,
            "message": "Connected to call updates"
        })

        while True:
            data = await websocket.receive_text()

            # Handle ping/pong for keepalive
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"WebSocket received: {data[:100]}")

    except WebSocketDisconnect:
        logger.info(f"Call status client disconnected for user {user_id}")
    finally:
        websocket_manager.disconnect(user_id, websocket)


@router.get("/ws/status")
async def websocket_status():
    """
    Get WebSocket connection statistics.

    Returns:
        dict: Connection counts and active users
    """
    active_users = websocket_manager.get_active_users()
    return {
        "total_connections": websocket_manager.get_connection_count(),
        "user_count": len(active_users),
    }
