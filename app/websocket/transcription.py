# =============================================================================
# app/websocket/transcription.py - Live Transcription Relay
# =============================================================================
# Relays dictation audio from the browser to Deepgram and transcripts back,
# so the Deepgram API key never reaches the client.
#
# Connect: ws://host/ws/transcribe?language=en&token={jwt}
#
# Client -> server: binary audio chunks (webm/opus, 48 kHz), or the text
#                   frame {"type": "CloseStream"} to flush final results
# Server -> client: Deepgram result JSON, forwarded as-is
#
# Closing either side closes the other.
# =============================================================================

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket
from starlette.websockets import WebSocketState

from app.auth.dependencies import verify_access_token
from app.config import settings
from lib.transcription import DeepgramStream, TranscriptionClientError

logger = logging.getLogger(__name__)

router = APIRouter()

# Close codes
CLOSE_NORMAL = 1000
CLOSE_SERVER_ERROR = 1011
CLOSE_UNAUTHORIZED = 4001


async def pump_client_audio(websocket: WebSocket, stream: DeepgramStream) -> None:
    """Forward browser audio upstream until the browser disconnects."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            logger.info(f"Client WebSocket closed: {message.get('code')}")
            return

        if message.get("bytes"):
            await stream.send_audio(message["bytes"])
        elif message.get("text"):
            try:
                control = json.loads(message["text"])
            except json.JSONDecodeError:
                continue
            if isinstance(control, dict) and control.get("type") == "CloseStream":
                await stream.finish()


async def pump_transcripts(websocket: WebSocket, stream: DeepgramStream) -> None:
    """Forward Deepgram results to the browser until Deepgram closes."""
    async for data in stream.messages():
        if websocket.client_state != WebSocketState.CONNECTED:
            return
        await websocket.send_text(data)


async def relay(websocket: WebSocket, stream: DeepgramStream) -> None:
    """
    Run both pumps until one side ends, then cancel the other.

    Errors from either pump are logged; the caller closes both sockets.
    """
    tasks = {
        asyncio.create_task(pump_client_audio(websocket, stream)),
        asyncio.create_task(pump_transcripts(websocket, stream)),
    }
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    for task in done:
        error = task.exception()
        if error is not None:
            logger.error(f"Transcription relay error: {error}")


@router.websocket("/ws/transcribe")
async def transcribe_websocket(
    websocket: WebSocket,
    token: str = Query(..., description="JWT token for authentication"),
    language: str = Query(default="en", description="Dictation language"),
):
    """
    Live transcription relay.

    Close codes:
        1000: Either side finished normally
        1011: DEEPGRAM_API_KEY missing or Deepgram unreachable
        4001: Invalid token
    """
    try:
        user = verify_access_token(token)
    except HTTPException as e:
        logger.warning(f"Transcription auth failed: {e.detail}")
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Invalid token")
        return

    await websocket.accept()

    if not settings.DEEPGRAM_API_KEY:
        logger.error("DEEPGRAM_API_KEY is not configured")
        await websocket.close(code=CLOSE_SERVER_ERROR, reason="Server configuration error")
        return

    logger.info(f"Transcription relay opened for user {user.id}, language={language}")
    stream = DeepgramStream(
        api_key=settings.DEEPGRAM_API_KEY,
        language=language,
        model=settings.DEEPGRAM_MODEL,
    )

    try:
        await stream.connect()
    except TranscriptionClientError as e:
        logger.error(f"Deepgram connect failed: {e}")
        await websocket.close(code=CLOSE_SERVER_ERROR, reason="Transcription unavailable")
        return

    try:
        await relay(websocket, stream)
    finally:
        await stream.close()
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close(code=CLOSE_NORMAL, reason="Deepgram connection closed")
        logger.info(f"Transcription relay closed for user {user.id}")
