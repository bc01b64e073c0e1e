# =============================================================================
# lib/transcription.py - Deepgram Streaming Client
# =============================================================================
# Thin async client for Deepgram's live transcription websocket. The API key
# never leaves the server: browsers talk to our /ws/transcribe relay, and the
# relay talks to Deepgram through this client.
#
# Audio goes up as binary frames (webm/opus from MediaRecorder); results come
# back as JSON text frames that lib/transcript.py knows how to accumulate.
#
# Usage:
#   async with DeepgramStream(api_key, language="en") as stream:
#       await stream.send_audio(chunk)
#       async for message in stream.messages():
#           ...
# =============================================================================

import json
import logging
from typing import AsyncIterator, Optional
from urllib.parse import urlencode

import aiohttp

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

DEEPGRAM_LISTEN_URL = "wss://api.deepgram.com/v1/listen"


class TranscriptionClientError(ApplicationError):
    """Error connecting to or talking with the transcription provider."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "TRANSCRIPTION_ERROR")
        super().__init__(message, **kwargs)


def build_listen_url(
    language: str = "en",
    model: str = "nova-2",
    encoding: str = "opus",
    sample_rate: int = 48000,
) -> str:
    """
    Build the Deepgram listen URL.

    Interim results are always on so the UI can show text while the user
    is still speaking.
    """
    params = {
        "model": model,
        "language": language or "en",
        "smart_format": "true",
        "punctuate": "true",
        "interim_results": "true",
        "encoding": encoding,
        "sample_rate": str(sample_rate),
    }
    return f"{DEEPGRAM_LISTEN_URL}?{urlencode(params)}"


class DeepgramStream:
    """
    One live transcription session.

    Authenticates with the ("token", api_key) websocket subprotocol pair,
    which is what Deepgram accepts from environments that cannot set
    headers on the upgrade request.
    """

    def __init__(
        self,
        api_key: str,
        language: str = "en",
        model: str = "nova-2",
        timeout: int = 30,
    ):
        self.api_key = api_key
        self.url = build_listen_url(language=language, model=model)
        self._timeout = aiohttp.ClientTimeout(total=None, sock_connect=timeout)
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    async def connect(self) -> "DeepgramStream":
        """
        Open the upstream websocket.

        Raises:
            TranscriptionClientError: If the handshake fails
        """
        if not self.api_key:
            raise TranscriptionClientError(
                "DEEPGRAM_API_KEY is not configured",
                code="TRANSCRIPTION_NOT_CONFIGURED",
                suggestion="Set DEEPGRAM_API_KEY in the server environment",
            )

        self._session = aiohttp.ClientSession(timeout=self._timeout)
        try:
            self._ws = await self._session.ws_connect(
                self.url,
                protocols=("token", self.api_key),
            )
        except aiohttp.ClientError as e:
            await self._session.close()
            self._session = None
            raise TranscriptionClientError(
                f"Could not connect to Deepgram: {e}",
                code="TRANSCRIPTION_CONNECT_FAILED",
                suggestion="Check DEEPGRAM_API_KEY and outbound network access",
            ) from e

        logger.info("Connected to Deepgram")
        return self

    @property
    def closed(self) -> bool:
        return self._ws is None or self._ws.closed

    async def send_audio(self, chunk: bytes) -> None:
        """Forward an audio chunk; dropped silently once the socket is closed."""
        if self.closed or not chunk:
            return
        await self._ws.send_bytes(chunk)

    async def finish(self) -> None:
        """Ask Deepgram to flush pending final results before closing."""
        if self.closed:
            return
        await self._ws.send_str(json.dumps({"type": "CloseStream"}))

    async def messages(self) -> AsyncIterator[str]:
        """
        Yield result messages as raw JSON strings until the upstream closes.

        Raises:
            TranscriptionClientError: If the upstream reports a websocket error
        """
        if self._ws is None:
            raise TranscriptionClientError("Stream is not connected", code="TRANSCRIPTION_NOT_CONNECTED")

        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.BINARY:
                yield msg.data.decode("utf-8", errors="replace")
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise TranscriptionClientError(
                    f"Deepgram websocket error: {self._ws.exception()}",
                    code="TRANSCRIPTION_STREAM_ERROR",
                )

        logger.info(f"Deepgram websocket closed: {self._ws.close_code}")

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "DeepgramStream":
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
