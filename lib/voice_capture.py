# =============================================================================
# lib/voice_capture.py - Voice Dictation Client
# =============================================================================
# Client side of the dictation flow. Streams audio chunks to the
# /ws/transcribe relay, accumulates the transcription results and returns
# the final transcript once recording stops.
#
# Recording stops when the audio source runs out or when the captured audio
# reaches max_duration_seconds (chunk count x chunk interval). After the last
# chunk the session asks the provider to flush and waits a short settle
# delay so trailing final results still arrive.
#
# Usage:
#   session = VoiceCaptureSession("ws://localhost:8000/ws/transcribe", token=jwt)
#   transcript = await session.capture(chunks)
# =============================================================================

import asyncio
import json
import logging
from typing import AsyncIterable, Callable, Iterable, Optional
from urllib.parse import urlencode

import aiohttp

from lib.transcript import TranscriptAccumulator
from lib.transcription import TranscriptionClientError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DURATION_SECONDS = 60
DEFAULT_CHUNK_INTERVAL_SECONDS = 0.25
DEFAULT_SETTLE_DELAY_SECONDS = 0.5


async def _iterate(chunks: AsyncIterable[bytes] | Iterable[bytes]):
    if hasattr(chunks, "__aiter__"):
        async for chunk in chunks:
            yield chunk
    else:
        for chunk in chunks:
            yield chunk


class VoiceCaptureSession:
    """
    Streams one recording to the transcription relay.

    Attributes:
        accumulator: Transcript state, readable while capture is running
        timed_out: True if recording stopped at the duration limit
    """

    def __init__(
        self,
        relay_url: str,
        token: str | None = None,
        language: str = "en",
        max_duration_seconds: int = DEFAULT_MAX_DURATION_SECONDS,
        chunk_interval: float = DEFAULT_CHUNK_INTERVAL_SECONDS,
        settle_delay: float = DEFAULT_SETTLE_DELAY_SECONDS,
        realtime: bool = True,
        on_transcript_update: Optional[Callable[[str], None]] = None,
        on_interim: Optional[Callable[[str], None]] = None,
    ):
        params = {"language": language}
        if token:
            params["token"] = token
        separator = "&" if "?" in relay_url else "?"
        self.url = f"{relay_url}{separator}{urlencode(params)}"

        self.max_duration_seconds = max_duration_seconds
        self.chunk_interval = chunk_interval
        self.settle_delay = settle_delay
        self.realtime = realtime
        self.on_transcript_update = on_transcript_update
        self.on_interim = on_interim

        self.accumulator = TranscriptAccumulator()
        self.timed_out = False

    @property
    def max_chunks(self) -> int:
        return int(self.max_duration_seconds / self.chunk_interval)

    def handle_message(self, raw: str) -> None:
        """Feed one relay message into the accumulator and fire callbacks."""
        updated = self.accumulator.feed(raw)
        if updated is not None:
            if self.on_transcript_update:
                self.on_transcript_update(updated)
        elif self.on_interim and self.accumulator.interim_transcript:
            self.on_interim(self.accumulator.interim_transcript)

    async def _read(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                self.handle_message(msg.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning(f"Relay websocket error: {ws.exception()}")
                break

    async def capture(self, chunks: AsyncIterable[bytes] | Iterable[bytes]) -> str:
        """
        Stream audio chunks and return the final transcript.

        Raises:
            TranscriptionClientError: If the relay cannot be reached
            NoSpeechDetectedError: If nothing was transcribed
        """
        self.accumulator.clear()
        self.timed_out = False

        try:
            async with aiohttp.ClientSession() as session:
                async with session.ws_connect(self.url) as ws:
                    reader = asyncio.create_task(self._read(ws))

                    sent = 0
                    async for chunk in _iterate(chunks):
                        if sent >= self.max_chunks:
                            self.timed_out = True
                            logger.info(f"Recording reached {self.max_duration_seconds}s limit")
                            break
                        if reader.done():
                            break
                        if chunk:
                            await ws.send_bytes(chunk)
                            sent += 1
                        if self.realtime:
                            await asyncio.sleep(self.chunk_interval)

                    if not ws.closed:
                        await ws.send_str(json.dumps({"type": "CloseStream"}))

                    # Give trailing final results a moment to arrive
                    try:
                        await asyncio.wait_for(asyncio.shield(reader), timeout=self.settle_delay)
                    except asyncio.TimeoutError:
                        pass

                    await ws.close()
                    if not reader.done():
                        reader.cancel()
                    await asyncio.gather(reader, return_exceptions=True)

        except aiohttp.ClientError as e:
            raise TranscriptionClientError(
                f"Voice recognition connection failed: {e}",
                code="RELAY_CONNECT_FAILED",
                suggestion="Check that the API server is running and the token is valid",
            ) from e

        return self.accumulator.final_text()
