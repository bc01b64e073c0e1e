#!/usr/bin/env python3
# =============================================================================
# scripts/dictate.py - Dictate a Reminder from an Audio File
# =============================================================================
# Streams a recording through the /ws/transcribe relay, prints the live
# transcript, then sends the final text to POST /api/v1/voice/parse and
# prints the reminder draft.
#
# Usage:
#   python scripts/dictate.py <audio_file> [timezone]
#   python scripts/dictate.py samples/grandma.wav Europe/London
#
# Environment:
#   YAAD_API_URL   - API base URL (default http://localhost:8000)
#   YAAD_TOKEN     - Supabase access token for the signed-in user
# =============================================================================

import asyncio
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

import httpx

from lib.transcript import NoSpeechDetectedError
from lib.transcription import TranscriptionClientError
from lib.voice_capture import VoiceCaptureSession

CHUNK_BYTES = 8000  # 250ms of 16kHz 16-bit mono


def read_chunks(path: str, size: int = CHUNK_BYTES):
    with open(path, "rb") as f:
        while True:
            chunk = f.read(size)
            if not chunk:
                break
            yield chunk


def show_interim(text: str) -> None:
    print(f"\r  ... {text}", end="", flush=True)


def show_update(text: str) -> None:
    print(f"\r  > {text}")


async def dictate(path: str, timezone: str, api_url: str, token: str) -> None:
    ws_url = api_url.replace("http://", "ws://").replace("https://", "wss://")
    session = VoiceCaptureSession(
        f"{ws_url.rstrip('/')}/ws/transcribe",
        token=token,
        on_transcript_update=show_update,
        on_interim=show_interim,
    )

    print(f"Streaming {path}...")
    transcript = await session.capture(read_chunks(path))
    if session.timed_out:
        print(f"(stopped at the {session.max_duration_seconds}s limit)")

    print()
    print(f"Transcript: {transcript}")
    print()

    async with httpx.AsyncClient(base_url=api_url, timeout=30.0) as client:
        response = await client.post(
            "/api/v1/voice/parse",
            json={"transcript": transcript, "timezone": timezone},
            headers={"Authorization": f"Bearer {token}"},
        )

    if response.status_code != 200:
        print(f"Parse failed ({response.status_code}): {response.text}")
        sys.exit(1)

    body = response.json()
    print("Draft:")
    print(json.dumps(body["draft"], indent=2))


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/dictate.py <audio_file> [timezone]")
        sys.exit(1)

    token = os.getenv("YAAD_TOKEN")
    if not token:
        print("ERROR: YAAD_TOKEN not found in environment")
        sys.exit(1)

    path = sys.argv[1]
    timezone = sys.argv[2] if len(sys.argv) > 2 else "UTC"
    api_url = os.getenv("YAAD_API_URL", "http://localhost:8000")

    try:
        asyncio.run(dictate(path, timezone, api_url, token))
    except NoSpeechDetectedError as e:
        print(f"\n{e}")
        sys.exit(1)
    except TranscriptionClientError as e:
        print(f"\n{e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
