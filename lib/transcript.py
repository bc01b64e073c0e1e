# =============================================================================
# lib/transcript.py - Streaming Transcript Accumulation
# =============================================================================
# Deepgram streams two kinds of results while the user speaks:
# - interim results: a best guess for the segment in progress (replaced often)
# - final results: the settled text for a segment (never revised)
#
# TranscriptAccumulator keeps the final segments joined with spaces and the
# latest interim text separately. The final transcript is what goes to the
# reminder parser once recording stops.
#
# Usage:
#   acc = TranscriptAccumulator()
#   for message in relay_messages:
#       acc.feed(message)
#   text = acc.final_text()  # raises NoSpeechDetectedError when empty
# =============================================================================

import json
import logging
from typing import Any

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

NO_SPEECH_MESSAGE = "No speech detected. Please try again and speak clearly."


class NoSpeechDetectedError(ApplicationError):
    """Raised when recording stopped without any final transcript."""

    def __init__(self):
        super().__init__(
            NO_SPEECH_MESSAGE,
            code="NO_SPEECH_DETECTED",
            suggestion="Speak closer to the microphone, or type the reminder instead",
        )


class TranscriptAccumulator:
    """
    Accumulates Deepgram result messages into a transcript.

    Attributes:
        final_transcript: Space-joined final segments so far
        interim_transcript: Latest interim text, cleared by each final segment
    """

    def __init__(self):
        self.final_transcript = ""
        self.interim_transcript = ""

    def feed(self, message: str | bytes | dict[str, Any]) -> str | None:
        """
        Consume one relay message.

        Messages without a transcript alternative (metadata, speech-started
        events) and malformed JSON are ignored.

        Returns:
            The updated final transcript when a final segment was appended,
            otherwise None
        """
        data = message
        if isinstance(message, (str, bytes)):
            try:
                data = json.loads(message)
            except ValueError:
                logger.debug("Ignoring non-JSON transcription message")
                return None

        if not isinstance(data, dict):
            return None

        # UtteranceEnd events carry "channel" as a list of channel indexes
        channel = data.get("channel")
        if not isinstance(channel, dict):
            return None

        alternatives = channel.get("alternatives") or []
        if not isinstance(alternatives, list) or not alternatives or not isinstance(alternatives[0], dict):
            return None

        text = alternatives[0].get("transcript") or ""

        if data.get("is_final"):
            if not text.strip():
                return None
            self.final_transcript = f"{self.final_transcript} {text}".strip()
            self.interim_transcript = ""
            return self.final_transcript

        self.interim_transcript = text
        return None

    @property
    def display_text(self) -> str:
        """Final text followed by the in-progress interim text."""
        return f"{self.final_transcript} {self.interim_transcript}".strip()

    def clear(self) -> None:
        self.final_transcript = ""
        self.interim_transcript = ""

    def final_text(self) -> str:
        """
        The settled transcript.

        Raises:
            NoSpeechDetectedError: If no final segment was received
        """
        text = self.final_transcript.strip()
        if not text:
            raise NoSpeechDetectedError()
        return text
