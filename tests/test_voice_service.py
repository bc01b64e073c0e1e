# =============================================================================
# tests/test_voice_service.py - Custom Voice Tests
# =============================================================================
# Tests for core/services/voice_service.py:
# - Base64 sample decoding
# - Clone flow: processing row -> ready, or failed on provider errors
# - Delete: provider cleanup, reminders fall back to the preset voice
# - Preview of a ready voice
# =============================================================================

import base64
from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import (
    SpeechSynthesisError,
    VoiceAlreadyExistsError,
    VoiceCloneError,
    VoiceNotFoundError,
    VoiceNotReadyError,
    VoiceSampleError,
)
from core.services.call_service import CallService
from core.services.voice_service import PREVIEW_TEXT, VoiceService, decode_audio_base64
from lib.speech import SpeechClientError
from lib.supabase_client import SupabaseClientError

from tests.conftest import USER_ID

VOICE_ID = "990e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def speech():
    client = MagicMock()
    client.add_voice.return_value = "cloned-abc"
    client.text_to_speech.return_value = b"mp3"
    with patch.object(CallService, "get_speech_client", return_value=client):
        yield client


class TestDecodeAudio:
    """Tests for decode_audio_base64()."""

    def test_plain_base64(self):
        assert decode_audio_base64(base64.b64encode(b"webm").decode()) == b"webm"

    def test_data_url(self):
        payload = "data:audio/webm;base64," + base64.b64encode(b"webm").decode()
        assert decode_audio_base64(payload) == b"webm"

    def test_invalid(self):
        with pytest.raises(VoiceSampleError):
            decode_audio_base64("not base64!!")


class TestCreateVoice:
    """Tests for VoiceService.create_voice()."""

    def test_clone_success(self, speech, mock_supabase):
        insert = mock_supabase.table.return_value.insert
        insert.return_value.execute.return_value = MagicMock(data=[{
            "id": VOICE_ID, "user_id": USER_ID, "name": "Grandma", "status": "processing",
        }])

        with patch.object(VoiceService, "get_user_voice", return_value=None):
            voice = VoiceService.create_voice(USER_ID, b"webm-bytes", "  Grandma ")

        assert voice["status"] == "ready"
        assert voice["elevenlabs_voice_id"] == "cloned-abc"
        assert insert.call_args.args[0]["name"] == "Grandma"
        assert insert.call_args.args[0]["elevenlabs_voice_id"] == "pending"
        assert speech.add_voice.call_args.kwargs["name"] == "Yaad - Grandma"

    def test_blank_name(self, speech):
        with pytest.raises(VoiceSampleError):
            VoiceService.create_voice(USER_ID, b"webm", "   ")

    def test_missing_audio(self, speech):
        with pytest.raises(VoiceSampleError):
            VoiceService.create_voice(USER_ID, b"", "Grandma")

    def test_sample_too_large(self, speech):
        with patch("core.services.voice_service.settings") as mock_settings:
            mock_settings.max_voice_sample_bytes = 4
            mock_settings.MAX_VOICE_SAMPLE_MB = 0
            with pytest.raises(VoiceSampleError):
                VoiceService.create_voice(USER_ID, b"12345", "Grandma")

    def test_one_voice_per_user(self, speech):
        with patch.object(VoiceService, "get_user_voice", return_value={"id": VOICE_ID}):
            with pytest.raises(VoiceAlreadyExistsError):
                VoiceService.create_voice(USER_ID, b"webm", "Grandma")
        speech.add_voice.assert_not_called()

    def test_empty_insert_raises_supabase_error(self, speech, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])

        with patch.object(VoiceService, "get_user_voice", return_value=None):
            with pytest.raises(SupabaseClientError) as exc_info:
                VoiceService.create_voice(USER_ID, b"webm", "Grandma")

        assert exc_info.value.code == "INSERT_FAILED"
        speech.add_voice.assert_not_called()

    def test_clone_failure_marks_row_failed(self, speech, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.return_value = MagicMock(
            data=[{"id": VOICE_ID}]
        )
        speech.add_voice.side_effect = SpeechClientError("bad sample", status_code=422)

        with patch.object(VoiceService, "get_user_voice", return_value=None), \
             patch.object(VoiceService, "_update_voice") as update:
            with pytest.raises(VoiceCloneError):
                VoiceService.create_voice(USER_ID, b"webm", "Grandma")

        update.assert_called_once_with(VOICE_ID, {
            "status": "failed",
            "error_message": "Voice cloning failed: 422",
        })


class TestDeleteVoice:
    """Tests for VoiceService.delete_voice()."""

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_not_found(self, mock_fetch):
        mock_fetch.return_value = None
        with pytest.raises(VoiceNotFoundError):
            VoiceService.delete_voice(USER_ID, VOICE_ID)

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_reminders_fall_back_to_preset(self, mock_fetch, speech, mock_supabase):
        mock_fetch.return_value = {"id": VOICE_ID, "elevenlabs_voice_id": "cloned-abc"}

        VoiceService.delete_voice(USER_ID, VOICE_ID)

        speech.delete_voice.assert_called_once_with("cloned-abc")
        mock_supabase.table.return_value.update.assert_called_once_with({
            "voice": "friendly_female",
            "custom_voice_id": None,
        })
        mock_supabase.table.return_value.delete.assert_called_once()

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_provider_error_does_not_block(self, mock_fetch, speech, mock_supabase):
        mock_fetch.return_value = {"id": VOICE_ID, "elevenlabs_voice_id": "cloned-abc"}
        speech.delete_voice.side_effect = SpeechClientError("gone", status_code=404)

        VoiceService.delete_voice(USER_ID, VOICE_ID)

        mock_supabase.table.return_value.delete.assert_called_once()

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_pending_clone_skips_provider(self, mock_fetch, speech, mock_supabase):
        mock_fetch.return_value = {"id": VOICE_ID, "elevenlabs_voice_id": "pending"}

        VoiceService.delete_voice(USER_ID, VOICE_ID)

        speech.delete_voice.assert_not_called()


class TestPreviewVoice:
    """Tests for VoiceService.preview_voice()."""

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_preview(self, mock_fetch, speech):
        mock_fetch.return_value = {"id": VOICE_ID, "status": "ready", "elevenlabs_voice_id": "cloned-abc"}

        preview = VoiceService.preview_voice(USER_ID, VOICE_ID)

        speech.text_to_speech.assert_called_once_with(PREVIEW_TEXT, "cloned-abc")
        assert base64.b64decode(preview.audio_base64) == b"mp3"
        assert preview.content_type == "audio/mpeg"

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_not_ready(self, mock_fetch, speech):
        mock_fetch.return_value = {"id": VOICE_ID, "status": "processing"}
        with pytest.raises(VoiceNotReadyError):
            VoiceService.preview_voice(USER_ID, VOICE_ID)

    @patch("core.services.voice_service.SupabaseClient.fetch_by_id")
    def test_synthesis_failure(self, mock_fetch, speech):
        mock_fetch.return_value = {"id": VOICE_ID, "status": "ready", "elevenlabs_voice_id": "cloned-abc"}
        speech.text_to_speech.side_effect = SpeechClientError("quota")
        with pytest.raises(SpeechSynthesisError):
            VoiceService.preview_voice(USER_ID, VOICE_ID)
