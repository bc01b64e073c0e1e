# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides sample reminder and call rows
# - Provides a mocked Supabase client
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ELEVENLABS_API_KEY", "test-elevenlabs-key")
os.environ.setdefault("TWILIO_ACCOUNT_SID", "ACtest")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-twilio-token")
os.environ.setdefault("TWILIO_PHONE_NUMBER", "+15005550006")
os.environ.setdefault("DEEPGRAM_API_KEY", "test-deepgram-key")
os.environ.setdefault("PUBLIC_BASE_URL", "https://api.test.yaad.app")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from unittest.mock import MagicMock, patch

import pytest


USER_ID = "770e8400-e29b-41d4-a716-446655440000"
REMINDER_ID = "550e8400-e29b-41d4-a716-446655440000"
HISTORY_ID = "880e8400-e29b-41d4-a716-446655440000"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def sample_reminder_row():
    """A daily reminder row as returned by Supabase."""
    return {
        "id": REMINDER_ID,
        "user_id": USER_ID,
        "recipient_name": "Mom",
        "phone_number": "+447700900123",
        "message": "Take your evening pills with water.",
        "voice": "friendly_female",
        "custom_voice_id": None,
        "scheduled_at": "2026-03-02T09:00:00+00:00",
        "timezone": "UTC",
        "frequency": "daily",
        "recurrence_interval": 1,
        "recurrence_days_of_week": None,
        "recurrence_day_of_month": None,
        "recurrence_week_of_month": None,
        "recurrence_day_of_week": None,
        "repeat_until": None,
        "max_occurrences": None,
        "repeat_count": 0,
        "is_active": True,
        "reminder_type": "quick",
        "created_at": "2026-03-01T12:00:00+00:00",
    }


@pytest.fixture
def call_request_data():
    """Valid make-call payload."""
    return {
        "reminder_id": REMINDER_ID,
        "user_id": USER_ID,
        "recipient_name": "Mom",
        "phone_number": "+447700900123",
        "message": "Take your evening pills.",
        "voice": "friendly_female",
    }


@pytest.fixture
def mock_supabase():
    """
    Patch SupabaseClient.get_client with a MagicMock.

    Query builder calls chain on the same mock, so tests set
    `mock_supabase.table.return_value....execute.return_value`.
    """
    client = MagicMock()
    with patch("lib.supabase_client.SupabaseClient.get_client", return_value=client):
        yield client
