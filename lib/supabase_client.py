# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database and storage
# operations. It implements the singleton pattern to reuse a single client
# connection and provides specialized methods for fetching:
# - Single rows by ID (with optional ownership check)
# - Reminders that are due inside the sweep window
# - A user's contacts (for voice-parser phone lookup)
# - Storage uploads and signed URLs (call audio)
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   reminder = SupabaseClient.fetch_by_id("reminders", reminder_id)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError, to_utc_iso

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "no rows returned" on .single()
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages: tells HOW to fix, not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        # Reminders due in the last two minutes
        due = SupabaseClient.fetch_due_reminders(window_start, now)

        # A reminder, only if it belongs to the caller
        reminder = SupabaseClient.fetch_by_id("reminders", reminder_id, user_id=user.id)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS), so
        every user-facing query must filter by user_id explicitly.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Generic Row Access
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_by_id(
        cls,
        table: str,
        row_id: str | UUID,
        user_id: str | UUID | None = None,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Args:
            table: Table name (reminders, contacts, call_history, user_voices)
            row_id: The row UUID
            user_id: If provided, only return the row when it belongs to this user
            columns: PostgREST select expression

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            query = client.table(table).select(columns).eq("id", row_id_str)
            if user_id is not None:
                query = query.eq("user_id", cls._normalize_uuid(user_id))
            response = query.single().execute()
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code="FETCH_ROW_FAILED",
                suggestion=f"Check that the {table} table is accessible",
                details={"table": table, "id": row_id_str}
            )

    # -------------------------------------------------------------------------
    # Reminders
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_due_reminders(
        cls,
        window_start: datetime,
        window_end: datetime,
    ) -> list[dict[str, Any]]:
        """
        Fetch active reminders scheduled inside [window_start, window_end].

        Args:
            window_start: Oldest scheduled_at still considered due
            window_end: Newest scheduled_at considered due (usually now)

        Returns:
            List of reminder rows, oldest first

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("reminders")
                .select("*")
                .eq("is_active", True)
                .gte("scheduled_at", to_utc_iso(window_start))
                .lte("scheduled_at", to_utc_iso(window_end))
                .order("scheduled_at")
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to query due reminders: {e}",
                code="REMINDER_QUERY_FAILED",
                suggestion="Check that the reminders table exists and the service key is valid",
                details={
                    "window_start": to_utc_iso(window_start),
                    "window_end": to_utc_iso(window_end),
                }
            )

    # -------------------------------------------------------------------------
    # Contacts
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_contacts(cls, user_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch a user's contacts ordered by name.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("contacts")
                .select("*")
                .eq("user_id", user_id_str)
                .order("name")
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch contacts: {e}",
                code="FETCH_CONTACTS_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    @classmethod
    def upload_file(
        cls,
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
    ) -> str:
        """
        Upload bytes to a storage bucket (upsert).

        Returns:
            The storage path

        Raises:
            SupabaseClientError: If upload fails
        """
        client = cls.get_client()

        try:
            client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "upsert": "true"}
            )
            logger.info(f"Uploaded {len(content)} bytes to {bucket}/{path}")
            return path

        except Exception as e:
            raise SupabaseClientError(
                message=f"Storage upload failed: {e}",
                code="STORAGE_UPLOAD_FAILED",
                suggestion=f"Check that the '{bucket}' bucket exists",
                details={"bucket": bucket, "path": path}
            )

    @classmethod
    def create_signed_url(cls, bucket: str, path: str, expires_in: int) -> str:
        """
        Create a time-limited URL for a stored object.

        Raises:
            SupabaseClientError: If the URL cannot be created
        """
        client = cls.get_client()

        try:
            response = client.storage.from_(bucket).create_signed_url(path, expires_in)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Signed URL generation failed: {e}",
                code="SIGNED_URL_FAILED",
                details={"bucket": bucket, "path": path}
            )

        signed_url = None
        if isinstance(response, dict):
            signed_url = response.get("signedURL") or response.get("signedUrl")

        if not signed_url:
            raise SupabaseClientError(
                message="Signed URL generation returned no URL",
                code="SIGNED_URL_FAILED",
                details={"bucket": bucket, "path": path}
            )
        return signed_url
