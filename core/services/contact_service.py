# =============================================================================
# core/services/contact_service.py - Contact Business Logic
# =============================================================================
# Contact CRUD. Contacts also feed the voice parser's phone number lookup.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid
from core.models.contact import ContactCreate, ContactUpdate
from app.exceptions import ContactNotFoundError

logger = logging.getLogger(__name__)


class ContactService:
    """
    Service for contact management operations.
    """

    @staticmethod
    def list_contacts(user_id: UUID | str) -> list[dict[str, Any]]:
        return SupabaseClient.fetch_contacts(user_id)

    @staticmethod
    def get_contact(contact_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            ContactNotFoundError: If contact doesn't exist or user doesn't own it
        """
        contact = SupabaseClient.fetch_by_id("contacts", contact_id, user_id=user_id)
        if not contact:
            raise ContactNotFoundError(str(contact_id))
        return contact

    @staticmethod
    def create_contact(user_id: UUID | str, data: ContactCreate) -> dict[str, Any]:
        """
        Raises:
            Exception: If creation fails
        """
        client = SupabaseClient.get_client()

        row = {
            "user_id": normalize_uuid(user_id),
            "name": data.name,
            "phone_number": data.phone_number,
            "relationship": data.relationship,
        }

        try:
            response = client.table("contacts").insert(row).execute()

            if response.data:
                contact = response.data[0]
                logger.info(f"Created contact: {contact['id']} for user: {user_id}")
                return contact

            raise SupabaseClientError(
                "Contact insert returned no data",
                code="INSERT_FAILED",
                details={"table": "contacts"},
            )

        except Exception as e:
            logger.error(f"Failed to create contact: {e}")
            raise

    @staticmethod
    def update_contact(
        contact_id: UUID | str,
        user_id: UUID | str,
        data: ContactUpdate,
    ) -> dict[str, Any]:
        """
        Raises:
            ContactNotFoundError: If contact doesn't exist or user doesn't own it
        """
        contact = ContactService.get_contact(contact_id, user_id)

        update_data = data.model_dump(exclude_none=True)
        if not update_data:
            return contact

        client = SupabaseClient.get_client()
        response = (
            client.table("contacts")
            .update(update_data)
            .eq("id", normalize_uuid(contact_id))
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )

        if response.data:
            logger.info(f"Updated contact: {contact_id}")
            return response.data[0]
        return contact

    @staticmethod
    def delete_contact(contact_id: UUID | str, user_id: UUID | str) -> None:
        """
        Raises:
            ContactNotFoundError: If contact doesn't exist or user doesn't own it
        """
        ContactService.get_contact(contact_id, user_id)

        client = SupabaseClient.get_client()
        client.table("contacts").delete().eq("id", normalize_uuid(contact_id)).eq(
            "user_id", normalize_uuid(user_id)
        ).execute()
        logger.info(f"Deleted contact: {contact_id}")
