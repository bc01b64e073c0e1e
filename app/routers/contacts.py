# =============================================================================
# app/routers/contacts.py - Contact Endpoints
# =============================================================================
# Saved recipients. The voice parser uses them to fill in phone numbers.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.contact import ContactCreate, ContactList, ContactResponse, ContactUpdate
from core.services.contact_service import ContactService

router = APIRouter()

ContactId = Annotated[UUID, Path(description="Contact UUID")]


@router.get("", response_model=ContactList)
async def list_contacts(user: AuthUser = Depends(get_current_user)):
    """List the user's contacts alphabetically."""
    contacts = ContactService.list_contacts(user.id)
    return ContactList(
        contacts=[ContactResponse(**c) for c in contacts],
        total=len(contacts),
    )


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    request: ContactCreate,
    user: AuthUser = Depends(get_current_user),
):
    contact = ContactService.create_contact(user.id, request)
    return ContactResponse(**contact)


@router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: ContactId,
    request: ContactUpdate,
    user: AuthUser = Depends(get_current_user),
):
    contact = ContactService.update_contact(contact_id, user.id, request)
    return ContactResponse(**contact)


@router.delete("/{contact_id}", status_code=204)
async def delete_contact(
    contact_id: ContactId,
    user: AuthUser = Depends(get_current_user),
):
    ContactService.delete_contact(contact_id, user.id)
