# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel
from uuid import UUID
from typing import Optional


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    id: UUID
    email: Optional[str] = None

    class Config:
        frozen = True  # Make immutable


class Caller(BaseModel):
    """
    Whoever is calling an endpoint that also accepts the service key.

    Either `user` is set (a signed-in user) or `is_service` is True
    (the scheduler or another backend job).
    """
    user: Optional[AuthUser] = None
    is_service: bool = False

    class Config:
        frozen = True


class TokenVerification(BaseModel):
    """Response for GET /auth/verify."""
    valid: bool
    user_id: str
    email: Optional[str] = None
