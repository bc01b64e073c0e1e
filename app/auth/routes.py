# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Note: Actual signup/login is handled by Supabase Auth client-side.
# This route lets the client check a stored token.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, TokenVerification

router = APIRouter()


@router.get("/verify", response_model=TokenVerification)
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> TokenVerification:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return TokenVerification(valid=True, user_id=str(user.id), email=user.email)
