"""
Login through the identity provider and session management
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models import User
from app.schemas.user import UserResponse
from app.services.identity_provider import DiscordIdentityProvider, IdentityProviderError, get_identity_provider
from app.services.user_service import UserService
from app.utils.responses import error_response, success_response
from app.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/login")
async def login(
    request: Request,
    provider: DiscordIdentityProvider = Depends(get_identity_provider)
):
    """Redirect to the identity provider"""
    state = secrets.token_urlsafe(16)
    request.session["oauth_state"] = state
    return RedirectResponse(provider.authorize_url(state), status_code=302)

@router.get("/callback")
async def callback(
    request: Request,
    code: str = "",
    state: str = "",
    db: Session = Depends(get_db),
    provider: DiscordIdentityProvider = Depends(get_identity_provider)
):
    """Complete login: identify the user, upsert them and open a session"""
    expected_state = request.session.pop("oauth_state", None)
    if not code or not expected_state or not secrets.compare_digest(state, expected_state):
        return error_response(
            message="Login failed. Please try again.",
            error_code="LOGIN_FAILED",
            status_code=400
        )

    try:
        profile = await provider.fetch_profile(code)
    except IdentityProviderError as e:
        return error_response(message=str(e), error_code="LOGIN_FAILED", status_code=502)

    settings = request.app.state.settings
    user = UserService.upsert_from_identity(db, profile, admin_identity_id=settings.ADMIN_IDENTITY_ID)

    request.session.clear()
    request.session["user_id"] = user.id
    logger.info(f"User {user.display_name} ({user.external_identity_id}) logged in")

    return RedirectResponse(settings.POST_LOGIN_REDIRECT, status_code=302)

@router.get("/logout")
async def logout(request: Request):
    """Close the session"""
    request.session.clear()
    return RedirectResponse("/", status_code=302)

@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Current user profile"""
    return success_response(
        message="Current user",
        data=UserResponse.model_validate(user).model_dump()
    )
