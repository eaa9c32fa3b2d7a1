"""Authentication API routes."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from mavlib.api.schemas import (
    LoginRequest,
    ProfileResponse,
    SessionResponse,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from mavlib.core.dependencies import get_auth_service, get_current_actor, oauth2_scheme
from mavlib.domain.entities import Identity
from mavlib.services.auth_service import AuthService, LoginLockedError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionResponse:
    """Register a new actor and sign them in."""
    try:
        user, token = await auth_service.signup(body.name, body.email, body.password, body.role)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SessionResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> SessionResponse:
    """Authenticate and return a session token."""
    try:
        user, token = await auth_service.login(body.email, body.password)
    except LoginLockedError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return SessionResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/guest", response_model=TokenResponse)
async def continue_as_guest(
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Open a guest session: browse and search, but no borrowing."""
    token = await auth_service.continue_as_guest()
    return TokenResponse(access_token=token)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    identity: Annotated[Identity, Depends(get_current_actor)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ProfileResponse:
    """The signed-in actor with their returned loans."""
    user = await auth_service.get_profile(identity.actor_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return ProfileResponse.model_validate(user)


@router.post("/signout", status_code=status.HTTP_200_OK)
async def signout(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict:
    """Drop the caller's session or guest record."""
    if token:
        await auth_service.logout(token)
    return {"detail": "Successfully signed out"}
