"""
Dashboard session routes.
"""
from fastapi import APIRouter, Depends

from studio.exceptions.handlers import AuthenticationError
from studio.models.api import LoginRequest, LoginResponse, SessionResponse
from studio.routers.dependencies import get_session_service
from studio.services.session import SessionService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, session: SessionService = Depends(get_session_service)):
    """Password login."""
    if not await session.login(request.email, request.password):
        raise AuthenticationError("Invalid email or password", "INVALID_CREDENTIALS")
    return LoginResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user_id=session.user_id,
        email=session.email,
    )


@router.post("/logout")
async def logout(session: SessionService = Depends(get_session_service)):
    """Sign out."""
    await session.logout()
    return {"message": "Logged out"}


@router.get("/session", response_model=SessionResponse)
async def current_session(session: SessionService = Depends(get_session_service)):
    """Current session state."""
    return SessionResponse(
        authenticated=session.is_authenticated,
        user_id=session.user_id,
        email=session.email,
    )
