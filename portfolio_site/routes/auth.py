"""
CMS authentication routes: login, logout and session lookup.
"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
import logging

from portfolio_site.config import settings
from portfolio_site.schemas import LoginRequest, SessionResponse
from portfolio_site.utils.edit_mode import EditMode, get_edit_mode
from portfolio_site.utils.jwt_auth import TOKEN_COOKIE_NAME, authenticate_user, create_access_token
from portfolio_site.utils.rate_limit import limiter, RATE_LIMITS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cms", tags=["CMS auth"])


@router.post("/login")
@limiter.limit(RATE_LIMITS["login"])
async def login(request: Request, credentials: LoginRequest):
    """
    Exchange the admin password for an access token.

    The token is set as an httpOnly cookie and also returned in the body
    for clients that send it as a Bearer header.

    Raises:
        HTTPException: 401 on a wrong password, 429 when rate limited
    """
    claims = authenticate_user(credentials.password)
    token = create_access_token(claims)
    max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    response = JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"access_token": token, "token_type": "bearer", "expires_in": max_age},
    )
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    logger.info("CMS admin logged in")
    return response


@router.post("/logout")
async def logout():
    response = JSONResponse(content={"message": "Logged out"})
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return response


@router.get("/session", response_model=SessionResponse)
async def get_session(mode: EditMode = Depends(get_edit_mode)):
    """Report whether the caller holds an admin session."""
    return SessionResponse(is_admin=mode.is_admin)
