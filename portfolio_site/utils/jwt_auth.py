"""
JWT token-based authentication for the CMS.
The login endpoint issues a token; CMS routes require an admin token.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status, Header, Request
from portfolio_site.config import settings
from portfolio_site.utils.auth import verify_admin_password


ALGORITHM = "HS256"
TOKEN_COOKIE_NAME = "cms_token"
ADMIN_ROLE = "admin"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to include in token
        expires_delta: Optional custom expiration time

    Returns:
        str: Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)

    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
        "type": "access"
    })

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: If token is invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid token", "message": "Authentication token is invalid or expired"}
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid token type", "message": "Token is not an access token"}
        )

    return payload


def token_from_request(request: Request, authorization: Optional[str]) -> Optional[str]:
    """
    Read the token from the httpOnly cookie, falling back to a Bearer header.
    """
    token = request.cookies.get(TOKEN_COOKIE_NAME)

    if not token and authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1]

    return token


def verify_cms_token(
    request: Request,
    authorization: Optional[str] = Header(None, description="Bearer token for authentication (fallback to cookie)")
) -> dict:
    """
    FastAPI dependency for JWT token authentication.

    Args:
        request: FastAPI request object (for reading cookies)
        authorization: Authorization header value (e.g., "Bearer <token>")

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = token_from_request(request, authorization)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Missing token", "message": "Authentication required"},
            headers={"WWW-Authenticate": "Bearer"}
        )

    return verify_token(token)


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None, description="Bearer token for authentication (fallback to cookie)")
) -> dict:
    """
    FastAPI dependency guarding CMS routes: a valid token with the admin role.

    Raises:
        HTTPException: 401 without a valid token, 403 for a non-admin role
    """
    payload = verify_cms_token(request, authorization)
    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Forbidden", "message": "Admin role required"}
        )
    return payload


def authenticate_user(password: str) -> dict:
    """
    Authenticate the CMS admin with a password and return token claims.

    Raises:
        HTTPException: 401 if password is invalid, 500 if no hash is configured
    """
    try:
        is_valid = verify_admin_password(password)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Authentication not configured", "message": str(e)}
        )

    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid credentials", "message": "Incorrect password"}
        )

    return {
        "role": ADMIN_ROLE,
        "sub": "cms_admin"
    }
