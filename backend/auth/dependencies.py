"""
FastAPI dependencies for authentication.

``get_current_user`` is the gate in front of every protected route: it pulls
the bearer token from the Authorization header, verifies it, and attaches the
decoded identity to the request.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from auth.security import verify_token
from schemas import AuthenticatedUser

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; missing credentials are reported by get_current_user itself
security = HTTPBearer(auto_error=False)


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid token",
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """
    Extract and validate the caller's identity from a JWT bearer token.

    Args:
        request: Incoming request; the identity is stored on ``request.state.user``
        credentials: HTTP Bearer credentials parsed from the Authorization header

    Returns:
        AuthenticatedUser carrying the user id and email from the token

    Raises:
        HTTPException: 401 if no token was sent, 403 if the token is invalid or expired

    Example:
        @app.get("/api/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.user_id}
    """
    if not credentials or not credentials.credentials:
        logger.info(f"Missing access token for {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise _invalid_token()

    token_type = payload.get("type")
    if token_type != "access":
        logger.info(f"Invalid token type: {token_type}")
        raise _invalid_token()

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        logger.info("Token payload missing 'sub' claim")
        raise _invalid_token()

    user = AuthenticatedUser(user_id=user_id, email=payload.get("email"))
    request.state.user = user
    logger.debug(f"Request authenticated for user_id: {user.user_id}")
    return user
