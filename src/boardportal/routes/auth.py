"""
Authentication Dependencies

Tokens are issued by the managed backend's auth service; the portal only
verifies them. The `sub` claim carries the user id.
"""
import jwt
import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Header

from ..config import Config
from ..services.engine_service import get_engine_service
from ..services.errors import SessionNotFoundError
from ..services.session_service import PortalSession

logger = logging.getLogger("boardportal.routes.auth")


def verify_token(token: str) -> Optional[dict]:
    """Verify and decode JWT token"""
    options = {} if Config.JWT_AUDIENCE else {"verify_aud": False}
    try:
        return jwt.decode(
            token,
            Config.JWT_SECRET,
            algorithms=[Config.JWT_ALGORITHM],
            audience=Config.JWT_AUDIENCE or None,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected token: {e}")
        return None


async def get_current_user(authorization: str = Header(None)) -> dict:
    """Dependency to get current authenticated user"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    # Expect "Bearer <token>"
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    payload = verify_token(parts[1])
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid subject in token")

    return {
        "user_id": user_id,
        "email": payload.get("email"),
    }


async def get_portal_session(current_user: dict = Depends(get_current_user)) -> PortalSession:
    """Dependency resolving the caller's open portal session"""
    engine = get_engine_service()
    try:
        return engine.sessions.get(current_user["user_id"])
    except SessionNotFoundError:
        raise HTTPException(status_code=409, detail="No open portal session; POST /api/v1/sessions first")


async def require_admin(session: PortalSession = Depends(get_portal_session)) -> PortalSession:
    """Dependency for administrative directory actions"""
    if not session.profile.is_admin:
        raise HTTPException(status_code=403, detail="Administrator role required")
    return session
