"""API dependencies for authentication and the acting user."""
from __future__ import annotations
from typing import Annotated, Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.config import settings
from fintrack.core.database import get_db
from fintrack.core.errors import AuthenticationRequired
from fintrack.core.permissions import Actor
from fintrack.core.security import decode_access_token
from fintrack.services.users import UserService
import logging

logger = logging.getLogger(__name__)


# Security scheme; the session cookie is preferred, a Bearer header also works
security = HTTPBearer(auto_error=False)


def get_session_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    session_cookie: Annotated[Optional[str], Cookie(alias=settings.session_cookie_name)] = None
) -> Optional[str]:
    if session_cookie:
        return session_cookie
    if credentials:
        return credentials.credentials
    return None


async def get_current_actor(
    token: Annotated[Optional[str], Depends(get_session_token)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Actor:
    """
    Resolve the authenticated Actor from the session token.
    """
    if not token:
        raise AuthenticationRequired("Not authenticated")

    payload = decode_access_token(token)
    if not payload:
        logger.warning("Auth Failed: Invalid or expired token")
        raise AuthenticationRequired("Invalid or expired session")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Auth Failed: No sub in payload")
        raise AuthenticationRequired("Invalid session payload")

    try:
        return await UserService(db).get_actor(int(user_id))
    except AuthenticationRequired:
        logger.warning(f"Auth Failed: User {user_id} not found in DB")
        raise


# Type aliases for dependency injection
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
Database = Annotated[AsyncSession, Depends(get_db)]
