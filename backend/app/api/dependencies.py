"""
Request dependencies: session context, current user and confirmation.
"""
import logging
from typing import Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.context import SessionContext, require_context
from app.core.exceptions import ConfirmationRequired, Unauthenticated
from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[SessionContext]:
    """
    Resolve the bearer token into a session context.

    Returns None when there is no valid session; read routes then serve an
    empty record set and write routes reject the request.
    """
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        logger.debug("Ignoring invalid or expired bearer token")
        return None
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        return None
    return SessionContext(user_id=user.id, username=user.username)


def require_session(ctx: Optional[SessionContext] = Depends(get_session_context)) -> SessionContext:
    """Session context for routes that write."""
    return require_context(ctx)


def get_current_user(
    ctx: SessionContext = Depends(require_session),
    db: Session = Depends(get_db)
) -> User:
    """Dependency for getting the signed-in user row."""
    user = db.query(User).filter(User.id == ctx.user_id).first()
    if user is None:
        raise Unauthenticated()
    return user


def require_confirmation(
    confirm: bool = Query(False, description="Must be true for destructive operations")
) -> None:
    """Destructive operations only run with an explicit confirm=true."""
    if not confirm:
        raise ConfirmationRequired("This operation needs explicit confirmation (confirm=true)")
