"""
Explicit session context handed to every ledger service call.
"""
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import Unauthenticated


@dataclass(frozen=True)
class SessionContext:
    """Read-only identity of the signed-in account for one request."""
    user_id: int
    username: str


def require_context(ctx: Optional[SessionContext]) -> SessionContext:
    """Reject a missing session before any store call is attempted."""
    if ctx is None:
        raise Unauthenticated()
    return ctx
