"""
Ownership context.

Every store operation receives a SessionContext explicitly: the acting user
is never read from ambient storage. A context without a user id makes every
operation fail with NotAuthenticated before any gateway call.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from client.app.errors import NotAuthenticated, RemoteCallFailed
from client.app.logging_config import get_logger
from client.app.services.gateway import Command, CommandGateway

logger = get_logger(__name__)


class SessionContext(BaseModel):
    """The acting user of a store operation."""
    model_config = ConfigDict(frozen=True)

    user_id: Optional[int] = None
    username: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def anonymous(cls) -> SessionContext:
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> int:
        """Return the acting user id or raise NotAuthenticated."""
        if self.user_id is None:
            raise NotAuthenticated()
        return self.user_id


async def verify_session(
    gateway: CommandGateway,
    token: Optional[str],
    user: Optional[dict[str, Any]] = None
    ) -> SessionContext:
    """
    Resolve an ownership context from a saved session token.

    The backend answers auth_verify_session with the session's user record,
    or with a bare truthy/falsy flag; in the flag case the locally saved
    `user` record provides the identity.

    Args:
        gateway: Remote command gateway
        token: Saved session token (None means not logged in)
        user: Locally saved user record ({"id": ..., "username": ...})

    Returns:
        An authenticated SessionContext, or an anonymous one when the token
        is missing, rejected, or the verification call fails.
    """
    if not token:
        return SessionContext.anonymous()

    try:
        verified = await gateway.invoke(Command.AUTH_VERIFY_SESSION, {"request": {"token": token}})
    except RemoteCallFailed as e:
        logger.warning("Session verification failed", error=e.message)
        return SessionContext.anonymous()

    if isinstance(verified, dict) and verified.get("id") is not None:
        user = verified
    elif not verified or not user or user.get("id") is None:
        logger.info("Session token rejected")
        return SessionContext.anonymous()

    context = SessionContext(user_id=int(user["id"]), username=user.get("username"), token=token)
    logger.info("Session verified", user_id=context.user_id)
    return context
