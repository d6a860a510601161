"""Authenticated console session.

Holds the bearer credential and the signed-in user explicitly instead of
in ambient storage. The gateway client receives the session at
construction and reads the credential for every request.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import structlog

logger = structlog.get_logger()


class SessionStatus(str, Enum):
    """Authentication state of a session."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"


@dataclass(frozen=True)
class UserInfo:
    """Signed-in user as returned by the auth endpoint."""

    name: str
    role: str
    id: str | None = None


@dataclass
class Session:
    """Explicit session context.

    Attributes:
        token: Bearer credential, None when signed out.
        user: Signed-in user, None when signed out.
        status: Current authentication state.
    """

    token: str | None = None
    user: UserInfo | None = None
    status: SessionStatus = SessionStatus.ANONYMOUS
    _listeners: list[Callable[["Session"], None]] = field(
        default_factory=list, repr=False
    )

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED and bool(self.token)

    @property
    def bearer_token(self) -> str | None:
        """Credential to send, None unless authenticated."""
        return self.token if self.is_authenticated else None

    def login(self, token: str, user: UserInfo) -> None:
        """Enter the authenticated state.

        Args:
            token: Credential issued by the external auth endpoint.
            user: Signed-in user.

        Raises:
            ValueError: If the token is empty.
        """
        if not token:
            raise ValueError("Cannot log in with an empty token")
        self.token = token
        self.user = user
        self.status = SessionStatus.AUTHENTICATED
        logger.info("Session started", user=user.name, role=user.role)

    def logout(self) -> None:
        """Leave the session voluntarily."""
        self.token = None
        self.user = None
        self.status = SessionStatus.ANONYMOUS
        logger.info("Session ended")

    def invalidate(self) -> None:
        """Drop the credential after the server rejected it.

        Registered listeners are notified so the caller can force
        re-authentication.
        """
        was_authenticated = self.is_authenticated
        self.token = None
        self.user = None
        self.status = SessionStatus.EXPIRED
        if was_authenticated:
            logger.warning("Session invalidated by server")
        for listener in list(self._listeners):
            listener(self)

    def on_invalidated(self, listener: Callable[["Session"], None]) -> None:
        """Register a callback run when the session is invalidated."""
        self._listeners.append(listener)

    def has_permission(self, required_role: str) -> bool:
        """Check if the signed-in user holds a role.

        The ``admin`` requirement is also met by ``administrator``.

        Args:
            required_role: Role name to check.

        Returns:
            True if the user holds the role.
        """
        if self.user is None or not self.is_authenticated:
            return False
        if required_role == "admin" and self.user.role == "administrator":
            return True
        return self.user.role == required_role
