"""
Authentication collaborators for the MoodCheck view-model.
"""

import logging
import uuid
from collections.abc import Callable
from typing import Protocol

from .errors import AuthError
from .models import Identity

logger = logging.getLogger(__name__)

IdentityCallback = Callable[[Identity | None], None]

_USER_NAMESPACE = uuid.UUID("6f1d3c2e-4b7a-4e59-9c1f-8a2d5e7b3c40")


class AuthClient(Protocol):
    """What the view-model needs from an identity provider."""

    def subscribe(self, on_change: IdentityCallback) -> Callable[[], None]: ...

    async def sign_in(self) -> None: ...

    async def sign_out(self) -> None: ...


def user_id_for(username: str) -> str:
    """Stable user id for a user name, so separate runs share one history."""
    return uuid.uuid5(_USER_NAMESPACE, username.strip().lower()).hex


class LocalAuthClient:
    """
    Identity provider backed by a configured user name.

    Signing in resolves the name to an Identity; there is no password. The
    current identity is pushed to every subscriber immediately on
    subscription and again after each change.
    """

    def __init__(self, username: str | None = None) -> None:
        self._username = username
        self._current: Identity | None = None
        self._listeners: list[IdentityCallback] = []

    def subscribe(self, on_change: IdentityCallback) -> Callable[[], None]:
        self._listeners.append(on_change)
        on_change(self._current)

        def unsubscribe() -> None:
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    async def sign_in(self) -> None:
        if not self._username or not self._username.strip():
            raise AuthError("No user name configured")

        name = self._username.strip()
        self._set(Identity(uid=user_id_for(name), display_name=name))

    async def sign_out(self) -> None:
        if self._current is None:
            raise AuthError("Not signed in")
        self._set(None)

    def _set(self, identity: Identity | None) -> None:
        self._current = identity
        if identity is None:
            logger.info("Signed out")
        else:
            logger.info("Signed in as %s", identity.display_name)

        for listener in list(self._listeners):
            listener(identity)
