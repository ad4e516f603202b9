"""In-process auth state: the signed-in user plus sign-in/sign-out notifications."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from tripsync.auth.interface import AuthStateProvider, AuthUser, TokenVerifier

logger = logging.getLogger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthListener = Callable[[AuthEvent, AuthUser | None], Awaitable[None] | None]


class AuthSession(AuthStateProvider):
    def __init__(self, verifier: TokenVerifier | None = None) -> None:
        self._verifier = verifier
        self._user: AuthUser | None = None
        self._listeners: list[AuthListener] = []

    def current_user(self) -> AuthUser | None:
        return self._user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register ``listener`` for auth events. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, token: str) -> AuthUser:
        if self._verifier is None:
            raise ValueError("AuthSession has no token verifier")
        user = await self._verifier.verify_token(token)
        await self.sign_in_as(user)
        return user

    async def sign_in_as(self, user: AuthUser) -> None:
        self._user = user
        logger.info("Signed in as %s", user.user_id)
        await self._notify(AuthEvent.SIGNED_IN, user)

    async def sign_out(self) -> None:
        previous = self._user
        self._user = None
        if previous is not None:
            logger.info("Signed out %s", previous.user_id)
        await self._notify(AuthEvent.SIGNED_OUT, None)

    async def _notify(self, event: AuthEvent, user: AuthUser | None) -> None:
        for listener in list(self._listeners):
            result = listener(event, user)
            if inspect.isawaitable(result):
                await result
