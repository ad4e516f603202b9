from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel


class AuthUser(BaseModel):
    user_id: str
    email: str = ""
    name: str = ""


class AuthStateProvider(ABC):
    """Source of the signed-in identity, read at the moment of each call."""

    @abstractmethod
    def current_user(self) -> AuthUser | None: ...

    def is_signed_in(self) -> bool:
        return self.current_user() is not None

    def subscribe(self, listener: Callable[..., Any]) -> Callable[[], None]:
        """Register for sign-in/sign-out events. Providers without events ignore the listener."""
        return lambda: None


class TokenVerifier(ABC):
    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser: ...

    @abstractmethod
    async def get_user(self, user_id: str) -> AuthUser: ...


def get_token_verifier() -> TokenVerifier:
    from tripsync.config import get_config

    config = get_config()
    clerk_secret = config.clerk_secret_key
    if not clerk_secret:
        raise ValueError("CLERK_SECRET_KEY not configured")

    from tripsync.auth.clerk_provider import ClerkTokenVerifier

    return ClerkTokenVerifier(secret_key=clerk_secret)
