"""Authentication abstraction layer."""

from tripsync.auth.clerk_provider import ClerkTokenVerifier
from tripsync.auth.interface import AuthStateProvider, AuthUser, TokenVerifier, get_token_verifier
from tripsync.auth.session import AuthEvent, AuthSession

__all__ = [
    "AuthEvent",
    "AuthSession",
    "AuthStateProvider",
    "AuthUser",
    "ClerkTokenVerifier",
    "TokenVerifier",
    "get_token_verifier",
]
