import jwt
from clerk_backend_api import Clerk, authenticate_request
from clerk_backend_api.security.types import AuthenticateRequestOptions

from tripsync.errors import AuthenticationError, ErrorCode

from .interface import AuthUser, TokenVerifier


class _BearerRequest:
    """Adapts a raw session token to the Requestish protocol expected by Clerk SDK."""

    def __init__(self, token: str):
        self.headers = {"Authorization": f"Bearer {token}"}


class ClerkTokenVerifier(TokenVerifier):
    def __init__(self, secret_key: str):
        self._client = Clerk(bearer_auth=secret_key)
        self._secret_key = secret_key

    async def verify_token(self, token: str) -> AuthUser:
        # Malformed tokens are rejected before any call to Clerk.
        self._decode_unverified(token)
        try:
            request_state = authenticate_request(
                _BearerRequest(token),
                AuthenticateRequestOptions(secret_key=self._secret_key),
            )
            if not request_state.is_signed_in or request_state.payload is None:
                raise AuthenticationError(
                    f"Token verification failed: {request_state.message or 'unknown'}",
                    code=ErrorCode.INVALID_TOKEN,
                )
            user_id = str(request_state.payload["sub"])
        except AuthenticationError:
            raise
        except Exception as e:
            raise AuthenticationError(f"Token verification failed: {e}") from e
        return await self.get_user(user_id)

    async def get_user(self, user_id: str) -> AuthUser:
        try:
            user = self._client.users.get(user_id=user_id)
            return AuthUser(
                user_id=user.id,
                email=user.email_addresses[0].email_address if user.email_addresses else "",
                name=f"{user.first_name or ''} {user.last_name or ''}".strip() or user.username or "",
            )
        except Exception as e:
            raise AuthenticationError(f"Failed to fetch user: {e}") from e

    @staticmethod
    def _decode_unverified(token: str) -> dict[str, object]:
        """Decode JWT claims WITHOUT signature verification."""
        try:
            decoded: dict[str, object] = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}", code=ErrorCode.INVALID_TOKEN) from e
        if not decoded.get("sub"):
            raise AuthenticationError("Invalid token: missing subject", code=ErrorCode.INVALID_TOKEN)
        return decoded
