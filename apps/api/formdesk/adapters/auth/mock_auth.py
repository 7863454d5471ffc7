"""Mock identity provider for local development and tests."""

from formdesk.adapters.auth.base import AuthVerificationError, TokenVerifier
from formdesk.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens of the form ``test:<user_id>``."""

    def verify_token(self, token: str) -> AuthPrincipal:
        prefix, separator, user_id = token.partition(":")
        if prefix != "test" or not separator:
            raise AuthVerificationError("Invalid bearer token")

        user_id = user_id.strip()
        if not user_id or ":" in user_id:
            raise AuthVerificationError("Bearer token missing user identity")

        return AuthPrincipal(user_id=user_id)


__all__ = ["MockTokenVerifier"]
