"""Firebase Auth token verifier adapter."""

from __future__ import annotations

from typing import Any

from formdesk.adapters.auth.base import AuthVerificationError, TokenVerifier
from formdesk.adapters.firebase_app import load_firebase_auth
from formdesk.schemas.auth import AuthPrincipal

# Provider exception class name -> message surfaced in the 401 payload.
_PROVIDER_REJECTIONS: dict[str, str] = {
    "RevokedIdTokenError": "Bearer token has been revoked",
    "ExpiredIdTokenError": "Bearer token has expired",
    "UserDisabledError": "User account is disabled",
}


class FirebaseTokenVerifier(TokenVerifier):
    """Verifies Firebase ID tokens; only the uid is taken from the claims."""

    def __init__(self, project_id: str | None, audience: str | None) -> None:
        self._project_id = project_id
        self._audience = audience

    def verify_token(self, token: str) -> AuthPrincipal:
        firebase_auth = load_firebase_auth(AuthVerificationError)

        try:
            claims = firebase_auth.verify_id_token(token, check_revoked=True)
        except Exception as exc:
            message = _PROVIDER_REJECTIONS.get(type(exc).__name__, "Invalid bearer token")
            raise AuthVerificationError(message) from exc

        self._check_audience(claims)
        user_id = str(claims.get("uid") or claims.get("sub") or "").strip()
        if not user_id:
            raise AuthVerificationError("Bearer token missing user identity")

        return AuthPrincipal(user_id=user_id)

    def _check_audience(self, claims: dict[str, Any]) -> None:
        audience = str(claims.get("aud", ""))
        if self._audience and audience != self._audience:
            raise AuthVerificationError("Invalid bearer token audience")

        if self._project_id:
            issuer = str(claims.get("iss", ""))
            if self._project_id not in issuer and audience != self._project_id:
                raise AuthVerificationError("Invalid bearer token issuer")


__all__ = ["FirebaseTokenVerifier"]
