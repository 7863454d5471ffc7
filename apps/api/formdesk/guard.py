"""Client-side navigation gate and per-session profile state.

The guard only decides where a browser-like client should go next. It is a
convenience layer: every API route enforces authentication, bans and roles on
its own, so a skipped or failed guard check never widens access.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

import httpx

from formdesk.schemas.profile import Profile, Role

logger = logging.getLogger(__name__)

AUTH_PAGE = "/auth"
HOME_PAGE = "/"
BANNED_REDIRECT = "/auth?error=banned"
PROFILE_ENDPOINT = "/api/auth/profile"


class ProfileUnavailableError(Exception):
    """The profile endpoint could not be reached or answered with a server error."""


@dataclass
class ClientSession:
    """Explicit per-session auth state held by a client.

    ``token`` is the bearer credential issued by the identity provider; the
    cached ``profile`` is only a hint for rendering and is never trusted by
    the API.
    """

    client: httpx.Client
    token: str | None = None
    profile: Profile | None = field(default=None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == Role.ADMIN

    @property
    def is_banned(self) -> bool:
        return self.profile is not None and self.profile.is_banned

    @property
    def can_access(self) -> bool:
        return self.is_authenticated and not self.is_banned

    def fetch_profile(self) -> Profile | None:
        """Refresh the cached profile.

        Returns ``None`` when signed out or when the API rejects the session
        (401/403). Raises ``ProfileUnavailableError`` on transport failures and
        5xx answers so callers can tell "denied" apart from "unknown"; a 200
        whose body is not a profile envelope counts as unknown too.
        """
        if not self.token:
            self.profile = None
            return None

        try:
            response = self.client.get(PROFILE_ENDPOINT, headers={"Authorization": f"Bearer {self.token}"})
        except httpx.HTTPError as exc:
            raise ProfileUnavailableError(str(exc)) from exc

        if response.status_code >= 500:
            raise ProfileUnavailableError(f"profile endpoint returned {response.status_code}")
        if response.status_code != 200:
            self.profile = None
            return None

        try:
            body: dict[str, Any] = response.json()
            data = body.get("data")
            self.profile = Profile.model_validate(data) if data else None
        except (ValueError, AttributeError) as exc:
            raise ProfileUnavailableError("profile endpoint returned an unreadable body") from exc
        return self.profile

    def sign_out(self) -> None:
        self.token = None
        self.profile = None


@dataclass(frozen=True, slots=True)
class GuardOutcome:
    allowed: bool
    redirect_to: str | None = None


class RouteGuard:
    def check(self, path: str, session: ClientSession) -> GuardOutcome:
        """Decide whether ``session`` may navigate to ``path``."""
        if path == AUTH_PAGE:
            if session.is_authenticated:
                return GuardOutcome(allowed=False, redirect_to=HOME_PAGE)
            return GuardOutcome(allowed=True)

        if not session.is_authenticated:
            return GuardOutcome(allowed=False, redirect_to=AUTH_PAGE)

        try:
            profile = session.fetch_profile()
        except ProfileUnavailableError as exc:
            # Fail open here; the API still fails closed.
            logger.warning("guard.profile_unavailable path=%s error=%s", path, exc)
            return GuardOutcome(allowed=True)

        if profile is None:
            return GuardOutcome(allowed=False, redirect_to=AUTH_PAGE)

        if profile.is_banned:
            session.sign_out()
            return GuardOutcome(allowed=False, redirect_to=BANNED_REDIRECT)

        return GuardOutcome(allowed=True)
