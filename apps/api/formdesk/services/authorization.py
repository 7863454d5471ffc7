"""Authorization contract invoked by every resource handler."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from formdesk.core.logging_safety import safe_log_identifier
from formdesk.domain.access_control import (
    Action,
    Allow,
    Deny,
    DenyReason,
    deny_error,
    evaluate,
)
from formdesk.repositories.memory import ProfileRecord
from formdesk.schemas.auth import AuthPrincipal
from formdesk.services.profile_gateway import ProfileGateway, ProfileNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthorizationContext:
    principal: AuthPrincipal
    profile: ProfileRecord
    decision: Allow


class Authorizer:
    def __init__(self, gateway: ProfileGateway) -> None:
        self._gateway = gateway

    def authorize(
        self,
        principal: AuthPrincipal,
        action: Action,
        *,
        resource_owner_id: str | None = None,
        target_principal_id: str | None = None,
    ) -> AuthorizationContext:
        """Load the caller's profile and evaluate ``action``; raise on deny.

        ``resource_owner_id`` only matters for ``Action.VIEW_SUBMISSION``.
        """
        try:
            profile = self._gateway.load_profile(principal.user_id)
        except ProfileNotFoundError:
            self._log_denied(principal, action, DenyReason.PROFILE_NOT_FOUND)
            raise deny_error(DenyReason.PROFILE_NOT_FOUND) from None

        return self.recheck(
            AuthorizationContext(principal=principal, profile=profile, decision=Allow()),
            action,
            resource_owner_id=resource_owner_id,
            target_principal_id=target_principal_id,
        )

    def recheck(
        self,
        context: AuthorizationContext,
        action: Action,
        *,
        resource_owner_id: str | None = None,
        target_principal_id: str | None = None,
    ) -> AuthorizationContext:
        """Evaluate a further action against the profile already loaded in ``context``."""
        decision = evaluate(
            context.profile,
            action,
            resource_owner_id=resource_owner_id,
            target_principal_id=target_principal_id,
        )
        if isinstance(decision, Deny):
            self._log_denied(context.principal, action, decision.reason)
            raise deny_error(decision.reason)

        return AuthorizationContext(principal=context.principal, profile=context.profile, decision=decision)

    @staticmethod
    def _log_denied(principal: AuthPrincipal, action: Action, reason: DenyReason) -> None:
        logger.warning(
            "authz.denied principal_id=%s action=%s reason=%s",
            safe_log_identifier(principal.user_id, prefix="pid"),
            action.value,
            reason.value,
        )
