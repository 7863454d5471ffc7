"""Access control rules shared by every handler.

``evaluate`` is a pure classification of (profile, action, resource) into an
``Allow`` or ``Deny`` decision. Rules run in a fixed order and the first match
wins:

1. banned profiles are denied every action except reading their own profile;
2. admin-only actions are denied to non-admins;
3. an admin may not ban themselves (role changes on self are allowed);
4. submission listing is narrowed to the caller's rows unless they are admin;
5. anything else is allowed unrestricted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from formdesk.errors import ApiError
from formdesk.schemas.profile import Role


class Action(str, Enum):
    """Actions a handler can ask about.

    ``VIEW_SUBMISSION`` (with ``resource_owner_id``) covers reading a single
    submission by id; reading another owner's row is admin-only. No route
    exposes that read yet.
    """

    READ_OWN_PROFILE = "read_own_profile"
    CREATE_SUBMISSION = "create_submission"
    LIST_SUBMISSIONS = "list_submissions"
    VIEW_SUBMISSION = "view_submission"
    LIST_USERS = "list_users"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    BAN_USER = "ban_user"


class Scope(str, Enum):
    ALL = "all"
    OWN = "own"
    UNRESTRICTED = "unrestricted"


class DenyReason(str, Enum):
    PROFILE_NOT_FOUND = "profile_not_found"
    BANNED = "banned"
    FORBIDDEN = "forbidden"
    CANNOT_SELF_BAN = "cannot_self_ban"


class ProfileLike(Protocol):
    id: str
    role: Role
    is_banned: bool


@dataclass(frozen=True, slots=True)
class Allow:
    scope: Scope = Scope.UNRESTRICTED
    owner_id: str | None = None


@dataclass(frozen=True, slots=True)
class Deny:
    reason: DenyReason


Decision = Allow | Deny

_BAN_EXEMPT_ACTIONS: frozenset[Action] = frozenset({Action.READ_OWN_PROFILE})
_ADMIN_ACTIONS: frozenset[Action] = frozenset(
    {
        Action.LIST_USERS,
        Action.CREATE_USER,
        Action.UPDATE_USER,
        Action.BAN_USER,
    }
)

_DENY_ERRORS: dict[DenyReason, tuple[int, str, str]] = {
    DenyReason.PROFILE_NOT_FOUND: (403, "PROFILE_NOT_FOUND", "Access forbidden - Profile not found"),
    DenyReason.BANNED: (403, "USER_BANNED", "Access forbidden - User is banned"),
    DenyReason.FORBIDDEN: (403, "FORBIDDEN", "Forbidden - Admin access required"),
    DenyReason.CANNOT_SELF_BAN: (400, "CANNOT_SELF_BAN", "Cannot ban yourself"),
}


def _requires_admin(action: Action, requester_id: str, resource_owner_id: str | None) -> bool:
    if action in _ADMIN_ACTIONS:
        return True
    if action is Action.VIEW_SUBMISSION:
        return resource_owner_id is not None and resource_owner_id != requester_id
    return False


def evaluate(
    profile: ProfileLike,
    action: Action,
    *,
    resource_owner_id: str | None = None,
    target_principal_id: str | None = None,
) -> Decision:
    """Classify a request; never raises and never touches storage."""
    if profile.is_banned and action not in _BAN_EXEMPT_ACTIONS:
        return Deny(DenyReason.BANNED)

    is_admin = profile.role == Role.ADMIN
    if not is_admin and _requires_admin(action, profile.id, resource_owner_id):
        return Deny(DenyReason.FORBIDDEN)

    if action is Action.BAN_USER and target_principal_id == profile.id:
        return Deny(DenyReason.CANNOT_SELF_BAN)

    if action is Action.LIST_SUBMISSIONS:
        if is_admin:
            return Allow(scope=Scope.ALL)
        return Allow(scope=Scope.OWN, owner_id=profile.id)

    return Allow()


def deny_error(reason: DenyReason) -> ApiError:
    status_code, code, message = _DENY_ERRORS[reason]
    return ApiError(status_code=status_code, code=code, message=message)

