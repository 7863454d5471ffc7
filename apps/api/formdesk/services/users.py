"""User administration service layer."""

from __future__ import annotations

import logging

from formdesk.adapters.provisioning import CredentialProvisioner, ProvisioningError
from formdesk.core.logging_safety import safe_log_email, safe_log_identifier
from formdesk.domain.access_control import Action
from formdesk.errors import ApiError, not_found_error, validation_error
from formdesk.repositories.memory import InMemoryStore, ProfileRecord, StoreUnavailableError
from formdesk.schemas.profile import CreatedUser, CreateUserRequest, Profile, Role, UpdateUserRequest
from formdesk.services.authorization import AuthorizationContext, Authorizer

logger = logging.getLogger(__name__)


def to_profile(record: ProfileRecord) -> Profile:
    return Profile(
        id=record.id,
        email=record.email,
        role=record.role,
        is_banned=record.is_banned,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class UserService:
    def __init__(self, store: InMemoryStore, provisioner: CredentialProvisioner, authorizer: Authorizer) -> None:
        self._store = store
        self._provisioner = provisioner
        self._authorizer = authorizer

    def list_users(self) -> list[Profile]:
        return [to_profile(record) for record in self._store.list_profiles()]

    def create_user(self, *, payload: CreateUserRequest) -> CreatedUser:
        """Provision credentials, ensure the profile, then apply a non-default role.

        The steps are not transactional. Provisioning and profile creation are
        idempotent on email, so re-sending the same request after a failed role
        assignment resumes at the role step instead of creating a duplicate.
        The result's ``created`` flag is false when the account already existed.
        """
        email = (payload.email or "").strip()
        if not email or not payload.password:
            raise validation_error("Missing required fields: email and password are required")

        try:
            account = self._provisioner.provision(email=email, password=payload.password)
        except ProvisioningError as exc:
            logger.error("users.provision_failed email=%s error=%s", safe_log_email(email), exc)
            raise ApiError(status_code=500, code="PROVISIONING_FAILED", message=str(exc) or "Account creation failed") from exc

        self._store.ensure_profile(user_id=account.user_id, email=account.email)
        safe_user_id = safe_log_identifier(account.user_id, prefix="pid")
        logger.info("users.provisioned user_id=%s created=%s", safe_user_id, account.created)

        role = payload.role or Role.BASIC
        if role is not Role.BASIC:
            try:
                self._store.update_profile(account.user_id, role=role)
            except StoreUnavailableError as exc:
                # The account stays at the default role; no credential rollback.
                logger.error(
                    "users.role_assignment_failed user_id=%s role=%s error=%s",
                    safe_user_id,
                    role.value,
                    exc,
                )
                raise ApiError(
                    status_code=500,
                    code="ROLE_ASSIGNMENT_FAILED",
                    message="User was created but the requested role could not be assigned",
                    details={"userId": account.user_id, "role": role.value},
                ) from exc

        if not account.created:
            # Existing credentials and ban state are left as they are.
            return CreatedUser(
                user_id=account.user_id,
                created=False,
                message="User already exists; password and ban status were not changed",
            )
        return CreatedUser(user_id=account.user_id)

    def update_user(self, *, context: AuthorizationContext, payload: UpdateUserRequest) -> Profile:
        target_id = (payload.user_id or "").strip()
        if not target_id:
            raise validation_error("Missing required field: userId")

        if payload.is_banned is True:
            self._authorizer.recheck(context, Action.BAN_USER, target_principal_id=target_id)

        record = self._store.update_profile(target_id, role=payload.role, is_banned=payload.is_banned)
        if record is None:
            raise not_found_error()

        logger.info(
            "users.updated actor_id=%s target_id=%s role=%s is_banned=%s",
            safe_log_identifier(context.principal.user_id, prefix="pid"),
            safe_log_identifier(target_id, prefix="pid"),
            record.role.value,
            record.is_banned,
        )
        return to_profile(record)
