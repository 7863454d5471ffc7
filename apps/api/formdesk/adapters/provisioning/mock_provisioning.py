"""In-memory credential provisioner for local development and tests."""

from __future__ import annotations

from uuid import uuid4

from formdesk.adapters.provisioning.base import CredentialProvisioner, ProvisionedAccount, ProvisioningError


class MockCredentialProvisioner(CredentialProvisioner):
    """Keeps accounts keyed by normalized email; ids are ``user-<uuid>``."""

    def __init__(self) -> None:
        self.accounts: dict[str, str] = {}
        self.passwords: dict[str, str] = {}
        self.failure_message: str | None = None

    def provision(self, *, email: str, password: str) -> ProvisionedAccount:
        if self.failure_message is not None:
            raise ProvisioningError(self.failure_message)

        key = email.strip().lower()
        existing = self.accounts.get(key)
        if existing is not None:
            return ProvisionedAccount(user_id=existing, email=key, created=False)

        user_id = f"user-{uuid4()}"
        self.accounts[key] = user_id
        self.passwords[user_id] = password
        return ProvisionedAccount(user_id=user_id, email=key, created=True)


__all__ = ["MockCredentialProvisioner"]
