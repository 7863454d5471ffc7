"""Credential provisioning interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class ProvisioningError(Exception):
    """Raised when the identity provider refuses or fails to create an account."""


@dataclass(frozen=True, slots=True)
class ProvisionedAccount:
    user_id: str
    email: str
    created: bool


class CredentialProvisioner(ABC):
    """Creates login credentials with the external identity provider."""

    @abstractmethod
    def provision(self, *, email: str, password: str) -> ProvisionedAccount:
        """Create an account, or return the existing one registered for ``email``."""


__all__ = ["CredentialProvisioner", "ProvisionedAccount", "ProvisioningError"]
