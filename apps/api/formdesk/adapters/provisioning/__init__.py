"""Credential provisioning adapters."""

from .base import CredentialProvisioner, ProvisionedAccount, ProvisioningError
from .firebase_provisioning import FirebaseCredentialProvisioner
from .mock_provisioning import MockCredentialProvisioner

__all__ = [
    "CredentialProvisioner",
    "FirebaseCredentialProvisioner",
    "MockCredentialProvisioner",
    "ProvisionedAccount",
    "ProvisioningError",
]
