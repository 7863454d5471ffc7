"""Firebase Auth account provisioning adapter."""

from __future__ import annotations

from formdesk.adapters.firebase_app import load_firebase_auth
from formdesk.adapters.provisioning.base import CredentialProvisioner, ProvisionedAccount, ProvisioningError


class FirebaseCredentialProvisioner(CredentialProvisioner):
    """Creates email/password accounts through the Firebase Admin SDK.

    Accounts are created pre-verified. An email that is already registered
    resolves to the existing account so repeated requests converge.
    """

    def provision(self, *, email: str, password: str) -> ProvisionedAccount:
        firebase_auth = load_firebase_auth(ProvisioningError)

        try:
            record = firebase_auth.create_user(email=email, password=password, email_verified=True)
        except firebase_auth.EmailAlreadyExistsError:
            try:
                record = firebase_auth.get_user_by_email(email)
            except Exception as exc:  # pragma: no cover - provider exception surface
                raise ProvisioningError("Existing account lookup failed") from exc
            return ProvisionedAccount(user_id=record.uid, email=email, created=False)
        except Exception as exc:
            raise ProvisioningError(str(exc) or "Account creation failed") from exc

        return ProvisionedAccount(user_id=record.uid, email=email, created=True)


__all__ = ["FirebaseCredentialProvisioner"]
