"""Lazy Firebase Admin SDK bootstrap shared by the Firebase adapters."""

from __future__ import annotations

from types import ModuleType


def load_firebase_auth(unavailable_error: type[Exception]) -> ModuleType:
    """Import ``firebase_admin.auth``, initializing the default app on first use.

    ``unavailable_error`` is raised when the SDK is not installed so each
    adapter reports the failure in its own error type.
    """
    try:
        import firebase_admin
        from firebase_admin import auth as firebase_auth
    except ImportError as exc:  # pragma: no cover - depends on optional package
        raise unavailable_error("Firebase Admin SDK is unavailable") from exc

    if not firebase_admin._apps:
        firebase_admin.initialize_app()
    return firebase_auth
