"""Helpers for keeping identifiers and emails out of log lines."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def safe_log_email(email: str | None) -> str:
    """Keep only the domain of an email address; the mailbox is hashed."""
    text = (email or "").strip().lower()
    local, _, domain = text.partition("@")
    if not local or not domain:
        return safe_log_identifier(text, prefix="email")
    return f"{safe_log_identifier(local, prefix='email')}@{domain}"
