"""Form submission API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CreateSubmissionRequest(BaseModel):
    """Client payload for a new submission.

    Unknown keys (including any ``user_id``) are dropped; ownership is always
    taken from the authenticated principal.
    """

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    message: str | None = None
    category: str | None = None
    priority: Priority | None = None


class FormSubmission(BaseModel):
    id: str
    user_id: str
    full_name: str
    email: str
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    message: str | None = None
    category: str | None = None
    priority: Priority | None = None
    created_at: datetime
    updated_at: datetime
