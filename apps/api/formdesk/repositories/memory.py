"""In-memory repositories used by the API scaffold and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from formdesk.schemas.profile import Role
from formdesk.schemas.submission import Priority


class StoreUnavailableError(Exception):
    """Raised when the backing store cannot complete an operation."""


@dataclass(slots=True)
class ProfileRecord:
    id: str
    email: str
    role: Role
    is_banned: bool
    created_at: datetime
    updated_at: datetime
    sequence: int = 0


@dataclass(slots=True)
class SubmissionRecord:
    id: str
    user_id: str
    full_name: str
    email: str
    created_at: datetime
    updated_at: datetime
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    message: str | None = None
    category: str | None = None
    priority: Priority | None = None
    sequence: int = 0


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for scaffolding and tests.

    The ``*_failure_message`` fields inject a ``StoreUnavailableError`` into
    the matching operation so callers can exercise their 500 paths.
    """

    profiles: dict[str, ProfileRecord] = field(default_factory=dict)
    submissions: dict[str, SubmissionRecord] = field(default_factory=dict)
    profile_read_count: int = 0
    profile_write_count: int = 0
    submission_read_count: int = 0
    submission_write_count: int = 0
    profile_read_failure_message: str | None = None
    profile_update_failure_message: str | None = None
    submission_failure_message: str | None = None
    _sequence: int = 0

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    @staticmethod
    def _raise_if_failing(message: str | None) -> None:
        if message is not None:
            raise StoreUnavailableError(message)

    def create_profile(
        self,
        *,
        user_id: str,
        email: str,
        role: Role = Role.BASIC,
        is_banned: bool = False,
    ) -> ProfileRecord:
        now = datetime.now(UTC)
        profile = ProfileRecord(
            id=user_id,
            email=email,
            role=role,
            is_banned=is_banned,
            created_at=now,
            updated_at=now,
            sequence=self._next_sequence(),
        )
        self.profiles[profile.id] = profile
        self.profile_write_count += 1
        return profile

    def ensure_profile(self, *, user_id: str, email: str) -> ProfileRecord:
        """Create the default profile for a newly provisioned account once."""
        existing = self.profiles.get(user_id)
        if existing is not None:
            return existing
        return self.create_profile(user_id=user_id, email=email)

    def get_profile(self, user_id: str) -> ProfileRecord | None:
        self._raise_if_failing(self.profile_read_failure_message)
        self.profile_read_count += 1
        return self.profiles.get(user_id)

    def list_profiles(self) -> list[ProfileRecord]:
        self._raise_if_failing(self.profile_read_failure_message)
        self.profile_read_count += 1
        return sorted(
            self.profiles.values(),
            key=lambda record: (record.created_at, record.sequence),
            reverse=True,
        )

    def update_profile(
        self,
        user_id: str,
        *,
        role: Role | None = None,
        is_banned: bool | None = None,
    ) -> ProfileRecord | None:
        """Apply a single-row update; absent fields are left untouched."""
        self._raise_if_failing(self.profile_update_failure_message)
        profile = self.profiles.get(user_id)
        if profile is None:
            return None

        if role is not None:
            profile.role = role
        if is_banned is not None:
            profile.is_banned = is_banned
        profile.updated_at = datetime.now(UTC)
        self.profile_write_count += 1
        return profile

    def create_submission(
        self,
        *,
        user_id: str,
        full_name: str,
        email: str,
        phone: str | None = None,
        company: str | None = None,
        job_title: str | None = None,
        message: str | None = None,
        category: str | None = None,
        priority: Priority | None = None,
    ) -> SubmissionRecord:
        self._raise_if_failing(self.submission_failure_message)
        now = datetime.now(UTC)
        submission = SubmissionRecord(
            id=str(uuid4()),
            user_id=user_id,
            full_name=full_name,
            email=email,
            phone=phone,
            company=company,
            job_title=job_title,
            message=message,
            category=category,
            priority=priority,
            created_at=now,
            updated_at=now,
            sequence=self._next_sequence(),
        )
        self.submissions[submission.id] = submission
        self.submission_write_count += 1
        return submission

    def list_submissions(self, *, user_id: str | None = None) -> list[SubmissionRecord]:
        """Return submissions newest first, optionally filtered to one owner."""
        self._raise_if_failing(self.submission_failure_message)
        self.submission_read_count += 1
        records = [
            record
            for record in self.submissions.values()
            if user_id is None or record.user_id == user_id
        ]
        records.sort(key=lambda record: (record.created_at, record.sequence), reverse=True)
        return records
