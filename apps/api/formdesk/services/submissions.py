"""Form submission service layer."""

import logging

from formdesk.core.logging_safety import safe_log_identifier
from formdesk.domain.access_control import Allow, Scope
from formdesk.errors import validation_error
from formdesk.repositories.memory import InMemoryStore, SubmissionRecord
from formdesk.schemas.submission import CreateSubmissionRequest, FormSubmission

logger = logging.getLogger(__name__)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class SubmissionService:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def create_submission(self, *, owner_id: str, payload: CreateSubmissionRequest) -> FormSubmission:
        if _is_blank(payload.full_name) or _is_blank(payload.email):
            raise validation_error("Missing required fields: full_name and email are required")

        record = self._store.create_submission(
            user_id=owner_id,
            full_name=payload.full_name,
            email=payload.email,
            phone=payload.phone,
            company=payload.company,
            job_title=payload.job_title,
            message=payload.message,
            category=payload.category,
            priority=payload.priority,
        )
        logger.info(
            "submission.created submission_id=%s owner_id=%s",
            record.id,
            safe_log_identifier(owner_id, prefix="pid"),
        )
        return self._to_submission(record)

    def list_submissions(self, *, decision: Allow) -> list[FormSubmission]:
        """List newest first; anything narrower than ``ALL`` is owner-filtered."""
        owner_filter = None if decision.scope is Scope.ALL else decision.owner_id
        if decision.scope is not Scope.ALL and owner_filter is None:
            raise ValueError("Owner-scoped listing requires an owner id")

        return [self._to_submission(record) for record in self._store.list_submissions(user_id=owner_filter)]

    @staticmethod
    def _to_submission(record: SubmissionRecord) -> FormSubmission:
        return FormSubmission(
            id=record.id,
            user_id=record.user_id,
            full_name=record.full_name,
            email=record.email,
            phone=record.phone,
            company=record.company,
            job_title=record.job_title,
            message=record.message,
            category=record.category,
            priority=record.priority,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
