"""Form submission routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from formdesk.domain.access_control import Action
from formdesk.routes.dependencies import authorized_body, get_submission_service, require
from formdesk.schemas.envelope import DataResponse
from formdesk.schemas.error import ErrorResponse
from formdesk.schemas.submission import CreateSubmissionRequest, FormSubmission
from formdesk.services.authorization import AuthorizationContext
from formdesk.services.submissions import SubmissionService

router = APIRouter(prefix="/submissions", tags=["Submissions"])


@router.post(
    "/create",
    response_model=DataResponse[FormSubmission],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_submission(
    context: Annotated[AuthorizationContext, Depends(require(Action.CREATE_SUBMISSION))],
    payload: Annotated[CreateSubmissionRequest, Depends(authorized_body(CreateSubmissionRequest, Action.CREATE_SUBMISSION))],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> DataResponse[FormSubmission]:
    submission = service.create_submission(owner_id=context.principal.user_id, payload=payload)
    return DataResponse(data=submission)


@router.get(
    "/list",
    response_model=DataResponse[list[FormSubmission]],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def list_submissions(
    context: Annotated[AuthorizationContext, Depends(require(Action.LIST_SUBMISSIONS))],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
) -> DataResponse[list[FormSubmission]]:
    return DataResponse(data=service.list_submissions(decision=context.decision))
