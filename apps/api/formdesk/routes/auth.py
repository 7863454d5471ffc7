"""Authenticated principal routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from formdesk.domain.access_control import Action
from formdesk.routes.dependencies import require
from formdesk.schemas.envelope import DataResponse
from formdesk.schemas.error import ErrorResponse
from formdesk.schemas.profile import Profile
from formdesk.services.authorization import AuthorizationContext
from formdesk.services.users import to_profile

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get(
    "/profile",
    response_model=DataResponse[Profile],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_own_profile(
    context: Annotated[AuthorizationContext, Depends(require(Action.READ_OWN_PROFILE))],
) -> DataResponse[Profile]:
    # Banned callers still get their profile so clients can explain the ban.
    return DataResponse(data=to_profile(context.profile))
