"""Admin user-management routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from formdesk.domain.access_control import Action
from formdesk.routes.dependencies import authorized_body, get_user_service, require
from formdesk.schemas.envelope import DataResponse
from formdesk.schemas.error import ErrorResponse
from formdesk.schemas.profile import CreatedUser, CreateUserRequest, Profile, UpdateUserRequest
from formdesk.services.authorization import AuthorizationContext
from formdesk.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get(
    "/list",
    response_model=DataResponse[list[Profile]],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def list_users(
    _: Annotated[AuthorizationContext, Depends(require(Action.LIST_USERS))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> DataResponse[list[Profile]]:
    return DataResponse(data=service.list_users())


@router.post(
    "/create",
    response_model=DataResponse[CreatedUser],
    responses=_ERROR_RESPONSES,
)
async def create_user(
    _: Annotated[AuthorizationContext, Depends(require(Action.CREATE_USER))],
    payload: Annotated[CreateUserRequest, Depends(authorized_body(CreateUserRequest, Action.CREATE_USER))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> DataResponse[CreatedUser]:
    return DataResponse(data=service.create_user(payload=payload))


@router.post(
    "/update",
    response_model=DataResponse[Profile],
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
async def update_user(
    context: Annotated[AuthorizationContext, Depends(require(Action.UPDATE_USER))],
    payload: Annotated[UpdateUserRequest, Depends(authorized_body(UpdateUserRequest, Action.UPDATE_USER))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> DataResponse[Profile]:
    return DataResponse(data=service.update_user(context=context, payload=payload))
