"""Dependency wiring for routes."""

# Annotations must stay eager: dependency closures below reference local names.
from collections.abc import Awaitable, Callable
import logging
from typing import Annotated, TypeVar
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError

from formdesk.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from formdesk.adapters.provisioning import CredentialProvisioner, FirebaseCredentialProvisioner
from formdesk.core.config import Settings, get_settings
from formdesk.core.logging_safety import safe_log_identifier
from formdesk.domain.access_control import Action
from formdesk.errors import ApiError, validation_error
from formdesk.repositories.memory import InMemoryStore
from formdesk.schemas.auth import AuthPrincipal
from formdesk.services.authorization import AuthorizationContext, Authorizer
from formdesk.services.profile_gateway import ProfileGateway
from formdesk.services.submissions import SubmissionService
from formdesk.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_REQUIREMENTS: dict[Action, Callable[..., AuthorizationContext]] = {}


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve identity provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthPrincipal:
    """Validate bearer token and attach the principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error("Unauthorized - No user logged in")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error(str(exc) or "Invalid bearer token") from exc

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
    )
    request.state.auth_principal = principal
    return principal


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_profile_gateway(store: Annotated[InMemoryStore, Depends(get_store)]) -> ProfileGateway:
    return ProfileGateway(store)


def get_authorizer(gateway: Annotated[ProfileGateway, Depends(get_profile_gateway)]) -> Authorizer:
    return Authorizer(gateway)


def require(action: Action) -> Callable[..., AuthorizationContext]:
    """Return the dependency that authorizes ``action``.

    One function per action, so FastAPI evaluates it once per request even
    when both the route and ``authorized_body`` depend on it.
    """
    existing = _REQUIREMENTS.get(action)
    if existing is not None:
        return existing

    def _authorize(
        principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
        authorizer: Annotated[Authorizer, Depends(get_authorizer)],
    ) -> AuthorizationContext:
        return authorizer.authorize(principal, action)

    _REQUIREMENTS[action] = _authorize
    return _authorize


def authorized_body(model: type[ModelT], action: Action) -> Callable[..., Awaitable[ModelT]]:
    """Build a dependency that reads the JSON body only after ``action`` is authorized."""

    async def _parse(
        _: Annotated[AuthorizationContext, Depends(require(action))],
        request: Request,
    ) -> ModelT:
        try:
            raw = await request.json()
        except ValueError as exc:
            raise validation_error("Invalid request payload") from exc

        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            raise validation_error("Invalid request payload") from exc

    return _parse


def get_credential_provisioner(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> CredentialProvisioner:
    if settings.auth_provider == "firebase":
        return FirebaseCredentialProvisioner()
    return request.app.state.credential_provisioner


def get_submission_service(store: Annotated[InMemoryStore, Depends(get_store)]) -> SubmissionService:
    return SubmissionService(store)


def get_user_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    provisioner: Annotated[CredentialProvisioner, Depends(get_credential_provisioner)],
    authorizer: Annotated[Authorizer, Depends(get_authorizer)],
) -> UserService:
    return UserService(store, provisioner, authorizer)
