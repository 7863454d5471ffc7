"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from formdesk.adapters.provisioning import MockCredentialProvisioner
from formdesk.errors import ApiError
from formdesk.repositories.memory import InMemoryStore, StoreUnavailableError
from formdesk.routes import auth_router, submissions_router, users_router
from formdesk.schemas.error import ErrorResponse
from formdesk.schemas.profile import CreateUserRequest, UpdateUserRequest
from formdesk.schemas.submission import CreateSubmissionRequest

logger = logging.getLogger(__name__)

_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/auth/profile": {"get": {"200", "401", "403", "500"}},
    "/api/submissions/create": {"post": {"200", "400", "401", "403", "500"}},
    "/api/submissions/list": {"get": {"200", "401", "403", "500"}},
    "/api/users/list": {"get": {"200", "401", "403", "500"}},
    "/api/users/create": {"post": {"200", "400", "401", "403", "500"}},
    "/api/users/update": {"post": {"200", "400", "401", "403", "404", "500"}},
}

# Bodies are parsed by an authorized dependency, so FastAPI cannot infer them.
_REQUEST_BODY_MODELS: dict[tuple[str, str], type[BaseModel]] = {
    ("/api/submissions/create", "post"): CreateSubmissionRequest,
    ("/api/users/create", "post"): CreateUserRequest,
    ("/api/users/update", "post"): UpdateUserRequest,
}


def _apply_contract_response_codes(schema: dict) -> None:
    """Limit documented response codes to each route's contract."""
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                responses.setdefault(status_code, {"description": "See API contract"})


def _apply_request_body_schemas(schema: dict) -> None:
    """Document JSON request bodies and register their component schemas."""
    components = schema.setdefault("components", {}).setdefault("schemas", {})
    for (path, method), model in _REQUEST_BODY_MODELS.items():
        operation = schema.get("paths", {}).get(path, {}).get(method)
        if not operation:
            continue

        model_schema = model.model_json_schema(ref_template="#/components/schemas/{model}")
        for name, definition in model_schema.pop("$defs", {}).items():
            components.setdefault(name, definition)
        components.setdefault(model.__name__, model_schema)
        operation["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{model.__name__}"}}},
        }


def create_app(store: InMemoryStore | None = None) -> FastAPI:
    app = FastAPI(title="Formdesk API", version="1.0.0")
    app.state.store = store if store is not None else InMemoryStore()
    app.state.credential_provisioner = MockCredentialProvisioner()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_error(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        logger.error("store.unavailable method=%s path=%s error=%s", request.method, request.url.path, exc)
        payload = ErrorResponse(code="STORE_UNAVAILABLE", message=str(exc) or "Store unavailable")
        return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorResponse(code="VALIDATION_ERROR", message="Invalid request payload")
        return JSONResponse(status_code=400, content=payload.model_dump(exclude_none=True))

    api_prefix = "/api"
    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(submissions_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        _apply_request_body_schemas(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
