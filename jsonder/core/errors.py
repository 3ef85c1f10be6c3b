"""Framework exception handlers rendered in the fail envelope."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jsonder.core.responses import send_fail
from jsonder.core.validation import issues_to_errors
from jsonder.schemas.error import EndpointError

logger = logging.getLogger(__name__)

# FastAPI reports path parameters under "path"; the envelope calls them "params".
_FASTAPI_LOCATIONS = {"body": "body", "query": "query", "path": "params", "header": "header", "cookie": "cookie"}


class APIError(Exception):
    """Explicit domain exception carrying one or more endpoint errors."""

    def __init__(self, errors: EndpointError | Sequence[EndpointError]) -> None:
        self.errors = [errors] if isinstance(errors, EndpointError) else list(errors)
        if not self.errors:
            raise ValueError("APIError requires at least one EndpointError")
        super().__init__(self.errors[0].detail)


class NotFoundError(APIError):
    """Convenience exception for missing resources."""

    def __init__(self, *, detail: str = "Resource not found") -> None:
        super().__init__(EndpointError(status=status.HTTP_404_NOT_FOUND, code="not_found", detail=detail))


def _http_error_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "validation_error"
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return "unauthorized"
    if status_code == status.HTTP_403_FORBIDDEN:
        return "forbidden"
    if status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return "method_not_allowed"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return "internal_error"
    return "bad_request"


def _validation_errors(exc: RequestValidationError) -> list[EndpointError]:
    errors: list[EndpointError] = []
    for issue in exc.errors():
        location = issue.get("loc", ())
        prefix = location[0] if location else "body"
        mapped = _FASTAPI_LOCATIONS.get(str(prefix), str(prefix))
        remaining = {key: value for key, value in issue.items() if key in ("loc", "ctx")}
        remaining["loc"] = [str(part) for part in location]
        if "ctx" in remaining:
            remaining["ctx"] = {key: str(value) for key, value in remaining["ctx"].items()}
        errors.extend(
            issues_to_errors(
                [{"type": issue.get("type"), "msg": issue.get("msg"), **remaining}],
                mapped,
            )
        )
    return errors


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI's own parameter validation to the fail envelope."""

    return send_fail(_validation_errors(exc))


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Normalize HTTP exceptions to the fail envelope."""

    detail = exc.detail if isinstance(exc.detail, str) and exc.detail else "Request failed"
    return send_fail(
        EndpointError(
            status=exc.status_code,
            code=_http_error_code(exc.status_code),
            detail=detail,
        )
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Return explicit domain errors in the shared envelope."""

    return send_fail(exc.errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Avoid leaking internal exceptions while keeping response shape stable."""

    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return send_fail(
        EndpointError(
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code="internal_error",
            detail="Internal server error",
        )
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the fail-envelope error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
