"""Endpoint factory binding the validation gate, handler, and response translator."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
import inspect
import json
import logging
from typing import Any
from typing import Union

from fastapi import FastAPI
from fastapi import Request
from fastapi import Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import QueryParams
from starlette.middleware import Middleware

from jsonder.core.config import JsonderSettings
from jsonder.core.config import get_settings
from jsonder.core.errors import register_error_handlers
from jsonder.core.responses import send_fail
from jsonder.core.responses import send_success
from jsonder.core.result import EndpointResult
from jsonder.core.result import Failure
from jsonder.core.result import Outcome
from jsonder.core.result import Success
from jsonder.core.validation import VALIDATION_ERROR_STATUS
from jsonder.core.validation import Validation
from jsonder.core.validation import validate_request
from jsonder.schemas.error import EndpointError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointContext:
    """Request profiles handed to an endpoint handler."""

    request: Request
    body: Any
    query: dict[str, Any]
    params: dict[str, Any]
    validated: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[EndpointContext], Union[Outcome[Any], Awaitable[Outcome[Any]]]]


@dataclass(frozen=True)
class EndpointDefinition:
    """Static route configuration: resource label, optional schemas, and handler."""

    resource_type: str
    handler: Handler
    validation: Validation | None = None


def _query_profile(query_params: QueryParams) -> dict[str, Any]:
    profile: dict[str, Any] = {}
    for key in query_params.keys():
        values = query_params.getlist(key)
        profile[key] = values[0] if len(values) == 1 else values
    return profile


def _is_json_media_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def _body_profile(request: Request, *, schema_declared: bool) -> tuple[Any, EndpointError | None]:
    # Only JSON bodies are decoded; anything else stays an empty profile.
    raw = await request.body()
    if not raw or not _is_json_media_type(request.headers.get("content-type")):
        return {}, None
    try:
        return json.loads(raw), None
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        if not schema_declared:
            return {}, None
        return {}, EndpointError(
            status=VALIDATION_ERROR_STATUS,
            code="invalid_json",
            detail="Request body is not valid JSON",
            meta={"location": "body", "error": str(exc)},
        )


async def _run_handler(handler: Handler, context: EndpointContext) -> Outcome[Any]:
    if inspect.iscoroutinefunction(handler):
        outcome = await handler(context)
    else:
        outcome = await run_in_threadpool(handler, context)
        if inspect.isawaitable(outcome):
            outcome = await outcome

    if not isinstance(outcome, (Success, Failure)):
        raise TypeError(f"Endpoint handlers must return Success or Failure, got {type(outcome).__name__}")
    return outcome


class Jsonder:
    """JSON envelope adapter for FastAPI routes."""

    def __init__(self, settings: JsonderSettings) -> None:
        self.settings = settings

    def middleware(self) -> list[Middleware]:
        """Cross-cutting request preprocessing for ``FastAPI(middleware=...)``."""
        return [
            Middleware(
                CORSMiddleware,
                allow_origins=list(self.settings.cors_origins),
                allow_methods=["*"],
                allow_headers=["*"],
            )
        ]

    def install(self, app: FastAPI) -> None:
        """Add the middleware stack and fail-envelope error handlers to an existing app."""
        for cls, args, kwargs in self.middleware():
            app.add_middleware(cls, *args, **kwargs)
        register_error_handlers(app)

    def send_success(self, request: Request, result: EndpointResult) -> Response:
        return send_success(result, path=request.url.path, base_url=self.settings.server_url)

    def send_fail(self, errors: EndpointError | Sequence[EndpointError]) -> Response:
        return send_fail(errors)

    def endpoint(self, definition: EndpointDefinition) -> Callable[[Request], Awaitable[Response]]:
        """Build a route handler that validates, runs the handler, and renders its outcome."""
        validation = definition.validation
        handler = definition.handler

        async def endpoint(request: Request) -> Response:
            body, body_error = await _body_profile(
                request,
                schema_declared=validation is not None and validation.body_schema is not None,
            )
            query = _query_profile(request.query_params)
            params = dict(request.path_params)

            gate = validate_request(validation, body=body, query=query, params=params)
            errors = gate.errors
            if body_error is not None:
                errors = [body_error, *(error for error in errors if (error.meta or {}).get("location") != "body")]
            if errors:
                logger.debug("Rejected %s %s before handler", request.method, request.url.path)
                return self.send_fail(errors)

            context = EndpointContext(
                request=request,
                body=body,
                query=query,
                params=params,
                validated=gate.values,
            )
            outcome = await _run_handler(handler, context)
            return outcome.map(lambda result: self.send_success(request, result)).or_else(self.send_fail)

        endpoint.__name__ = f"{definition.resource_type}_{getattr(handler, '__name__', 'handler')}"
        endpoint.__doc__ = getattr(handler, "__doc__", None)
        return endpoint


def jsonder(settings: JsonderSettings | None = None) -> Jsonder:
    """Create an adapter; settings default to the environment-derived ones."""
    resolved = settings if settings is not None else get_settings()
    logger.info("Configured jsonder adapter with settings=%s", resolved.safe_for_logging())
    return Jsonder(resolved)
