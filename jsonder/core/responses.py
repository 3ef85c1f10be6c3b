"""Response translator: renders handler outcomes as JSON envelopes."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from jsonder.core.result import EndpointResult
from jsonder.schemas.error import EndpointError
from jsonder.schemas.error import FailEnvelope
from jsonder.schemas.error import SuccessEnvelope


def aggregate_status(errors: Sequence[EndpointError]) -> int:
    """Derive one HTTP status for a list of errors.

    A single error keeps its own status. Several errors collapse to the
    highest status class among them, e.g. 404 and 422 give 400 while 400 and
    503 give 500.
    """
    if not errors:
        raise ValueError("aggregate_status requires at least one error")
    if len(errors) == 1:
        return errors[0].status
    return max(error.status // 100 for error in errors) * 100


def _dump_resource(item: Any) -> dict[str, Any]:
    if isinstance(item, BaseModel):
        payload = item.model_dump(mode="json")
    elif isinstance(item, Mapping):
        payload = dict(item)
    else:
        raise TypeError(f"Unsupported resource type: {type(item).__name__}")

    if payload.get("id") is None:
        raise ValueError("Resource payloads must carry an 'id'")
    payload["id"] = str(payload["id"])
    return payload


def _is_sequence_result(result: Any) -> bool:
    return isinstance(result, Sequence) and not isinstance(result, (str, bytes, Mapping))


def decorate_result(
    result: EndpointResult,
    *,
    base_url: str | None,
    path: str,
) -> dict[str, Any] | list[dict[str, Any]]:
    """Dump resources and attach canonical urls when a base url is configured."""
    if _is_sequence_result(result):
        items = [_dump_resource(item) for item in result]
        if base_url is not None:
            for item in items:
                item["url"] = f"{base_url}{path}/{item['id']}"
        return items

    single = _dump_resource(result)
    if base_url is not None:
        single["url"] = f"{base_url}{path}"
    return single


def send_success(result: EndpointResult, *, path: str, base_url: str | None = None) -> JSONResponse:
    """Build the success envelope response for a handler result."""
    envelope = SuccessEnvelope(result=decorate_result(result, base_url=base_url, path=path))
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=envelope.model_dump(mode="json"),
    )


def _error_payload(error: EndpointError) -> dict[str, Any]:
    payload = error.model_dump(mode="json")
    if payload["meta"] is None:
        del payload["meta"]
    return payload


def _normalize_errors(errors: EndpointError | Sequence[EndpointError]) -> list[EndpointError]:
    if isinstance(errors, EndpointError):
        return [errors]
    return list(errors)


def send_fail(errors: EndpointError | Sequence[EndpointError]) -> JSONResponse:
    """Build the fail envelope response with the aggregated status."""
    normalized = _normalize_errors(errors)
    status_code = aggregate_status(normalized)
    envelope = FailEnvelope(errors=normalized)
    return JSONResponse(
        status_code=status_code,
        content={"status": envelope.status, "errors": [_error_payload(error) for error in envelope.errors]},
    )
