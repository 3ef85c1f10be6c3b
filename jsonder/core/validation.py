"""Validation gate: checks request profiles against declared schemas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
import json
import logging
from typing import Any
from typing import Literal

from pydantic import TypeAdapter
from pydantic import ValidationError

from jsonder.schemas.error import EndpointError

logger = logging.getLogger(__name__)

Location = Literal["body", "query", "params"]
LOCATIONS: tuple[Location, ...] = ("body", "query", "params")

VALIDATION_ERROR_STATUS = 400


@dataclass(frozen=True)
class Validation:
    """Optional schemas for each request location.

    A schema is anything pydantic can validate through ``TypeAdapter``: a
    ``BaseModel`` subclass, a ``TypedDict``, or an annotated type. A location
    without a schema is not checked at all.
    """

    body_schema: Any | None = None
    query_schema: Any | None = None
    params_schema: Any | None = None
    _adapters: dict[str, TypeAdapter[Any]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        adapters = {
            location: TypeAdapter(schema)
            for location, schema in (
                ("body", self.body_schema),
                ("query", self.query_schema),
                ("params", self.params_schema),
            )
            if schema is not None
        }
        object.__setattr__(self, "_adapters", adapters)

    def adapter_for(self, location: Location) -> TypeAdapter[Any] | None:
        """Return the compiled adapter for a location, or None when undeclared."""
        return self._adapters.get(location)


@dataclass
class GateResult:
    """Errors collected across all locations plus the validated values."""

    errors: list[EndpointError] = field(default_factory=list)
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.errors


def issues_to_errors(issues: list[dict[str, Any]], location: Location) -> list[EndpointError]:
    """Convert pydantic issue dicts into 400 endpoint errors tagged with their location."""
    errors: list[EndpointError] = []
    for issue in issues:
        remaining = {key: value for key, value in issue.items() if key not in ("type", "msg", "url")}
        errors.append(
            EndpointError(
                status=VALIDATION_ERROR_STATUS,
                code=str(issue.get("type", "invalid")),
                detail=str(issue.get("msg", "Invalid value")),
                meta={"location": location, **remaining},
            )
        )
    return errors


def _json_safe_issues(exc: ValidationError) -> list[dict[str, Any]]:
    # pydantic stringifies non-JSON inputs and context values when dumping to JSON
    return json.loads(exc.json(include_url=False))


def validate_profile(
    adapter: TypeAdapter[Any] | None,
    profile: Any,
    location: Location,
) -> tuple[Any, list[EndpointError]]:
    """Validate one profile; an undeclared schema passes the profile through untouched."""
    if adapter is None:
        return profile, []

    try:
        return adapter.validate_python(profile), []
    except ValidationError as exc:
        return None, issues_to_errors(_json_safe_issues(exc), location)


def validate_request(
    validation: Validation | None,
    *,
    body: Any = None,
    query: Mapping[str, Any] | None = None,
    params: Mapping[str, Any] | None = None,
) -> GateResult:
    """Validate body, query, and params independently and collect every failure."""
    result = GateResult()
    if validation is None:
        return result

    profiles: dict[Location, Any] = {
        "body": body if body is not None else {},
        "query": dict(query) if query is not None else {},
        "params": dict(params) if params is not None else {},
    }

    for location in LOCATIONS:
        adapter = validation.adapter_for(location)
        if adapter is None:
            continue
        value, errors = validate_profile(adapter, profiles[location], location)
        if errors:
            result.errors.extend(errors)
        else:
            result.values[location] = value

    if result.errors:
        logger.debug(
            "Request validation failed with %d error(s) at %s",
            len(result.errors),
            sorted({error.meta["location"] for error in result.errors if error.meta}),
        )
    return result
