"""Envelope and error schemas shared by the validation gate and response translator."""

from __future__ import annotations

from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

# Open diagnostic mapping. Keys vary by issue kind (location, loc, input, ctx, ...).
ErrorMeta = dict[str, Any]


class EndpointError(BaseModel):
    """Single validation or business failure."""

    model_config = ConfigDict(frozen=True)

    status: int = Field(ge=100, le=599)
    code: str
    detail: str
    meta: ErrorMeta | None = None


class Resource(BaseModel):
    """Success payload item: domain fields plus a mandatory unique id."""

    model_config = ConfigDict(extra="allow")

    id: str


class SuccessEnvelope(BaseModel):
    """Top-level success response envelope."""

    status: Literal["success"] = "success"
    result: dict[str, Any] | list[dict[str, Any]]


class FailEnvelope(BaseModel):
    """Top-level failure response envelope."""

    status: Literal["fail"] = "fail"
    errors: list[EndpointError] = Field(min_length=1)
