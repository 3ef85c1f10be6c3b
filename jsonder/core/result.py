"""Handler outcome type: exactly one of Success or Failure."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from typing import Generic
from typing import TypeVar
from typing import Union

from pydantic import BaseModel

from jsonder.schemas.error import EndpointError

T = TypeVar("T")
U = TypeVar("U")

ResourceLike = Union[BaseModel, dict[str, Any]]
EndpointResult = Union[ResourceLike, Sequence[ResourceLike]]


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful handler outcome."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> Success[U]:
        return Success(fn(self.value))

    def map_err(self, fn: Callable[[tuple[EndpointError, ...]], Any]) -> Success[T]:
        return self

    def or_else(self, fn: Callable[[tuple[EndpointError, ...]], Any]) -> T:
        return self.value


@dataclass(frozen=True, init=False)
class Failure:
    """Failed handler outcome carrying a non-empty ordered list of errors."""

    errors: tuple[EndpointError, ...]

    def __init__(self, errors: EndpointError | Iterable[EndpointError]) -> None:
        normalized = (errors,) if isinstance(errors, EndpointError) else tuple(errors)
        if not normalized:
            raise ValueError("Failure requires at least one EndpointError")
        object.__setattr__(self, "errors", normalized)

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def map(self, fn: Callable[[Any], Any]) -> Failure:
        return self

    def map_err(
        self,
        fn: Callable[[tuple[EndpointError, ...]], EndpointError | Iterable[EndpointError]],
    ) -> Failure:
        return Failure(fn(self.errors))

    def or_else(self, fn: Callable[[tuple[EndpointError, ...]], U]) -> U:
        return fn(self.errors)


Outcome = Union[Success[T], Failure]


def success(value: T) -> Success[T]:
    """Wrap a handler result as a successful outcome."""
    return Success(value)


def failure(*errors: EndpointError) -> Failure:
    """Wrap one or more errors as a failed outcome."""
    return Failure(errors)
