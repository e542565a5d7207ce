"""Field resolution records shared by middleware and the executor."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class ResolutionState(str, Enum):
    """Lifecycle states for one field's resolution."""

    unresolved = "unresolved"
    suspended = "suspended"
    resolved = "resolved"


class Success(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error: Any


FieldResult = Success | Failure


@runtime_checkable
class Middleware(Protocol):
    """One step of a field's resolution pipeline."""

    def call(self, resolution: Resolution, params: Any) -> Resolution: ...


class Resolution(BaseModel):
    """A single field being resolved.

    ``middleware`` holds the pending ``(middleware, params)`` steps, front
    first. Middleware never mutates a resolution in place; each call returns
    an updated copy.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: ResolutionState = ResolutionState.unresolved
    context: dict[str, Any] = Field(default_factory=dict)
    middleware: list[Any] = Field(default_factory=list)
    source: Any = None
    value: Any = None
    errors: list[Any] = Field(default_factory=list)

    def push(self, step: tuple[Middleware, Any]) -> list[Any]:
        """Return the middleware list with ``step`` in front."""
        return [step, *self.middleware]


def put_result(resolution: Resolution, result: FieldResult) -> Resolution:
    """Set the terminal outcome of a field."""
    if isinstance(result, Success):
        return resolution.model_copy(
            update={"state": ResolutionState.resolved, "value": result.value}
        )
    if isinstance(result, Failure):
        return resolution.model_copy(
            update={
                "state": ResolutionState.resolved,
                "errors": [*resolution.errors, result.error],
            }
        )
    raise TypeError(f"Expected Success or Failure, got {result!r}")
