"""Generic middleware steps: batched execution and plain resolvers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from policygate.resolution.models import (
    FieldResult,
    Resolution,
    ResolutionState,
    Success,
    put_result,
)

if TYPE_CHECKING:
    from policygate.interfaces.loader import BatchLoader

logger = logging.getLogger(__name__)

BatchCallback = Callable[["BatchLoader"], FieldResult]


class BatchMiddleware:
    """Waits for a loader's pending batches, then resolves the field from ``callback(loader)``.

    Params are ``(loader, callback)`` on first call and the bare ``callback``
    once the executor resumes a suspended field.
    """

    def call(self, resolution: Resolution, params: Any) -> Resolution:
        if resolution.state is ResolutionState.unresolved:
            loader, callback = params
            if loader.pending_batches():
                logger.debug("suspending field on pending batches")
                return resolution.model_copy(
                    update={
                        "state": ResolutionState.suspended,
                        "context": {**resolution.context, "loader": loader},
                        "middleware": resolution.push((self, callback)),
                    }
                )
            return put_result(resolution, callback(loader))

        if resolution.state is ResolutionState.suspended:
            return put_result(resolution, params(resolution.context["loader"]))

        return resolution


class Resolve:
    """Terminal step: ``fn(source, context)`` becomes the field value."""

    def call(self, resolution: Resolution, params: Any) -> Resolution:
        if resolution.state is not ResolutionState.unresolved:
            return resolution
        fn: Callable[[Any, Mapping[str, Any]], Any] = params
        return put_result(resolution, Success(value=fn(resolution.source, resolution.context)))


def resolve_with(fn: Callable[[Any, Mapping[str, Any]], Any]) -> tuple[Resolve, Any]:
    return (Resolve(), fn)
