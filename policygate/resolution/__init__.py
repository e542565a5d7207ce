"""Field resolution contract: records, generic middleware and the pass executor."""

from policygate.resolution.batch import BatchMiddleware, Resolve, resolve_with
from policygate.resolution.executor import Executor
from policygate.resolution.models import (
    Failure,
    FieldResult,
    Middleware,
    Resolution,
    ResolutionState,
    Success,
    put_result,
)

__all__ = [
    "BatchMiddleware",
    "Executor",
    "Failure",
    "FieldResult",
    "Middleware",
    "Resolution",
    "ResolutionState",
    "Resolve",
    "Success",
    "put_result",
    "resolve_with",
]
