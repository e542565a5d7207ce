"""Policy results, batch requests, and the verdict normalizer."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from policygate.errors import DEFAULT_MESSAGE, InvalidPolicyResultError, UnauthorizedError


class Ok(str, Enum):
    """Sentinel a policy may return instead of ``True``."""

    OK = "ok"


OK = Ok.OK


class Deny(BaseModel):
    """Refusal with a reason; the reason is stringified into the error message."""

    model_config = ConfigDict(frozen=True)

    reason: Any = DEFAULT_MESSAGE

    def __init__(self, reason: Any = DEFAULT_MESSAGE, **data: Any) -> None:
        super().__init__(reason=reason, **data)


class BatchRequest(BaseModel):
    """A deferred authorization: resolve ``input`` within the batch ``(source, batch_key)``.

    Requests sharing ``source`` and ``batch_key`` end up in the same batch
    function call when loaded into one loader before it runs. All three
    fields are used as cache keys and must be hashable; ``normalize`` rejects
    a request that is not.
    """

    model_config = ConfigDict(frozen=True)

    source: Any
    batch_key: Any
    input: Any


RawResult = bool | Ok | Deny | BatchRequest


class Allowed(BaseModel):
    model_config = ConfigDict(frozen=True)


class Denied(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    error: UnauthorizedError

    @property
    def message(self) -> str:
        return self.error.message


class Deferred(BaseModel):
    model_config = ConfigDict(frozen=True)

    request: BatchRequest


Verdict = Allowed | Denied | Deferred


def normalize(raw: Any, action: Any = None) -> Verdict:
    """Map a policy's return value onto exactly one verdict.

    Raises:
        InvalidPolicyResultError: ``raw`` is not one of the accepted shapes,
            or is a ``BatchRequest`` with an unhashable field.
    """
    if raw is OK or raw is True:
        return Allowed()
    if raw is False:
        return Denied(error=UnauthorizedError(action=action))
    if isinstance(raw, Deny):
        return Denied(error=UnauthorizedError(str(raw.reason), action))
    if isinstance(raw, BatchRequest):
        try:
            hash((raw.source, raw.batch_key, raw.input))
        except TypeError as exc:
            reason = f"batch request is not hashable ({exc})"
            raise InvalidPolicyResultError(raw, action, reason) from exc
        return Deferred(request=raw)
    raise InvalidPolicyResultError(raw, action)
