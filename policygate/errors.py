"""Error taxonomy for authorization checks."""

from __future__ import annotations

from typing import Any

DEFAULT_MESSAGE = "Unauthorized"


class UnauthorizedError(Exception):
    """An expected denial: the actor may not perform the action.

    Carried as a value by ``Denied`` verdicts and field failures. Only
    ``enforce`` raises it.
    """

    def __init__(self, message: str = DEFAULT_MESSAGE, action: Any = None) -> None:
        self._message = message
        self._action = action
        super().__init__(message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def action(self) -> Any:
        return self._action

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnauthorizedError):
            return NotImplemented
        return (self.message, self.action) == (other.message, other.action)

    def __hash__(self) -> int:
        return hash((self.message, self.action))

    def __repr__(self) -> str:
        return f"UnauthorizedError(message={self.message!r}, action={self.action!r})"


class InvalidPolicyResultError(TypeError):
    """Raised when a policy returns a value outside the accepted result shapes."""

    def __init__(self, value: Any, action: Any = None, reason: str | None = None) -> None:
        self.value = value
        self.action = action
        msg = f"Invalid policy result {value!r}"
        if action is not None:
            msg += f" for action {action!r}"
        if reason is not None:
            msg += f": {reason}"
        super().__init__(msg)


class MissingDataSourceError(ValueError):
    """Raised when a deferred check has no loader and the policy defines no data()."""

    def __init__(self, policy: Any) -> None:
        self.policy = policy
        super().__init__(
            f"Cannot automatically determine the batch source of {policy!r}: "
            "define a data() method on the policy or pass a loader explicitly"
        )
