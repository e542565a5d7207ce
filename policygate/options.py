"""Option values that are either literal or read from the resolution context."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict) -> _Unset:
        return self


UNSET: Any = _Unset()


@dataclass(frozen=True)
class FromContext:
    """Defers an option to call time: ``reader(context)`` produces the value.

    Example::

        authorize(blog, "view_stats", actor=FromContext(lambda ctx: ctx["current_user"]))
    """

    reader: Callable[[Mapping[str, Any]], Any]

    @classmethod
    def key(cls, name: str) -> FromContext:
        """Reader for a plain context entry; missing entries read as None."""
        return cls(lambda context: context.get(name))


def resolve_option(value: Any, context: Mapping[str, Any]) -> Any:
    if isinstance(value, FromContext):
        return value.reader(context)
    return value
