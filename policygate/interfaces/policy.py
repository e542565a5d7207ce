"""Policy interfaces consumed by the permit and suspension protocols."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from policygate.interfaces.loader import DataSource
    from policygate.verdict import RawResult


@runtime_checkable
class Policy(Protocol):
    """Where authorization rules live.

    ``authorize`` returns one of: ``OK`` or ``True`` to permit, ``False`` or
    ``Deny(reason)`` to refuse, or a ``BatchRequest`` to defer the verdict to
    a batched lookup.
    """

    def authorize(self, action: Any, actor: Any, subject: Any) -> RawResult: ...


@runtime_checkable
class DataSourcePolicy(Policy, Protocol):
    """A policy that can supply its own batch source for default loaders."""

    def data(self) -> DataSource: ...
