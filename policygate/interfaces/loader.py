"""Batching collaborator interfaces."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DataSource(Protocol):
    """A single batch source: accumulates items per batch key, fetches them in bulk."""

    def load(self, batch_key: Hashable, item: Hashable) -> None: ...

    def run(self, max_batch_size: int | None = None) -> None: ...

    def fetch(self, batch_key: Hashable, item: Hashable) -> Any: ...

    def pending_batches(self) -> bool: ...


@runtime_checkable
class BatchLoader(Protocol):
    """A registry of named sources that share one run() round trip."""

    def add_source(self, name: Hashable, source: DataSource) -> BatchLoader: ...

    def load(self, source: Hashable, batch_key: Hashable, item: Hashable) -> BatchLoader: ...

    def run(self) -> BatchLoader: ...

    def get(self, source: Hashable, batch_key: Hashable, item: Hashable) -> Any: ...

    def pending_batches(self) -> bool: ...
