"""In-process batch loader: a registry of named sources run together."""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Any

from policygate.dataloader.errors import LoaderError
from policygate.interfaces.loader import DataSource

logger = logging.getLogger(__name__)


class Loader:
    """Accumulates loads across sources and resolves them in one ``run()``.

    Mutable and single-owner: every method returns ``self`` so calls chain,
    but loads are recorded in place. Callers sharing one loader between
    threads must synchronize themselves.
    """

    def __init__(self, max_batch_size: int | None = None) -> None:
        if max_batch_size is not None and max_batch_size < 1:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")
        self.max_batch_size = max_batch_size
        self.sources: dict[Hashable, DataSource] = {}

    def add_source(self, name: Hashable, source: DataSource) -> Loader:
        self.sources[name] = source
        return self

    def load(self, source: Hashable, batch_key: Hashable, item: Hashable) -> Loader:
        self._source(source).load(batch_key, item)
        return self

    def load_many(self, source: Hashable, batch_key: Hashable, items: list) -> Loader:
        data_source = self._source(source)
        for item in items:
            data_source.load(batch_key, item)
        return self

    def run(self) -> Loader:
        for name, source in self.sources.items():
            if source.pending_batches():
                logger.debug("running pending batches for source %r", name)
                source.run(self.max_batch_size)
        return self

    def get(self, source: Hashable, batch_key: Hashable, item: Hashable) -> Any:
        return self._source(source).fetch(batch_key, item)

    def pending_batches(self) -> bool:
        return any(source.pending_batches() for source in self.sources.values())

    def _source(self, name: Hashable) -> DataSource:
        try:
            return self.sources[name]
        except KeyError:
            raise LoaderError(f"Source {name!r} does not exist") from None
