"""Key-value batch source driven by a user-supplied bulk load function."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from typing import Any

from policygate.dataloader.errors import LoaderError

logger = logging.getLogger(__name__)

LoadFunction = Callable[[Hashable, list], Mapping[Hashable, Any]]


class KVSource:
    """Batch source backed by ``load_function(batch_key, items) -> {item: value}``.

    Items are cached per batch key once fetched; loading a cached item again
    does not schedule another fetch.
    """

    def __init__(self, load_function: LoadFunction) -> None:
        self._load_function = load_function
        # batch_key -> ordered set of items waiting for the next run
        self._pending: dict[Hashable, dict[Hashable, None]] = {}
        self._results: dict[tuple[Hashable, Hashable], Any] = {}
        self._errors: dict[tuple[Hashable, Hashable], Exception] = {}
        self.calls = 0

    def load(self, batch_key: Hashable, item: Hashable) -> None:
        key = (batch_key, item)
        if key in self._results or key in self._errors:
            return
        self._pending.setdefault(batch_key, {})[item] = None

    def pending_batches(self) -> bool:
        return bool(self._pending)

    def run(self, max_batch_size: int | None = None) -> None:
        pending, self._pending = self._pending, {}
        for batch_key, items in pending.items():
            for chunk in _chunks(list(items), max_batch_size):
                self._run_batch(batch_key, chunk)

    def fetch(self, batch_key: Hashable, item: Hashable) -> Any:
        key = (batch_key, item)
        if key in self._results:
            return self._results[key]
        if key in self._errors:
            raise LoaderError(
                f"Batch {batch_key!r} failed for item {item!r}: {self._errors[key]}"
            ) from self._errors[key]
        raise LoaderError(f"Item {item!r} was never loaded under batch {batch_key!r}")

    def _run_batch(self, batch_key: Hashable, items: list) -> None:
        self.calls += 1
        logger.debug("fetching %d item(s) for batch %r", len(items), batch_key)
        try:
            loaded = self._load_function(batch_key, items)
        except Exception as exc:
            logger.warning("Batch load failed for %r", batch_key, exc_info=True)
            for item in items:
                self._errors[(batch_key, item)] = exc
            return

        for item in items:
            if item in loaded:
                self._results[(batch_key, item)] = loaded[item]
            else:
                self._errors[(batch_key, item)] = KeyError(item)


def _chunks(items: list, size: int | None) -> Iterable[list]:
    if size is None:
        yield items
        return
    for start in range(0, len(items), size):
        yield items[start : start + size]
