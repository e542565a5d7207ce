"""Cooperative driver resolving sibling fields with shared batch runs."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from policygate.resolution.models import Resolution, ResolutionState, Success, put_result

if TYPE_CHECKING:
    from policygate.config.models import PolicyGateConfig

logger = logging.getLogger(__name__)


class Executor:
    """Resolves a set of sibling fields in passes.

    Each pass advances every unresolved field until it suspends or resolves.
    Fields share one context: whatever a field writes (typically the
    ``loader``) is visible to the fields after it. When fields are
    suspended, every distinct loader they hold is run exactly once and the
    suspended fields are resumed.

    A ``config`` is published to the fields as the ``"config"`` context
    entry, where ``Authorize`` reads it when it has to build a default loader.
    """

    def __init__(
        self,
        context: Mapping[str, Any] | None = None,
        *,
        config: PolicyGateConfig | None = None,
    ) -> None:
        self.context: dict[str, Any] = dict(context or {})
        if config is not None:
            self.context["config"] = config
        self.loader_runs = 0

    def execute(self, resolutions: list[Resolution]) -> list[Resolution]:
        results = list(resolutions)
        passes = 0
        while True:
            for i, resolution in enumerate(results):
                if resolution.state is ResolutionState.unresolved:
                    results[i] = self._advance(resolution)

            suspended = [i for i, r in enumerate(results) if r.state is ResolutionState.suspended]
            if not suspended:
                return results

            passes += 1
            ran = self._run_loaders([results[i] for i in suspended])
            logger.debug(
                "pass %d: resuming %d suspended field(s) after %d loader run(s)",
                passes, len(suspended), len(ran),
            )
            for i in suspended:
                resolution = results[i]
                loader = resolution.context.get("loader")
                if loader is not None:
                    resolution = resolution.model_copy(
                        update={"context": {**resolution.context, "loader": ran[id(loader)]}}
                    )
                results[i] = self._call_next(resolution)

    def _advance(self, resolution: Resolution) -> Resolution:
        resolution = resolution.model_copy(
            update={"context": {**resolution.context, **self.context}}
        )
        while resolution.state is ResolutionState.unresolved:
            if not resolution.middleware:
                return put_result(resolution, Success(value=None))
            resolution = self._call_next(resolution)
            self.context.update(resolution.context)
        return resolution

    def _call_next(self, resolution: Resolution) -> Resolution:
        (middleware, params), *rest = resolution.middleware
        return middleware.call(resolution.model_copy(update={"middleware": rest}), params)

    def _run_loaders(self, suspended: list[Resolution]) -> dict[int, Any]:
        ran: dict[int, Any] = {}
        for resolution in suspended:
            loader = resolution.context.get("loader")
            if loader is None or id(loader) in ran:
                continue
            ran[id(loader)] = loader.run()
            self.loader_runs += 1

        shared = self.context.get("loader")
        if shared is not None and id(shared) in ran:
            self.context["loader"] = ran[id(shared)]
        return ran
