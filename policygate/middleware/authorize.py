"""Authorization middleware for batched field resolution.

Each time a policy defers its verdict with a ``BatchRequest``, the request is
loaded (accumulated) into a loader instead of being fetched right away, and
the field is suspended. The executor runs the loader once for every
suspended sibling, so a list of 500 records costs one batch query per batch
key instead of 500 permission queries.

Options:

* ``actor`` - the actor, or ``FromContext`` reading it from the context.
* ``subject`` - passed to ``authorize``; defaults to the field's ``source``.
* ``loader`` - a loader, or ``FromContext`` reading it from the context.
  Falls back to ``default_loader(policy, config)``.
* ``config`` - a ``PolicyGateConfig`` for that fallback loader; defaults to
  the ``"config"`` entry of the context, which ``Executor(config=...)`` sets.
* ``callback`` - receives the final ``Allowed``/``Denied`` verdict and
  returns the field's ``Success``/``Failure``.

A deferred check whose input the loader has already fetched is settled on
the spot without suspending: an allowed field stays ``unresolved`` and a
denied one goes straight to ``resolved`` with its error, instead of being
handed back ``unresolved`` with the cached verdict skipped.

Example::

    steps = [
        authorize(
            blog,
            "view_stats",
            actor=FromContext.key("current_user"),
            loader=FromContext.key("loader"),
            callback=lambda verdict: Success(value=isinstance(verdict, Allowed)),
        ),
        resolve_with(lambda post, ctx: post.stats),
    ]
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from policygate.errors import InvalidPolicyResultError
from policygate.options import UNSET, resolve_option
from policygate.permit import default_loader
from policygate.resolution.batch import BatchMiddleware
from policygate.resolution.models import (
    Failure,
    FieldResult,
    Resolution,
    ResolutionState,
    put_result,
)
from policygate.verdict import Allowed, BatchRequest, Deferred, Denied, normalize

if TYPE_CHECKING:
    from policygate.config.models import PolicyGateConfig
    from policygate.interfaces.loader import BatchLoader
    from policygate.interfaces.policy import Policy

logger = logging.getLogger(__name__)

Callback = Callable[[Allowed | Denied], Any]


@dataclass(frozen=True)
class AuthorizeOptions:
    actor: Any = None
    subject: Any = UNSET
    loader: Any = None
    callback: Callback | None = None
    config: PolicyGateConfig | None = None


class Authorize:
    """Gate a field on ``policy.authorize(action, actor, subject)``.

    Params are ``(action, policy)`` or ``(action, policy, AuthorizeOptions)``
    on first call, and the pending continuation when a suspended field is
    resumed.
    """

    def call(self, resolution: Resolution, params: Any) -> Resolution:
        if resolution.state is ResolutionState.unresolved and isinstance(params, tuple):
            if len(params) == 2:
                action, policy = params
                options = AuthorizeOptions()
            else:
                action, policy, options = params
            return self._authorize(resolution, action, policy, options)

        if resolution.state is ResolutionState.suspended and callable(params):
            return self._resume(resolution, params(resolution.context["loader"]))

        return resolution

    def _authorize(
        self, resolution: Resolution, action: Any, policy: Policy, options: AuthorizeOptions
    ) -> Resolution:
        actor = resolve_option(options.actor, resolution.context)
        subject = resolution.source if options.subject is UNSET else options.subject
        callback = options.callback

        verdict = normalize(policy.authorize(action, actor, subject), action)

        if isinstance(verdict, Allowed):
            if callback is None:
                return resolution
            return put_result(resolution, callback(verdict))

        if isinstance(verdict, Denied):
            logger.debug("denied %r: %s", action, verdict.message)
            if callback is None:
                return put_result(resolution, Failure(error=verdict.error))
            return put_result(resolution, callback(verdict))

        request = verdict.request
        loader = self._loader(resolution, policy, options)
        loader.load(request.source, request.batch_key, request.input)
        on_load = _on_load(request, action, callback)
        context = {**resolution.context, "loader": loader}

        if callback is not None:
            return resolution.model_copy(
                update={
                    "context": context,
                    "middleware": resolution.push((BatchMiddleware(), (loader, on_load))),
                }
            )

        if not loader.pending_batches():
            # Already fetched by an earlier check on this loader.
            return self._resume(resolution.model_copy(update={"context": context}), on_load(loader))

        logger.debug(
            "suspending %r on batch %r/%r", action, request.source, request.batch_key
        )
        return resolution.model_copy(
            update={
                "state": ResolutionState.suspended,
                "context": context,
                "middleware": resolution.push((self, on_load)),
            }
        )

    def _resume(self, resolution: Resolution, outcome: Any) -> Resolution:
        if isinstance(outcome, Allowed):
            return resolution.model_copy(update={"state": ResolutionState.unresolved})
        if isinstance(outcome, Denied):
            return put_result(resolution, Failure(error=outcome.error))
        return put_result(resolution, outcome)

    @staticmethod
    def _loader(resolution: Resolution, policy: Policy, options: AuthorizeOptions) -> BatchLoader:
        loader = resolve_option(options.loader, resolution.context)
        if loader is not None:
            return loader
        config = options.config
        if config is None:
            config = resolution.context.get("config")
        return default_loader(policy, config)


def _on_load(
    request: BatchRequest, action: Any, callback: Callback | None
) -> Callable[[BatchLoader], FieldResult | Allowed | Denied]:
    def continuation(loader: BatchLoader) -> Any:
        value = loader.get(request.source, request.batch_key, request.input)
        verdict = normalize(value, action)
        if isinstance(verdict, Deferred):
            raise InvalidPolicyResultError(value, action)
        if callback is None:
            return verdict
        return callback(verdict)

    return continuation


def authorize(
    policy: Policy,
    action: Any,
    *,
    actor: Any = None,
    subject: Any = UNSET,
    loader: BatchLoader | Any = None,
    callback: Callback | None = None,
    config: PolicyGateConfig | None = None,
) -> tuple[Authorize, tuple]:
    """Build an ``Authorize`` middleware step."""
    options = AuthorizeOptions(
        actor=actor, subject=subject, loader=loader, callback=callback, config=config
    )
    return (Authorize(), (action, policy, options))
