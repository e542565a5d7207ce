"""Synchronous authorization: evaluate a policy, running one batch round trip if deferred."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from policygate.dataloader import Loader
from policygate.errors import InvalidPolicyResultError, MissingDataSourceError
from policygate.verdict import Allowed, Deferred, Denied, Verdict, normalize

if TYPE_CHECKING:
    from policygate.config.models import PolicyGateConfig
    from policygate.interfaces.loader import BatchLoader
    from policygate.interfaces.policy import Policy

logger = logging.getLogger(__name__)


def permit(
    policy: Policy,
    action: Any,
    actor: Any,
    *,
    subject: Any = None,
    loader: BatchLoader | None = None,
    config: PolicyGateConfig | None = None,
) -> Allowed | Denied:
    """Authorize ``actor`` to perform ``action`` on ``subject``.

    A deferred policy result is loaded into ``loader`` (or a fresh
    ``default_loader(policy, config)``), the loader is run, and the fetched
    value is normalized as the final verdict. Passing the same loader to several calls
    reuses inputs it has already fetched.

    Example::

        verdict = permit(accounts, "view_email", current_user, subject=other_user)
        if isinstance(verdict, Denied):
            return verdict.error
    """
    verdict = normalize(policy.authorize(action, actor, subject))
    if not isinstance(verdict, Deferred):
        return verdict

    request = verdict.request
    if loader is None:
        loader = default_loader(policy, config)

    logger.debug(
        "deferring %r to batch %r/%r", action, request.source, request.batch_key
    )
    loader.load(request.source, request.batch_key, request.input)
    loader.run()
    value = loader.get(request.source, request.batch_key, request.input)
    return _final(normalize(value), value, action)


def is_permitted(
    policy: Policy,
    action: Any,
    actor: Any,
    *,
    subject: Any = None,
    loader: BatchLoader | None = None,
    config: PolicyGateConfig | None = None,
) -> bool:
    """Same as ``permit`` but returns a bool."""
    verdict = permit(policy, action, actor, subject=subject, loader=loader, config=config)
    return isinstance(verdict, Allowed)


def enforce(
    policy: Policy,
    action: Any,
    actor: Any,
    *,
    subject: Any = None,
    loader: BatchLoader | None = None,
    config: PolicyGateConfig | None = None,
) -> None:
    """Same as ``permit`` but raises ``UnauthorizedError`` on denial."""
    verdict = permit(policy, action, actor, subject=subject, loader=loader, config=config)
    if isinstance(verdict, Denied):
        raise verdict.error


def default_loader(policy: Any, config: PolicyGateConfig | None = None) -> Loader:
    """Return a new loader with a single source registered under ``policy``.

    Requires ``policy.data()`` to build the source.

    Raises:
        MissingDataSourceError: ``policy`` has no ``data()`` method.
    """
    data = getattr(policy, "data", None)
    if not callable(data):
        raise MissingDataSourceError(policy)

    max_batch_size = config.loader.max_batch_size if config is not None else None
    return Loader(max_batch_size=max_batch_size).add_source(policy, data())


def _final(verdict: Verdict, value: Any, action: Any) -> Allowed | Denied:
    # A batch must settle the check; deferring again is a policy bug.
    if isinstance(verdict, Deferred):
        raise InvalidPolicyResultError(value, action)
    return verdict
