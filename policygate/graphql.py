"""Strawberry GraphQL permission classes backed by policies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from strawberry.permission import BasePermission

from policygate.errors import DEFAULT_MESSAGE
from policygate.options import UNSET, resolve_option
from policygate.permit import permit
from policygate.verdict import Denied

if TYPE_CHECKING:
    from strawberry.types import Info

    from policygate.config.models import PolicyGateConfig
    from policygate.interfaces.policy import Policy

logger = logging.getLogger(__name__)


def policy_permission(
    policy: Policy,
    action: Any,
    *,
    actor: Any = None,
    subject: Any = UNSET,
    loader: Any = None,
    config: PolicyGateConfig | None = None,
) -> type[BasePermission]:
    """Build a permission class checking ``action`` for every resolved field.

    ``actor`` and ``loader`` may be ``FromContext`` readers over
    ``info.context``; ``subject`` defaults to the parent object. Sharing one
    loader through the context lets repeated checks reuse fetched inputs;
    without one, each check builds ``default_loader(policy, config)``.

    A denial raises the permission's ``error_class`` carrying the policy's
    reason; the class-level ``message`` stays the default for every resolution.

    Example::

        CanViewRevenue = policy_permission(
            accounts, "view_revenue", actor=FromContext.key("user"), loader=FromContext.key("loader")
        )

        @strawberry.type
        class Company:
            @strawberry.field(permission_classes=[CanViewRevenue])
            def revenue(self) -> int: ...
    """

    class PolicyPermission(BasePermission):
        message = DEFAULT_MESSAGE

        def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
            context = info.context
            verdict = permit(
                policy,
                action,
                resolve_option(actor, context),
                subject=source if subject is UNSET else subject,
                loader=resolve_option(loader, context),
                config=config,
            )
            if isinstance(verdict, Denied):
                logger.debug("field %s denied: %s", info.field_name, verdict.message)
                raise self.error_class(verdict.message, extensions=self.error_extensions)
            return True

    PolicyPermission.__name__ = PolicyPermission.__qualname__ = f"Permit_{action}"
    return PolicyPermission
