"""policygate - batched authorization checks for list and field resolution."""

from policygate.config import PolicyGateConfig, configure_logging, load_config
from policygate.dataloader import KVSource, Loader, LoaderError
from policygate.errors import InvalidPolicyResultError, MissingDataSourceError, UnauthorizedError
from policygate.interfaces import BatchLoader, DataSource, DataSourcePolicy, Policy
from policygate.middleware import Authorize, authorize
from policygate.options import UNSET, FromContext
from policygate.permit import default_loader, enforce, is_permitted, permit
from policygate.verdict import (
    OK,
    Allowed,
    BatchRequest,
    Deferred,
    Denied,
    Deny,
    Verdict,
    normalize,
)

__version__ = "0.1.0"

__all__ = [
    "OK",
    "UNSET",
    "Allowed",
    "Authorize",
    "BatchLoader",
    "BatchRequest",
    "DataSource",
    "DataSourcePolicy",
    "Deferred",
    "Denied",
    "Deny",
    "FromContext",
    "InvalidPolicyResultError",
    "KVSource",
    "Loader",
    "LoaderError",
    "MissingDataSourceError",
    "Policy",
    "PolicyGateConfig",
    "UnauthorizedError",
    "Verdict",
    "authorize",
    "configure_logging",
    "default_loader",
    "enforce",
    "is_permitted",
    "load_config",
    "normalize",
    "permit",
]
