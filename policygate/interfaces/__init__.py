"""Protocols for policies and batch loaders."""

from policygate.interfaces.loader import BatchLoader, DataSource
from policygate.interfaces.policy import DataSourcePolicy, Policy

__all__ = [
    "BatchLoader",
    "DataSource",
    "DataSourcePolicy",
    "Policy",
]
