"""Minimal batch loader implementing the BatchLoader protocol."""

from policygate.dataloader.errors import LoaderError
from policygate.dataloader.kv import KVSource
from policygate.dataloader.loader import Loader

__all__ = ["KVSource", "Loader", "LoaderError"]
