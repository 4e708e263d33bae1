"""Cache module for KV-Server."""

from .store import KVStore, SharedStore
from .value import Value, ValueType

__all__ = ["KVStore", "SharedStore", "Value", "ValueType"]
