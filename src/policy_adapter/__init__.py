"""policy_adapter — relational storage for access-control policy rules.

Rules travel between an engine's in-memory model and a single rule table.
Saving replaces the whole table atomically; adds and removes touch only
the rows they name.
"""

from policy_adapter._internal.lifecycle import AdapterState
from policy_adapter.adapters import Adapter, InMemoryAdapter, SQLiteAdapter, create_adapter
from policy_adapter.codec import MAX_ARITY, decode, encode
from policy_adapter.config import AdapterConfig
from policy_adapter.exceptions import (
    AdapterError,
    AdapterStateError,
    ArityError,
    FilterNotSupportedError,
    NotOpenError,
    SaveFailedError,
    StoreError,
    StoreUnavailableError,
)
from policy_adapter.model import PolicyModel, RuleModel
from policy_adapter.rule import PolicyRule, StorageRecord

__all__ = [
    "MAX_ARITY",
    "Adapter",
    "AdapterConfig",
    "AdapterError",
    "AdapterState",
    "AdapterStateError",
    "ArityError",
    "FilterNotSupportedError",
    "InMemoryAdapter",
    "NotOpenError",
    "PolicyModel",
    "PolicyRule",
    "RuleModel",
    "SQLiteAdapter",
    "SaveFailedError",
    "StorageRecord",
    "StoreError",
    "StoreUnavailableError",
    "create_adapter",
    "decode",
    "encode",
]
