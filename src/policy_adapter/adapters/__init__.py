"""Storage backends for policy rules."""

from __future__ import annotations

from policy_adapter.adapters.base import Adapter
from policy_adapter.adapters.memory import InMemoryAdapter
from policy_adapter.adapters.sqlite import SQLiteAdapter
from policy_adapter.config import AdapterConfig


def create_adapter(config: AdapterConfig) -> Adapter:
    """Build an unopened adapter from configuration."""
    if config.type == "sqlite":
        return SQLiteAdapter(
            config.path,
            table_name=config.table_name,
            timeout=config.timeout,
            create_table=config.create_table,
        )
    return InMemoryAdapter(timeout=config.timeout)


__all__ = ["Adapter", "InMemoryAdapter", "SQLiteAdapter", "create_adapter"]
