"""InMemoryAdapter — zero-config, list-backed storage for development and testing."""

from __future__ import annotations

import itertools
from dataclasses import replace

from policy_adapter.adapters.base import Adapter
from policy_adapter.codec import matches
from policy_adapter.rule import StorageRecord


class InMemoryAdapter(Adapter):
    """In-memory rule table.  Data is lost on process exit.

    Every mutation builds the new record list first and swaps it in with a
    single assignment, so a failure can never leave a half-applied change.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        super().__init__(timeout=timeout)
        self._records: list[StorageRecord] = []
        self._ids = itertools.count(1)

    async def _open(self) -> None:
        pass

    async def _close(self) -> None:
        self._records = []

    async def _fetch_records(self) -> list[StorageRecord]:
        return list(self._records)

    async def _replace_all(self, records: list[StorageRecord]) -> None:
        self._records = [self._assign_id(r) for r in records]

    async def _insert(self, records: list[StorageRecord]) -> None:
        self._records = self._records + [self._assign_id(r) for r in records]

    async def _delete(self, records: list[StorageRecord]) -> int:
        kept = [r for r in self._records if r not in records]
        removed = len(self._records) - len(kept)
        self._records = kept
        return removed

    async def _delete_filtered(self, ptype: str, constraints: dict[str, str]) -> int:
        kept = [r for r in self._records if not matches(r, ptype, constraints)]
        removed = len(self._records) - len(kept)
        self._records = kept
        return removed

    def _assign_id(self, record: StorageRecord) -> StorageRecord:
        return replace(record, id=next(self._ids))
