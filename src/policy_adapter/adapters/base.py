"""Adapter ABC — the storage contract the policy engine talks to."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from policy_adapter._internal.lifecycle import AdapterState, Lifecycle
from policy_adapter.codec import decode, encode, filter_slots
from policy_adapter.exceptions import FilterNotSupportedError
from policy_adapter.model import SECTIONS

if TYPE_CHECKING:
    from typing import Self

    from policy_adapter.model import RuleModel
    from policy_adapter.rule import StorageRecord

logger = structlog.get_logger(__name__)


class Adapter(ABC):
    """Abstract base for all storage backends.

    The public coroutines implement the engine-facing contract: they check
    the lifecycle, encode rules (so arity errors happen before any I/O),
    apply the per-operation timeout and log.  Backends only implement the
    record-level hooks (``_fetch_records``, ``_replace_all``, ``_insert``,
    ``_delete`` and optionally ``_delete_filtered``).

    Multi-record hooks must be atomic: on any failure, cancellation or
    timeout the store is left exactly as it was.

    Parameters:
        timeout: Seconds allowed for each operation.  ``None`` disables it.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self._lifecycle = Lifecycle()
        self._timeout = timeout

    @classmethod
    async def new_adapter(cls, *args: Any, **kwargs: Any) -> Self:
        """Construct and open an adapter in one call."""
        adapter = cls(*args, **kwargs)
        await adapter.open()
        return adapter

    @property
    def state(self) -> AdapterState:
        return self._lifecycle.state

    # ── lifecycle ────────────────────────────────────────────

    async def open(self) -> None:
        """Acquire the backing store.  Callable once per instance."""
        self._lifecycle.require_unopened()
        await self._open()
        self._lifecycle.mark_open()
        logger.debug("adapter_opened", adapter=type(self).__name__)

    async def close(self) -> None:
        """Release the backing store.  No-op when already closed."""
        if self._lifecycle.state is AdapterState.CLOSED:
            return
        was_open = self._lifecycle.state is AdapterState.OPEN
        self._lifecycle.mark_closed()
        if was_open:
            await self._close()
        logger.debug("adapter_closed", adapter=type(self).__name__)

    async def __aenter__(self) -> Self:
        if self._lifecycle.state is AdapterState.UNOPENED:
            await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── engine contract ──────────────────────────────────────

    async def load_policy(self, model: RuleModel) -> None:
        """Add every stored rule to *model*.

        All records are fetched before the model is touched, so a read
        failure leaves *model* as it was.
        """
        self._lifecycle.require_open("load_policy")
        async with asyncio.timeout(self._timeout):
            records = await self._fetch_records()
        for record in records:
            rule = decode(record)
            model.add_rule(rule.section, rule.ptype, list(rule.params))
        logger.debug("policy_loaded", count=len(records))

    async def save_policy(self, model: RuleModel) -> bool:
        """Replace the whole stored rule set with the rules held by *model*."""
        self._lifecycle.require_open("save_policy")
        records = [
            encode(ptype, params)
            for section in SECTIONS
            for ptype, params in model.iter_rules(section)
        ]
        async with asyncio.timeout(self._timeout):
            await self._replace_all(records)
        logger.debug("policy_saved", count=len(records))
        return True

    async def add_policy(self, section: str, ptype: str, rule: Sequence[str]) -> None:
        """Insert one rule.  Duplicates are not checked."""
        self._lifecycle.require_open("add_policy")
        record = encode(ptype, rule)
        async with asyncio.timeout(self._timeout):
            await self._insert([record])
        logger.debug("policy_added", section=section, ptype=ptype, count=1)

    async def add_policies(
        self, section: str, ptype: str, rules: Iterable[Sequence[str]]
    ) -> None:
        """Insert several rules in one transaction."""
        self._lifecycle.require_open("add_policies")
        records = [encode(ptype, rule) for rule in rules]
        async with asyncio.timeout(self._timeout):
            await self._insert(records)
        logger.debug("policy_added", section=section, ptype=ptype, count=len(records))

    async def remove_policy(self, section: str, ptype: str, rule: Sequence[str]) -> int:
        """Delete every stored copy of a rule.  Returns how many were removed."""
        self._lifecycle.require_open("remove_policy")
        record = encode(ptype, rule)
        async with asyncio.timeout(self._timeout):
            removed = await self._delete([record])
        logger.debug("policy_removed", section=section, ptype=ptype, removed=removed)
        return removed

    async def remove_policies(
        self, section: str, ptype: str, rules: Iterable[Sequence[str]]
    ) -> int:
        """Delete several rules in one transaction."""
        self._lifecycle.require_open("remove_policies")
        records = [encode(ptype, rule) for rule in rules]
        async with asyncio.timeout(self._timeout):
            removed = await self._delete(records)
        logger.debug("policy_removed", section=section, ptype=ptype, removed=removed)
        return removed

    async def remove_filtered_policy(
        self,
        section: str,
        ptype: str,
        field_index: int,
        *field_values: str | None,
    ) -> int:
        """Delete every rule of *ptype* matching a positional pattern.

        ``field_values[i]`` must equal slot ``field_index + i``; ``None``
        entries match anything.  Slots outside the pattern are ignored.
        """
        self._lifecycle.require_open("remove_filtered_policy")
        constraints = filter_slots(ptype, field_index, field_values)
        async with asyncio.timeout(self._timeout):
            removed = await self._delete_filtered(ptype, constraints)
        logger.debug(
            "policy_removed",
            section=section,
            ptype=ptype,
            field_index=field_index,
            removed=removed,
        )
        return removed

    # ── backend hooks ────────────────────────────────────────

    @abstractmethod
    async def _open(self) -> None: ...

    @abstractmethod
    async def _close(self) -> None: ...

    @abstractmethod
    async def _fetch_records(self) -> list[StorageRecord]:
        """Return every stored record, in any order."""
        ...

    @abstractmethod
    async def _replace_all(self, records: list[StorageRecord]) -> None:
        """Atomically swap the stored records for *records*."""
        ...

    @abstractmethod
    async def _insert(self, records: list[StorageRecord]) -> None:
        """Insert *records* atomically."""
        ...

    @abstractmethod
    async def _delete(self, records: list[StorageRecord]) -> int:
        """Delete every record equal to any of *records* (all fields but ``id``)."""
        ...

    async def _delete_filtered(self, ptype: str, constraints: dict[str, str]) -> int:
        """Delete records of *ptype* whose slots match *constraints*."""
        raise FilterNotSupportedError(
            "remove_filtered_policy", f"{type(self).__name__} has no filtered delete"
        )
