"""SQLiteAdapter — durable rule table backed by aiosqlite."""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

try:
    import aiosqlite
except ImportError as exc:
    raise ImportError(
        "SQLiteAdapter requires the 'aiosqlite' package. "
        "Install it with: pip install aiosqlite"
    ) from exc

from policy_adapter.adapters.base import Adapter
from policy_adapter.codec import SLOT_NAMES
from policy_adapter.exceptions import SaveFailedError, StoreUnavailableError
from policy_adapter.rule import StorageRecord

logger = structlog.get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SAVEPOINT = "policy_adapter"
_COLUMNS = ("ptype", *SLOT_NAMES)


class SQLiteAdapter(Adapter):
    """Rule table in a SQLite database.

    Parameters:
        path:         Database file.  ``":memory:"`` gives a private
                      in-memory database (useful for testing).
        connection:   An already open ``aiosqlite.Connection`` to use instead
                      of *path*.  The adapter never closes a connection it
                      did not create.
        table_name:   Name of the rule table.
        timeout:      Seconds allowed for each operation.
        create_table: Create the table and its index on ``open()``.

    Every write runs in a transaction.  When a borrowed connection is
    already inside a transaction the adapter uses a savepoint, leaving the
    outer commit to its owner.

    Reads and transactions on the connection are serialized by a lock, so
    concurrent calls on one adapter never see each other's uncommitted work.
    """

    def __init__(
        self,
        path: str = "policy.db",
        *,
        connection: aiosqlite.Connection | None = None,
        table_name: str = "casbin_rule",
        timeout: float | None = None,
        create_table: bool = True,
    ) -> None:
        if not _IDENTIFIER.match(table_name):
            raise ValueError(f"Invalid table name: {table_name!r}")
        super().__init__(timeout=timeout)
        self._path = path
        self._db = connection
        self._owns_connection = connection is None
        self._table = table_name
        self._create_table = create_table
        # One connection has one transaction; coroutines must take turns on it.
        self._lock = asyncio.Lock()

    @property
    def owns_connection(self) -> bool:
        return self._owns_connection

    @property
    def table_name(self) -> str:
        return self._table

    # ── lifecycle hooks ──────────────────────────────────────

    async def _open(self) -> None:
        try:
            if self._db is None:
                self._db = await aiosqlite.connect(self._path)
            if self._create_table:
                async with self._transaction("open") as db:
                    await db.execute(self._create_table_sql())
                    await db.execute(
                        f"CREATE INDEX IF NOT EXISTS ix_{self._table}_ptype "
                        f"ON {self._table} (ptype)"
                    )
        except aiosqlite.Error as exc:
            if self._owns_connection and self._db is not None:
                await self._db.close()
                self._db = None
            raise StoreUnavailableError("open", str(exc)) from exc

    async def _close(self) -> None:
        if self._db is not None and self._owns_connection:
            await self._db.close()
        self._db = None
        logger.debug("connection_released", owns_connection=self._owns_connection)

    # ── record hooks ─────────────────────────────────────────

    async def _fetch_records(self) -> list[StorageRecord]:
        db = self._connection("load_policy")
        columns = ", ".join(_COLUMNS)
        try:
            async with self._lock, db.execute(
                f"SELECT id, {columns} FROM {self._table}"
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StoreUnavailableError("load_policy", str(exc)) from exc
        return [
            StorageRecord(id=row[0], ptype=row[1], **dict(zip(SLOT_NAMES, row[2:], strict=True)))
            for row in rows
        ]

    async def _replace_all(self, records: list[StorageRecord]) -> None:
        try:
            async with self._transaction("save_policy") as db:
                await db.execute(f"DELETE FROM {self._table}")
                await db.executemany(self._insert_sql(), [self._row(r) for r in records])
        except aiosqlite.Error as exc:
            raise SaveFailedError("save_policy", str(exc)) from exc

    async def _insert(self, records: list[StorageRecord]) -> None:
        try:
            async with self._transaction("add_policy") as db:
                await db.executemany(self._insert_sql(), [self._row(r) for r in records])
        except aiosqlite.Error as exc:
            raise SaveFailedError("add_policy", str(exc)) from exc

    async def _delete(self, records: list[StorageRecord]) -> int:
        # IS compares NULL to NULL, so absent slots only match absent slots.
        where = " AND ".join(f"{column} IS ?" for column in _COLUMNS)
        removed = 0
        try:
            async with self._transaction("remove_policy") as db:
                for record in records:
                    cursor = await db.execute(
                        f"DELETE FROM {self._table} WHERE {where}", self._row(record)
                    )
                    removed += cursor.rowcount
        except aiosqlite.Error as exc:
            raise SaveFailedError("remove_policy", str(exc)) from exc
        return removed

    async def _delete_filtered(self, ptype: str, constraints: dict[str, str]) -> int:
        clauses = ["ptype = ?", *(f"{slot} = ?" for slot in constraints)]
        params = (ptype, *constraints.values())
        try:
            async with self._transaction("remove_filtered_policy") as db:
                cursor = await db.execute(
                    f"DELETE FROM {self._table} WHERE {' AND '.join(clauses)}", params
                )
                removed = cursor.rowcount
        except aiosqlite.Error as exc:
            raise SaveFailedError("remove_filtered_policy", str(exc)) from exc
        return removed

    # ── helpers ──────────────────────────────────────────────

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        """Run the block in a transaction; anything but a clean exit rolls back."""
        db = self._connection(operation)
        async with self._lock:
            nested = db.in_transaction
            try:
                # aiosqlite runs requests in order, so a rollback queued after a
                # cancelled BEGIN still runs after it.
                await db.execute(f"SAVEPOINT {_SAVEPOINT}" if nested else "BEGIN IMMEDIATE")
                yield db
                if nested:
                    await db.execute(f"RELEASE SAVEPOINT {_SAVEPOINT}")
                else:
                    await db.commit()
            except BaseException as exc:
                await self._rollback(db, nested)
                logger.warning(
                    "transaction_rolled_back", operation=operation, error=type(exc).__name__
                )
                raise

    async def _rollback(self, db: aiosqlite.Connection, nested: bool) -> None:
        try:
            if nested:
                await db.execute(f"ROLLBACK TO SAVEPOINT {_SAVEPOINT}")
                await db.execute(f"RELEASE SAVEPOINT {_SAVEPOINT}")
            else:
                await db.rollback()
        except aiosqlite.Error:
            # The original error is re-raised by the caller.
            logger.exception("rollback_failed")

    def _connection(self, operation: str) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreUnavailableError(operation, "no database connection")
        return self._db

    def _create_table_sql(self) -> str:
        slots = ",\n    ".join(f"{slot} TEXT" for slot in SLOT_NAMES)
        return (
            f"CREATE TABLE IF NOT EXISTS {self._table} (\n"
            f"    id    INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            f"    ptype TEXT NOT NULL,\n"
            f"    {slots}\n"
            f")"
        )

    def _insert_sql(self) -> str:
        placeholders = ", ".join("?" for _ in _COLUMNS)
        return f"INSERT INTO {self._table} ({', '.join(_COLUMNS)}) VALUES ({placeholders})"

    @staticmethod
    def _row(record: StorageRecord) -> tuple[str | None, ...]:
        return (record.ptype, *record.slots)
