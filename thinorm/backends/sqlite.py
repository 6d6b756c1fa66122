"""
thinorm backend - SQLite adapter via aiosqlite.

SQLite allows one writer per database, so the adapter keeps a single
aiosqlite handle and serializes every statement through an asyncio lock.
The generated row id is captured from the same cursor, inside the same
lock hold, as the insert that produced it.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any, List, Optional

from .base import (
    BackendAdapter,
    AdapterCapabilities,
    ExecResult,
)
from ..faults import ConnectionFault
from ..values import Row

try:
    import aiosqlite
except ImportError:
    aiosqlite = None  # type: ignore[assignment]

logger = logging.getLogger("thinorm.backends.sqlite")

__all__ = ["SQLiteAdapter"]


class SQLiteAdapter(BackendAdapter):
    """
    SQLite adapter using aiosqlite.

    Features:
    - Single handle, statements serialized (single writer)
    - Foreign key enforcement
    - Commit after every statement
    """

    capabilities = AdapterCapabilities(
        name="sqlite",
        single_writer=True,
        pooled=False,
    )

    def __init__(self):
        self._connection: Any = None
        self._connected = False
        self._lock = asyncio.Lock()
        self._last_insert_id: Optional[int] = None
        self._path = ""

    async def connect(self, url: str, **options: Any) -> None:
        if self._connected:
            return
        if aiosqlite is None:
            raise ImportError(
                "aiosqlite is required for SQLite backend. "
                "Install: pip install aiosqlite"
            )
        async with self._lock:
            if self._connected:
                return
            self._path = self._parse_url(url)
            try:
                self._connection = await aiosqlite.connect(self._path, **options)
                await self._connection.execute("PRAGMA foreign_keys=ON")
            except sqlite3.Error as exc:
                self._connection = None
                raise ConnectionFault(url=url, reason=str(exc)) from exc
            self._connected = True
            logger.info(f"SQLite connected: {self._path}")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        async with self._lock:
            if self._connection:
                await self._connection.close()
                self._connection = None
            self._connected = False
            logger.info("SQLite disconnected")

    async def execute(self, sql: str) -> ExecResult:
        async with self._lock:
            conn = self._require()
            cursor = await conn.execute(sql)
            try:
                rowcount = max(cursor.rowcount, 0)
                lastrowid = cursor.lastrowid
            finally:
                await cursor.close()
            await conn.commit()
            if lastrowid:
                self._last_insert_id = lastrowid
            return ExecResult(rowcount=rowcount, lastrowid=lastrowid)

    async def fetch_all(self, sql: str) -> List[Row]:
        async with self._lock:
            conn = self._require()
            async with conn.execute(sql) as cursor:
                rows = await cursor.fetchall()
            # Statements other than SELECT may arrive through raw queries
            if conn.in_transaction:
                await conn.commit()
            return [Row.from_python(r) for r in rows]

    async def last_insert_id(self) -> Optional[int]:
        return self._last_insert_id

    def _require(self) -> Any:
        if not self._connected or self._connection is None:
            raise ConnectionFault(url=f"sqlite:///{self._path}", reason="Not connected")
        return self._connection

    @property
    def is_connected(self) -> bool:
        return self._connected

    @staticmethod
    def _parse_url(url: str) -> str:
        """Extract file path from sqlite URL."""
        for prefix in ("sqlite:///", "sqlite://"):
            if url.startswith(prefix):
                path = url[len(prefix):]
                return path or ":memory:"
        return url.replace("sqlite:", "").lstrip("/") or ":memory:"
