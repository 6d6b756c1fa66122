"""
thinorm query - lazy builders and their execution entry points.

Building a query never touches the backend. Each ``Connection`` verb returns
a builder holding one pending operation; I/O happens only when its
execution method is awaited:

    user = await conn.add(User(name="John", age=30)).apply()
    found = await conn.find_one(User, user.id).run()
    some = await conn.find_many(User, "age > 18").limit(10).run()
    count = await conn.modify(user).run()
    rows = await conn.query("SELECT name FROM user").exec()

Awaiting the same builder twice renders and submits the statement twice.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, List, Optional, TYPE_CHECKING, TypeVar

from .faults import InsertFault, QueryBuildFault
from .mapper import Mapper, is_unset_key
from .values import Row, Value

if TYPE_CHECKING:
    from .connection import Connection


__all__ = [
    "Operation",
    "QueryBuilder",
    "InsertQuery",
    "FetchOneQuery",
    "FetchManyQuery",
    "CountQuery",
    "RawQuery",
    "RawUpdate",
]

T = TypeVar("T")


class Operation(str, Enum):
    INSERT = "insert"
    SELECT_BY_KEY = "select_by_key"
    SELECT_ALL = "select_all"
    SELECT_WHERE = "select_where"
    UPDATE = "update"
    DELETE = "delete"
    RAW_QUERY = "raw_query"
    RAW_EXEC = "raw_exec"


# Operations that accept limit()
LIMITABLE = frozenset({Operation.SELECT_ALL, Operation.SELECT_WHERE})


class QueryBuilder:
    """
    One pending operation plus its modifiers. Immutable: modifiers return
    a new builder.

    Write verbs hold the record's ``Row``, taken when the builder was made,
    so later changes to the record do not reach the statement.
    """

    __slots__ = ("_conn", "_operation", "_mapper", "_payload", "_limit")

    def __init__(
        self,
        conn: Connection,
        operation: Operation,
        *,
        mapper: Optional[Mapper] = None,
        payload: Any = None,
        limit: Optional[int] = None,
    ):
        self._conn = conn
        self._operation = operation
        self._mapper = mapper
        self._payload = payload
        self._limit = limit

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def limit_value(self) -> Optional[int]:
        return self._limit

    @property
    def sql(self) -> str:
        """Statement text this builder would submit (no I/O)."""
        return self.render()

    def limit(self, n: int) -> QueryBuilder:
        """
        Cap the number of returned records.

        Only ``find_all``/``find_many`` accept a limit; any other builder
        raises ``QueryBuildFault``.
        """
        if self._operation not in LIMITABLE:
            raise QueryBuildFault(
                operation=self._operation.value,
                reason="limit() applies only to find_all/find_many",
            )
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise QueryBuildFault(operation=self._operation.value, reason=f"invalid limit {n!r}")
        return self._clone(limit=n)

    def _clone(self, **changes: Any) -> QueryBuilder:
        state = {
            "mapper": self._mapper,
            "payload": self._payload,
            "limit": self._limit,
        }
        state.update(changes)
        return type(self)(self._conn, self._operation, **state)

    def render(self) -> str:
        dialect = self._conn.dialect
        op = self._operation

        if op is Operation.RAW_QUERY or op is Operation.RAW_EXEC:
            return self._payload

        meta = self._mapper.metadata
        if op is Operation.INSERT:
            keyed = not is_unset_key(self._payload[meta.primary_key_index])
            return dialect.render_insert(meta, self._payload, include_key=keyed)
        if op is Operation.SELECT_BY_KEY:
            return dialect.render_select_by_key(meta, Value.from_python(self._payload))
        if op is Operation.SELECT_ALL:
            return dialect.render_select(meta, limit=self._limit)
        if op is Operation.SELECT_WHERE:
            return dialect.render_select(meta, where=self._payload, limit=self._limit)
        if op is Operation.UPDATE:
            return dialect.render_update(meta, self._payload)
        if op is Operation.DELETE:
            return dialect.render_delete(meta, self._payload[meta.primary_key_index])
        raise QueryBuildFault(operation=str(op), reason="unknown operation")

    def __repr__(self) -> str:
        target = self._mapper.metadata.name if self._mapper else "<raw>"
        extra = f", limit={self._limit}" if self._limit is not None else ""
        return f"{self.__class__.__name__}({self._operation.value} on {target}{extra})"


class InsertQuery(QueryBuilder, Generic[T]):
    """Result of ``Connection.add``."""

    __slots__ = ()

    async def apply(self) -> T:
        """
        Insert the record, then read it back.

        The read-back selects by the record's own key when it carried one,
        otherwise by the id the backend generated.

        Raises:
            InsertFault: When the stored row cannot be found afterwards.
        """
        conn = self._conn
        conn.ensure_open("add")
        meta = self._mapper.metadata
        dialect = conn.dialect

        row = self._payload
        key = row[meta.primary_key_index]
        keyed = not is_unset_key(key)

        result = await conn.submit(dialect.render_insert(meta, row, include_key=keyed), "add")

        if keyed:
            lookup = dialect.render_select_by_key(meta, key)
        elif result.lastrowid:
            lookup = dialect.render_generated_lookup(meta, result.lastrowid)
        else:
            raise InsertFault(table=meta.name, reason="backend reported no generated id")

        rows = await conn.fetch(lookup, "add")
        if not rows:
            raise InsertFault(table=meta.name, reason="inserted row not found on read-back")
        return self._mapper.from_row(rows[0])


class FetchOneQuery(QueryBuilder, Generic[T]):
    """Result of ``Connection.find_one``."""

    __slots__ = ()

    async def run(self) -> Optional[T]:
        """The matching record, or ``None`` when no row has that key."""
        self._conn.ensure_open("find_one")
        rows = await self._conn.fetch(self.render(), "find_one")
        if not rows:
            return None
        return self._mapper.from_row(rows[0])


class FetchManyQuery(QueryBuilder, Generic[T]):
    """Result of ``Connection.find_all`` / ``Connection.find_many``."""

    __slots__ = ()

    async def run(self) -> List[T]:
        """Records in backend return order."""
        operation = "find_all" if self._operation is Operation.SELECT_ALL else "find_many"
        self._conn.ensure_open(operation)
        rows = await self._conn.fetch(self.render(), operation)
        return [self._mapper.from_row(row) for row in rows]


class CountQuery(QueryBuilder):
    """Result of ``Connection.modify`` / ``Connection.remove``."""

    __slots__ = ()

    async def run(self) -> int:
        """Number of rows the backend reports as affected."""
        operation = "modify" if self._operation is Operation.UPDATE else "remove"
        self._conn.ensure_open(operation)
        result = await self._conn.submit(self.render(), operation)
        return result.rowcount


class RawQuery(QueryBuilder):
    """Result of ``Connection.query``."""

    __slots__ = ()

    async def exec(self) -> List[Row]:
        self._conn.ensure_open("query")
        return await self._conn.fetch(self._payload, "query")


class RawUpdate(QueryBuilder):
    """Result of ``Connection.query_update``."""

    __slots__ = ()

    async def exec(self) -> int:
        self._conn.ensure_open("query_update")
        result = await self._conn.submit(self._payload, "query_update")
        return result.rowcount
