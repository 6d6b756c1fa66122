"""
thinorm dialects - per-backend SQL rendering rules.

A dialect is stateless and chosen once when a connection opens. It turns
structural query data (metadata, rows, keys, predicates) into literal SQL
text. Every value is spliced through ``Dialect.literal`` so the rendered
statement is exactly what the debug log shows.

Usage:
    from thinorm.dialects import get_dialect

    sqlite = get_dialect("sqlite")
    sqlite.render_select(User_meta, where="age > 18", limit=10)
    # 'SELECT * FROM "user" WHERE age > 18 LIMIT 10'
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional

from pymysql.converters import escape_string

from .faults import ConnectionFault, MappingFault
from .metadata import ColumnMeta, TableMetadata
from .values import Row, Value, ValueKind

__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
]


class Dialect:
    """
    Base rendering rules. Subclasses override quoting, escaping, column
    types and the autoincrement fragment.
    """

    name: str = "base"
    identifier_quote: str = '"'
    null_literal: str = "NULL"
    autoincrement: str = "AUTOINCREMENT"
    column_types: Dict[ValueKind, str] = {
        ValueKind.INTEGER: "INTEGER",
        ValueKind.REAL: "REAL",
        ValueKind.TEXT: "TEXT",
        ValueKind.BLOB: "BLOB",
    }

    # ── Quoting & literals ───────────────────────────────────────────

    def quote_identifier(self, name: str) -> str:
        q = self.identifier_quote
        return f"{q}{name.replace(q, q + q)}{q}"

    def escape(self, text: str) -> str:
        """Neutralize quote characters inside a string literal body."""
        return text.replace("'", "''")

    def protect(self, text: str) -> str:
        """Quoted, escaped string literal safe to splice into raw SQL."""
        return f"'{self.escape(text)}'"

    def literal(self, value: Value) -> str:
        if value.kind is ValueKind.NULL:
            return self.null_literal
        if value.kind is ValueKind.INTEGER:
            return str(value.data)
        if value.kind is ValueKind.REAL:
            if not math.isfinite(value.data):
                raise MappingFault(table="<literal>", reason=f"{value.data!r} has no SQL literal")
            return repr(value.data)
        if value.kind is ValueKind.TEXT:
            return self.protect(value.data)
        return f"X'{value.data.hex()}'"

    def limit_clause(self, n: int) -> str:
        return f"LIMIT {int(n)}"

    def table_ref(self, meta: TableMetadata) -> str:
        return self.quote_identifier(meta.name)

    # ── Statements ───────────────────────────────────────────────────

    def render_insert(self, meta: TableMetadata, row: Row, *, include_key: bool) -> str:
        """
        INSERT with literal values. The key column is left out when
        ``include_key`` is false so the backend generates it.
        """
        _check_arity(meta, row)
        cols: List[str] = []
        vals: List[str] = []
        for i, col in enumerate(meta.columns):
            if col.primary_key and not include_key:
                continue
            cols.append(self.quote_identifier(col.name))
            vals.append(self.literal(row[i]))
        if not cols:
            return self.empty_insert(meta)
        return f"INSERT INTO {self.table_ref(meta)} ({', '.join(cols)}) VALUES ({', '.join(vals)})"

    def empty_insert(self, meta: TableMetadata) -> str:
        return f"INSERT INTO {self.table_ref(meta)} DEFAULT VALUES"

    def render_select(
        self,
        meta: TableMetadata,
        *,
        where: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> str:
        sql = f"SELECT * FROM {self.table_ref(meta)}"
        if where is not None:
            sql += f" WHERE {where}"
        if limit is not None:
            sql += f" {self.limit_clause(limit)}"
        return sql

    def render_select_by_key(self, meta: TableMetadata, key: Value) -> str:
        return self.render_select(meta, where=self._key_predicate(meta, key))

    def render_update(self, meta: TableMetadata, row: Row) -> str:
        _check_arity(meta, row)
        sets = [
            f"{self.quote_identifier(col.name)} = {self.literal(row[i])}"
            for i, col in meta.non_key_columns()
        ]
        if not sets:
            raise MappingFault(table=meta.name, reason="no non-key columns to update")
        key = row[meta.primary_key_index]
        return (
            f"UPDATE {self.table_ref(meta)} SET {', '.join(sets)} "
            f"WHERE {self._key_predicate(meta, key)}"
        )

    def render_delete(self, meta: TableMetadata, key: Value) -> str:
        return f"DELETE FROM {self.table_ref(meta)} WHERE {self._key_predicate(meta, key)}"

    def render_generated_lookup(self, meta: TableMetadata, generated_id: int) -> str:
        """SELECT for the row the backend just generated ``generated_id`` for."""
        return self.render_select_by_key(meta, Value.integer(generated_id))

    def _key_predicate(self, meta: TableMetadata, key: Value) -> str:
        return f"{self.quote_identifier(meta.primary_key.name)} = {self.literal(key)}"

    # ── DDL ──────────────────────────────────────────────────────────

    def column_def(self, col: ColumnMeta) -> str:
        parts = [self.quote_identifier(col.name), self.column_types[col.kind]]
        if col.primary_key:
            parts.append("PRIMARY KEY")
            if col.kind is ValueKind.INTEGER:
                parts.append(self.autoincrement)
        elif not col.nullable:
            parts.append("NOT NULL")
        return " ".join(parts)

    def create_table(self, meta: TableMetadata) -> str:
        cols = ", ".join(self.column_def(c) for c in meta.columns)
        return f"CREATE TABLE IF NOT EXISTS {self.table_ref(meta)} ({cols})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class SQLiteDialect(Dialect):
    """
    SQLite rules: double-quoted identifiers, quote-doubling in strings,
    generated keys read back through ``rowid``.
    """

    name = "sqlite"

    def protect(self, text: str) -> str:
        # SQLite rejects statement text containing U+0000
        if "\x00" in text:
            return f"CAST(X'{text.encode('utf-8').hex()}' AS TEXT)"
        return super().protect(text)

    def render_generated_lookup(self, meta: TableMetadata, generated_id: int) -> str:
        return self.render_select(meta, where=f"rowid = {int(generated_id)}")


class MySQLDialect(Dialect):
    """
    MySQL rules: backtick identifiers, backslash escaping in strings,
    ``AUTO_INCREMENT`` keys.
    """

    name = "mysql"
    identifier_quote = "`"
    autoincrement = "AUTO_INCREMENT"
    column_types = {
        ValueKind.INTEGER: "BIGINT",
        ValueKind.REAL: "DOUBLE",
        ValueKind.TEXT: "TEXT",
        ValueKind.BLOB: "BLOB",
    }

    def escape(self, text: str) -> str:
        # Assumes the server runs without NO_BACKSLASH_ESCAPES
        return escape_string(text)

    def empty_insert(self, meta: TableMetadata) -> str:
        return f"INSERT INTO {self.table_ref(meta)} () VALUES ()"

    def column_def(self, col: ColumnMeta) -> str:
        # TEXT/BLOB keys need a bounded type
        if col.primary_key and col.kind in (ValueKind.TEXT, ValueKind.BLOB):
            sql_type = "VARCHAR(255)" if col.kind is ValueKind.TEXT else "VARBINARY(255)"
            return f"{self.quote_identifier(col.name)} {sql_type} PRIMARY KEY"
        return super().column_def(col)


def _check_arity(meta: TableMetadata, row: Row) -> None:
    if len(row) != len(meta.columns):
        raise MappingFault(
            table=meta.name,
            reason=f"row has {len(row)} values, table has {len(meta.columns)} columns",
        )


_DIALECTS: Dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
}


def get_dialect(name: str) -> Dialect:
    """Resolve the shared dialect instance for a driver name."""
    dialect = _DIALECTS.get(name)
    if dialect is None:
        raise ConnectionFault(url=f"<{name}>", reason=f"No dialect registered for driver: {name}")
    return dialect
