"""
thinorm - thin async relational mapper for SQLite and MySQL.

Complete integration of:
- Values: tagged column values and positional rows
- Metadata: table descriptions reflected from dataclasses
- Dialects: per-backend quoting, literals and statement rendering
- Query builders: lazy, immutable, executed by apply/run/exec
- Connection: the sole execution gateway, with an Open/Closed lifecycle
- Faults: structured errors for every public operation

Usage:
    from thinorm import connect, table, column

    @table("user")
    @dataclass
    class User:
        id: int = column(primary_key=True, default=0)
        name: str = ""
        age: int = 0

    conn = await connect("sqlite:///:memory:")
    await conn.create_table(User)
    john = await conn.add(User(name="John", age=30)).apply()
"""

__version__ = "0.1.0"

from .values import Value, ValueKind, Row, unwrap_optional
from .metadata import (
    ColumnMeta,
    TableMetadata,
    TableBinding,
    table,
    column,
    register_table,
    binding_for,
)
from .mapper import Mapper
from .dialects import Dialect, SQLiteDialect, MySQLDialect, get_dialect
from .query import (
    Operation,
    QueryBuilder,
    InsertQuery,
    FetchOneQuery,
    FetchManyQuery,
    CountQuery,
    RawQuery,
    RawUpdate,
)
from .connection import Connection, ConnectionState, connect
from .config import ConnectionConfig, ConfigLoader
from .script import read_script, split_statements
from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ORMFault,
    ORMError,
    ConnectionFault,
    ConnectionClosedFault,
    SQLFault,
    SqlError,
    QueryBuildFault,
    InsertFault,
    MappingFault,
    MappingError,
    SchemaScriptFault,
    ConfigFault,
)

__all__ = [
    "__version__",
    # Values
    "Value",
    "ValueKind",
    "Row",
    "unwrap_optional",
    # Metadata
    "ColumnMeta",
    "TableMetadata",
    "TableBinding",
    "table",
    "column",
    "register_table",
    "binding_for",
    "Mapper",
    # Dialects
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    # Queries
    "Operation",
    "QueryBuilder",
    "InsertQuery",
    "FetchOneQuery",
    "FetchManyQuery",
    "CountQuery",
    "RawQuery",
    "RawUpdate",
    # Connection
    "Connection",
    "ConnectionState",
    "connect",
    "ConnectionConfig",
    "ConfigLoader",
    "read_script",
    "split_statements",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ORMFault",
    "ORMError",
    "ConnectionFault",
    "ConnectionClosedFault",
    "SQLFault",
    "SqlError",
    "QueryBuildFault",
    "InsertFault",
    "MappingFault",
    "MappingError",
    "SchemaScriptFault",
    "ConfigFault",
]
