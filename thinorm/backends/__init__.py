"""
thinorm backends package - pluggable database adapters.

Provides a common adapter interface and implementations for:
- SQLite (default, via aiosqlite)
- MySQL (via aiomysql)
"""

from .base import BackendAdapter, AdapterCapabilities, ExecResult
from .sqlite import SQLiteAdapter
from .mysql import MySQLAdapter

__all__ = [
    "BackendAdapter",
    "AdapterCapabilities",
    "ExecResult",
    "SQLiteAdapter",
    "MySQLAdapter",
]
