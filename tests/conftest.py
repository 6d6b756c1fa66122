"""
Shared test fixtures for the thinorm test suite.
"""

from dataclasses import dataclass
from typing import Optional

import pytest
import pytest_asyncio

from thinorm import ColumnMeta, TableMetadata, ValueKind, column, connect, table


# ============================================================================
# Mapped records
# ============================================================================


@table("user")
@dataclass
class User:
    id: int = 0
    name: Optional[str] = None
    age: int = 0


@table("account")
@dataclass
class Account:
    number: str = column(primary_key=True, default="")
    owner: str = ""
    balance: float = 0.0
    active: bool = True
    avatar: Optional[bytes] = None


@table("counter")
@dataclass
class Counter:
    id: int = 0


USER_SCHEMA = """
-- user table used by most integration tests
CREATE TABLE user (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    age INTEGER NOT NULL
);
"""


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def user_meta() -> TableMetadata:
    return TableMetadata(
        name="user",
        columns=(
            ColumnMeta("id", ValueKind.INTEGER, primary_key=True),
            ColumnMeta("name", ValueKind.TEXT, nullable=True),
            ColumnMeta("age", ValueKind.INTEGER),
        ),
    )


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.sql"
    path.write_text(USER_SCHEMA, encoding="utf-8")
    return path


@pytest_asyncio.fixture
async def conn(schema_file):
    """Open in-memory SQLite connection with the user table created."""
    connection = await connect("sqlite:///:memory:")
    await connection.init(schema_file)
    yield connection
    if connection.is_connected:
        await connection.close()
