"""
thinorm backend - Base Adapter Interface.

All database backends implement this interface. ``Connection`` delegates
every statement to the adapter chosen from the connection URL.

The interface deliberately stays at the driver boundary:
- ``execute`` runs a statement and reports affected rows + generated id
- ``fetch_all`` runs a query and returns decoded ``Row`` values
- ``last_insert_id`` reports the id generated by the latest insert

Adapters raise ``ConnectionFault`` for lost or unusable handles; any other
driver exception is left for ``Connection`` to wrap into ``SQLFault``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import urlparse

from ..values import Row

logger = logging.getLogger("thinorm.backends")

__all__ = [
    "BackendAdapter",
    "AdapterCapabilities",
    "ExecResult",
    "mask_url",
]


@dataclass(frozen=True)
class AdapterCapabilities:
    """Describes how a specific backend may be driven."""

    name: str = "base"
    single_writer: bool = False  # one handle, statements serialized
    pooled: bool = False


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a non-query statement."""

    rowcount: int = 0
    lastrowid: Optional[int] = None


class BackendAdapter(ABC):
    """
    Abstract database adapter interface.

    All backends must implement these methods.
    """

    capabilities: AdapterCapabilities = AdapterCapabilities()

    @abstractmethod
    async def connect(self, url: str, **options: Any) -> None:
        """Open the backend handle(s)."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the backend handle(s)."""
        ...

    @abstractmethod
    async def execute(self, sql: str) -> ExecResult:
        """Execute a literal statement."""
        ...

    @abstractmethod
    async def fetch_all(self, sql: str) -> List[Row]:
        """Execute a literal query and return every row."""
        ...

    @abstractmethod
    async def last_insert_id(self) -> Optional[int]:
        """Id generated by the most recent insert through this adapter."""
        ...

    @property
    def is_connected(self) -> bool:
        return False


def mask_url(url: str) -> str:
    """Hide the password in a URL before it reaches logs or faults."""
    try:
        parsed = urlparse(url)
        password = parsed.password
    except ValueError:
        return "<unparseable url>"
    if password:
        netloc = parsed.netloc.replace(f":{password}@", ":***@")
        return parsed._replace(netloc=netloc).geturl()
    return url
