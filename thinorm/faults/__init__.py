"""
thinorm faults - typed failures for every public operation.

Every public coroutine either returns its value or raises one of these.
Backend exceptions are wrapped (never swallowed) and chained with ``from``.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- ORMFault and its domain subclasses
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ORMFault,
    ConnectionFault,
    ConnectionClosedFault,
    SQLFault,
    QueryBuildFault,
    InsertFault,
    MappingFault,
    SchemaScriptFault,
    ConfigFault,
)

# ── Short aliases ────────────────────────────────────────────────────────────
ORMError = ORMFault
SqlError = SQLFault
MappingError = MappingFault

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Domain faults
    "ORMFault",
    "ConnectionFault",
    "ConnectionClosedFault",
    "SQLFault",
    "QueryBuildFault",
    "InsertFault",
    "MappingFault",
    "SchemaScriptFault",
    "ConfigFault",

    # Aliases
    "ORMError",
    "SqlError",
    "MappingError",
]
