"""
thinorm faults - Domain-specific fault types.

Provides the concrete fault classes raised by the engine:
- CONNECTION faults (open/closed/auth failures)
- QUERY faults (backend rejected SQL, invalid builder, failed insert)
- MAPPING faults (row arity mismatch, value conversion)
- IO faults (unreadable schema scripts)
- CONFIG faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# ORM base fault
# ============================================================================

class ORMFault(Fault):
    """Base class for every fault raised by thinorm."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain = FaultDomain.QUERY,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=domain,
            severity=severity,
            retryable=retryable,
            metadata=metadata,
        )


# ============================================================================
# CONNECTION Faults
# ============================================================================

class ConnectionFault(ORMFault):
    """Backend could not be opened, was lost, or refused the credentials."""

    def __init__(self, url: str, reason: str, *, code: str = "DB_CONNECTION_FAILED", **kwargs):
        super().__init__(
            code=code,
            message=f"Database connection failed ({url}): {reason}",
            domain=FaultDomain.CONNECTION,
            metadata={"url": url, "reason": reason, **kwargs.get("metadata", {})},
        )


class ConnectionClosedFault(ConnectionFault):
    """Operation attempted on a connection that has been closed."""

    def __init__(self, url: str, operation: str, **kwargs):
        super().__init__(
            url=url,
            reason=f"connection is closed, cannot {operation}",
            code="CONNECTION_CLOSED",
            metadata={"operation": operation, **kwargs.get("metadata", {})},
        )
        self.retryable = False


# ============================================================================
# QUERY Faults
# ============================================================================

class SQLFault(ORMFault):
    """The backend rejected a rendered statement."""

    def __init__(self, operation: str, reason: str, sql: str = "", **kwargs):
        super().__init__(
            code="SQL_REJECTED",
            message=f"Statement ({operation}) failed: {reason}",
            domain=FaultDomain.QUERY,
            metadata={"operation": operation, "reason": reason, "sql": sql[:200], **kwargs.get("metadata", {})},
        )


class QueryBuildFault(ORMFault):
    """A builder was asked for something its operation does not support."""

    def __init__(self, operation: str, reason: str, **kwargs):
        super().__init__(
            code="INVALID_QUERY",
            message=f"Cannot build {operation}: {reason}",
            domain=FaultDomain.QUERY,
            metadata={"operation": operation, "reason": reason, **kwargs.get("metadata", {})},
        )


class InsertFault(ORMFault):
    """Insert succeeded at the backend but the stored record could not be read back."""

    def __init__(self, table: str, reason: str, **kwargs):
        super().__init__(
            code="INSERT_FAILED",
            message=f"Insert into '{table}' failed: {reason}",
            domain=FaultDomain.QUERY,
            metadata={"table": table, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# MAPPING Faults
# ============================================================================

class MappingFault(ORMFault):
    """Row arity mismatch, bad metadata, or a value that cannot convert."""

    def __init__(self, table: str, reason: str, **kwargs):
        super().__init__(
            code="MAPPING_FAILED",
            message=f"Mapping error for '{table}': {reason}",
            domain=FaultDomain.MAPPING,
            metadata={"table": table, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# IO / CONFIG Faults
# ============================================================================

class SchemaScriptFault(ORMFault):
    """Schema-init script could not be read."""

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__(
            code="SCHEMA_SCRIPT_UNREADABLE",
            message=f"Cannot read schema script '{path}': {reason}",
            domain=FaultDomain.IO,
            metadata={"path": path, "reason": reason, **kwargs.get("metadata", {})},
        )


class ConfigFault(ORMFault):
    """Configuration value missing or invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid config '{key}': {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )
