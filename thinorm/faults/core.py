"""
thinorm faults - Core types and fault taxonomy.

A fault is an exception that also carries a stable code, the domain it
belongs to, how bad it is, whether trying again can help, and free-form
metadata (offending SQL, table name, URL ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    """How loudly a caller should report a fault."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True, eq=False)
class FaultDomain:
    """
    Functional area a fault comes from.

    Domains compare equal to their name, so ``FaultDomain.QUERY == "query"``.
    """

    name: str
    description: str = field(default="", repr=False)

    @property
    def value(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return other.name == self.name
        return isinstance(other, str) and other == self.name

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.CONFIG = FaultDomain("config", "Configuration values")
FaultDomain.CONNECTION = FaultDomain("connection", "Opening, closing and losing backend handles")
FaultDomain.QUERY = FaultDomain("query", "Statements rejected by the backend or badly built")
FaultDomain.MAPPING = FaultDomain("mapping", "Record <-> row conversion")
FaultDomain.IO = FaultDomain("io", "Schema script files")

# (severity, retryable) when a fault does not say otherwise
DOMAIN_DEFAULTS: Dict[FaultDomain, Dict[str, Any]] = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.CONNECTION: {"severity": Severity.FATAL, "retryable": True},
    FaultDomain.QUERY: {"severity": Severity.ERROR, "retryable": False},
    FaultDomain.MAPPING: {"severity": Severity.ERROR, "retryable": False},
    FaultDomain.IO: {"severity": Severity.WARN, "retryable": False},
}
_FALLBACK = {"severity": Severity.ERROR, "retryable": False}


class Fault(Exception):
    """
    Structured exception.

    Example:
        raise Fault(
            code="ROW_ARITY_MISMATCH",
            message="Row has 2 values, table 'user' has 3 columns",
            domain=FaultDomain.MAPPING,
        )
    """

    def __init__(
        self,
        code: str,
        message: str,
        domain: FaultDomain,
        *,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain

        defaults = DOMAIN_DEFAULTS.get(domain, _FALLBACK)
        self.severity = severity if severity is not None else defaults["severity"]
        self.retryable = defaults["retryable"] if retryable is None else retryable
        self.metadata: Dict[str, Any] = dict(metadata or {})

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, domain={self.domain}, severity={self.severity.value})"

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for structured logs."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": str(self.domain),
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }
