"""
thinorm values - column values and result rows.

A ``Value`` is one cell: Null, Integer (signed 64-bit), Real (64-bit
float), Text or Blob. Values convert to and from native Python scalars
without ever narrowing silently: a Real never becomes an int, Text never
becomes a number.

A ``Row`` is an immutable, positionally addressed sequence of values, the
unit every backend returns.
"""

from __future__ import annotations

import datetime
import decimal
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple, Union, get_args, get_origin

from .faults import MappingFault

__all__ = [
    "ValueKind",
    "Value",
    "Row",
    "unwrap_optional",
]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ValueKind(str, Enum):
    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


# Native target type -> value kinds it accepts
_ACCEPTS = {
    int: (ValueKind.INTEGER,),
    bool: (ValueKind.INTEGER,),
    float: (ValueKind.REAL, ValueKind.INTEGER),
    str: (ValueKind.TEXT,),
    bytes: (ValueKind.BLOB,),
}


def unwrap_optional(target: Any) -> Tuple[Any, bool]:
    """
    Split ``Optional[X]`` / ``X | None`` into ``(X, True)``.

    Any other annotation comes back as ``(target, False)``.
    """
    origin = get_origin(target)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(target) if a is not type(None)]
        if len(args) == 1 and len(get_args(target)) == 2:
            return args[0], True
    return target, False


@dataclass(frozen=True, slots=True)
class Value:
    """A single column value tagged with its kind."""

    kind: ValueKind
    data: Any = None

    # ── Constructors ─────────────────────────────────────────────────

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL)

    @classmethod
    def integer(cls, n: int) -> Value:
        if not INT64_MIN <= n <= INT64_MAX:
            raise MappingFault(table="<value>", reason=f"integer {n} does not fit in 64 bits")
        return cls(ValueKind.INTEGER, int(n))

    @classmethod
    def real(cls, x: float) -> Value:
        return cls(ValueKind.REAL, float(x))

    @classmethod
    def text(cls, s: str) -> Value:
        return cls(ValueKind.TEXT, str(s))

    @classmethod
    def blob(cls, b: bytes) -> Value:
        return cls(ValueKind.BLOB, bytes(b))

    @classmethod
    def from_python(cls, obj: Any) -> Value:
        """Wrap a native scalar, as returned by a driver or held by a record."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.integer(1 if obj else 0)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.real(obj)
        if isinstance(obj, str):
            return cls.text(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.blob(bytes(obj))
        # Exact decimals and temporal values keep their string form
        if isinstance(obj, decimal.Decimal):
            return cls.text(str(obj))
        if isinstance(obj, datetime.datetime):
            return cls.text(obj.isoformat(sep=" "))
        if isinstance(obj, (datetime.date, datetime.time)):
            return cls.text(obj.isoformat())
        if isinstance(obj, datetime.timedelta):
            return cls.text(str(obj))
        raise MappingFault(
            table="<value>",
            reason=f"unsupported column value of type {type(obj).__name__}",
        )

    # ── Conversions ──────────────────────────────────────────────────

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def to_python(self) -> Any:
        return self.data

    def to(self, target: Any) -> Any:
        """
        Convert to a native type.

        ``target`` is one of ``int``, ``float``, ``str``, ``bytes``, ``bool``
        or ``Optional`` of those. Null converts only to an optional target.

        Raises:
            MappingFault: When the value would have to be narrowed or coerced.
        """
        base, nullable = unwrap_optional(target)
        if self.is_null:
            if nullable:
                return None
            raise MappingFault(
                table="<value>",
                reason=f"NULL cannot convert to non-optional {_type_name(base)}",
            )

        accepted = _ACCEPTS.get(base)
        if accepted is None:
            raise MappingFault(table="<value>", reason=f"unsupported target type {_type_name(base)}")
        if self.kind not in accepted:
            raise MappingFault(
                table="<value>",
                reason=f"{self.kind.value} value {self.data!r} cannot convert to {_type_name(base)}",
            )
        if base is bool:
            return self.data != 0
        if base is float:
            return float(self.data)
        return self.data

    def __repr__(self) -> str:
        if self.is_null:
            return "Value.null()"
        return f"Value.{self.kind.value}({self.data!r})"


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", repr(tp))


class Row(Sequence[Value]):
    """
    One result row, positionally aligned with the backend's column order.

    Usage:
        rows = await conn.query("SELECT id, name FROM user").exec()
        user_id = rows[0].get(0, int)
        name = rows[0].get(1, Optional[str])
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[Value] = ()):
        self._values: Tuple[Value, ...] = tuple(values)

    @classmethod
    def from_python(cls, cells: Iterable[Any]) -> Row:
        return cls(Value.from_python(c) for c in cells)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Row(self._values[index])
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Row):
            return self._values == other._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"Row({list(self._values)!r})"

    def get(self, index: int, target: Optional[Any] = None) -> Any:
        """
        Native value at ``index``; converted through ``Value.to`` when a
        target type is given.
        """
        value = self._values[index]
        if target is None:
            return value.to_python()
        return value.to(target)

    def to_python(self) -> Tuple[Any, ...]:
        return tuple(v.to_python() for v in self._values)
