"""
thinorm metadata - static table descriptions and record reflection.

``TableMetadata`` describes one mapped record type: table name, ordered
columns and the single primary-key column. The engine never inspects
record classes itself; it asks for a ``TableBinding`` (metadata plus the
two field-conversion functions) through ``binding_for``.

Bindings come from one of two places:

- the ``@table`` decorator on a dataclass, which reflects the fields in
  declaration order::

      @table("user")
      @dataclass
      class User:
          id: int = 0
          name: Optional[str] = None
          age: int = 0

- ``register_table`` for any other record type, with explicit metadata and
  conversion functions.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, get_type_hints

from .faults import MappingFault
from .values import ValueKind, unwrap_optional

logger = logging.getLogger("thinorm.metadata")

__all__ = [
    "ColumnMeta",
    "TableMetadata",
    "TableBinding",
    "table",
    "column",
    "register_table",
    "binding_for",
]

_FIELD_KEY = "thinorm"

_KIND_FOR_TYPE = {
    int: ValueKind.INTEGER,
    bool: ValueKind.INTEGER,
    float: ValueKind.REAL,
    str: ValueKind.TEXT,
    bytes: ValueKind.BLOB,
}


@dataclass(frozen=True)
class ColumnMeta:
    """One column of a mapped table."""

    name: str
    kind: ValueKind = ValueKind.TEXT
    primary_key: bool = False
    nullable: bool = False
    python_type: Optional[type] = None

    @property
    def target(self) -> Any:
        """Conversion target for ``Value.to``."""
        base = self.python_type or _default_type(self.kind)
        return Optional[base] if self.nullable else base


def _default_type(kind: ValueKind) -> type:
    for tp, k in _KIND_FOR_TYPE.items():
        if k is kind and tp is not bool:
            return tp
    return str


@dataclass(frozen=True)
class TableMetadata:
    """
    Static description of a mapped table.

    Invariants (checked on construction):
    - at least one column, names unique
    - exactly one primary-key column
    """

    name: str
    columns: Tuple[ColumnMeta, ...]

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        if not self.name:
            raise MappingFault(table="<unnamed>", reason="table name must not be empty")
        if not self.columns:
            raise MappingFault(table=self.name, reason="table has no columns")
        names = [c.name for c in self.columns]
        if len(set(names)) != len(names):
            raise MappingFault(table=self.name, reason=f"duplicate column names in {names}")
        keys = [c.name for c in self.columns if c.primary_key]
        if len(keys) != 1:
            raise MappingFault(
                table=self.name,
                reason=f"expected exactly one primary key column, found {len(keys)}: {keys}",
            )

    @property
    def primary_key_index(self) -> int:
        for i, col in enumerate(self.columns):
            if col.primary_key:
                return i
        raise AssertionError("unreachable: validated in __post_init__")

    @property
    def primary_key(self) -> ColumnMeta:
        return self.columns[self.primary_key_index]

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def non_key_columns(self) -> List[Tuple[int, ColumnMeta]]:
        return [(i, c) for i, c in enumerate(self.columns) if not c.primary_key]

    def __len__(self) -> int:
        return len(self.columns)


@dataclass(frozen=True)
class TableBinding:
    """Metadata plus the record <-> field-value conversion pair."""

    record_type: type
    metadata: TableMetadata
    to_fields: Callable[[Any], Sequence[Any]]
    from_fields: Callable[[Sequence[Any]], Any]


# ── Registry ────────────────────────────────────────────────────────────────

_bindings: Dict[type, TableBinding] = {}


def register_table(
    record_type: type,
    metadata: TableMetadata,
    *,
    to_fields: Optional[Callable[[Any], Sequence[Any]]] = None,
    from_fields: Optional[Callable[[Sequence[Any]], Any]] = None,
) -> TableBinding:
    """
    Register a record type by hand.

    ``to_fields`` defaults to reading attributes named after the columns;
    ``from_fields`` defaults to calling the type with column-named keyword
    arguments.
    """
    names = metadata.column_names

    if to_fields is None:
        def to_fields(record: Any) -> Tuple[Any, ...]:
            return tuple(getattr(record, n) for n in names)

    if from_fields is None:
        def from_fields(values: Sequence[Any]) -> Any:
            return record_type(**dict(zip(names, values)))

    binding = TableBinding(
        record_type=record_type,
        metadata=metadata,
        to_fields=to_fields,
        from_fields=from_fields,
    )
    _bindings[record_type] = binding
    logger.debug(f"Registered table '{metadata.name}' for {record_type.__name__}")
    return binding


def binding_for(record_or_type: Any) -> TableBinding:
    """
    Look up the binding for a record type or instance.

    Raises:
        MappingFault: When the type was never mapped.
    """
    cls = record_or_type if isinstance(record_or_type, type) else type(record_or_type)
    for klass in cls.__mro__:
        binding = _bindings.get(klass)
        if binding is not None:
            return binding
    raise MappingFault(
        table=f"<{cls.__name__}>",
        reason=f"{cls.__name__} is not a mapped table; decorate it with @table or call register_table()",
    )


# ── Dataclass reflection ────────────────────────────────────────────────────

def column(*, primary_key: bool = False, **field_kwargs: Any) -> Any:
    """
    ``dataclasses.field`` with column options.

    Usage:
        @table("account")
        @dataclass
        class Account:
            number: int = column(primary_key=True, default=0)
    """
    meta = dict(field_kwargs.pop("metadata", None) or {})
    meta[_FIELD_KEY] = {"primary_key": primary_key}
    return dataclasses.field(metadata=meta, **field_kwargs)


def reflect(cls: type, name: Optional[str] = None, primary_key: Optional[str] = None) -> TableMetadata:
    """Build ``TableMetadata`` from a dataclass's fields, in declaration order."""
    if not dataclasses.is_dataclass(cls):
        raise MappingFault(table=name or cls.__name__, reason=f"{cls.__name__} is not a dataclass")

    table_name = name or cls.__name__.lower()
    hints = get_type_hints(cls)
    fields = dataclasses.fields(cls)

    marked = [f.name for f in fields if f.metadata.get(_FIELD_KEY, {}).get("primary_key")]
    if len(marked) > 1:
        raise MappingFault(table=table_name, reason=f"several fields marked primary_key: {marked}")
    if marked:
        pk_name = marked[0]
    else:
        pk_name = primary_key or "id"

    columns: List[ColumnMeta] = []
    for f in fields:
        base, nullable = unwrap_optional(hints.get(f.name, str))
        kind = _KIND_FOR_TYPE.get(base)
        if kind is None:
            raise MappingFault(
                table=table_name,
                reason=f"field '{f.name}' has unsupported type {getattr(base, '__name__', base)!r}",
            )
        columns.append(ColumnMeta(
            name=f.name,
            kind=kind,
            primary_key=(f.name == pk_name),
            nullable=nullable,
            python_type=base,
        ))

    if pk_name not in [c.name for c in columns]:
        raise MappingFault(table=table_name, reason=f"primary key field '{pk_name}' not found")

    return TableMetadata(name=table_name, columns=tuple(columns))


def table(name: Any = None, *, primary_key: Optional[str] = None) -> Any:
    """
    Class decorator mapping a dataclass to a table.

    Accepts ``@table``, ``@table()`` and ``@table("user", primary_key="uid")``.
    The table name defaults to the lowercased class name.
    """
    def decorate(cls: type) -> type:
        metadata = reflect(cls, name if isinstance(name, str) else None, primary_key)
        register_table(cls, metadata)
        return cls

    if isinstance(name, type):
        return decorate(name)
    return decorate
