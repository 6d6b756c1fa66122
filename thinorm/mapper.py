"""
thinorm mapper - record <-> Row translation driven by TableMetadata.
"""

from __future__ import annotations

from typing import Any, List

from .faults import MappingFault
from .metadata import TableBinding, TableMetadata
from .values import Row, Value, ValueKind

__all__ = ["Mapper", "is_unset_key"]


class Mapper:
    """
    Bidirectional translator between a record and a ``Row``.

    Column order comes from ``TableMetadata``; it must match the order the
    backend returns for ``SELECT *``.
    """

    __slots__ = ("_binding",)

    def __init__(self, binding: TableBinding):
        self._binding = binding

    @property
    def metadata(self) -> TableMetadata:
        return self._binding.metadata

    @property
    def record_type(self) -> type:
        return self._binding.record_type

    def to_row(self, record: Any) -> Row:
        """
        Record -> Row. Any record of the mapped type yields a full row;
        only a field holding a non-scalar object raises ``MappingFault``.
        """
        meta = self.metadata
        fields = list(self._binding.to_fields(record))
        if len(fields) != len(meta.columns):
            raise MappingFault(
                table=meta.name,
                reason=f"record produced {len(fields)} fields, table has {len(meta.columns)} columns",
            )
        values: List[Value] = []
        for col, field in zip(meta.columns, fields):
            try:
                values.append(Value.from_python(field))
            except MappingFault as exc:
                raise MappingFault(
                    table=meta.name,
                    reason=f"column '{col.name}': {exc.metadata.get('reason', exc.message)}",
                ) from exc
        return Row(values)

    def from_row(self, row: Row) -> Any:
        """
        Row -> record.

        Raises:
            MappingFault: Arity mismatch, NULL in a non-optional field, or a
                value whose kind does not fit the field type.
        """
        meta = self.metadata
        if len(row) != len(meta.columns):
            raise MappingFault(
                table=meta.name,
                reason=f"row has {len(row)} values, table has {len(meta.columns)} columns",
            )
        converted: List[Any] = []
        for col, value in zip(meta.columns, row):
            try:
                converted.append(value.to(col.target))
            except MappingFault as exc:
                raise MappingFault(
                    table=meta.name,
                    reason=f"column '{col.name}': {exc.metadata.get('reason', exc.message)}",
                ) from exc
        return self._binding.from_fields(converted)

    # ── Primary key helpers ──────────────────────────────────────────

    def key_value(self, record: Any) -> Value:
        return self.to_row(record)[self.metadata.primary_key_index]

    def has_key(self, record: Any) -> bool:
        """False when the key holds the "unset" sentinel (NULL or 0)."""
        return not is_unset_key(self.key_value(record))


def is_unset_key(value: Value) -> bool:
    return value.is_null or (value.kind is ValueKind.INTEGER and value.data == 0)
