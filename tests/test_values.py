"""
Value / Row Tests - tagged values, native conversions, positional rows.
"""

import dataclasses
import datetime
import decimal
from typing import Optional

import pytest

from thinorm import MappingFault, Row, Value, ValueKind, unwrap_optional


class TestValueConstruction:
    """Wrapping native scalars."""

    def test_from_python_scalars(self):
        assert Value.from_python(None) == Value.null()
        assert Value.from_python(7) == Value.integer(7)
        assert Value.from_python(1.5) == Value.real(1.5)
        assert Value.from_python("x") == Value.text("x")
        assert Value.from_python(b"\x00\x01") == Value.blob(b"\x00\x01")

    def test_bool_becomes_integer(self):
        assert Value.from_python(True) == Value.integer(1)
        assert Value.from_python(False) == Value.integer(0)

    def test_bytearray_and_memoryview_become_blob(self):
        assert Value.from_python(bytearray(b"ab")).kind is ValueKind.BLOB
        assert Value.from_python(memoryview(b"ab")).data == b"ab"

    def test_integer_outside_64_bits_rejected(self):
        with pytest.raises(MappingFault, match="64 bits"):
            Value.from_python(2 ** 63)
        assert Value.from_python(-(2 ** 63)).data == -(2 ** 63)

    def test_decimal_and_temporal_keep_text_form(self):
        assert Value.from_python(decimal.Decimal("1.10")) == Value.text("1.10")
        stamp = datetime.datetime(2024, 1, 2, 3, 4, 5)
        assert Value.from_python(stamp) == Value.text("2024-01-02 03:04:05")
        assert Value.from_python(datetime.date(2024, 1, 2)) == Value.text("2024-01-02")

    def test_unsupported_object_rejected(self):
        with pytest.raises(MappingFault, match="unsupported column value"):
            Value.from_python(object())

    def test_value_passthrough(self):
        v = Value.text("same")
        assert Value.from_python(v) is v

    def test_values_are_frozen(self):
        v = Value.integer(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            v.data = 2

    def test_repr(self):
        assert repr(Value.null()) == "Value.null()"
        assert repr(Value.integer(3)) == "Value.integer(3)"


class TestValueConversion:
    """Converting back to native types, without silent narrowing."""

    def test_exact_kinds(self):
        assert Value.integer(3).to(int) == 3
        assert Value.real(2.5).to(float) == 2.5
        assert Value.text("a").to(str) == "a"
        assert Value.blob(b"z").to(bytes) == b"z"

    def test_integer_widens_to_float(self):
        result = Value.integer(3).to(float)
        assert result == 3.0
        assert isinstance(result, float)

    def test_integer_to_bool(self):
        assert Value.integer(5).to(bool) is True
        assert Value.integer(0).to(bool) is False

    def test_real_does_not_narrow_to_int(self):
        with pytest.raises(MappingFault, match="cannot convert to int"):
            Value.real(1.9).to(int)

    def test_no_implicit_text_coercion(self):
        with pytest.raises(MappingFault):
            Value.text("12").to(int)
        with pytest.raises(MappingFault):
            Value.integer(12).to(str)

    def test_null_requires_optional_target(self):
        assert Value.null().to(Optional[int]) is None
        with pytest.raises(MappingFault, match="NULL"):
            Value.null().to(int)

    def test_optional_target_with_value(self):
        assert Value.text("x").to(Optional[str]) == "x"

    def test_unsupported_target(self):
        with pytest.raises(MappingFault, match="unsupported target"):
            Value.integer(1).to(list)


class TestUnwrapOptional:

    def test_optional(self):
        assert unwrap_optional(Optional[int]) == (int, True)

    def test_pipe_union(self):
        assert unwrap_optional(str | None) == (str, True)

    def test_plain(self):
        assert unwrap_optional(bytes) == (bytes, False)


class TestRow:
    """Positional, read-only rows."""

    def test_from_python(self):
        row = Row.from_python((1, "John", None))
        assert len(row) == 3
        assert row[0] == Value.integer(1)
        assert row[2].is_null

    def test_get_native_and_typed(self):
        row = Row.from_python((1, "John", None))
        assert row.get(1) == "John"
        assert row.get(0, int) == 1
        assert row.get(2, Optional[str]) is None
        with pytest.raises(MappingFault):
            row.get(1, int)

    def test_slice_returns_row(self):
        row = Row.from_python((1, 2, 3))
        tail = row[1:]
        assert isinstance(tail, Row)
        assert tail.to_python() == (2, 3)

    def test_equality_and_hash(self):
        a = Row.from_python((1, "a"))
        b = Row([Value.integer(1), Value.text("a")])
        assert a == b
        assert hash(a) == hash(b)
        assert a != Row.from_python((1, "b"))

    def test_iteration_order(self):
        row = Row.from_python(("x", "y"))
        assert [v.data for v in row] == ["x", "y"]

    def test_index_out_of_range(self):
        with pytest.raises(IndexError):
            Row.from_python((1,))[5]
