"""
Mapper Tests - record <-> Row translation.
"""

import pytest

from thinorm import ColumnMeta, MappingFault, Mapper, Row, TableMetadata, Value, ValueKind, binding_for, register_table
from thinorm.mapper import is_unset_key

from conftest import Account, User


@pytest.fixture
def users():
    return Mapper(binding_for(User))


@pytest.fixture
def accounts():
    return Mapper(binding_for(Account))


class TestToRow:

    def test_user(self, users):
        row = users.to_row(User(id=1, name="John", age=30))
        assert row == Row([Value.integer(1), Value.text("John"), Value.integer(30)])

    def test_default_record(self, users):
        row = users.to_row(User())
        assert row.to_python() == (0, None, 0)

    def test_mixed_kinds(self, accounts):
        row = accounts.to_row(Account(number="A-1", owner="Ann", balance=2.5, active=False, avatar=b"\x01"))
        assert [v.kind for v in row] == [
            ValueKind.TEXT,
            ValueKind.TEXT,
            ValueKind.REAL,
            ValueKind.INTEGER,
            ValueKind.BLOB,
        ]
        assert row[3] == Value.integer(0)

    def test_unsupported_field_value_names_column(self, users):
        with pytest.raises(MappingFault, match="column 'name'"):
            users.to_row(User(id=1, name=["not", "scalar"], age=3))

    def test_custom_to_fields_arity(self):
        class Pair:
            pass

        meta = TableMetadata(
            "pair",
            (ColumnMeta("id", ValueKind.INTEGER, primary_key=True), ColumnMeta("v", ValueKind.TEXT)),
        )
        mapper = Mapper(register_table(Pair, meta, to_fields=lambda rec: (1,), from_fields=lambda vals: Pair()))
        with pytest.raises(MappingFault, match="produced 1 fields"):
            mapper.to_row(Pair())


class TestFromRow:

    def test_user(self, users):
        user = users.from_row(Row.from_python((1, "John", 30)))
        assert user == User(id=1, name="John", age=30)

    def test_null_into_optional(self, users):
        assert users.from_row(Row.from_python((2, None, 33))).name is None

    def test_bool_and_blob(self, accounts):
        acct = accounts.from_row(Row.from_python(("A-1", "Ann", 10, 1, None)))
        assert acct.balance == 10.0
        assert acct.active is True
        assert acct.avatar is None

    def test_arity_mismatch(self, users):
        with pytest.raises(MappingFault, match="row has 2 values, table has 3 columns"):
            users.from_row(Row.from_python((1, "John")))

    def test_text_into_integer_field(self, users):
        with pytest.raises(MappingFault, match="column 'age'"):
            users.from_row(Row.from_python((1, "John", "thirty")))

    def test_null_into_required_field(self, users):
        with pytest.raises(MappingFault, match="column 'age'"):
            users.from_row(Row.from_python((1, "John", None)))

    def test_real_into_integer_field(self, users):
        with pytest.raises(MappingFault):
            users.from_row(Row.from_python((1.0, "John", 30)))


class TestKeys:

    def test_unset_sentinels(self):
        assert is_unset_key(Value.null())
        assert is_unset_key(Value.integer(0))
        assert not is_unset_key(Value.integer(7))
        assert not is_unset_key(Value.text(""))

    def test_has_key(self, users, accounts):
        assert users.has_key(User(id=0)) is False
        assert users.has_key(User(id=5)) is True
        assert users.key_value(User(id=5)) == Value.integer(5)
        assert accounts.has_key(Account(number="A-1")) is True
