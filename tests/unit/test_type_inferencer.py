"""
Unit tests for SQL type inference.
"""

import pytest

from src.convert.models import Table
from src.convert.type_inferencer import TypeInferencer, is_date_string, is_email_string


def column_type(*values):
    table = Table(
        name="t",
        columns=["id", "v"],
        rows=[[index + 1, value] for index, value in enumerate(values)],
    )
    return TypeInferencer().infer_types(table)["v"]


class TestTypeInference:
    """Tests for per-column type tags."""

    @pytest.mark.parametrize("value,expected", [
        (42, "INTEGER"),
        (-7, "INTEGER"),
        (2.0, "INTEGER"),
        (3.14, "REAL"),
        (True, "BOOLEAN"),
        (False, "BOOLEAN"),
        ("2024-01-01", "DATETIME"),
        ("2024-01-01T10:30:00", "DATETIME"),
        ("a@b.com", "VARCHAR(255)"),
        ("hello", "TEXT"),
        ("", "TEXT"),
    ])
    def test_first_value_decides(self, value, expected):
        assert column_type(value) == expected

    def test_id_is_primary_key(self):
        table = Table(name="t", columns=["id"], rows=[[1], [2]])

        assert TypeInferencer().infer_types(table) == {"id": "INTEGER PRIMARY KEY"}

    def test_renamed_row_key_is_primary_key(self):
        table = Table(
            name="t",
            columns=["_row_id", "id"],
            rows=[[1, "x"]],
            primary_key="_row_id",
        )
        types = TypeInferencer().infer_types(table)

        assert types == {"_row_id": "INTEGER PRIMARY KEY", "id": "TEXT"}

    def test_nulls_are_skipped(self):
        assert column_type(None, None, 5) == "INTEGER"

    def test_all_null_defaults_to_text(self):
        assert column_type(None, None) == "TEXT"

    def test_empty_table_defaults_to_text(self):
        assert column_type() == "TEXT"

    def test_heterogeneous_column_uses_first_value(self):
        assert column_type("x", 5, 6) == "TEXT"
        assert column_type(5, "x") == "INTEGER"

    def test_types_stored_on_table(self):
        table = Table(name="t", columns=["id", "n"], rows=[[1, 1.5]])
        TypeInferencer().infer_types(table)

        assert table.column_types == {"id": "INTEGER PRIMARY KEY", "n": "REAL"}


class TestStringPatterns:
    """Tests for date and email detection."""

    def test_date_needs_pattern_and_parse(self):
        assert is_date_string("2024-02-29")
        assert not is_date_string("2023-02-30")
        assert not is_date_string("2024-13-45")
        assert not is_date_string("Meeting on 2024-01-01")
        assert not is_date_string("01/02/2024")
        assert not is_date_string(20240101)

    def test_email(self):
        assert is_email_string("john.doe@example.org")
        assert not is_email_string("john doe@example.org")
        assert not is_email_string("john@example")
        assert not is_email_string("@example.com")
        assert not is_email_string(None)
