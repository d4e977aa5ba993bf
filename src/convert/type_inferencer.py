"""
SQL column type inference for relational tables.

The first non-null value of a column decides its type; heterogeneous
columns are not reconciled.
"""

import re
from datetime import datetime
from typing import Any, Dict

from src.convert.models import Table

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PRIMARY_KEY_TYPE = "INTEGER PRIMARY KEY"


def is_date_string(value: Any) -> bool:
    """True if `value` contains a YYYY-MM-DD date and parses as ISO-8601."""
    if not isinstance(value, str) or not DATE_PATTERN.search(value):
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def is_email_string(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


class TypeInferencer:
    """Maps table columns to SQL type tags."""

    def infer_value_type(self, value: Any) -> str:
        """
        Map a single non-null cell value to a SQL type.

        Args:
            value: Cell value

        Returns:
            SQL type tag
        """
        if isinstance(value, bool):
            return "BOOLEAN"
        if isinstance(value, int):
            return "INTEGER"
        if isinstance(value, float):
            return "INTEGER" if value.is_integer() else "REAL"
        if is_date_string(value):
            return "DATETIME"
        if is_email_string(value):
            return "VARCHAR(255)"
        return "TEXT"

    def infer_types(self, table: Table) -> Dict[str, str]:
        """
        Infer a type for every column and store it on the table.

        Args:
            table: Table to annotate in place

        Returns:
            Mapping of column name to SQL type tag
        """
        types: Dict[str, str] = {}

        for col_index, column in enumerate(table.columns):
            if column == table.primary_key:
                types[column] = PRIMARY_KEY_TYPE
                continue

            first_value = next(
                (row[col_index] for row in table.rows if row[col_index] is not None),
                None,
            )
            types[column] = "TEXT" if first_value is None else self.infer_value_type(first_value)

        table.column_types = types
        return types
