"""
SQL text rendering and conversion previews.

The emitted SQL is display text: values are embedded as literals using the
escaping applied during conversion. Anything that executes statements
against a database must use parameterized queries instead.
"""

import json
from typing import Any, Dict, List, Optional

from src.convert.json_types import type_name
from src.convert.models import DocumentModel, RelationalModel, Table


def format_sql_literal(value: Any) -> str:
    """
    Render one cell as a SQL literal.

    Args:
        value: Cell value from a Table row

    Returns:
        NULL, 1/0 for booleans, quoted strings or the number itself
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SchemaEmitter:
    """Renders CREATE TABLE / INSERT text and cross-model previews."""

    def render_table(self, table: Table) -> str:
        column_defs = [
            f"  {column} {table.column_types.get(column, 'TEXT')}"
            for column in table.columns
        ]
        return f"CREATE TABLE {table.name} (\n" + ",\n".join(column_defs) + "\n);"

    def render_schema(self, model: RelationalModel) -> str:
        """
        Generate CREATE TABLE statements followed by relationship comments.

        Args:
            model: Relational model

        Returns:
            Statements separated by blank lines
        """
        statements = [self.render_table(table) for table in model.tables]

        if model.relationships:
            statements.append("\n-- Relationships:")
            for rel in model.relationships:
                target = model.get_table(rel.to_table)
                target_key = target.primary_key if target else "id"
                statements.append(
                    f"-- {rel.from_table}.{rel.foreign_key} -> "
                    f"{rel.to_table}.{target_key} ({rel.kind.value})"
                )

        return "\n\n".join(statements)

    def render_inserts(self, model: RelationalModel) -> str:
        """
        Generate one INSERT statement per row, table by table.

        Args:
            model: Relational model

        Returns:
            Statements separated by newlines
        """
        statements: List[str] = []

        for table in model.tables:
            columns = ", ".join(table.columns)
            for row in table.rows:
                values = ", ".join(format_sql_literal(value) for value in row)
                statements.append(
                    f"INSERT INTO {table.name} ({columns}) VALUES ({values});")

        return "\n".join(statements)

    def preview(
        self,
        value: Any,
        relational: Optional[RelationalModel] = None,
        document: Optional[DocumentModel] = None,
    ) -> Dict[str, Any]:
        """
        Summarize the source value next to the generated models.

        Args:
            value: Original JSON value
            relational: Relational model, if generated
            document: Document model, if generated

        Returns:
            Dictionary with 'original', 'sql' and 'nosql' sections
        """
        summary: Dict[str, Any] = {
            "original": {
                "type": type_name(value),
                "size": len(json.dumps(value, separators=(",", ":"), ensure_ascii=False)),
                "item_count": len(value) if isinstance(value, list) else 1,
            },
            "sql": None,
            "nosql": None,
        }

        if relational is not None:
            summary["sql"] = {
                "table_count": len(relational.tables),
                "total_rows": relational.total_rows,
                "relationships": len(relational.relationships),
                "main_table": relational.tables[0].to_dict() if relational.tables else None,
            }

        if document is not None:
            summary["nosql"] = {
                "collection_count": len(document.collections),
                "total_documents": document.total_documents,
                "indexes": document.total_indexes,
                "main_collection": (
                    document.collections[0].to_dict() if document.collections else None),
            }

        return summary
