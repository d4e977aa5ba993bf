"""
Relational converter.

Turns a JSON value into tables, rows and foreign-key relationships.
Primitive fields become columns; arrays of objects and nested objects are
extracted recursively into child tables named `<parent>_<field>`.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from src.convert.clock import Clock, format_timestamp, utc_now
from src.convert.json_types import is_complex, unique_name, validate_json_value, validate_name
from src.convert.models import RelationalModel, Relationship, RelationshipKind, Table
from src.convert.type_inferencer import TypeInferencer

ROW_KEY = "id"
FALLBACK_ROW_KEY = "_row_id"


def escape_sql_string(value: Any) -> Any:
    """Double single quotes in strings; other values pass through."""
    if isinstance(value, str):
        return value.replace("'", "''")
    return value


@dataclass
class _ConversionRun:
    """Per-call state: tables and relationships built so far, used names."""
    tables: List[Table] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)
    table_names: Set[str] = field(default_factory=set)


class RelationalConverter:
    """
    Converts JSON values into a RelationalModel.

    Every row gets a synthetic 1-based row key. Child rows carry a
    `<parent>_id` foreign key holding the row key of the parent item they
    were extracted from.
    """

    def __init__(
        self,
        type_inferencer: Optional[TypeInferencer] = None,
        clock: Optional[Clock] = None,
    ):
        self.type_inferencer = type_inferencer or TypeInferencer()
        self.clock = clock or utc_now

    def to_relational(self, value: Any, root_name: str) -> RelationalModel:
        """
        Convert a JSON value to tables and relationships.

        Args:
            value: Parsed JSON value (never mutated)
            root_name: Name of the root table

        Returns:
            RelationalModel with the root table first

        Raises:
            InvalidInput: If the value is not JSON or the name is blank
        """
        validate_name(root_name, "table name")
        validate_json_value(value)

        run = _ConversionRun()

        if isinstance(value, (list, dict)):
            items = value if isinstance(value, list) else [value]
            root = self.array_to_table(items, root_name, run.table_names)
            run.tables.append(root)
            self._extract_nested(items, root, run)
        else:
            run.table_names.add(root_name)
            run.tables.append(Table(
                name=root_name,
                columns=[ROW_KEY, "value"],
                rows=[[1, escape_sql_string(value)]],
            ))

        for table in run.tables:
            self.type_inferencer.infer_types(table)

        return RelationalModel(
            database_name=f"{root_name}_db",
            tables=run.tables,
            relationships=run.relationships,
            conversion_timestamp=format_timestamp(self.clock()),
        )

    def array_to_table(
        self,
        items: List[Any],
        table_name: str,
        taken_names: Optional[Set[str]] = None,
    ) -> Table:
        """
        Build one table from a list of items.

        Columns are the row key followed by every key that holds a
        primitive in at least one item, in first-seen order. Complex
        values, missing keys and non-object items yield None cells.

        Args:
            items: Source items
            table_name: Desired table name
            taken_names: Names already used in this run (updated)

        Returns:
            Table without column types
        """
        if taken_names is not None:
            table_name = unique_name(table_name, taken_names)

        data_columns: Dict[str, None] = {}
        for item in items:
            if isinstance(item, dict):
                for key, value in item.items():
                    if not is_complex(value):
                        data_columns.setdefault(key, None)

        row_key = self._pick_row_key(data_columns)
        columns = [row_key, *data_columns]

        rows = []
        for ordinal, item in enumerate(items, start=1):
            row: List[Any] = [ordinal]
            for column in data_columns:
                cell = item.get(column) if isinstance(item, dict) else None
                row.append(None if is_complex(cell) else escape_sql_string(cell))
            rows.append(row)

        return Table(name=table_name, columns=columns, rows=rows, primary_key=row_key)

    def _pick_row_key(self, data_columns: Dict[str, None]) -> str:
        """Use `id` unless a source field already claims it."""
        if ROW_KEY not in data_columns:
            return ROW_KEY
        candidate = FALLBACK_ROW_KEY
        while candidate in data_columns:
            candidate = f"_{candidate}"
        return candidate

    def _extract_nested(self, items: List[Any], parent: Table, run: _ConversionRun) -> None:
        """
        Extract arrays of objects and nested objects, depth first.

        Fields are taken from the first item; values of that field are
        gathered from every object item together with the row key of the
        item they came from. A child table is fully expanded before the
        next field of its parent, using an explicit stack of pending
        fields instead of recursion.
        """
        if not items or not isinstance(items[0], dict):
            return

        stack: List[Tuple[List[Any], Table, Iterator[str]]] = [
            (items, parent, iter(list(items[0])))]

        while stack:
            current_items, current_parent, keys = stack[-1]
            key = next(keys, None)
            if key is None:
                stack.pop()
                continue

            extracted = self._extract_field(current_items, current_parent, key, run)
            if extracted is not None:
                child_items, child = extracted
                stack.append((child_items, child, iter(list(child_items[0]))))

    def _extract_field(
        self,
        items: List[Any],
        parent: Table,
        key: str,
        run: _ConversionRun,
    ) -> Optional[Tuple[List[Any], Table]]:
        """Build the child table for one field, if its first value is complex."""
        present = [
            (ordinal, item[key])
            for ordinal, item in enumerate(items, start=1)
            if isinstance(item, dict) and key in item
        ]
        first_value = present[0][1]

        if isinstance(first_value, list):
            flat: List[Any] = []
            parent_keys: List[int] = []
            for ordinal, value in present:
                if isinstance(value, list):
                    flat.extend(value)
                    parent_keys.extend([ordinal] * len(value))
                else:
                    flat.append(value)
                    parent_keys.append(ordinal)

            if flat and isinstance(flat[0], dict):
                child = self._attach_child(
                    flat, parent_keys, parent, key, RelationshipKind.MANY_TO_ONE, run)
                return flat, child

        elif isinstance(first_value, dict):
            objects = [(o, v) for o, v in present if isinstance(v, dict)]
            nested = [v for _, v in objects]
            child = self._attach_child(
                nested, [o for o, _ in objects], parent, key,
                RelationshipKind.ONE_TO_ONE, run)
            return nested, child

        return None

    def _attach_child(
        self,
        items: List[Any],
        parent_keys: List[int],
        parent: Table,
        key: str,
        kind: RelationshipKind,
        run: _ConversionRun,
    ) -> Table:
        """Build a child table, add its foreign key and record the relationship."""
        child = self.array_to_table(items, f"{parent.name}_{key}", run.table_names)

        foreign_key = unique_name(f"{parent.name}_id", set(child.columns))
        child.columns.append(foreign_key)
        for row, parent_key in zip(child.rows, parent_keys):
            row.append(parent_key)

        run.tables.append(child)
        run.relationships.append(Relationship(
            from_table=child.name,
            to_table=parent.name,
            kind=kind,
            foreign_key=foreign_key,
        ))
        return child
