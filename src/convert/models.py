"""
Relational and document models produced by a conversion.

All objects are created fresh per conversion call and serialize to plain
JSON data with `to_dict()`.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RelationshipKind(str, Enum):
    MANY_TO_ONE = "many-to-one"
    ONE_TO_ONE = "one-to-one"


class IndexKind(str, Enum):
    SINGLE = "single"
    COMPOSITE = "composite"


# ========== Relational ==========

@dataclass
class Table:
    """A table with positional rows; the first column is the row key."""
    name: str
    columns: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    primary_key: str = "id"
    column_types: Dict[str, str] = field(default_factory=dict)

    def column_values(self, column: str) -> List[Any]:
        index = self.columns.index(column)
        return [row[index] for row in self.rows]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": list(self.columns),
            "rows": [list(row) for row in self.rows],
            "primary_key": self.primary_key,
            "column_types": dict(self.column_types),
        }


@dataclass
class Relationship:
    """Foreign key on `from_table` pointing at the row key of `to_table`."""
    from_table: str
    to_table: str
    kind: RelationshipKind
    foreign_key: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_table,
            "to": self.to_table,
            "kind": self.kind.value,
            "foreign_key": self.foreign_key,
        }


@dataclass
class RelationalModel:
    database_name: str
    tables: List[Table]
    relationships: List[Relationship]
    conversion_timestamp: str

    @property
    def total_rows(self) -> int:
        return sum(len(table.rows) for table in self.tables)

    def get_table(self, name: str) -> Optional[Table]:
        return next((t for t in self.tables if t.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database": self.database_name,
            "tables": [table.to_dict() for table in self.tables],
            "relationships": [rel.to_dict() for rel in self.relationships],
            "metadata": {
                "table_count": len(self.tables),
                "total_rows": self.total_rows,
                "conversion_timestamp": self.conversion_timestamp,
            },
        }


# ========== Document ==========

@dataclass
class IndexSuggestion:
    kind: IndexKind
    field: Optional[str] = None
    # `field` is shadowed by the attribute above within this class body
    fields: List[str] = dataclasses.field(default_factory=list)
    unique: bool = False

    @classmethod
    def single(cls, field_name: str, unique: bool = False) -> "IndexSuggestion":
        return cls(kind=IndexKind.SINGLE, field=field_name, unique=unique)

    @classmethod
    def composite(cls, field_names: List[str]) -> "IndexSuggestion":
        return cls(kind=IndexKind.COMPOSITE, fields=list(field_names))

    def to_dict(self) -> Dict[str, Any]:
        if self.kind == IndexKind.COMPOSITE:
            return {"fields": list(self.fields), "kind": self.kind.value}
        return {"field": self.field, "kind": self.kind.value, "unique": self.unique}


@dataclass
class Collection:
    name: str
    documents: List[Dict[str, Any]] = field(default_factory=list)
    indexes: List[IndexSuggestion] = field(default_factory=list)
    parent_collection: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "documents": self.documents,
            "indexes": [index.to_dict() for index in self.indexes],
        }
        if self.parent_collection is not None:
            data["parent_collection"] = self.parent_collection
        return data


@dataclass
class DocumentModel:
    database_name: str
    collections: List[Collection]
    conversion_timestamp: str

    @property
    def total_documents(self) -> int:
        return sum(len(c.documents) for c in self.collections)

    @property
    def total_indexes(self) -> int:
        return sum(len(c.indexes) for c in self.collections)

    def get_collection(self, name: str) -> Optional[Collection]:
        return next((c for c in self.collections if c.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database": self.database_name,
            "collections": [c.to_dict() for c in self.collections],
            "metadata": {
                "collection_count": len(self.collections),
                "total_documents": self.total_documents,
                "conversion_timestamp": self.conversion_timestamp,
            },
        }
