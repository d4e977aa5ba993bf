"""
Convert module for JSON structure analysis and schema conversion.

Provides structure analysis, relational and document conversion, type and
index inference, and SQL text rendering.
"""

from src.convert.errors import JsonConversionError, InvalidInput
from src.convert.json_types import JsonType, detect_json_type, validate_json_value
from src.convert.structure_analyzer import (
    StructureAnalyzer,
    StructureAnalysis,
    Complexity,
    Recommendation,
)
from src.convert.models import (
    Table,
    Relationship,
    RelationshipKind,
    RelationalModel,
    Collection,
    DocumentModel,
    IndexSuggestion,
    IndexKind,
)
from src.convert.relational import RelationalConverter
from src.convert.type_inferencer import TypeInferencer
from src.convert.document import DocumentConverter, ObjectIdGenerator
from src.convert.index_advisor import IndexAdvisor
from src.convert.schema_emitter import SchemaEmitter
from src.convert.converter import JsonConverter, ConversionResult, ConversionTarget

__all__ = [  # ruff: noqa: RUF022
    # Errors
    "JsonConversionError",
    "InvalidInput",
    # JSON types
    "JsonType",
    "detect_json_type",
    "validate_json_value",
    # Structure Analysis
    "StructureAnalyzer",
    "StructureAnalysis",
    "Complexity",
    "Recommendation",
    # Models
    "Table",
    "Relationship",
    "RelationshipKind",
    "RelationalModel",
    "Collection",
    "DocumentModel",
    "IndexSuggestion",
    "IndexKind",
    # Conversion
    "RelationalConverter",
    "TypeInferencer",
    "DocumentConverter",
    "ObjectIdGenerator",
    "IndexAdvisor",
    "SchemaEmitter",
    "JsonConverter",
    "ConversionResult",
    "ConversionTarget",
]
