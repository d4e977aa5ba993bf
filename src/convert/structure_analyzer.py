"""
JSON Structure Analyzer.

Classifies the shape of a JSON value (flat, nested, relational), measures
its nesting depth and recommends a target model: relational ("sql"),
document ("nosql") or both.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from src.config.settings import get_settings
from src.convert.json_types import type_name


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class Recommendation(str, Enum):
    SQL = "sql"
    NOSQL = "nosql"
    BOTH = "both"


@dataclass
class StructureAnalysis:
    """Result of analyzing one JSON value. Advisory only."""
    kind: str
    is_flat: bool = True
    is_nested: bool = False
    is_relational: bool = False
    depth: int = 0
    has_arrays: bool = False
    has_objects: bool = False
    complexity: Complexity = Complexity.SIMPLE
    recommendation: Recommendation = Recommendation.NOSQL
    item_count: int = 0
    fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "is_flat": self.is_flat,
            "is_nested": self.is_nested,
            "is_relational": self.is_relational,
            "depth": self.depth,
            "has_arrays": self.has_arrays,
            "has_objects": self.has_objects,
            "complexity": self.complexity.value,
            "recommendation": self.recommendation.value,
            "item_count": self.item_count,
            "fields": list(self.fields),
        }


def calculate_depth(value: Any, current_depth: int = 0) -> int:
    """
    Nesting depth of a value.

    A primitive (or a container without container children) has the depth
    of its enclosing call; each container child is measured one level
    deeper.
    """
    max_depth = current_depth
    stack = [(value, current_depth)]

    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue

        for child in children:
            if isinstance(child, (dict, list)):
                max_depth = max(max_depth, depth + 1)
                stack.append((child, depth + 1))

    return max_depth


class StructureAnalyzer:
    """
    Analyzer for the overall shape of a JSON value.

    Arrays are sampled: only the first `sample_size` elements are inspected
    for depth and fields, which bounds the cost on large arrays at the price
    of missing fields that only appear further in.
    """

    def __init__(self, sample_size: Optional[int] = None):
        """
        Initialize analyzer.

        Args:
            sample_size: Number of leading array elements to inspect
        """
        settings = get_settings()
        self.sample_size = (
            sample_size if sample_size is not None
            else settings.analysis_sample_size
        )

    def analyze(self, value: Any) -> StructureAnalysis:
        """Classify `value` and recommend a target model."""
        analysis = StructureAnalysis(kind=type_name(value))

        if isinstance(value, list):
            analysis.item_count = len(value)
            sample = value[:self.sample_size]
        elif isinstance(value, dict):
            analysis.item_count = 1
            sample = [value]
        else:
            sample = []

        if sample:
            analysis.depth = max(calculate_depth(item) for item in sample)

        seen_fields: Dict[str, None] = {}
        for item in sample:
            self._analyze_object(item, analysis, seen_fields)
        analysis.fields = list(seen_fields)

        # Classification
        if analysis.depth > 2:
            analysis.is_nested = True
        if analysis.is_nested:
            analysis.is_flat = False

        analysis.is_relational = analysis.has_arrays and analysis.has_objects

        if analysis.is_relational:
            analysis.complexity = Complexity.COMPLEX
        elif analysis.is_nested:
            analysis.complexity = Complexity.MODERATE
        else:
            analysis.complexity = Complexity.SIMPLE

        analysis.recommendation = self._recommend(analysis)
        return analysis

    def _analyze_object(
        self,
        item: Any,
        analysis: StructureAnalysis,
        seen_fields: Dict[str, None],
    ) -> None:
        """Record the fields of one sampled item."""
        if not isinstance(item, dict):
            return

        for key, value in item.items():
            seen_fields.setdefault(key, None)

            if isinstance(value, list):
                analysis.has_arrays = True
                if value and isinstance(value[0], dict):
                    analysis.is_nested = True
                    analysis.is_flat = False
            elif isinstance(value, dict):
                analysis.has_objects = True
                analysis.is_nested = True
                analysis.is_flat = False

    def _recommend(self, analysis: StructureAnalysis) -> Recommendation:
        if analysis.is_relational or (analysis.depth > 1 and analysis.has_arrays):
            return Recommendation.BOTH
        if analysis.is_flat and analysis.item_count > 100:
            return Recommendation.SQL
        return Recommendation.NOSQL
