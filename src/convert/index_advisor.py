"""Index suggestions for document collections."""

from typing import Any, Dict, List, Optional

from src.config.settings import get_settings
from src.convert.models import IndexSuggestion

RESERVED_FIELDS = ("_id", "_metadata")

# Hard-coded pair for "documents of a user, newest first" access patterns
COMPOSITE_PAIR = ["userId", "createdAt"]


class IndexAdvisor:
    """
    Suggests indexes from field coverage.

    A field present in more than `coverage_threshold` of the documents gets
    a single-field, non-unique index.
    """

    def __init__(self, coverage_threshold: Optional[float] = None):
        settings = get_settings()
        self.coverage_threshold = (
            coverage_threshold if coverage_threshold is not None
            else settings.index_coverage_threshold
        )

    def field_counts(self, documents: List[Dict[str, Any]]) -> Dict[str, int]:
        """Number of documents containing each non-reserved top-level field."""
        counts: Dict[str, int] = {}
        for doc in documents:
            for key in doc:
                if key not in RESERVED_FIELDS:
                    counts[key] = counts.get(key, 0) + 1
        return counts

    def suggest_indexes(self, documents: List[Dict[str, Any]]) -> List[IndexSuggestion]:
        """
        Suggest indexes for a collection.

        Args:
            documents: Processed documents of one collection

        Returns:
            Single-field suggestions in first-seen field order, followed by
            the userId/createdAt composite when both fields occur
        """
        if not documents:
            return []

        counts = self.field_counts(documents)
        total = len(documents)

        indexes = [
            IndexSuggestion.single(field_name)
            for field_name, count in counts.items()
            if count / total > self.coverage_threshold
        ]

        if all(name in counts for name in COMPOSITE_PAIR):
            indexes.append(IndexSuggestion.composite(COMPOSITE_PAIR))

        return indexes
