"""
JSON Converter Service.

Runs the whole conversion pipeline for one JSON value: structure
analysis, relational and/or document conversion, SQL rendering and the
preview summary.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from src.common.logging_config import PerformanceTracker, get_structured_logger
from src.common.metrics import (
    collections_generated_total,
    tables_generated_total,
    track_conversion_time,
)
from src.config.settings import get_settings
from src.convert.clock import Clock, utc_now
from src.convert.document import DocumentConverter
from src.convert.errors import InvalidInput, JsonConversionError
from src.convert.index_advisor import IndexAdvisor
from src.convert.json_types import validate_json_value
from src.convert.models import DocumentModel, RelationalModel
from src.convert.relational import RelationalConverter
from src.convert.schema_emitter import SchemaEmitter
from src.convert.structure_analyzer import StructureAnalysis, StructureAnalyzer

logger = get_structured_logger(__name__)


class ConversionTarget(str, Enum):
    SQL = "sql"
    NOSQL = "nosql"
    BOTH = "both"


@dataclass
class ConversionResult:
    """Everything produced by one conversion call."""
    analysis: StructureAnalysis
    relational: Optional[RelationalModel]
    document: Optional[DocumentModel]
    schema_sql: Optional[str]
    insert_sql: Optional[str]
    preview: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis": self.analysis.to_dict(),
            "sql": self.relational.to_dict() if self.relational else None,
            "nosql": self.document.to_dict() if self.document else None,
            "schema_sql": self.schema_sql,
            "insert_sql": self.insert_sql,
            "preview": self.preview,
        }


def parse_target(target: Any) -> ConversionTarget:
    """Accept a ConversionTarget or its string value."""
    try:
        return ConversionTarget(target)
    except ValueError:
        raise InvalidInput(
            f"Unknown conversion target {target!r}; expected one of "
            f"{', '.join(t.value for t in ConversionTarget)}"
        ) from None


class JsonConverter:
    """
    Coordinates the conversion pipeline.

    The clock and random source are shared by both converters so a fixed
    clock and a seeded `random.Random` make the output reproducible.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        sample_size: Optional[int] = None,
        coverage_threshold: Optional[float] = None,
    ):
        """
        Initialize converter.

        Args:
            clock: Returns the current time (defaults to UTC now)
            rng: Random source for document identifiers
            sample_size: Array elements inspected by the analyzer
            coverage_threshold: Field coverage above which indexes are suggested
        """
        self.settings = get_settings()
        self.clock = clock or utc_now
        self.analyzer = StructureAnalyzer(sample_size=sample_size)
        self.relational_converter = RelationalConverter(clock=self.clock)
        self.document_converter = DocumentConverter(
            index_advisor=IndexAdvisor(coverage_threshold),
            clock=self.clock,
            rng=rng,
        )
        self.emitter = SchemaEmitter()

    @track_conversion_time("analyze")
    def analyze(self, value: Any) -> StructureAnalysis:
        """Validate and classify a JSON value."""
        validate_json_value(value)
        return self.analyzer.analyze(value)

    def convert(
        self,
        value: Any,
        name: Optional[str] = None,
        target: Any = ConversionTarget.BOTH,
        include_sql: bool = True,
    ) -> ConversionResult:
        """
        Convert a JSON value.

        Args:
            value: Parsed JSON value
            name: Root table / collection name (defaults from settings)
            target: sql, nosql or both
            include_sql: Render CREATE TABLE and INSERT text

        Returns:
            ConversionResult

        Raises:
            InvalidInput: On contract violations
            JsonConversionError: On any other failure
        """
        target = parse_target(target)
        convert = track_conversion_time(target.value)(self._convert)
        return convert(value, name, target, include_sql)

    def _convert(
        self,
        value: Any,
        name: Optional[str],
        target: ConversionTarget,
        include_sql: bool,
    ) -> ConversionResult:
        try:
            with PerformanceTracker(
                "json_conversion", logger.logger, target=target.value
            ):
                validate_json_value(value)
                analysis = self.analyzer.analyze(value)

                relational = None
                document = None
                schema_sql = None
                insert_sql = None

                if target in (ConversionTarget.SQL, ConversionTarget.BOTH):
                    relational = self.relational_converter.to_relational(
                        value, name or self.settings.default_table_name)
                    tables_generated_total.inc(len(relational.tables))
                    if include_sql:
                        schema_sql = self.emitter.render_schema(relational)
                        insert_sql = self.emitter.render_inserts(relational)

                if target in (ConversionTarget.NOSQL, ConversionTarget.BOTH):
                    document = self.document_converter.to_documents(
                        value, name or self.settings.default_collection_name)
                    collections_generated_total.inc(len(document.collections))

                preview = self.emitter.preview(value, relational, document)
        except InvalidInput as e:
            logger.warning("Rejected conversion input", error=str(e))
            raise
        except JsonConversionError:
            raise
        except Exception as e:
            logger.error("Conversion failed", error=str(e), error_type=type(e).__name__)
            raise JsonConversionError(f"Failed to convert JSON value: {e}") from e

        logger.info(
            "Conversion finished",
            target=target.value,
            kind=analysis.kind,
            recommendation=analysis.recommendation.value,
            tables=len(relational.tables) if relational else 0,
            collections=len(document.collections) if document else 0,
        )

        return ConversionResult(
            analysis=analysis,
            relational=relational,
            document=document,
            schema_sql=schema_sql,
            insert_sql=insert_sql,
            preview=preview,
        )
