"""
watershed-extractor: LLM extraction of watershed management plans with accuracy scoring.
"""

from seeds_clients.core.base_client import BaseClient
from seeds_clients.core.types import CumulativeTracking

from watershed_extractor.core.config import ExtractionConfig, ScoringConfig
from watershed_extractor.core.exceptions import (
    ConfigurationError,
    ExtractionError,
    ExtractionValidationError,
    GroundTruthNotFoundError,
    LLMError,
    PdfReadError,
    WatershedExtractorError,
)
from watershed_extractor.core.extractor import PlanExtractor
from watershed_extractor.core.pdf import PdfTextReader

# Evaluation
from watershed_extractor.evaluation import (
    AccuracyEvaluator,
    AccuracyMetric,
    AccuracyReporter,
    AccuracyRun,
    AccuracyScorer,
    AccuracyTestResult,
    AccuracyTestRunner,
    AIComparator,
    ComparisonEvent,
    ComparisonType,
    GroundTruthStore,
    OverallMetrics,
    PresetCatalog,
    PresetTestCase,
    ScoringOutcome,
    SnapshotWriter,
    build_report,
    fuzzy_match,
)
from watershed_extractor.prompts.builder import PromptBuilder
from watershed_extractor.results.types import ExtractionResult

# Plan schema
from watershed_extractor.schemas import (
    BMP,
    CATEGORIES,
    Category,
    GeographicArea,
    Goal,
    ImplementationActivity,
    MonitoringMetric,
    OutreachActivity,
    StructuredDocument,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "PlanExtractor",
    "PdfTextReader",
    "WatershedExtractorError",
    "ExtractionError",
    "ExtractionValidationError",
    "LLMError",
    "PdfReadError",
    "GroundTruthNotFoundError",
    "ConfigurationError",
    "BaseClient",  # For type hints when injecting clients
    # Config
    "ExtractionConfig",
    "ScoringConfig",
    # Schema
    "StructuredDocument",
    "Category",
    "CATEGORIES",
    "Goal",
    "BMP",
    "ImplementationActivity",
    "MonitoringMetric",
    "OutreachActivity",
    "GeographicArea",
    # Prompts
    "PromptBuilder",
    # Results
    "ExtractionResult",
    # Evaluation
    "fuzzy_match",
    "build_report",
    "ComparisonType",
    "ComparisonEvent",
    "AccuracyMetric",
    "OverallMetrics",
    "AccuracyTestResult",
    "ScoringOutcome",
    "AccuracyEvaluator",
    "AIComparator",
    "AccuracyScorer",
    "GroundTruthStore",
    "PresetTestCase",
    "PresetCatalog",
    "SnapshotWriter",
    "AccuracyTestRunner",
    "AccuracyRun",
    "AccuracyReporter",
    # Tracking
    "CumulativeTracking",
]
