"""Contract Risk Analyzer -- PDF contract to structured risk analysis."""

__version__ = "0.1.0"

from .analyzer import ContractAnalyzer, assign_clause_pages, placeholder_segments
from .config import Settings, configure_logging
from .exceptions import (
    CapabilityUnavailable,
    ContractRiskError,
    ExtractionError,
    MalformedCapabilityOutput,
    PartialAnalysisFailure,
    UnsupportedLanguageError,
)
from .generation import GenerationConfig, TextGenerationService, create_generation_service
from .heuristics import DocumentType, FallbackHeuristicEngine, Topic
from .labeler import SegmentLabeler
from .layout import LayoutExtractor, LayoutService, PdfPlumberLayoutService, get_bounding_box
from .models import (
    AnalysisResult,
    BoundingBox,
    Citation,
    Clause,
    KeyPoint,
    KeyPointType,
    Language,
    PageAnalysis,
    RawSegment,
    RiskLevel,
    Segment,
)
from .pages import PageContentAnalyzer
from .redaction import RedactionService, Redactor, RegexRedactor
from .risk import DocumentRiskAnalyzer

__all__ = [
    # Core
    "ContractAnalyzer",
    "Settings",
    "configure_logging",
    "assign_clause_pages",
    "placeholder_segments",
    # Models
    "AnalysisResult",
    "BoundingBox",
    "Citation",
    "Clause",
    "KeyPoint",
    "KeyPointType",
    "Language",
    "PageAnalysis",
    "RawSegment",
    "RiskLevel",
    "Segment",
    # Components
    "DocumentRiskAnalyzer",
    "FallbackHeuristicEngine",
    "DocumentType",
    "Topic",
    "LayoutExtractor",
    "LayoutService",
    "PdfPlumberLayoutService",
    "get_bounding_box",
    "PageContentAnalyzer",
    "SegmentLabeler",
    "RedactionService",
    "Redactor",
    "RegexRedactor",
    "GenerationConfig",
    "TextGenerationService",
    "create_generation_service",
    # Errors
    "ContractRiskError",
    "ExtractionError",
    "UnsupportedLanguageError",
    "CapabilityUnavailable",
    "MalformedCapabilityOutput",
    "PartialAnalysisFailure",
]
