"""Legal Risk Analyzer -- legal document risk scoring with LLM and heuristic analysis."""

__version__ = "1.0.0"

from .analyzer import AnalysisState, LegalAnalyzer, analyze
from .config import Settings
from .errors import (
    AnalysisUnavailableError,
    DocumentValidationError,
    LegalAnalyzerError,
    LLMConfigurationError,
    LLMError,
    TextExtractionError,
)
from .extractors import ClauseClassifier, CriticalIssueDetector, FinancialExtractor
from .llm import Invalid, LLMClient, Valid, parse_llm_response
from .models import (
    AnalysisResult,
    Clause,
    CriticalIssue,
    FileMetadata,
    FinancialAnalysis,
    FinancialImpact,
    RiskAssessment,
    RiskBreakdown,
    RiskLevel,
    RiskTier,
)
from .patterns import DEFAULT_LIBRARY, PatternLibrary, RiskPattern, count_matches
from .scoring import RiskScorer
from .summarizer import NarrativeGenerator

__all__ = [
    # Core
    "analyze",
    "LegalAnalyzer",
    "AnalysisState",
    "Settings",
    # Engine components
    "PatternLibrary",
    "RiskPattern",
    "DEFAULT_LIBRARY",
    "count_matches",
    "RiskScorer",
    "ClauseClassifier",
    "CriticalIssueDetector",
    "FinancialExtractor",
    "NarrativeGenerator",
    # LLM
    "LLMClient",
    "Valid",
    "Invalid",
    "parse_llm_response",
    # Models
    "AnalysisResult",
    "RiskAssessment",
    "RiskBreakdown",
    "RiskTier",
    "RiskLevel",
    "Clause",
    "CriticalIssue",
    "FinancialAnalysis",
    "FinancialImpact",
    "FileMetadata",
    # Errors
    "LegalAnalyzerError",
    "DocumentValidationError",
    "TextExtractionError",
    "LLMError",
    "LLMConfigurationError",
    "AnalysisUnavailableError",
]
