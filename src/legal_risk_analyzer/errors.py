"""Exception hierarchy for the legal risk analyzer.

Validation errors are raised at the collaborator boundary (uploads, parsers)
before the engine runs. LLM errors are always recovered by the orchestrator.
``AnalysisUnavailableError`` is the only error a caller of the full pipeline
should ever see.
"""

from __future__ import annotations


class LegalAnalyzerError(Exception):
    """Base class for every error raised by this package."""


class DocumentValidationError(LegalAnalyzerError, ValueError):
    """Input rejected before analysis (empty text, bad type, oversize file)."""


class TextExtractionError(DocumentValidationError):
    """A document could not be converted to plain text."""


class LLMError(LegalAnalyzerError):
    """The external language model call failed or returned garbage."""


class LLMConfigurationError(LLMError):
    """No usable credential or client library for the configured model."""


class AnalysisUnavailableError(LegalAnalyzerError):
    """The deterministic pipeline itself failed. Indicates a defect."""
