"""Main analyzer orchestrating LLM analysis with heuristic fallback.

The ``LegalAnalyzer`` class is the primary entry point. It takes raw
document text, asks the configured language model for a structured risk
report and, when that is unavailable, slow, or unusable, produces the
report with the deterministic heuristic pipeline instead::

    START -> TRY_LLM -> LLM_OK ------------------> DONE
                     -> LLM_FAILED -> FALLBACK --> DONE
    START ------------------------> FALLBACK ----> DONE   (no client)

The heuristic pipeline (scorer, clause classifier, critical issue detector,
financial extractor and narrative generator) is also available on its own
through :meth:`LegalAnalyzer.analyze_heuristic` and the module-level
:func:`analyze`.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum

from .config import Settings
from .errors import AnalysisUnavailableError
from .extractors import ClauseClassifier, CriticalIssueDetector, FinancialExtractor
from .llm import Invalid, LLMClient, build_llm_client, parse_llm_response
from .models import AnalysisResult, FileMetadata
from .patterns import DEFAULT_LIBRARY, PatternLibrary
from .prompts import build_analysis_prompt
from .scoring import RiskScorer
from .summarizer import NarrativeGenerator, text_statistics

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "untitled.txt"
DEFAULT_FILE_TYPE = "text/plain"


class AnalysisState(str, Enum):
    """Steps of one call to :meth:`LegalAnalyzer.analyze`."""

    START = "start"
    TRY_LLM = "try_llm"
    LLM_OK = "llm_ok"
    LLM_FAILED = "llm_failed"
    FALLBACK = "fallback"
    DONE = "done"


def _timestamp() -> str:
    """UTC time in ISO-8601 with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LegalAnalyzer:
    """High-level legal risk analyzer.

    Holds no per-call state: one instance can serve concurrent analyses.

    Example::

        analyzer = LegalAnalyzer(Settings.from_env())
        result = await analyzer.analyze(text, "msa.pdf")

        print(result.summary)
        print(f"Risk score: {result.overall_risk_score}/100 ({result.source})")

    Args:
        settings: Runtime settings. Defaults to ``Settings()``, which reads the
            process environment but not a ``.env`` file.
        llm_client: Explicit model client. When omitted one is built from
            *settings*; ``None`` from that means heuristic-only analysis.
        library: Pattern tables shared by every heuristic component.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm_client: LLMClient | None = None,
        library: PatternLibrary = DEFAULT_LIBRARY,
    ) -> None:
        self.settings = settings or Settings()
        self.llm_client = llm_client if llm_client is not None else build_llm_client(self.settings)
        self.library = library

        self._scorer = RiskScorer(library)
        self._classifier = ClauseClassifier(library)
        self._detector = CriticalIssueDetector(library)
        self._financial = FinancialExtractor(library)
        self._narrative = NarrativeGenerator(library)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def analyze(
        self,
        text: str,
        filename: str | None = None,
        *,
        file_type: str = DEFAULT_FILE_TYPE,
        file_size: int | None = None,
        timeout: float | None = None,
    ) -> AnalysisResult:
        """Analyze *text*, preferring the language model.

        The model gets exactly one attempt bounded by *timeout* seconds
        (default ``settings.llm_timeout``). A timeout, an exception, or a
        response that fails validation all lead to the heuristic pipeline,
        so for string input this only raises if that pipeline is broken.

        Args:
            text: Extracted document text.
            filename: Original file name, used in the summary and metadata.
            file_type: MIME type recorded in the metadata.
            file_size: Source size in bytes; defaults to ``len(text)``.
            timeout: Per-call override of the LLM timeout.

        Returns:
            The analysis with ``file_metadata`` attached.

        Raises:
            AnalysisUnavailableError: If the heuristic pipeline fails.
        """
        self._enter(AnalysisState.START, filename)
        result: AnalysisResult | None = None

        if self.llm_client is not None:
            self._enter(AnalysisState.TRY_LLM, filename)
            result = await self._try_llm(text, timeout)
            self._enter(
                AnalysisState.LLM_OK if result is not None else AnalysisState.LLM_FAILED,
                filename,
            )

        if result is None:
            self._enter(AnalysisState.FALLBACK, filename)
            try:
                result = self._heuristic(text, filename)
            except Exception as exc:
                logger.exception("Heuristic analysis failed")
                raise AnalysisUnavailableError("Heuristic analysis failed") from exc

        self._enter(AnalysisState.DONE, filename)
        logger.info(
            "Analysis of %s produced by %s path: score=%d confidence=%d",
            filename or DEFAULT_FILENAME,
            result.source,
            result.overall_risk_score,
            result.risk_confidence,
        )
        return result.with_metadata(self._metadata(text, filename, file_type, file_size))

    def analyze_sync(
        self,
        text: str,
        filename: str | None = None,
        **kwargs,
    ) -> AnalysisResult:
        """Blocking wrapper around :meth:`analyze` for scripts and the CLI."""
        return asyncio.run(self.analyze(text, filename, **kwargs))

    def analyze_heuristic(
        self,
        text: str,
        filename: str | None = None,
        *,
        file_type: str = DEFAULT_FILE_TYPE,
        file_size: int | None = None,
    ) -> AnalysisResult:
        """Run only the deterministic pipeline.

        Apart from the metadata timestamp the result is a pure function of
        ``(text, filename)``.
        """
        result = self._heuristic(text, filename)
        return result.with_metadata(self._metadata(text, filename, file_type, file_size))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _try_llm(self, text: str, timeout: float | None) -> AnalysisResult | None:
        """One bounded model attempt; ``None`` on any recoverable failure."""
        prompt = build_analysis_prompt(text, self.settings.max_prompt_chars)
        limit = self.settings.llm_timeout if timeout is None else timeout

        try:
            raw = await asyncio.wait_for(self.llm_client.generate_content(prompt), limit)
            parsed = parse_llm_response(raw)
        except asyncio.TimeoutError:
            logger.warning("LLM analysis timed out after %ss; using heuristic analysis", limit)
            return None
        except Exception as exc:
            logger.warning("LLM analysis failed (%s); using heuristic analysis", exc)
            return None

        if isinstance(parsed, Invalid):
            logger.warning("LLM response rejected (%s); using heuristic analysis", parsed.reason)
            return None
        return parsed.result

    def _heuristic(self, text: str, filename: str | None) -> AnalysisResult:
        assessment = self._scorer.assess(text)
        stats = text_statistics(text)
        industry = self._narrative.detect_industry(text)
        critical_issues = self._detector.detect(text, assessment)

        return AnalysisResult(
            summary=self._narrative.summarize(stats, assessment, industry, filename),
            overall_risk_score=assessment.overall_score,
            risk_confidence=assessment.confidence,
            document_type=self._narrative.classify_document(text),
            industry_context=industry,
            risk_breakdown=assessment.breakdown,
            key_findings=self._narrative.key_findings(text, stats, assessment),
            recommendations=self._narrative.recommendations(assessment, critical_issues),
            critical_issues=critical_issues,
            clauses=self._classifier.classify(text),
            financial_analysis=self._financial.analyze(text),
            source="heuristic",
            assessment=assessment,
        )

    @staticmethod
    def _metadata(
        text: str, filename: str | None, file_type: str, file_size: int | None
    ) -> FileMetadata:
        return FileMetadata(
            filename=filename or DEFAULT_FILENAME,
            file_type=file_type or DEFAULT_FILE_TYPE,
            file_size=len(text) if file_size is None else file_size,
            extracted_text_length=len(text),
            processing_timestamp=_timestamp(),
        )

    @staticmethod
    def _enter(state: AnalysisState, filename: str | None) -> None:
        logger.debug("[%s] %s", filename or DEFAULT_FILENAME, state.value)


_default_analyzer: LegalAnalyzer | None = None


def analyze(text: str, filename: str | None = None) -> AnalysisResult:
    """Analyze *text* with the heuristic pipeline and the default patterns.

    Never calls a language model and never raises for string input.

    Example::

        from legal_risk_analyzer import analyze

        result = analyze(open("contract.txt").read(), "contract.txt")
        print(result.overall_risk_score)
    """
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = LegalAnalyzer(Settings(llm_enabled=False))
    return _default_analyzer.analyze_heuristic(text, filename)
