"""Narrative generation for risk reports.

Turns the numeric output of the scorer and detectors into the human-readable
parts of an :class:`~legal_risk_analyzer.models.AnalysisResult`: summary
sentence, key findings, recommendations, document type and industry label.
All functions are pure formatting over already-computed structures.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePath

from .models import CriticalIssue, RiskAssessment
from .patterns import DEFAULT_LIBRARY, PatternLibrary, count_matches

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

#: Ordered document-type cascade; the first matching expression wins.
_DOCUMENT_TYPES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"contract|agreement", re.IGNORECASE), "Legal Contract"),
    (re.compile(r"policy|procedure", re.IGNORECASE), "Policy Document"),
    (re.compile(r"terms.*service|terms.*use", re.IGNORECASE), "Terms of Service"),
    (re.compile(r"privacy.*policy|data.*protection", re.IGNORECASE), "Privacy Policy"),
    (re.compile(r"employment|job.*description", re.IGNORECASE), "Employment Document"),
)

DEFAULT_DOCUMENT_TYPE = "Legal Document"
DEFAULT_INDUSTRY = "General Business"

#: Human label for the source file, keyed by lowercase extension.
_FILE_KINDS: dict[str, str] = {
    ".pdf": "PDF document",
    ".docx": "Word document",
    ".doc": "Word document",
    ".txt": "text file",
    ".md": "text file",
    ".html": "HTML page",
    ".htm": "HTML page",
    ".png": "scanned image",
    ".jpg": "scanned image",
    ".jpeg": "scanned image",
    ".tif": "scanned image",
    ".tiff": "scanned image",
}


@dataclass(frozen=True)
class TextStatistics:
    """Word, sentence and paragraph counts of the raw text.

    Counts follow plain ``split`` semantics rather than linguistic ones:
    an empty text has one (empty) word and one paragraph, and the sentence
    count is the number of ``.!?`` runs.
    """

    text_length: int
    word_count: int
    sentence_count: int
    paragraph_count: int


def text_statistics(text: str) -> TextStatistics:
    return TextStatistics(
        text_length=len(text),
        word_count=len(re.split(r"\s+", text)),
        sentence_count=len(re.split(r"[.!?]+", text)) - 1,
        paragraph_count=len(re.split(r"\n\s*\n", text)),
    )


def risk_tier_name(score: int) -> str:
    """``high`` above 70, ``moderate`` above 40, otherwise ``low``."""
    if score > 70:
        return "high"
    if score > 40:
        return "moderate"
    return "low"


def describe_filename(filename: str | None) -> str | None:
    """Short description of a source file from its extension, if known."""
    if not filename:
        return None
    return _FILE_KINDS.get(PurePath(filename).suffix.lower())


class NarrativeGenerator:
    """Generate summary text, findings and recommendations.

    Example::

        narrative = NarrativeGenerator()
        stats = text_statistics(text)
        industry = narrative.detect_industry(text)
        print(narrative.summarize(stats, assessment, industry))
    """

    def __init__(self, library: PatternLibrary = DEFAULT_LIBRARY) -> None:
        self.library = library

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @staticmethod
    def classify_document(text: str) -> str:
        for pattern, label in _DOCUMENT_TYPES:
            if pattern.search(text):
                return label
        return DEFAULT_DOCUMENT_TYPE

    def detect_industry(self, text: str) -> str:
        """Industry with the strictly highest indicator count.

        Ties go to the industry declared first; no matches at all gives
        ``General Business``.
        """
        best_count = 0
        detected = DEFAULT_INDUSTRY
        for industry, pattern in self.library.industry.items():
            count = count_matches(text, pattern)
            if count > best_count:
                best_count = count
                detected = industry[0].upper() + industry[1:]
        return detected

    # ------------------------------------------------------------------
    # Narrative
    # ------------------------------------------------------------------

    @staticmethod
    def summarize(
        stats: TextStatistics,
        assessment: RiskAssessment,
        industry: str,
        filename: str | None = None,
    ) -> str:
        tier = risk_tier_name(assessment.overall_score)
        parts = [
            f"Comprehensive analysis of {stats.word_count} words "
            f"across {stats.sentence_count} sentences.",
        ]
        kind = describe_filename(filename)
        if kind:
            parts.append(f"Source: {filename} ({kind}).")
        parts.append(
            f"Document classified as {industry} with {tier} risk level "
            f"({assessment.overall_score}/100)."
        )
        parts.append(
            "Key risk areas identified include legal compliance, financial obligations, "
            "and operational requirements."
        )
        parts.append(f"Analysis confidence: {assessment.confidence}%.")
        return " ".join(parts)

    def key_findings(
        self, text: str, stats: TextStatistics, assessment: RiskAssessment
    ) -> list[str]:
        findings = [
            f"Document contains {stats.word_count} words in {stats.paragraph_count} paragraphs"
        ]

        if assessment.overall_score > 70:
            findings.append("High-risk elements detected requiring immediate attention")
        elif assessment.overall_score > 40:
            findings.append("Moderate risk factors present requiring review")
        else:
            findings.append("Low risk profile with standard legal language")

        if self.library.financial["amounts"].search(text):
            findings.append("Financial terms and monetary obligations specified")

        if self.library.get("indemnification").search(text):
            findings.append("Indemnification clauses present")

        return findings

    @staticmethod
    def recommendations(
        assessment: RiskAssessment, critical_issues: Sequence[CriticalIssue]
    ) -> list[str]:
        recommendations: list[str] = []

        if critical_issues:
            recommendations.append(
                "Immediate legal review required due to critical issues identified"
            )
        if assessment.overall_score > 60:
            recommendations.append("Negotiate risk mitigation clauses before signing")
        if assessment.breakdown.financial_risk > 6:
            recommendations.append("Review financial obligations and payment terms carefully")
        if assessment.breakdown.legal_risk > 6:
            recommendations.append("Consult with legal counsel regarding compliance requirements")

        recommendations.append("Ensure all parties understand their obligations and rights")
        recommendations.append("Consider adding termination and dispute resolution clauses")
        return recommendations
