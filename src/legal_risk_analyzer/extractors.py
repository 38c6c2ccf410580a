"""Extraction engines for legal risk analysis.

Provides financial term extraction, clause segmentation and classification,
and critical issue detection using the regex tables of the shared
:class:`~legal_risk_analyzer.patterns.PatternLibrary`. No ML dependencies;
every function here is deterministic for a given text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import (
    Clause,
    CriticalIssue,
    FinancialAnalysis,
    FinancialImpact,
    LiabilityCap,
    Penalty,
    RiskAssessment,
    RiskLevel,
    Severity,
    Urgency,
)
from .patterns import DEFAULT_LIBRARY, PatternLibrary

# ---------------------------------------------------------------------------
# Financial Extractor
# ---------------------------------------------------------------------------


class FinancialExtractor:
    """Pull monetary amounts, percentages and payment terms out of text.

    Example::

        extractor = FinancialExtractor()
        analysis = extractor.analyze("Client shall pay $5,000 net 30.")
        print(analysis.total_value)  # "$5,000"
    """

    def __init__(self, library: PatternLibrary = DEFAULT_LIBRARY) -> None:
        self.library = library

    def amounts(self, text: str) -> list[str]:
        """All currency figures in document order."""
        return [m.group() for m in self.library.financial["amounts"].finditer(text)]

    def payment_terms(self, text: str) -> list[str]:
        return [m.group() for m in self.library.financial["payment_terms"].finditer(text)]

    def analyze(self, text: str) -> FinancialAnalysis | None:
        """Summarize the document's financial terms.

        Returns:
            ``None`` when the text has neither amounts nor payment terms.
        """
        amounts = self.amounts(text)
        terms = self.payment_terms(text)
        if not amounts and not terms:
            return None

        return FinancialAnalysis(
            total_value=amounts[0] if amounts else "Not specified",
            payment_terms=terms[:3],
            penalties=self._penalties(text),
            liability_caps=self._liability_caps(text),
        )

    def _penalties(self, text: str) -> list[Penalty]:
        if not self.library.financial["penalties"].search(text):
            return []
        return [
            Penalty(
                trigger="Contract breach or non-compliance",
                amount="As specified in contract",
                type="Monetary penalty",
            )
        ]

    def _liability_caps(self, text: str) -> list[LiabilityCap]:
        if not self.library.financial["liability_caps"].search(text):
            return []
        return [
            LiabilityCap(
                type="General liability cap",
                amount="As specified in contract",
                scope="Contract performance",
            )
        ]


# ---------------------------------------------------------------------------
# Clause Classifier
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _ClauseTypeRule:
    """One entry of the ordered clause-type cascade."""

    label: str
    pattern: re.Pattern

    @property
    def section(self) -> str:
        return f"{self.label} Clause"


@dataclass(frozen=True)
class _ClauseRisk:
    level: RiskLevel
    score: int
    confidence: int
    explanation: str


def _rule(label: str, expression: str) -> _ClauseTypeRule:
    return _ClauseTypeRule(label=label, pattern=re.compile(expression, re.IGNORECASE))


# First match wins. The order is part of the behaviour: "Payment Terms"
# catches any clause mentioning "due" or "amount" before "Liability" is tried.
_CLAUSE_TYPE_RULES: tuple[_ClauseTypeRule, ...] = (
    _rule("Payment Terms", r"payment|pay|invoice|billing|due|fee|cost|price|amount"),
    _rule("Liability", r"liability|liable|responsible|damages|harm|loss|injury"),
    _rule("Termination", r"terminat|end|expir|cancel|dissolv|breach"),
    _rule("Confidentiality", r"confidential|proprietary|non.?disclosure|secret|private"),
    _rule("Intellectual Property", r"intellectual\s+property|copyright|trademark|patent|IP"),
    _rule("Indemnification", r"indemnif|hold\s+harmless|defend"),
    _rule("Governing Law", r"governing\s+law|jurisdiction|venue|court|legal"),
    _rule("Force Majeure", r"force\s+majeure|act\s+of\s+god|unforeseeable"),
    _rule("Warranty", r"warrant|guarantee|represent|assur"),
    _rule("Assignment", r"assign|transfer|delegate|successor"),
)

_CRITICAL_CLAUSE = _ClauseRisk(
    RiskLevel.HIGH, 8, 90, "Contains critical risk indicators requiring immediate attention"
)
_HIGH_CLAUSE = _ClauseRisk(
    RiskLevel.MEDIUM, 6, 85, "Contains elevated risk factors that should be reviewed"
)
_MEDIUM_CLAUSE = _ClauseRisk(
    RiskLevel.MEDIUM, 4, 80, "Contains moderate risk elements worth noting"
)
_LOW_CLAUSE = _ClauseRisk(RiskLevel.LOW, 2, 75, "Standard clause with minimal risk indicators")

_KEY_TERM_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\$[\d,]+(?:\.\d{2})?"),
    re.compile(r"\d+\s*(?:days?|months?|years?)", re.IGNORECASE),
    re.compile(r"\d+%"),
    re.compile(r"(?:shall|must|will|may|should)\s+\w+", re.IGNORECASE),
    re.compile(r"(?:immediately|within|before|after|upon)", re.IGNORECASE),
)

_DOLLAR_RE = re.compile(r"\$[\d,]+(?:\.\d{2})?")
_PERCENT_RE = re.compile(r"\d+%")
_FINANCIAL_VOCAB_RE = re.compile(r"penalty|fine|damages|fee|cost", re.IGNORECASE)

_UNLIMITED_RE = re.compile(r"unlimited|without\s+limitation", re.IGNORECASE)
_IMMEDIATE_RE = re.compile(r"immediate|immediately", re.IGNORECASE)
_PAYMENT_RE = re.compile(r"payment|pay|fee", re.IGNORECASE)
_CONFIDENTIAL_RE = re.compile(r"confidential", re.IGNORECASE)
_TERMINATION_RE = re.compile(r"terminat", re.IGNORECASE)

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_WHITESPACE_RE = re.compile(r"\s+")


def split_paragraphs(text: str) -> list[str]:
    """Blank-line delimited paragraphs longer than 50 characters (trimmed)."""
    return [p for p in _PARAGRAPH_SPLIT_RE.split(text) if len(p.strip()) > 50]


def split_sentences(text: str) -> list[str]:
    """Sentence fragments (split on ``.!?``) longer than 30 characters."""
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if len(s.strip()) > 30]


def segment(text: str) -> list[str]:
    """Split *text* into clause candidates.

    Paragraphs are preferred; if no paragraph qualifies the text is split
    into sentences instead.
    """
    return split_paragraphs(text) or split_sentences(text)


class ClauseClassifier:
    """Segment a document and classify each segment's type and risk.

    Only the first :attr:`max_clauses` segments in document order are
    classified, so risk language late in a long document is not reflected
    at clause level (it still counts toward the document score).

    Example::

        classifier = ClauseClassifier()
        for clause in classifier.classify(contract_text):
            print(clause.clause_id, clause.clause_type, clause.risk_level.value)
    """

    max_clauses = 10
    max_display_chars = 200

    def __init__(self, library: PatternLibrary = DEFAULT_LIBRARY) -> None:
        self.library = library

    def classify(self, text: str) -> list[Clause]:
        """Classify up to :attr:`max_clauses` segments of *text*.

        ``clause_id`` reflects the segment's position, so a segment skipped
        for being too short after whitespace collapsing leaves a gap.
        """
        clauses: list[Clause] = []
        for index, raw in enumerate(segment(text)[: self.max_clauses]):
            clean = _WHITESPACE_RE.sub(" ", raw.strip())
            if len(clean) < 30:
                continue
            clauses.append(self.classify_segment(clean, index + 1))
        return clauses

    def classify_segment(self, clean: str, position: int) -> Clause:
        """Build a :class:`Clause` for one whitespace-normalized segment."""
        risk = self.assess_risk(clean)
        label, section = self.identify_type(clean)
        display = clean
        if len(clean) > self.max_display_chars:
            display = clean[: self.max_display_chars] + "..."

        return Clause(
            clause_id=f"clause_{position}",
            section=section,
            text=display,
            risk_level=risk.level,
            risk_score=risk.score,
            confidence=risk.confidence,
            risk_explanation=risk.explanation,
            clause_type=label,
            key_terms=self.extract_key_terms(clean),
            recommendations=self.recommend(clean, risk.level),
            financial_impact=self.assess_financial_impact(clean),
        )

    # ------------------------------------------------------------------
    # Classification rules
    # ------------------------------------------------------------------

    @staticmethod
    def identify_type(clause: str) -> tuple[str, str]:
        """Return ``(clause_type, section)`` using first-match-wins rules."""
        for rule in _CLAUSE_TYPE_RULES:
            if rule.pattern.search(clause):
                return rule.label, rule.section
        return "General", "General Provision"

    def assess_risk(self, clause: str) -> _ClauseRisk:
        """Tier the clause: any CRITICAL hit, else HIGH, else MEDIUM, else low."""
        cascade = (
            (self.library.critical, _CRITICAL_CLAUSE),
            (self.library.high, _HIGH_CLAUSE),
            (self.library.medium, _MEDIUM_CLAUSE),
        )
        for patterns, risk in cascade:
            if any(p.search(clause) for p in patterns):
                return risk
        return _LOW_CLAUSE

    @staticmethod
    def extract_key_terms(clause: str) -> list[str]:
        """Amounts, periods, percentages, obligations and timing words.

        At most three matches per pattern and five overall, in pattern order.
        """
        terms: list[str] = []
        for pattern in _KEY_TERM_PATTERNS:
            terms.extend(m.group() for m in list(pattern.finditer(clause))[:3])
        return terms[:5]

    @staticmethod
    def recommend(clause: str, level: RiskLevel) -> list[str]:
        recommendations: list[str] = []

        if level == RiskLevel.HIGH:
            recommendations.append("Seek legal review before agreeing to this clause")
            if _UNLIMITED_RE.search(clause):
                recommendations.append("Negotiate liability caps to limit exposure")
            if _IMMEDIATE_RE.search(clause):
                recommendations.append("Request reasonable notice period")

        if _PAYMENT_RE.search(clause):
            recommendations.append("Verify payment terms and amounts are acceptable")
            recommendations.append("Consider adding late payment penalties")

        if _CONFIDENTIAL_RE.search(clause):
            recommendations.append("Ensure confidentiality obligations are mutual")
            recommendations.append("Define what constitutes confidential information")

        if _TERMINATION_RE.search(clause):
            recommendations.append("Negotiate adequate termination notice period")
            recommendations.append("Clarify post-termination obligations")

        return recommendations[:3]

    @staticmethod
    def assess_financial_impact(clause: str) -> FinancialImpact:
        amounts = _DOLLAR_RE.findall(clause)
        percentages = _PERCENT_RE.findall(clause)

        if amounts or percentages:
            return FinancialImpact(
                has_financial_terms=True,
                impact_level=RiskLevel.HIGH if amounts else RiskLevel.MEDIUM,
                amounts=amounts,
                percentages=percentages,
            )

        if _FINANCIAL_VOCAB_RE.search(clause):
            return FinancialImpact(
                has_financial_terms=True,
                impact_level=RiskLevel.MEDIUM,
                note="Financial implications present but amounts not specified",
            )

        return FinancialImpact(has_financial_terms=False, impact_level=RiskLevel.LOW)


# ---------------------------------------------------------------------------
# Critical Issue Detector
# ---------------------------------------------------------------------------

_UNLIMITED_LIABILITY_ISSUE = CriticalIssue(
    issue="Unlimited Liability Exposure",
    severity=Severity.CRITICAL,
    urgency=Urgency.HIGH,
    impact="Could result in unlimited financial exposure beyond business assets",
    recommendation="Negotiate liability caps and limitations immediately",
)

_PERSONAL_GUARANTEE_ISSUE = CriticalIssue(
    issue="Personal Guarantee Required",
    severity=Severity.CRITICAL,
    urgency=Urgency.HIGH,
    impact="Personal assets may be at risk if business obligations are not met",
    recommendation="Seek legal counsel before agreeing to personal guarantees",
)

_LITIGATION_ISSUE = CriticalIssue(
    issue="Litigation Risk Present",
    severity=Severity.HIGH,
    urgency=Urgency.HIGH,
    impact="Potential for costly legal disputes and enforcement actions",
    recommendation="Review dispute resolution mechanisms and consider arbitration clauses",
)

_HIGH_SCORE_ISSUE = CriticalIssue(
    issue="High Overall Risk Score",
    severity=Severity.HIGH,
    urgency=Urgency.MEDIUM,
    impact="Multiple risk factors present that could affect business operations",
    recommendation="Comprehensive legal review recommended before proceeding",
)


class CriticalIssueDetector:
    """Flag discrete critical issues in the full document text.

    Checks run in a fixed order, so the output order never depends on where
    the phrases appear in the source: unlimited liability, personal
    guarantee, litigation, then the aggregate high-score warning.
    """

    high_score_threshold = 70

    def __init__(self, library: PatternLibrary = DEFAULT_LIBRARY) -> None:
        self.library = library
        self._text_checks = (
            (library.get("unlimited_liability"), _UNLIMITED_LIABILITY_ISSUE),
            (library.get("personal_guarantee"), _PERSONAL_GUARANTEE_ISSUE),
            (library.get("litigation"), _LITIGATION_ISSUE),
        )

    def detect(self, text: str, assessment: RiskAssessment) -> list[CriticalIssue]:
        issues = [issue for pattern, issue in self._text_checks if pattern.search(text)]
        if assessment.overall_score > self.high_score_threshold:
            issues.append(_HIGH_SCORE_ISSUE)
        return issues
