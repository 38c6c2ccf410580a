"""Data models for legal risk analysis.

Every record serializes with ``to_dict()`` using the field names of the
public JSON contract (the HTTP response body).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


class RiskTier(str, Enum):
    """Severity bucket of a risk pattern."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    """Risk level assigned to a single clause."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(str, Enum):
    """Severity of a critical issue."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Urgency(str, Enum):
    """How soon a critical issue should be acted on."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(2.5) == 2``); scores
    must round ``2.5`` up to ``3``.
    """
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Risk scoring records
# ---------------------------------------------------------------------------


@dataclass
class RiskBreakdown:
    """Five-dimensional decomposition of overall risk.

    Fields start at 1 and only grow while the scorer accumulates pattern
    hits; :meth:`clamped` produces the final integer values in ``[1, 10]``.
    """

    financial_risk: float = 1.0
    legal_risk: float = 1.0
    operational_risk: float = 1.0
    compliance_risk: float = 1.0
    reputational_risk: float = 1.0

    def clamped(self) -> RiskBreakdown:
        """Return a copy with every dimension clamped to [1, 10] and rounded."""
        return RiskBreakdown(
            financial_risk=round_half_up(clamp(self.financial_risk, 1, 10)),
            legal_risk=round_half_up(clamp(self.legal_risk, 1, 10)),
            operational_risk=round_half_up(clamp(self.operational_risk, 1, 10)),
            compliance_risk=round_half_up(clamp(self.compliance_risk, 1, 10)),
            reputational_risk=round_half_up(clamp(self.reputational_risk, 1, 10)),
        )

    def to_dict(self) -> dict:
        return {
            "financial_risk": self.financial_risk,
            "legal_risk": self.legal_risk,
            "operational_risk": self.operational_risk,
            "compliance_risk": self.compliance_risk,
            "reputational_risk": self.reputational_risk,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RiskBreakdown:
        defaults = cls()
        values = {}
        for name in defaults.to_dict():
            raw = data.get(name, getattr(defaults, name))
            try:
                values[name] = float(raw)
            except (TypeError, ValueError, OverflowError):
                values[name] = getattr(defaults, name)
        return cls(**values)


@dataclass(frozen=True)
class RiskAssessment:
    """Output of the risk scorer for one document."""

    overall_score: int
    confidence: int
    breakdown: RiskBreakdown
    pattern_matches: int = 0
    risk_density: float = 0.0


# ---------------------------------------------------------------------------
# Clause-level records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FinancialImpact:
    """Monetary exposure found inside a single clause."""

    has_financial_terms: bool
    impact_level: RiskLevel = RiskLevel.LOW
    amounts: list[str] = field(default_factory=list)
    percentages: list[str] = field(default_factory=list)
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "has_financial_terms": self.has_financial_terms,
            "impact_level": self.impact_level.value,
        }
        if self.has_financial_terms:
            data["amounts"] = list(self.amounts)
            data["percentages"] = list(self.percentages)
        if self.note:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class Clause:
    """A segmented unit of document text, classified for type and risk."""

    clause_id: str
    section: str
    text: str
    risk_level: RiskLevel
    risk_score: int
    confidence: int
    risk_explanation: str
    clause_type: str = "General"
    key_terms: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    financial_impact: Optional[FinancialImpact] = None

    def to_dict(self) -> dict:
        return {
            "clause_id": self.clause_id,
            "section": self.section,
            "text": self.text,
            "risk_level": self.risk_level.value,
            "risk_score": self.risk_score,
            "confidence": self.confidence,
            "risk_explanation": self.risk_explanation,
            "clause_type": self.clause_type,
            "key_terms": list(self.key_terms),
            "recommendations": list(self.recommendations),
            "financial_impact": (
                self.financial_impact.to_dict() if self.financial_impact else None
            ),
        }


@dataclass(frozen=True)
class CriticalIssue:
    """A discrete, high-priority problem flagged in the document."""

    issue: str
    severity: Severity
    urgency: Urgency
    impact: str
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "issue": self.issue,
            "severity": self.severity.value,
            "urgency": self.urgency.value,
            "impact": self.impact,
            "recommendation": self.recommendation,
        }


# ---------------------------------------------------------------------------
# Financial analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Penalty:
    trigger: str
    amount: str
    type: str

    def to_dict(self) -> dict:
        return {"trigger": self.trigger, "amount": self.amount, "type": self.type}


@dataclass(frozen=True)
class LiabilityCap:
    type: str
    amount: str
    scope: str

    def to_dict(self) -> dict:
        return {"type": self.type, "amount": self.amount, "scope": self.scope}


@dataclass(frozen=True)
class FinancialAnalysis:
    """Document-level summary of money, payment terms, penalties and caps."""

    total_value: str = "Not specified"
    payment_terms: list[str] = field(default_factory=list)
    penalties: list[Penalty] = field(default_factory=list)
    liability_caps: list[LiabilityCap] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_value": self.total_value,
            "payment_terms": list(self.payment_terms),
            "penalties": [p.to_dict() for p in self.penalties],
            "liability_caps": [c.to_dict() for c in self.liability_caps],
        }


# ---------------------------------------------------------------------------
# Terminal aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileMetadata:
    """Where the analyzed text came from."""

    filename: str
    file_type: str
    file_size: int
    extracted_text_length: int
    processing_timestamp: str

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "extracted_text_length": self.extracted_text_length,
            "processing_timestamp": self.processing_timestamp,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Complete risk report for one document.

    ``source`` records which path produced the result (``"llm"`` or
    ``"heuristic"``) and ``assessment`` keeps the scorer output of a
    heuristic run; neither is part of the serialized contract.
    """

    summary: str
    overall_risk_score: int
    risk_confidence: int
    document_type: str
    industry_context: str
    risk_breakdown: RiskBreakdown
    key_findings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    critical_issues: list[CriticalIssue] = field(default_factory=list)
    clauses: list[Clause] = field(default_factory=list)
    financial_analysis: Optional[FinancialAnalysis] = None
    file_metadata: Optional[FileMetadata] = None
    source: str = "heuristic"
    assessment: Optional[RiskAssessment] = field(default=None, compare=False)

    def with_metadata(self, metadata: FileMetadata) -> AnalysisResult:
        return replace(self, file_metadata=metadata)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "summary": self.summary,
            "overall_risk_score": self.overall_risk_score,
            "risk_confidence": self.risk_confidence,
            "document_type": self.document_type,
            "industry_context": self.industry_context,
            "risk_breakdown": self.risk_breakdown.to_dict(),
            "key_findings": list(self.key_findings),
            "recommendations": list(self.recommendations),
            "critical_issues": [i.to_dict() for i in self.critical_issues],
            "clauses": [c.to_dict() for c in self.clauses],
        }
        if self.financial_analysis is not None:
            data["financial_analysis"] = self.financial_analysis.to_dict()
        data["file_metadata"] = self.file_metadata.to_dict() if self.file_metadata else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> AnalysisResult:
        """Build a result from a model-generated JSON payload.

        Required fields must already have been validated; optional lists and
        records that are missing or malformed are dropped rather than
        rejected.
        """
        financial = data.get("financial_analysis")
        return cls(
            summary=str(data["summary"]),
            overall_risk_score=round_half_up(clamp(float(data["overall_risk_score"]), 20, 95)),
            risk_confidence=round_half_up(clamp(float(data["risk_confidence"]), 50, 95)),
            document_type=str(data.get("document_type") or "Legal Document"),
            industry_context=str(data.get("industry_context") or "General Business"),
            risk_breakdown=RiskBreakdown.from_dict(data["risk_breakdown"]).clamped(),
            key_findings=_str_list(data.get("key_findings")),
            recommendations=_str_list(data.get("recommendations")),
            critical_issues=[
                issue
                for issue in (_issue_from_dict(i) for i in _dict_list(data.get("critical_issues")))
                if issue is not None
            ],
            clauses=[
                clause
                for clause in (
                    _clause_from_dict(c, n)
                    for n, c in enumerate(_dict_list(data.get("clauses")), 1)
                )
                if clause is not None
            ],
            financial_analysis=(
                _financial_from_dict(financial) if isinstance(financial, dict) else None
            ),
            source="llm",
        )


# ---------------------------------------------------------------------------
# Lenient parsing helpers for model output
# ---------------------------------------------------------------------------


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _dict_list(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _enum_or(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        return default


def _issue_from_dict(data: dict) -> CriticalIssue | None:
    if not data.get("issue"):
        return None
    return CriticalIssue(
        issue=str(data["issue"]),
        severity=_enum_or(Severity, data.get("severity"), Severity.MEDIUM),
        urgency=_enum_or(Urgency, data.get("urgency"), Urgency.MEDIUM),
        impact=str(data.get("impact") or data.get("description") or ""),
        recommendation=str(data.get("recommendation") or ""),
    )


def _clause_from_dict(data: dict, position: int) -> Clause | None:
    if not data.get("text"):
        return None
    impact = data.get("financial_impact")
    financial_impact = None
    if isinstance(impact, dict):
        amounts = _str_list(impact.get("amounts"))
        percentages = _str_list(impact.get("percentages"))
        financial_impact = FinancialImpact(
            has_financial_terms=bool(impact.get("has_financial_terms", amounts or percentages)),
            impact_level=_enum_or(RiskLevel, impact.get("impact_level"), RiskLevel.LOW),
            amounts=amounts,
            percentages=percentages,
            note=impact.get("note"),
        )
    try:
        risk_score = round_half_up(float(data.get("risk_score", 0)))
        confidence = round_half_up(float(data.get("confidence", 0)))
    except (TypeError, ValueError, OverflowError):
        risk_score, confidence = 0, 0
    return Clause(
        clause_id=str(data.get("clause_id") or f"clause_{position}"),
        section=str(data.get("section") or f"Clause {position}"),
        text=str(data["text"]),
        risk_level=_enum_or(RiskLevel, data.get("risk_level"), RiskLevel.LOW),
        risk_score=risk_score,
        confidence=confidence,
        risk_explanation=str(data.get("risk_explanation") or ""),
        clause_type=str(data.get("clause_type") or "General"),
        key_terms=_str_list(data.get("key_terms"))[:5],
        recommendations=_str_list(data.get("recommendations"))[:3],
        financial_impact=financial_impact,
    )


def _financial_from_dict(data: dict) -> FinancialAnalysis:
    penalties = [
        Penalty(
            trigger=str(p.get("trigger", "")),
            amount=str(p.get("amount", "")),
            type=str(p.get("type", "")),
        )
        for p in _dict_list(data.get("penalties"))
    ]
    caps: list[LiabilityCap] = []
    for cap in data.get("liability_caps") or []:
        if isinstance(cap, dict):
            caps.append(
                LiabilityCap(
                    type=str(cap.get("type", "")),
                    amount=str(cap.get("amount", "")),
                    scope=str(cap.get("scope", "")),
                )
            )
        elif cap:
            caps.append(LiabilityCap(type=str(cap), amount="As specified in contract", scope=""))
    return FinancialAnalysis(
        total_value=str(data.get("total_value") or "Not specified"),
        payment_terms=_str_list(data.get("payment_terms")),
        penalties=penalties,
        liability_caps=caps,
    )
