"""Tests for financial extraction, clause classification, and critical issue detection."""

from __future__ import annotations

import pytest

from legal_risk_analyzer.extractors import (
    ClauseClassifier,
    CriticalIssueDetector,
    FinancialExtractor,
    segment,
    split_paragraphs,
    split_sentences,
)
from legal_risk_analyzer.models import RiskAssessment, RiskBreakdown, RiskLevel, Severity

NEUTRAL = "The sky is blue and the grass is green in summer."


# ---------------------------------------------------------------------------
# FinancialExtractor tests
# ---------------------------------------------------------------------------


class TestFinancialExtractor:
    """Tests for the FinancialExtractor."""

    @pytest.fixture
    def extractor(self) -> FinancialExtractor:
        return FinancialExtractor()

    def test_amounts_in_order(self, extractor: FinancialExtractor) -> None:
        assert extractor.amounts("Pay $5,000 now and $1,250.50 later.") == ["$5,000", "$1,250.50"]

    def test_analyze(self, extractor: FinancialExtractor) -> None:
        analysis = extractor.analyze(
            "Client shall pay $5,000 net 30. A penalty applies to late payment. "
            "Liability is limited to fees paid."
        )
        assert analysis is not None
        assert analysis.total_value == "$5,000"
        assert analysis.payment_terms == ["net 30"]
        assert len(analysis.penalties) == 1
        assert len(analysis.liability_caps) == 1

    def test_payment_terms_capped_at_three(self, extractor: FinancialExtractor) -> None:
        analysis = extractor.analyze("net 10, net 20, net 30, net 60 and a payment schedule")
        assert analysis.payment_terms == ["net 10", "net 20", "net 30"]
        assert analysis.total_value == "Not specified"

    def test_no_financial_terms(self, extractor: FinancialExtractor) -> None:
        assert extractor.analyze(NEUTRAL) is None

    def test_no_penalties_or_caps(self, extractor: FinancialExtractor) -> None:
        analysis = extractor.analyze("The price is $900.")
        assert analysis.penalties == []
        assert analysis.liability_caps == []


# ---------------------------------------------------------------------------
# Segmentation tests
# ---------------------------------------------------------------------------


class TestSegmentation:
    """Paragraph-first segmentation with sentence fallback."""

    def test_paragraphs(self, short_legal_text: str) -> None:
        paragraphs = split_paragraphs(short_legal_text)
        assert len(paragraphs) == 5
        assert all(len(p.strip()) > 50 for p in paragraphs)

    def test_short_paragraphs_dropped(self) -> None:
        assert split_paragraphs("Too short.\n\nAlso short.") == []

    def test_sentences(self) -> None:
        text = "Short one. This sentence is comfortably longer than thirty characters!"
        assert [s.strip() for s in split_sentences(text)] == [
            "This sentence is comfortably longer than thirty characters"
        ]

    def test_sentence_fallback(self) -> None:
        text = (
            "The supplier shall deliver all the goods on time.\n\n"
            "The buyer shall pay each invoice within ten days."
        )
        pieces = [s.strip() for s in segment(text)]
        assert pieces == [
            "The supplier shall deliver all the goods on time",
            "The buyer shall pay each invoice within ten days",
        ]


# ---------------------------------------------------------------------------
# ClauseClassifier tests
# ---------------------------------------------------------------------------


class TestClauseClassifier:
    """Tests for the ClauseClassifier."""

    @pytest.fixture
    def classifier(self) -> ClauseClassifier:
        return ClauseClassifier()

    def test_classify_sample_contract(
        self, classifier: ClauseClassifier, sample_contract_text: str
    ) -> None:
        clauses = classifier.classify(sample_contract_text)
        assert 0 < len(clauses) <= 10
        assert all(len(c.text) <= 203 for c in clauses)
        assert all(len(c.key_terms) <= 5 for c in clauses)
        assert all(len(c.recommendations) <= 3 for c in clauses)

    def test_thirty_paragraphs_yield_first_ten_in_order(
        self, classifier: ClauseClassifier
    ) -> None:
        text = "\n\n".join(
            f"Paragraph {i}: the supplier shall deliver the goods listed in schedule {i}."
            for i in range(1, 31)
        )
        clauses = classifier.classify(text)
        assert [c.clause_id for c in clauses] == [f"clause_{i}" for i in range(1, 11)]
        assert [c.text.split(":")[0] for c in clauses] == [f"Paragraph {i}" for i in range(1, 11)]

    def test_whitespace_collapsed(self, classifier: ClauseClassifier) -> None:
        text = "The   Client\tshall   maintain    all records\nfor the full term of the deal."
        (clause,) = classifier.classify(text + "\n\n" + "x")
        assert "  " not in clause.text
        assert "\n" not in clause.text

    def test_long_clause_truncated(self, classifier: ClauseClassifier) -> None:
        text = "The supplier shall deliver the goods. " * 10
        (clause,) = classifier.classify(text)
        assert len(clause.text) == 203
        assert clause.text.endswith("...")

    def test_empty(self, classifier: ClauseClassifier) -> None:
        assert classifier.classify("") == []

    @pytest.mark.parametrize(
        "text, label",
        [
            ("Client shall pay the invoice within 30 days", "Payment Terms"),
            ("Either party may terminate this agreement", "Termination"),
            ("The vendor is liable for all harm it causes", "Liability"),
            ("Each party shall keep all secrets", "Confidentiality"),
            ("The supplier shall indemnify the buyer", "Indemnification"),
            (NEUTRAL, "General"),
        ],
    )
    def test_identify_type(self, text: str, label: str) -> None:
        clause_type, section = ClauseClassifier.identify_type(text)
        assert clause_type == label
        if label == "General":
            assert section == "General Provision"
        else:
            assert section == f"{label} Clause"

    def test_first_rule_wins(self) -> None:
        # Mentions both payment and termination; payment is checked first.
        text = "Either party may terminate if any payment is late"
        assert ClauseClassifier.identify_type(text)[0] == "Payment Terms"

    @pytest.mark.parametrize(
        "text, level, score, confidence",
        [
            ("Supplier accepts unlimited liability for all losses.", RiskLevel.HIGH, 8, 90),
            ("The parties agree to arbitration of disputes.", RiskLevel.MEDIUM, 6, 85),
            ("The governing law of this agreement is Texas.", RiskLevel.MEDIUM, 4, 80),
            (NEUTRAL, RiskLevel.LOW, 2, 75),
        ],
    )
    def test_assess_risk(
        self,
        classifier: ClauseClassifier,
        text: str,
        level: RiskLevel,
        score: int,
        confidence: int,
    ) -> None:
        risk = classifier.assess_risk(text)
        assert (risk.level, risk.score, risk.confidence) == (level, score, confidence)
        assert risk.explanation

    def test_extract_key_terms(self) -> None:
        terms = ClauseClassifier.extract_key_terms(
            "Client shall pay $5,000 within 30 days at 5% interest."
        )
        assert terms == ["$5,000", "30 days", "5%", "shall pay", "within"]

    def test_key_terms_limits(self) -> None:
        terms = ClauseClassifier.extract_key_terms("$1 $2 $3 $4 $5 and 1 day 2 days 3 days 4 days")
        assert terms == ["$1", "$2", "$3", "1 day", "2 days"]

    def test_recommend_high_risk(self) -> None:
        recs = ClauseClassifier.recommend(
            "Supplier has unlimited liability and may terminate immediately", RiskLevel.HIGH
        )
        assert recs == [
            "Seek legal review before agreeing to this clause",
            "Negotiate liability caps to limit exposure",
            "Request reasonable notice period",
        ]

    def test_recommend_payment(self) -> None:
        recs = ClauseClassifier.recommend("Client shall pay on time", RiskLevel.LOW)
        assert recs == [
            "Verify payment terms and amounts are acceptable",
            "Consider adding late payment penalties",
        ]

    def test_recommend_none(self) -> None:
        assert ClauseClassifier.recommend(NEUTRAL, RiskLevel.LOW) == []

    def test_financial_impact_amounts(self) -> None:
        impact = ClauseClassifier.assess_financial_impact("Pay $5,000 plus 5% interest")
        assert impact.has_financial_terms is True
        assert impact.impact_level == RiskLevel.HIGH
        assert impact.amounts == ["$5,000"]
        assert impact.percentages == ["5%"]

    def test_financial_impact_percentage_only(self) -> None:
        impact = ClauseClassifier.assess_financial_impact("Interest of 5% applies")
        assert impact.impact_level == RiskLevel.MEDIUM

    def test_financial_impact_vocabulary(self) -> None:
        impact = ClauseClassifier.assess_financial_impact("A penalty applies for delay")
        assert impact.has_financial_terms is True
        assert impact.impact_level == RiskLevel.MEDIUM
        assert impact.note

    def test_financial_impact_none(self) -> None:
        impact = ClauseClassifier.assess_financial_impact(NEUTRAL)
        assert impact.has_financial_terms is False
        assert impact.impact_level == RiskLevel.LOW


# ---------------------------------------------------------------------------
# CriticalIssueDetector tests
# ---------------------------------------------------------------------------


def _assessment(score: int) -> RiskAssessment:
    return RiskAssessment(overall_score=score, confidence=80, breakdown=RiskBreakdown())


class TestCriticalIssueDetector:
    """Tests for the CriticalIssueDetector."""

    @pytest.fixture
    def detector(self) -> CriticalIssueDetector:
        return CriticalIssueDetector()

    def test_all_text_checks(self, detector: CriticalIssueDetector, risky_text: str) -> None:
        issues = detector.detect(risky_text, _assessment(50))
        assert [i.issue for i in issues] == [
            "Unlimited Liability Exposure",
            "Personal Guarantee Required",
            "Litigation Risk Present",
        ]
        assert [i.severity for i in issues] == [Severity.CRITICAL, Severity.CRITICAL, Severity.HIGH]

    def test_order_independent_of_source(self, detector: CriticalIssueDetector) -> None:
        forward = "Unlimited liability applies. A personal guarantee is required. Litigation follows."
        backward = "Litigation follows. A personal guarantee is required. Unlimited liability applies."
        assert detector.detect(forward, _assessment(50)) == detector.detect(
            backward, _assessment(50)
        )

    def test_high_score_issue(self, detector: CriticalIssueDetector) -> None:
        issues = detector.detect("", _assessment(71))
        assert [i.issue for i in issues] == ["High Overall Risk Score"]

    def test_threshold_is_exclusive(self, detector: CriticalIssueDetector) -> None:
        assert detector.detect("", _assessment(70)) == []

    def test_high_score_issue_is_last(
        self, detector: CriticalIssueDetector, risky_text: str
    ) -> None:
        issues = detector.detect(risky_text, _assessment(90))
        assert issues[-1].issue == "High Overall Risk Score"
        assert len(issues) == 4
