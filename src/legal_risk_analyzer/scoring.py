"""Heuristic risk scorer.

Aggregates pattern matches from the :class:`~legal_risk_analyzer.patterns.PatternLibrary`
into a five-dimensional breakdown (each 1-10), an overall score (20-95) and a
confidence estimate (50-95).

Scoring outline:

1. Every tier pattern that matches at least once contributes a fixed weight
   times ``min(match_count, 2)``, so repeated boilerplate cannot dominate.
2. Dollar amounts and percentages add to a separate financial score by size.
3. The tier scores are blended with fixed weights, scaled by a density
   multiplier (distinct pattern hits per 1000 characters) and offset by a
   base of 20.
4. Raw scores above 80 are compressed logarithmically so that very risky
   documents stay distinguishable instead of piling up at the ceiling.

The scorer holds no per-call state; one instance can serve any number of
concurrent analyses.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

from .models import RiskAssessment, RiskBreakdown, clamp, round_half_up
from .patterns import DEFAULT_LIBRARY, PatternLibrary, RiskPattern

logger = logging.getLogger(__name__)

BASE_SCORE = 20
MIN_SCORE = 20
MAX_SCORE = 95
COMPRESSION_THRESHOLD = 80

BASE_CONFIDENCE = 85
MIN_CONFIDENCE = 50
MAX_CONFIDENCE = 95

#: Per-tier points for each matching pattern (multiplied by min(count, 2)).
TIER_POINTS = {"critical": 15, "high": 8, "medium": 5}

#: Blend weights applied to the tier and financial accumulators.
TIER_WEIGHTS = {"critical": 0.8, "high": 0.6, "medium": 0.4, "financial": 0.5}

#: (minimum value, financial score, financial_risk increment), checked top-down.
AMOUNT_TIERS: tuple[tuple[float, float, float], ...] = (
    (100_000, 12, 2.0),
    (50_000, 10, 1.5),
    (10_000, 8, 1.2),
    (1_000, 5, 0.8),
)

PERCENT_TIERS: tuple[tuple[float, float, float], ...] = (
    (25, 10, 1.5),
    (18, 8, 1.2),
    (12, 5, 1.0),
)

_LEADING_NUMBER_RE = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def parse_amount(raw: str) -> float | None:
    """Numeric value of an amount match, or ``None`` if it has none.

    ``$`` and ``,`` are stripped and the leading number is read. Scale words
    are ignored (``"5 million"`` is 5) and a match that does not begin with a
    number (``"USD 500"``) has no value.
    """
    match = _LEADING_NUMBER_RE.match(raw.replace("$", "").replace(",", ""))
    if not match:
        return None
    return float(match.group(1))


def density_multiplier(risk_density: float) -> float:
    """Reward documents where risk language is concentrated."""
    if risk_density > 8:
        return 1.15
    if risk_density > 5:
        return 1.08
    if risk_density < 1:
        return 0.95
    return 1.0


def compress_score(raw_score: float) -> int:
    """Map a raw score onto the final 20-95 scale.

    Above 80 the curve is ``80 + log2(raw - 79) * 5``: continuous at 80 and
    monotonically increasing, reaching the 95 cap at a raw score of 87.
    """
    if raw_score > COMPRESSION_THRESHOLD:
        total = COMPRESSION_THRESHOLD + math.log2(raw_score - (COMPRESSION_THRESHOLD - 1)) * 5
    else:
        total = raw_score
    return round_half_up(clamp(total, MIN_SCORE, MAX_SCORE))


def adjust_confidence(confidence: float, pattern_count: int, text_length: int) -> int:
    """Apply the pattern-count and text-length confidence adjustments."""
    if pattern_count >= 10:
        confidence = min(MAX_CONFIDENCE, confidence + 10)
    elif pattern_count >= 5:
        confidence = min(MAX_CONFIDENCE, confidence + 5)
    elif pattern_count < 2:
        confidence = max(60, confidence - 10)

    if text_length < 500:
        confidence = max(MIN_CONFIDENCE, confidence - 15)
    elif text_length > 5000:
        confidence = min(MAX_CONFIDENCE, confidence + 5)

    return round_half_up(clamp(confidence, MIN_CONFIDENCE, MAX_CONFIDENCE))


@dataclass
class _Accumulator:
    """Mutable running totals for one call to :meth:`RiskScorer.assess`."""

    breakdown: RiskBreakdown
    confidence: float = BASE_CONFIDENCE
    critical: float = 0.0
    high: float = 0.0
    medium: float = 0.0
    financial: float = 0.0
    pattern_count: int = 0


class RiskScorer:
    """Score raw document text for legal risk.

    Example::

        scorer = RiskScorer()
        assessment = scorer.assess(contract_text)
        print(assessment.overall_score, assessment.breakdown.legal_risk)

    Args:
        library: Pattern tables to score against. Defaults to the shared
            process-wide library.
    """

    def __init__(self, library: PatternLibrary = DEFAULT_LIBRARY) -> None:
        self.library = library

    def assess(self, text: str) -> RiskAssessment:
        """Score *text*. Never raises for string input.

        Empty text has density 0 and no pattern hits, which yields the
        minimum score of 20 with reduced confidence.
        """
        acc = _Accumulator(breakdown=RiskBreakdown())

        self._score_critical(text, acc)
        self._score_high(text, acc)
        self._score_medium(text, acc)
        self._score_financials(text, acc)

        weighted = (
            acc.critical * TIER_WEIGHTS["critical"]
            + acc.high * TIER_WEIGHTS["high"]
            + acc.medium * TIER_WEIGHTS["medium"]
            + acc.financial * TIER_WEIGHTS["financial"]
        )

        text_length = len(text)
        risk_density = acc.pattern_count / (text_length / 1000) if text_length else 0.0
        raw_score = BASE_SCORE + weighted * density_multiplier(risk_density)
        overall = compress_score(raw_score)
        confidence = adjust_confidence(acc.confidence, acc.pattern_count, text_length)

        logger.debug(
            "Risk accumulators: critical=%s high=%s medium=%s financial=%s "
            "patterns=%d density=%.2f raw=%.2f final=%d",
            acc.critical,
            acc.high,
            acc.medium,
            acc.financial,
            acc.pattern_count,
            risk_density,
            raw_score,
            overall,
        )

        return RiskAssessment(
            overall_score=overall,
            confidence=confidence,
            breakdown=acc.breakdown.clamped(),
            pattern_matches=acc.pattern_count,
            risk_density=round_half_up(risk_density * 100) / 100,
        )

    # ------------------------------------------------------------------
    # Tier scoring
    # ------------------------------------------------------------------

    def _matching(self, patterns: tuple[RiskPattern, ...], text: str):
        for pattern in patterns:
            count = pattern.count(text)
            if count:
                yield pattern, count

    def _score_critical(self, text: str, acc: _Accumulator) -> None:
        for _pattern, count in self._matching(self.library.critical, text):
            acc.critical += TIER_POINTS["critical"] * min(count, 2)
            acc.breakdown.legal_risk += 2
            acc.breakdown.compliance_risk += 1.5
            acc.confidence += 5
            acc.pattern_count += 1

    def _score_high(self, text: str, acc: _Accumulator) -> None:
        for pattern, count in self._matching(self.library.high, text):
            acc.high += TIER_POINTS["high"] * min(count, 2)
            self._route_high(pattern.key, acc)
            acc.confidence += 2
            acc.pattern_count += 1

    @staticmethod
    def _route_high(key: str, acc: _Accumulator) -> None:
        """Send a HIGH-tier hit to the breakdown dimension its key names."""
        b = acc.breakdown
        if "financial" in key or "damages" in key or "penalty" in key:
            b.financial_risk += 1.5
            acc.financial += 8
        elif "liability" in key or "indemnif" in key:
            b.legal_risk += 1.5
            b.reputational_risk += 0.5
        elif "termination" in key or "breach" in key:
            b.operational_risk += 1.2
            b.legal_risk += 0.8
        else:
            b.legal_risk += 1.2

    def _score_medium(self, text: str, acc: _Accumulator) -> None:
        for _pattern, count in self._matching(self.library.medium, text):
            acc.medium += TIER_POINTS["medium"] * min(count, 2)
            acc.breakdown.operational_risk += 1
            acc.breakdown.compliance_risk += 0.8
            acc.pattern_count += 1

    # ------------------------------------------------------------------
    # Financial scoring
    # ------------------------------------------------------------------

    def _score_financials(self, text: str, acc: _Accumulator) -> None:
        for match in self.library.financial["amounts"].finditer(text):
            value = parse_amount(match.group())
            if value is not None:
                self._apply_tier(value, AMOUNT_TIERS, acc)

        for match in self.library.financial["percentages"].finditer(text):
            self._apply_tier(float(match.group(1)), PERCENT_TIERS, acc)

    @staticmethod
    def _apply_tier(
        value: float, tiers: tuple[tuple[float, float, float], ...], acc: _Accumulator
    ) -> None:
        for minimum, points, risk in tiers:
            if value >= minimum:
                acc.financial += points
                acc.breakdown.financial_risk += risk
                return
