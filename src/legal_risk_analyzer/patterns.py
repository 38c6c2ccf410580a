"""Pattern library shared by every analysis component.

All tables are compiled once at import time into a frozen
:class:`PatternLibrary` and injected into the scorer, classifier and
detectors. Nothing mutates it, so concurrent analyses can share one
instance without locking.

Patterns are case-insensitive and deliberately loose (no word boundaries):
``"IT"`` in the technology indicator also matches inside ``"within"``.
Scores depend on these exact expressions; changing one re-calibrates every
document.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .models import RiskTier


@dataclass(frozen=True)
class RiskPattern:
    """A single severity-tiered risk expression."""

    tier: RiskTier
    key: str
    regex: re.Pattern

    def count(self, text: str) -> int:
        return count_matches(text, self.regex)

    def search(self, text: str) -> bool:
        return self.regex.search(text) is not None


def count_matches(text: str, pattern: re.Pattern) -> int:
    """Count all non-overlapping matches of *pattern* in *text*."""
    if not text:
        return 0
    return sum(1 for _ in pattern.finditer(text))


def _compile(expression: str) -> re.Pattern:
    return re.compile(expression, re.IGNORECASE)


def _tier(tier: RiskTier, table: dict[str, str]) -> tuple[RiskPattern, ...]:
    return tuple(
        RiskPattern(tier=tier, key=key, regex=_compile(expr)) for key, expr in table.items()
    )


# ---------------------------------------------------------------------------
# Risk tiers
# ---------------------------------------------------------------------------

_CRITICAL: dict[str, str] = {
    "unlimited_liability": r"unlimited\s+liability|without\s+limitation|no\s+cap|unlimited\s+damages",
    "personal_guarantee": r"personal\s+guarantee|personally\s+liable|individual\s+liability",
    "criminal_liability": r"criminal\s+liability|criminal\s+penalties|felony|misdemeanor",
    "immediate_termination": r"immediate\s+termination|terminate\s+immediately|without\s+notice",
}

_HIGH: dict[str, str] = {
    "litigation": r"litigation|lawsuit|legal\s+action|court\s+proceedings|arbitration",
    "indemnification": r"indemnif|hold\s+harmless|defend\s+and\s+hold",
    "liquidated_damages": r"liquidated\s+damages|penalty\s+clause|punitive\s+damages",
    "non_compete": r"non.?compete|restraint\s+of\s+trade|exclusive\s+dealing",
    "force_majeure": r"force\s+majeure|act\s+of\s+god|unforeseeable",
}

_MEDIUM: dict[str, str] = {
    "auto_renewal": r"auto.?renew|automatic.?renewal|evergreen\s+clause",
    "governing_law": r"governing\s+law|jurisdiction|venue|forum",
    "confidentiality": r"confidential|non.?disclosure|proprietary\s+information",
    "assignment": r"assignment|transfer|delegate",
}

_LOW: dict[str, str] = {
    "standard_terms": r"standard\s+terms|boilerplate|entire\s+agreement",
    "notices": r"notice|notification|written\s+notice",
}

# ---------------------------------------------------------------------------
# Financial and industry tables
# ---------------------------------------------------------------------------

_FINANCIAL: dict[str, str] = {
    "amounts": r"\$[\d,]+(?:\.\d{2})?|\d+\s*(?:million|billion|thousand)|USD\s*\d+",
    "payment_terms": r"payment\s+terms|due\s+date|net\s+\d+|payment\s+schedule",
    "interest_rates": r"interest\s+rate|\d+%\s*per\s*annum|APR",
    "late_fees": r"late\s+fee|penalty\s+rate|default\s+interest",
    "percentages": r"(\d+(?:\.\d+)?)%",
    "penalties": r"penalty|fine|liquidated\s+damages",
    "liability_caps": r"liability.*limited\s+to|cap.*liability|maximum.*liability",
}

_INDUSTRY: dict[str, str] = {
    "technology": r"software|SaaS|API|cloud|data|technology|IT|digital",
    "healthcare": r"medical|healthcare|HIPAA|patient|clinical|pharmaceutical",
    "finance": r"financial|banking|investment|securities|credit|loan",
    "real_estate": r"property|real\s+estate|lease|rental|premises",
    "employment": r"employment|employee|contractor|work\s+for\s+hire",
    "manufacturing": r"manufacturing|production|supply\s+chain|inventory",
}


def _frozen(table: dict[str, str]) -> Mapping[str, re.Pattern]:
    return MappingProxyType({key: _compile(expr) for key, expr in table.items()})


@dataclass(frozen=True)
class PatternLibrary:
    """Immutable bundle of every pattern table the engine uses.

    Tier tuples keep their declaration order; the scorer walks them in that
    order and the clause risk cascade tests CRITICAL, then HIGH, then MEDIUM.
    """

    critical: tuple[RiskPattern, ...] = field(
        default_factory=lambda: _tier(RiskTier.CRITICAL, _CRITICAL)
    )
    high: tuple[RiskPattern, ...] = field(default_factory=lambda: _tier(RiskTier.HIGH, _HIGH))
    medium: tuple[RiskPattern, ...] = field(
        default_factory=lambda: _tier(RiskTier.MEDIUM, _MEDIUM)
    )
    low: tuple[RiskPattern, ...] = field(default_factory=lambda: _tier(RiskTier.LOW, _LOW))
    financial: Mapping[str, re.Pattern] = field(default_factory=lambda: _frozen(_FINANCIAL))
    industry: Mapping[str, re.Pattern] = field(default_factory=lambda: _frozen(_INDUSTRY))

    def tier(self, tier: RiskTier) -> tuple[RiskPattern, ...]:
        """Return the patterns of one severity tier."""
        return {
            RiskTier.CRITICAL: self.critical,
            RiskTier.HIGH: self.high,
            RiskTier.MEDIUM: self.medium,
            RiskTier.LOW: self.low,
        }[tier]

    def get(self, key: str) -> RiskPattern:
        """Look up a risk pattern by key across all tiers.

        Raises:
            KeyError: If no tier defines *key*.
        """
        for pattern in (*self.critical, *self.high, *self.medium, *self.low):
            if pattern.key == key:
                return pattern
        raise KeyError(key)


#: Process-wide default library. Built once, shared read-only.
DEFAULT_LIBRARY = PatternLibrary()
