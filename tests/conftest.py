"""Shared test fixtures for legal-risk-analyzer tests."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import pytest

from legal_risk_analyzer.analyzer import LegalAnalyzer
from legal_risk_analyzer.config import Settings


class FakeLLMClient:
    """Scriptable stand-in for a model client.

    Returns *response*, raises *exc*, or sleeps *delay* seconds first.
    Every prompt received is recorded in ``calls``.
    """

    def __init__(self, response: str = "", exc: Exception | None = None, delay: float = 0.0):
        self.response = response
        self.exc = exc
        self.delay = delay
        self.calls: list[str] = []

    async def generate_content(self, prompt: str) -> str:
        self.calls.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials out of every test."""
    for name in list(os.environ):
        if name.upper().startswith("LEGAL_RISK_"):
            monkeypatch.delenv(name)
    for name in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("legal_risk_analyzer.config.load_dotenv", lambda *a, **kw: False)


@pytest.fixture
def sample_contract_path() -> Path:
    """Path to the sample contract text file."""
    return Path(__file__).parent.parent / "examples" / "sample_contract.txt"


@pytest.fixture
def sample_contract_text(sample_contract_path: Path) -> str:
    """Full text of the sample contract."""
    return sample_contract_path.read_text(encoding="utf-8")


@pytest.fixture
def short_legal_text() -> str:
    """A short legal text snippet for targeted tests."""
    return (
        "This Agreement is entered into as of March 10, 2024, "
        'by and between Alpha Corp. ("Client") and Beta Services LLC ("Provider").\n\n'
        "1. CONFIDENTIALITY\n"
        "The Provider shall maintain the confidentiality of all proprietary information "
        "and trade secrets disclosed by the Client.\n\n"
        "2. PAYMENT\n"
        "The Client shall pay the Provider $50,000 upon execution of this Agreement "
        "and $25,000 upon completion. Invoices are due net 30.\n\n"
        "3. INDEMNIFICATION\n"
        "The Client shall indemnify and hold harmless the Provider against all claims.\n\n"
        "4. TERMINATION\n"
        "Either party may terminate this Agreement upon thirty (30) days written notice "
        "if the other party commits a material breach.\n"
    )


@pytest.fixture
def risky_text() -> str:
    """Text hitting every critical issue check."""
    return (
        "The Guarantor provides a personal guarantee for all obligations.\n\n"
        "The Supplier accepts unlimited liability for any loss, without limitation.\n\n"
        "Disputes shall be resolved by litigation in the courts of Delaware.\n"
    )


@pytest.fixture
def minimal_text() -> str:
    """Minimal text with almost no legal content (for edge-case testing)."""
    return "Hello world. This is a simple document with no legal clauses."


@pytest.fixture
def tmp_text_file(tmp_path: Path, short_legal_text: str) -> Path:
    """Create a temporary text file with legal content."""
    file = tmp_path / "test_contract.txt"
    file.write_text(short_legal_text, encoding="utf-8")
    return file


@pytest.fixture
def offline_settings() -> Settings:
    """Settings with the LLM path switched off."""
    return Settings(llm_enabled=False)


@pytest.fixture
def heuristic_analyzer(offline_settings: Settings) -> LegalAnalyzer:
    return LegalAnalyzer(offline_settings)


@pytest.fixture
def llm_payload() -> dict:
    """A well-formed model response body."""
    return {
        "summary": "Service agreement with moderate payment risk.",
        "overall_risk_score": 62,
        "risk_confidence": 88,
        "document_type": "Service Agreement",
        "industry_context": "Technology",
        "risk_breakdown": {
            "financial_risk": 6,
            "legal_risk": 5,
            "operational_risk": 4,
            "compliance_risk": 3,
            "reputational_risk": 2,
        },
        "key_findings": ["Large upfront payment"],
        "recommendations": ["Negotiate milestone payments"],
        "critical_issues": [
            {
                "issue": "Uncapped indemnity",
                "severity": "high",
                "description": "Client indemnifies without limit",
                "recommendation": "Add a cap",
            }
        ],
        "clauses": [
            {
                "clause_id": "clause_1",
                "section": "Payment Terms Clause",
                "text": "The Client shall pay $50,000 upon execution.",
                "risk_level": "medium",
                "risk_score": 5,
                "confidence": 85,
                "risk_explanation": "Large upfront payment",
                "clause_type": "Payment Terms",
                "key_terms": ["$50,000"],
                "recommendations": ["Tie payment to milestones"],
                "financial_impact": {"amounts": ["$50,000"], "impact_level": "high"},
            }
        ],
        "financial_analysis": {
            "total_value": "$75,000",
            "payment_terms": ["net 30"],
            "penalties": [],
            "liability_caps": ["Fees paid in prior 12 months"],
        },
    }


@pytest.fixture
def llm_response(llm_payload: dict) -> str:
    """The payload wrapped the way chat models usually return it."""
    return "Here is the analysis:\n```json\n" + json.dumps(llm_payload) + "\n```"


@pytest.fixture
def fake_llm() -> type[FakeLLMClient]:
    """Factory for scriptable model clients."""
    return FakeLLMClient
