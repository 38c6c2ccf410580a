"""Tests for LLM client construction, prompts, and response parsing."""

from __future__ import annotations

import json

import pytest

from legal_risk_analyzer.config import Settings
from legal_risk_analyzer.llm import (
    AnthropicClient,
    Invalid,
    LLMClient,
    OpenAIClient,
    Valid,
    build_llm_client,
    extract_json_block,
    missing_required_fields,
    parse_llm_response,
)
from legal_risk_analyzer.errors import LLMConfigurationError
from legal_risk_analyzer.prompts import ANALYSIS_PROMPT, build_analysis_prompt

# ---------------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------------


class TestBuildAnalysisPrompt:
    def test_short_text_included_verbatim(self) -> None:
        prompt = build_analysis_prompt("The Client shall pay $5,000.")
        assert prompt.rstrip().endswith("The Client shall pay $5,000.")
        assert "{document_text}" not in prompt

    def test_long_text_truncated(self) -> None:
        prompt = build_analysis_prompt("a" * 7000)
        assert "a" * 6000 + "..." in prompt
        assert "a" * 6001 not in prompt

    def test_custom_limit(self) -> None:
        prompt = build_analysis_prompt("abcdef", max_chars=3)
        assert "abc..." in prompt

    def test_schema_braces_rendered(self) -> None:
        prompt = build_analysis_prompt("x")
        assert '"overall_risk_score"' in prompt
        assert "{{" not in prompt
        assert "{{" in ANALYSIS_PROMPT


# ---------------------------------------------------------------------------
# Client construction
# ---------------------------------------------------------------------------


class TestBuildLLMClient:
    def test_disabled(self) -> None:
        assert build_llm_client(Settings(llm_enabled=False, openai_api_key="sk-test")) is None

    def test_no_credentials(self) -> None:
        assert build_llm_client(Settings()) is None

    def test_wrong_provider_key(self) -> None:
        settings = Settings(llm_model="claude-3-5-sonnet-latest", openai_api_key="sk-test")
        assert build_llm_client(settings) is None

    def test_openai(self) -> None:
        client = build_llm_client(Settings(openai_api_key="sk-test"))
        assert isinstance(client, OpenAIClient)
        assert isinstance(client, LLMClient)
        assert client.model == "gpt-4o-mini"

    def test_anthropic(self) -> None:
        settings = Settings(llm_model="claude-3-5-sonnet-latest", anthropic_api_key="sk-ant")
        client = build_llm_client(settings)
        assert isinstance(client, AnthropicClient)
        assert client.model == "claude-3-5-sonnet-latest"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(LLMConfigurationError):
            OpenAIClient("gpt-4o-mini", "")


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


class TestExtractJsonBlock:
    def test_markdown_fence(self) -> None:
        assert extract_json_block('Here you go:\n```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_greedy_to_last_brace(self) -> None:
        assert extract_json_block('x {"a": {"b": 1}} y') == '{"a": {"b": 1}}'

    def test_no_object(self) -> None:
        assert extract_json_block("no braces here") is None
        assert extract_json_block("} backwards {") is None


class TestMissingRequiredFields:
    def test_complete(self, llm_payload: dict) -> None:
        assert missing_required_fields(llm_payload) == []

    def test_missing_and_falsy(self, llm_payload: dict) -> None:
        del llm_payload["summary"]
        llm_payload["overall_risk_score"] = 0
        llm_payload["risk_breakdown"] = {}
        assert missing_required_fields(llm_payload) == [
            "summary",
            "overall_risk_score",
            "risk_breakdown",
        ]


class TestParseLLMResponse:
    """parse_llm_response never raises."""

    def test_valid(self, llm_response: str) -> None:
        parsed = parse_llm_response(llm_response)
        assert isinstance(parsed, Valid)
        assert parsed.result.source == "llm"
        assert parsed.result.overall_risk_score == 62
        assert parsed.result.document_type == "Service Agreement"

    @pytest.mark.parametrize("raw", [None, "", "   ", 42])
    def test_empty_or_not_text(self, raw) -> None:
        assert isinstance(parse_llm_response(raw), Invalid)

    def test_no_json(self) -> None:
        parsed = parse_llm_response("I cannot analyze this document.")
        assert isinstance(parsed, Invalid)
        assert "no JSON" in parsed.reason

    def test_malformed_json(self) -> None:
        parsed = parse_llm_response("{summary: not json}")
        assert isinstance(parsed, Invalid)
        assert "malformed JSON" in parsed.reason

    def test_missing_fields(self, llm_payload: dict) -> None:
        del llm_payload["risk_breakdown"]
        parsed = parse_llm_response(json.dumps(llm_payload))
        assert isinstance(parsed, Invalid)
        assert "risk_breakdown" in parsed.reason

    def test_unusable_values(self, llm_payload: dict) -> None:
        llm_payload["overall_risk_score"] = "very high"
        assert isinstance(parse_llm_response(json.dumps(llm_payload)), Invalid)

    def test_breakdown_not_object(self, llm_payload: dict) -> None:
        llm_payload["risk_breakdown"] = [1, 2, 3]
        assert isinstance(parse_llm_response(json.dumps(llm_payload)), Invalid)

    def test_score_too_large_for_float(self, llm_payload: dict) -> None:
        raw = json.dumps(llm_payload).replace(
            '"overall_risk_score": 62', '"overall_risk_score": 1' + "0" * 400
        )
        parsed = parse_llm_response(raw)
        assert isinstance(parsed, Invalid)
        assert "unusable field values" in parsed.reason

    def test_breakdown_too_large_for_float(self, llm_payload: dict) -> None:
        raw = json.dumps(llm_payload).replace(
            '"financial_risk": 6', '"financial_risk": 1' + "0" * 400
        )
        parsed = parse_llm_response(raw)
        assert isinstance(parsed, Valid)
        assert parsed.result.risk_breakdown.financial_risk == 1

    def test_integer_digit_limit(self, llm_payload: dict) -> None:
        raw = json.dumps(llm_payload).replace(
            '"overall_risk_score": 62', '"overall_risk_score": ' + "1" * 5000
        )
        parsed = parse_llm_response(raw)
        assert isinstance(parsed, Invalid)

    def test_deeply_nested_arrays(self) -> None:
        raw = '{"summary": ' + "[" * 100_000 + "]" * 100_000 + "}"
        parsed = parse_llm_response(raw)
        assert isinstance(parsed, Invalid)
        assert "unparsable JSON" in parsed.reason
