"""
LLM-backed document analysis.

Wraps the OpenAI or Anthropic async clients behind a single
``generate_content(prompt)`` coroutine and turns the raw model output into
an :class:`~legal_risk_analyzer.models.AnalysisResult`.

The analyzer makes exactly one attempt per document; any failure here is
recovered by falling back to heuristic scoring, so nothing in this module
retries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol, Union, runtime_checkable

from .config import Settings
from .errors import LLMConfigurationError, LLMError
from .models import AnalysisResult
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

#: Fields a model payload must carry (present and non-empty) to be used.
REQUIRED_FIELDS: tuple[str, ...] = (
    "summary",
    "overall_risk_score",
    "risk_confidence",
    "risk_breakdown",
)

MAX_TOKENS = 4096
TEMPERATURE = 0.3


@runtime_checkable
class LLMClient(Protocol):
    """Anything that can turn a prompt into model text."""

    async def generate_content(self, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Provider clients
# ---------------------------------------------------------------------------


class OpenAIClient:
    """Chat-completions client for OpenAI models."""

    def __init__(self, model: str, api_key: str, system_prompt: str = SYSTEM_PROMPT):
        if not api_key:
            raise LLMConfigurationError("OPENAI_API_KEY not found in environment")

        from openai import AsyncOpenAI

        self.model = model
        self.system_prompt = system_prompt
        self.client = AsyncOpenAI(api_key=api_key)

    async def generate_content(self, prompt: str) -> str:
        from openai import OpenAIError

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_TOKENS,
            )
        except OpenAIError as exc:
            raise LLMError(f"OpenAI request failed: {exc}") from exc
        return response.choices[0].message.content or ""


class AnthropicClient:
    """Messages-API client for Anthropic (``claude*``) models."""

    def __init__(self, model: str, api_key: str, system_prompt: str = SYSTEM_PROMPT):
        if not api_key:
            raise LLMConfigurationError("ANTHROPIC_API_KEY not found in environment")

        from anthropic import AsyncAnthropic

        self.model = model
        self.system_prompt = system_prompt
        self.client = AsyncAnthropic(api_key=api_key)

    async def generate_content(self, prompt: str) -> str:
        from anthropic import AnthropicError

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                system=self.system_prompt,
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicError as exc:
            raise LLMError(f"Anthropic request failed: {exc}") from exc
        return "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )


def build_llm_client(settings: Settings) -> LLMClient | None:
    """Create the client for ``settings.llm_model``.

    Returns ``None`` when the LLM path is disabled or no credential is
    configured for the selected provider.
    """
    if not settings.llm_enabled:
        logger.info("LLM analysis disabled by configuration")
        return None
    if not settings.has_llm_credentials:
        provider = "ANTHROPIC_API_KEY" if settings.is_anthropic else "OPENAI_API_KEY"
        logger.warning("%s not set; using heuristic analysis only", provider)
        return None

    if settings.is_anthropic:
        return AnthropicClient(settings.llm_model, settings.api_key)
    return OpenAIClient(settings.llm_model, settings.api_key)


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Valid:
    """Model output that passed validation."""

    result: AnalysisResult


@dataclass(frozen=True)
class Invalid:
    """Model output that cannot be used, with the reason."""

    reason: str


ParseResult = Union[Valid, Invalid]


def extract_json_block(text: str) -> str | None:
    """Return the span from the first ``{`` to the last ``}``, if any.

    Handles prose or markdown fences around the object.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def missing_required_fields(payload: dict[str, Any]) -> list[str]:
    """Names of :data:`REQUIRED_FIELDS` that are absent or falsy."""
    return [name for name in REQUIRED_FIELDS if not payload.get(name)]


def parse_llm_response(raw: Any) -> ParseResult:
    """Validate raw model text and convert it to a result.

    Never raises: every problem is reported as :class:`Invalid`.

    Example::

        parsed = parse_llm_response(await client.generate_content(prompt))
        if isinstance(parsed, Valid):
            return parsed.result
    """
    if not isinstance(raw, str) or not raw.strip():
        return Invalid("empty response")

    block = extract_json_block(raw)
    if block is None:
        return Invalid("no JSON object in response")

    try:
        payload = json.loads(block)
    except json.JSONDecodeError as exc:
        return Invalid(f"malformed JSON: {exc.msg}")
    except (ValueError, RecursionError) as exc:
        # Integer digit limits and pathological nesting.
        return Invalid(f"unparsable JSON: {exc.__class__.__name__}")

    if not isinstance(payload, dict):
        return Invalid("JSON payload is not an object")

    missing = missing_required_fields(payload)
    if missing:
        return Invalid(f"missing required fields: {', '.join(missing)}")

    try:
        result = AnalysisResult.from_dict(payload)
    except (TypeError, ValueError, KeyError, AttributeError, OverflowError) as exc:
        return Invalid(f"unusable field values: {exc}")
    return Valid(result)
