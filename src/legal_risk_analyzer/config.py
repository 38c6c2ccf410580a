"""Runtime configuration loaded from environment variables.

Values are read from the process environment, after loading a ``.env`` file
if one is present. Nothing here is required for heuristic analysis; the
LLM path is only attempted when a credential for the configured model exists.
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

#: Upload MIME types accepted by the service layer.
ALLOWED_FILE_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/html",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/webp",
    "image/tiff",
    "image/tif",
)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB


class Settings(BaseSettings):
    """Analyzer settings.

    Fields read ``LEGAL_RISK_<FIELD>`` environment variables, so
    ``LEGAL_RISK_LLM_TIMEOUT=12.5`` sets :attr:`llm_timeout`. The model name
    also reads ``LEGAL_RISK_MODEL`` and the credentials read the providers'
    usual ``OPENAI_API_KEY`` and ``ANTHROPIC_API_KEY``. Keyword arguments
    override the environment; an unparsable value raises
    :class:`pydantic.ValidationError`.

    Attributes:
        llm_model: Model name. ``claude*`` models go to Anthropic, everything
            else to OpenAI.
        openai_api_key: Credential for OpenAI models.
        anthropic_api_key: Credential for Anthropic models.
        llm_enabled: Master switch for the LLM path.
        llm_timeout: Seconds allowed for the single LLM attempt.
        max_prompt_chars: Document characters included in the LLM prompt.
        max_file_size: Upload size limit in bytes.
        allowed_file_types: Upload MIME types accepted by the API.
        log_level: Level name passed to :func:`configure_logging`.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEGAL_RISK_",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    llm_model: str = Field(
        "gpt-4o-mini",
        validation_alias=AliasChoices("llm_model", "LEGAL_RISK_MODEL", "LEGAL_RISK_LLM_MODEL"),
    )
    openai_api_key: str | None = Field(
        None, validation_alias=AliasChoices("openai_api_key", "OPENAI_API_KEY")
    )
    anthropic_api_key: str | None = Field(
        None, validation_alias=AliasChoices("anthropic_api_key", "ANTHROPIC_API_KEY")
    )
    llm_enabled: bool = True
    llm_timeout: float = Field(30.0, gt=0)
    max_prompt_chars: int = Field(6000, gt=0)
    max_file_size: int = Field(MAX_FILE_SIZE, gt=0)
    allowed_file_types: tuple[str, ...] = ALLOWED_FILE_TYPES
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the environment (and ``.env``, if present)."""
        load_dotenv()
        return cls()

    @property
    def is_anthropic(self) -> bool:
        return self.llm_model.startswith("claude")

    @property
    def api_key(self) -> str | None:
        """The credential matching :attr:`llm_model`."""
        return self.anthropic_api_key if self.is_anthropic else self.openai_api_key

    @property
    def has_llm_credentials(self) -> bool:
        return bool(self.api_key)


def configure_logging(level: str | int = "WARNING") -> None:
    """Configure root logging for the CLI and the HTTP service."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
