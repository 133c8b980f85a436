"""
Core data models.

Two groups:

- Domain models (``ConversionRequest``, ``ConversionRecord``) used by the
  orchestrator and the history cache.
- Wire schemas for the backend HTTP API. Field aliases keep the JSON
  camelCase while the Python side stays snake_case.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from polycode.core.utils import epoch_ms


# =============================================================================
# Domain
# =============================================================================


class ConversionRequest(BaseModel):
    """A user's request to translate code from one language to another."""

    model_config = ConfigDict(frozen=True)

    source_code: str
    source_lang: str
    target_lang: str


class ConversionRecord(BaseModel):
    """
    One completed conversion, as kept in history.

    Immutable once created. Serialized with camelCase keys
    (``sourceCode``, ``targetLang``, ...) so persisted history stays
    readable by older clients.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    source_code: str = ""
    source_lang: str = ""
    target_lang: str = ""
    output: str = ""
    timestamp: int = Field(default_factory=epoch_ms)  # epoch milliseconds

    @property
    def languages(self) -> str:
        return f"{self.source_lang} → {self.target_lang}"

    def preview(self, length: int = 80) -> str:
        """Single-line preview of the source code."""
        return self.source_code[:length].replace("\n", " ")


# =============================================================================
# Wire Schemas
# =============================================================================


class ConvertRequest(BaseModel):
    """Body of ``POST /convert``."""

    model_config = ConfigDict(populate_by_name=True)

    source_code: StrictStr = Field(alias="sourceCode")
    target_language: StrictStr = Field(alias="targetLanguage")

    @field_validator("source_code")
    @classmethod
    def _source_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("sourceCode cannot be empty")
        return value

    @field_validator("target_language")
    @classmethod
    def _target_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("targetLanguage cannot be empty")
        return value


class ConvertResponse(BaseModel):
    output: StrictStr = Field(min_length=1)


class ExplainRequest(BaseModel):
    """Body of ``POST /explain``."""

    code: StrictStr
    language: StrictStr | None = None

    @field_validator("code")
    @classmethod
    def _code_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("code cannot be empty")
        return value


class ExplainResponse(BaseModel):
    explanation: StrictStr = Field(min_length=1)


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
    message: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
    model: str
