"""
Conversion orchestrator.

Drives one request/response cycle against a code assistant (the backend
client in the app, or a ``CompletionProxy`` directly) and owns the
resulting state: current output, current explanation, busy flag.

Every error raised below this layer is caught here and turned into a
single notice event, including ones outside the polycode taxonomy.
Busy is released exactly once per call, whichever way the call exits.

Overlapping calls are neither cancelled nor sequenced. If an earlier,
slower call finishes after a later one, its output replaces the newer
output and the first call to finish clears busy while the other is still
in flight.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from polycode.core.errors import (
    MalformedResponseError,
    PolycodeError,
    ProviderError,
    TransportError,
    ValidationError,
)
from polycode.core.events import (
    BUSY_CHANGED,
    CONVERSION_COMPLETED,
    CONVERSION_FAILED,
    EXPLAIN_COMPLETED,
    NOTICE_ERROR,
    NOTICE_SUCCESS,
    EventBus,
)
from polycode.core.models import ConversionRecord, ConversionRequest
from polycode.services.history import HistoryCache

logger = logging.getLogger(__name__)


# User-facing messages
MSG_EMPTY_SOURCE = "Please enter source code to convert"
MSG_SAME_LANGUAGES = "Source and target languages are the same"
MSG_NOTHING_TO_EXPLAIN = "No code to explain"
MSG_UNREACHABLE = "Unable to connect to server. Ensure the backend is running."
MSG_CONVERTED = "Code converted successfully!"
MSG_UNEXPECTED = "unexpected error"


class CodeAssistant(Protocol):
    """Anything that can translate and explain code."""

    async def translate(self, source_code: str, target_language: str) -> str: ...

    async def explain(self, code: str, language: str | None = None) -> str: ...


@dataclass
class ConversionResult:
    """Outcome of one ``convert`` call."""

    output: str = ""
    record: ConversionRecord | None = None
    error: PolycodeError | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ExplainResult:
    """Outcome of one ``explain`` call."""

    explanation: str = ""
    error: PolycodeError | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Markup Stripping
# =============================================================================


_MARKUP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),  # bold
    (re.compile(r"\*([^*]+)\*"), r"\1"),  # italic
    (re.compile(r"^###\s+", re.MULTILINE), ""),
    (re.compile(r"^##\s+", re.MULTILINE), ""),
    (re.compile(r"^#\s+", re.MULTILINE), ""),
    (re.compile(r"^\t\+\s+", re.MULTILINE), "• "),
    (re.compile(r"^\s{2,}", re.MULTILINE), ""),  # indentation
)


def strip_markup(text: str) -> str:
    """Remove markdown emphasis, headings and indentation from prose."""
    for pattern, replacement in _MARKUP_RULES:
        text = pattern.sub(replacement, text)
    return text


def failure_message(action: str, error: PolycodeError) -> str:
    """User-facing text for an error, one wording per error class."""
    if isinstance(error, TransportError):
        return MSG_UNREACHABLE
    if isinstance(error, MalformedResponseError):
        return f"{action} failed: invalid response from server"
    if isinstance(error, ProviderError):
        return f"{action} failed: {error.message}"
    return error.message


# =============================================================================
# Orchestrator
# =============================================================================


class ConversionOrchestrator:
    """
    Runs conversions and explanations.

    Usage:
        orchestrator = ConversionOrchestrator(BackendClient(url), history, bus)
        result = await orchestrator.convert(
            ConversionRequest(source_code="x = 1", source_lang="Python", target_lang="Go")
        )
        if result.ok:
            print(orchestrator.output)
    """

    def __init__(
        self,
        assistant: CodeAssistant,
        history: HistoryCache,
        bus: EventBus | None = None,
    ):
        self.assistant = assistant
        self.history = history
        self.bus = bus or history.bus or EventBus()
        self.output = ""
        self.explanation = ""
        self.busy = False

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """
        Translate ``request.source_code`` into ``request.target_lang``.

        Validation happens before any network activity. On success the
        output is replaced and a record is added to history; on failure the
        output stays empty and history is untouched.
        """
        try:
            source_code = request.source_code.strip()
            if not source_code:
                return await self._reject(ValidationError(MSG_EMPTY_SOURCE))
            if request.source_lang == request.target_lang:
                return await self._reject(ValidationError(MSG_SAME_LANGUAGES))

            self.output = ""
            await self._set_busy(True)

            try:
                output = await self.assistant.translate(source_code, request.target_lang)
            except PolycodeError as e:
                logger.error(f"Conversion error: {e}")
                message = failure_message("Conversion", e)
                await self.bus.emit(CONVERSION_FAILED, error=type(e).__name__, message=message)
                await self._notice(NOTICE_ERROR, message)
                return ConversionResult(error=e, message=message)
            except Exception as e:
                logger.exception("Unexpected conversion error")
                error = PolycodeError(str(e))
                message = f"Conversion failed: {MSG_UNEXPECTED}"
                await self.bus.emit(CONVERSION_FAILED, error=type(e).__name__, message=message)
                await self._notice(NOTICE_ERROR, message)
                return ConversionResult(error=error, message=message)

            self.output = output
            record = ConversionRecord(
                source_code=source_code,
                source_lang=request.source_lang,
                target_lang=request.target_lang,
                output=output,
            )
            await self.history.add(record)
            await self.bus.emit(CONVERSION_COMPLETED, target_lang=request.target_lang)
            await self._notice(NOTICE_SUCCESS, MSG_CONVERTED)
            return ConversionResult(output=output, record=record, message=MSG_CONVERTED)
        finally:
            await self._set_busy(False)

    async def explain(self, code: str, language: str | None = None) -> ExplainResult:
        """Explain ``code`` in prose. Never touches history."""
        try:
            if not code or not code.strip():
                error = ValidationError(MSG_NOTHING_TO_EXPLAIN)
                await self._notice(NOTICE_ERROR, error.message)
                return ExplainResult(error=error, message=error.message)

            await self._set_busy(True)

            try:
                raw = await self.assistant.explain(code, language)
            except PolycodeError as e:
                logger.error(f"Explain error: {e}")
                message = failure_message("Explain", e)
                await self._notice(NOTICE_ERROR, message)
                return ExplainResult(error=e, message=message)
            except Exception as e:
                logger.exception("Unexpected explain error")
                message = f"Explain failed: {MSG_UNEXPECTED}"
                await self._notice(NOTICE_ERROR, message)
                return ExplainResult(error=PolycodeError(str(e)), message=message)

            self.explanation = strip_markup(raw)
            await self.bus.emit(EXPLAIN_COMPLETED, language=language)
            return ExplainResult(explanation=self.explanation)
        finally:
            await self._set_busy(False)

    async def _reject(self, error: ValidationError) -> ConversionResult:
        await self._notice(NOTICE_ERROR, error.message)
        return ConversionResult(error=error, message=error.message)

    async def _set_busy(self, busy: bool) -> None:
        self.busy = busy
        await self.bus.emit(BUSY_CHANGED, busy=busy)

    async def _notice(self, kind: str, message: str) -> None:
        await self.bus.emit(kind, message=message)
