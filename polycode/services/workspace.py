"""
Workspace controller.

A UI-agnostic stand-in for the converter page: it holds the editor fields
(source code, language pickers, output) and exposes every user action as a
plain method. Renderers read the fields and subscribe to bus events; tests
drive the methods directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from polycode.core.detection import classify, classify_by_extension
from polycode.core.events import LANGUAGE_DETECTED, NOTICE_ERROR, NOTICE_SUCCESS, Event
from polycode.core.languages import LanguageLabel, get_file_extension
from polycode.core.models import ConversionRequest
from polycode.core.utils import time_ago
from polycode.services.debounce import Debouncer
from polycode.services.orchestrator import (
    ConversionOrchestrator,
    ConversionResult,
    ExplainResult,
)
from polycode.services.theme import ThemeStore

logger = logging.getLogger(__name__)

DEFAULT_DETECT_DELAY = 0.6


@dataclass
class Notice:
    """A transient message for the user."""

    kind: str  # "success" or "error"
    message: str

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


@dataclass
class HistoryEntry:
    """A history record shaped for listing."""

    index: int
    languages: str
    age: str
    preview: str


class Workspace:
    """
    Editor state plus the actions a user can take on it.

    Usage:
        workspace = Workspace(orchestrator)
        await workspace.startup()
        workspace.input_source("def greet(): ...")   # detection is debounced
        workspace.select_target_language("Go")
        await workspace.convert()
        print(workspace.output)
    """

    def __init__(
        self,
        orchestrator: ConversionOrchestrator,
        theme: ThemeStore | None = None,
        detect_delay: float = DEFAULT_DETECT_DELAY,
    ):
        self.orchestrator = orchestrator
        self.history = orchestrator.history
        self.bus = orchestrator.bus
        self.theme = theme

        self.source_code = ""
        self.source_language = LanguageLabel.AUTO.value
        self.target_language = LanguageLabel.JAVASCRIPT.value
        self.file_name: str | None = None
        self.last_notice: Notice | None = None

        # A manual pick of a concrete source language turns detection off
        self.user_selected_source = False

        self.detector = Debouncer(detect_delay, self._detect_from_code)
        self.bus.subscribe("notice.*", self._remember_notice)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def output(self) -> str:
        return self.orchestrator.output

    @output.setter
    def output(self, value: str) -> None:
        self.orchestrator.output = value

    @property
    def busy(self) -> bool:
        return self.orchestrator.busy

    @property
    def explanation(self) -> str:
        return self.orchestrator.explanation

    async def startup(self) -> None:
        """Load persisted history and theme."""
        await self.history.load()
        if self.theme is not None:
            await self.theme.load()

    # =========================================================================
    # Editing
    # =========================================================================

    def input_source(self, text: str) -> None:
        """Replace the source text, as typing does."""
        self.source_code = text
        if self.source_language == LanguageLabel.AUTO.value and not self.user_selected_source:
            self.detector.trigger(text)

    def select_source_language(self, label: str) -> None:
        self.source_language = label
        self.user_selected_source = label != LanguageLabel.AUTO.value

    def select_target_language(self, label: str) -> None:
        self.target_language = label

    async def upload(self, filename: str, text: str) -> None:
        """Load a file's contents as the source and detect by extension."""
        self.file_name = filename
        self.source_code = text

        label = classify_by_extension(filename)
        if label is not None:
            logger.debug(f"Matched {filename} → {label.value}")
            await self._apply_detected(label)
        else:
            logger.debug(f"No language match found for: {filename}")

        await self._notice(NOTICE_SUCCESS, "File uploaded successfully!")

    async def format(self) -> None:
        """Trim every line of the source."""
        code = self.source_code.strip()
        if not code:
            await self._notice(NOTICE_ERROR, "No code to format")
            return

        self.source_code = "\n".join(line.strip() for line in code.split("\n"))
        await self._notice(NOTICE_SUCCESS, "Code formatted!")

    async def swap(self) -> None:
        """Swap the language pickers, and the code too once there is output."""
        self.source_language, self.target_language = self.target_language, self.source_language

        if self.output:
            self.source_code, self.output = self.output, self.source_code

        await self._notice(NOTICE_SUCCESS, "Languages swapped!")

    # =========================================================================
    # Conversion
    # =========================================================================

    async def convert(self) -> ConversionResult:
        return await self.orchestrator.convert(
            ConversionRequest(
                source_code=self.source_code,
                source_lang=self.source_language,
                target_lang=self.target_language,
            )
        )

    async def explain(self) -> ExplainResult:
        """Explain the current output."""
        return await self.orchestrator.explain(self.output, self.target_language)

    def download_name(self) -> str:
        """Filename for saving the output, e.g. ``converted_code.rs``."""
        return f"converted_code.{get_file_extension(self.target_language)}"

    async def export_output(self) -> tuple[str, str] | None:
        """The (filename, contents) pair to save, or None when there is no output."""
        if not self.output:
            await self._notice(NOTICE_ERROR, "No code to download")
            return None

        await self._notice(NOTICE_SUCCESS, "Code downloaded!")
        return self.download_name(), self.output

    # =========================================================================
    # History
    # =========================================================================

    def history_entries(self, now: int | None = None) -> list[HistoryEntry]:
        return [
            HistoryEntry(
                index=i,
                languages=record.languages,
                age=time_ago(record.timestamp, now),
                preview=record.preview(),
            )
            for i, record in enumerate(self.history.all())
        ]

    async def load_history_item(self, index: int) -> bool:
        """Restore the editor from a history record."""
        record = self.history.get(index)
        if record is None:
            return False

        self.source_code = record.source_code
        self.source_language = record.source_lang or self.source_language
        self.target_language = record.target_lang or self.target_language
        self.output = record.output

        await self._notice(NOTICE_SUCCESS, "Loaded history item")
        return True

    async def clear_history(self) -> None:
        await self.history.clear()
        await self._notice(NOTICE_SUCCESS, "History cleared")

    # =========================================================================
    # Theme
    # =========================================================================

    async def toggle_theme(self) -> str | None:
        if self.theme is None:
            return None
        theme = await self.theme.toggle()
        await self._notice(NOTICE_SUCCESS, f"Switched to {theme} theme")
        return theme

    # =========================================================================
    # Internals
    # =========================================================================

    async def _detect_from_code(self, text: str) -> None:
        label = classify(text)
        if label is None:
            logger.debug("No language detected from code")
            return
        await self._apply_detected(label)

    async def _apply_detected(self, label: LanguageLabel) -> None:
        self.source_language = label.value
        await self.bus.emit(LANGUAGE_DETECTED, language=label.value)
        await self._notice(NOTICE_SUCCESS, f"Detected language: {label.value}")

    async def _notice(self, kind: str, message: str) -> None:
        await self.bus.emit(kind, message=message)

    async def _remember_notice(self, event: Event) -> None:
        kind = event.event_type.split(".", 1)[1]
        self.last_notice = Notice(kind=kind, message=event.payload.get("message", ""))
