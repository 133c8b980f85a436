"""
Client-side services: history, theme, orchestration and the workspace
controller, plus the backend client and completion proxy they talk to.
"""

from polycode.services.backend import BackendClient
from polycode.services.debounce import Debouncer
from polycode.services.history import HISTORY_CAPACITY, HistoryCache
from polycode.services.orchestrator import (
    CodeAssistant,
    ConversionOrchestrator,
    ConversionResult,
    ExplainResult,
    strip_markup,
)
from polycode.services.theme import ThemeStore
from polycode.services.workspace import Notice, Workspace

__all__ = [
    "BackendClient",
    "Debouncer",
    "HISTORY_CAPACITY",
    "HistoryCache",
    "CodeAssistant",
    "ConversionOrchestrator",
    "ConversionResult",
    "ExplainResult",
    "strip_markup",
    "ThemeStore",
    "Notice",
    "Workspace",
]
