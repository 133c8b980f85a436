"""
Core domain: languages, detection, models, errors and events.
"""

from polycode.core.detection import (
    DEFAULT_RULES,
    PatternRule,
    classify,
    classify_by_extension,
)
from polycode.core.errors import (
    MalformedResponseError,
    PersistenceError,
    PolycodeError,
    ProviderError,
    TransportError,
    ValidationError,
)
from polycode.core.events import Event, EventBus
from polycode.core.languages import (
    LanguageLabel,
    SUPPORTED_LANGUAGES,
    get_file_extension,
    get_language_by_label,
)
from polycode.core.models import ConversionRecord, ConversionRequest

__all__ = [
    # Detection
    "DEFAULT_RULES",
    "PatternRule",
    "classify",
    "classify_by_extension",
    # Errors
    "MalformedResponseError",
    "PersistenceError",
    "PolycodeError",
    "ProviderError",
    "TransportError",
    "ValidationError",
    # Events
    "Event",
    "EventBus",
    # Languages
    "LanguageLabel",
    "SUPPORTED_LANGUAGES",
    "get_file_extension",
    "get_language_by_label",
    # Models
    "ConversionRecord",
    "ConversionRequest",
]
