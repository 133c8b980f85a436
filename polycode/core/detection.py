"""
Heuristic source-language detection.

Two pure functions:

- ``classify`` looks at the code itself and walks an ordered rule table.
  The first rule that matches wins, so specific signatures (``def f(``)
  must come before generic ones (``console.``). Order is load-bearing.
  Patterns are ASCII-only: ``\w`` and ``\b`` do not match accented letters.
- ``classify_by_extension`` maps a filename suffix to a language.

Neither touches the UI; callers decide what to do with the label.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from polycode.core.languages import EXTENSION_LANGUAGES, LanguageLabel


@dataclass(frozen=True)
class PatternRule:
    """A signature pattern and the language it indicates."""

    matcher: re.Pattern[str]
    label: LanguageLabel

    @classmethod
    def of(cls, pattern: str, label: LanguageLabel, flags: int = re.MULTILINE) -> PatternRule:
        return cls(matcher=re.compile(pattern, flags | re.ASCII), label=label)

    def matches(self, text: str) -> bool:
        return self.matcher.search(text) is not None


# =============================================================================
# Rule Table
# =============================================================================


DEFAULT_RULES: tuple[PatternRule, ...] = (
    PatternRule.of(r"\bdef\s+\w+\(|\bimport\s+\w+", LanguageLabel.PYTHON),
    PatternRule.of(
        r"console\.log\(|\bfunction\s+\w+\(|=>|\bconst\s+\w+",
        LanguageLabel.JAVASCRIPT,
    ),
    PatternRule.of(
        r"\bclass\s+\w+\b.*\bextends\b|System\.out\.println|public\s+static\s+void\s+main",
        LanguageLabel.JAVA,
    ),
    PatternRule.of(r"#include\s+<|std::|cout\s*<<", LanguageLabel.CPP),
    PatternRule.of(r"using\s+System;|Console\.WriteLine\(", LanguageLabel.CSHARP),
    PatternRule.of(r"package\s+\w+;|fun\s+\w+\(|val\s+\w+|var\s+\w+", LanguageLabel.KOTLIN, flags=0),
    PatternRule.of(r"\bfunc\s+\w+\(|fmt\.Println\(", LanguageLabel.GO),
    PatternRule.of(r"->|let\s+\w+:|fn\s+\w+\(", LanguageLabel.RUST),
    PatternRule.of(r"console\.|import\s+\w+\s+from\s+", LanguageLabel.TYPESCRIPT),
    PatternRule.of(r"<\?php|echo\s+", LanguageLabel.PHP),
    PatternRule.of(r"#!", LanguageLabel.BASH, flags=0),
)


# Checked only when no rule matched
_SQL_FALLBACK = (
    re.compile(r"SELECT\s+.+FROM", re.IGNORECASE | re.ASCII),
    re.compile(r"INSERT\s+INTO", re.IGNORECASE | re.ASCII),
)


# =============================================================================
# Classifiers
# =============================================================================


def classify(
    text: str | None,
    rules: Sequence[PatternRule] = DEFAULT_RULES,
) -> LanguageLabel | None:
    """
    Guess the language of a piece of source code.

    Args:
        text: Source code; surrounding whitespace is ignored
        rules: Ordered rule table, first match wins

    Returns:
        The detected label, or None when the text is empty or nothing matched
    """
    sample = (text or "").strip()
    if not sample:
        return None

    for rule in rules:
        if rule.matches(sample):
            return rule.label

    if any(pattern.search(sample) for pattern in _SQL_FALLBACK):
        return LanguageLabel.SQL

    return None


def classify_by_extension(filename: str | None) -> LanguageLabel | None:
    """Map a filename to a language by its (case-insensitive) suffix."""
    if not filename or "." not in filename:
        return None

    suffix = "." + filename.rsplit(".", 1)[1].lower()
    return EXTENSION_LANGUAGES.get(suffix)
