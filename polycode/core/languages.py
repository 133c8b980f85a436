"""
Supported programming languages and utilities.

Labels are the human-readable names shown in the language pickers and
sent verbatim to the completion provider. "Auto" is the sentinel for
"detect the source language from the code".
"""

from __future__ import annotations

from enum import Enum


class LanguageLabel(str, Enum):
    """Supported programming languages."""

    PYTHON = "Python"
    JAVASCRIPT = "JavaScript"
    TYPESCRIPT = "TypeScript"
    JAVA = "Java"
    C = "C"
    CPP = "C++"
    CSHARP = "C#"
    GO = "Go"
    RUST = "Rust"
    KOTLIN = "Kotlin"
    SWIFT = "Swift"
    OBJECTIVE_C = "Objective-C"
    SCALA = "Scala"
    PERL = "Perl"
    BASH = "Bash"
    SQL = "SQL"
    PHP = "PHP"
    RUBY = "Ruby"

    # Sentinel, never a conversion target
    AUTO = "Auto"


# Source file suffix -> language (used when a file is loaded)
EXTENSION_LANGUAGES: dict[str, LanguageLabel] = {
    ".py": LanguageLabel.PYTHON,
    ".js": LanguageLabel.JAVASCRIPT,
    ".ts": LanguageLabel.TYPESCRIPT,
    ".java": LanguageLabel.JAVA,
    ".cpp": LanguageLabel.CPP,
    ".c": LanguageLabel.C,
    ".go": LanguageLabel.GO,
    ".rb": LanguageLabel.RUBY,
    ".php": LanguageLabel.PHP,
    ".cs": LanguageLabel.CSHARP,
    ".rs": LanguageLabel.RUST,
    ".kt": LanguageLabel.KOTLIN,
    ".swift": LanguageLabel.SWIFT,
    ".m": LanguageLabel.OBJECTIVE_C,
    ".scala": LanguageLabel.SCALA,
    ".pl": LanguageLabel.PERL,
    ".sh": LanguageLabel.BASH,
    ".sql": LanguageLabel.SQL,
}


# Language -> file extension for saved output
FILE_EXTENSIONS: dict[str, str] = {
    "Python": "py",
    "JavaScript": "js",
    "Javascript": "js",  # legacy label still present in old history entries
    "Java": "java",
    "C++": "cpp",
    "C": "c",
    "Go": "go",
    "Ruby": "rb",
    "PHP": "php",
    "C#": "cs",
    "TypeScript": "ts",
    "Rust": "rs",
    "Kotlin": "kt",
    "Swift": "swift",
    "Objective-C": "m",
    "Scala": "scala",
    "Perl": "pl",
    "Bash": "sh",
    "SQL": "sql",
}


# All concrete languages (for pickers and the API)
SUPPORTED_LANGUAGES = [lang for lang in LanguageLabel if lang is not LanguageLabel.AUTO]


# =============================================================================
# Utilities
# =============================================================================


def get_file_extension(language: str) -> str:
    """File extension for output in ``language``; unknown labels get "txt"."""
    return FILE_EXTENSIONS.get(language, "txt")


def get_language_by_label(label: str) -> LanguageLabel | None:
    """
    Look up a label case-insensitively.

    Accepts "python", "C++", "auto", etc. Returns None for anything
    outside the closed set.
    """
    wanted = label.strip().lower()
    for lang in LanguageLabel:
        if lang.value.lower() == wanted:
            return lang
    return None
