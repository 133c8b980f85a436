"""
Directives sent to the completion provider.

Sampling parameters are fixed: low temperature for both operations, a
larger output budget for translation than for explanation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

TEMPERATURE = 0.2
TRANSLATE_MAX_TOKENS = 4000
EXPLAIN_MAX_TOKENS = 1000

# Comments in translated code are rendered in this language
COMMENT_LANGUAGE = "English"


@dataclass(frozen=True)
class Directive:
    """A single-turn prompt plus its sampling parameters."""

    prompt: str
    max_tokens: int
    temperature: float = TEMPERATURE

    def to_messages(self) -> list[dict[str, Any]]:
        return [{"role": "user", "content": self.prompt}]


def translate_directive(source_code: str, target_language: str) -> Directive:
    prompt = f"""Convert the following code to {target_language}.

RULES:
1. Convert ONLY the code - nothing else
2. If the original code has comments, translate them to {COMMENT_LANGUAGE}
3. DO NOT add any new comments that weren't in the original code
4. DO NOT add explanations
5. Output ONLY the converted code with NO markdown formatting

Code to convert:
{source_code}"""
    return Directive(prompt=prompt, max_tokens=TRANSLATE_MAX_TOKENS)


def explain_directive(code: str, language: str | None = None) -> Directive:
    prompt = (
        f"Explain the following {language or 'code'} in clear, concise plain "
        f"{COMMENT_LANGUAGE}. Describe the purpose, major steps, and any important "
        "implementation details. Do NOT return code; return explanation only:"
        f"\n\n{code}"
    )
    return Directive(prompt=prompt, max_tokens=EXPLAIN_MAX_TOKENS)
