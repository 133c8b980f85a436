"""
Completion proxy.

Turns translate/explain calls into chat-completion requests, validates
the replies and cleans up code output. All provider failures surface as
``ProviderError`` with the provider's status so the HTTP layer can mirror
it; nothing is retried.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import openai
from openai import AsyncOpenAI

from polycode.core.errors import MalformedResponseError, ProviderError
from polycode.services.ai.prompts import Directive, explain_directive, translate_directive

logger = logging.getLogger(__name__)


# =============================================================================
# Output Sanitizing
# =============================================================================


_FENCE_OPENER = re.compile(r"^```[\w+#.-]*[ \t]*\r?\n")
_FENCE_CLOSER = re.compile(r"```$")


def clean_code_output(code: str) -> str:
    """
    Remove a markdown fence wrapped around code.

    Strips one leading fence opener (``` with an optional language tag) and
    one trailing closer, then trims whitespace. The pass repeats until the
    text stops changing, so the result is stable under re-cleaning.
    """
    cleaned = code.strip()
    while True:
        stripped = _FENCE_OPENER.sub("", cleaned, count=1)
        stripped = _FENCE_CLOSER.sub("", stripped, count=1).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


# =============================================================================
# Proxy
# =============================================================================


class CompletionProxy:
    """
    Backend façade over the completion provider.

    Usage:
        proxy = CompletionProxy(get_completion_client(), model="llama-3.3-70b")
        code = await proxy.translate("print('hi')", "JavaScript")
        text = await proxy.explain(code, "JavaScript")
    """

    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    async def translate(self, source_code: str, target_language: str) -> str:
        """Translate code; returns the cleaned code."""
        logger.info(f"Converting code to {target_language}...")
        content = await self._complete(translate_directive(source_code, target_language))
        code = clean_code_output(content)
        if not code:
            raise MalformedResponseError("Completion contained no code")
        logger.info("Conversion successful")
        return code

    async def explain(self, code: str, language: str | None = None) -> str:
        """Explain code in prose; returned as-is apart from trimming."""
        logger.info(f"Explaining {language or 'code'}...")
        return (await self._complete(explain_directive(code, language))).strip()

    async def _complete(self, directive: Directive) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=directive.to_messages(),
                temperature=directive.temperature,
                max_tokens=directive.max_tokens,
            )
        except openai.APIStatusError as e:
            logger.error(f"Completion provider error: {e.status_code} {e.response.text}")
            raise ProviderError(
                f"Completion provider error: {e.response.reason_phrase or e.status_code}",
                status_code=e.status_code,
                details=e.response.text,
            ) from e
        except openai.APIConnectionError as e:
            logger.error(f"Completion provider unreachable: {e}")
            raise ProviderError("Completion provider unreachable", status_code=502) from e
        except openai.APIError as e:
            logger.error(f"Invalid completion response: {e}")
            raise MalformedResponseError("Invalid response from completion provider") from e

        return _extract_content(completion)


def _extract_content(completion: Any) -> str:
    """Pull ``choices[0].message.content`` out of a reply, or fail."""
    choices = getattr(completion, "choices", None)
    message = getattr(choices[0], "message", None) if choices else None
    content = getattr(message, "content", None)

    if not isinstance(content, str) or not content.strip():
        logger.error(f"Invalid completion response structure: {completion!r}")
        raise MalformedResponseError("Invalid response from completion provider")

    return content.strip()
