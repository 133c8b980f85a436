"""
Completion provider client.

The provider speaks the OpenAI chat-completions protocol, so the official
``openai`` async client is pointed at its base URL.
"""

from __future__ import annotations

import httpx
from openai import AsyncOpenAI

from polycode.config import Settings, get_settings


def get_completion_client(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncOpenAI:
    """
    Build the provider client.

    Args:
        settings: Settings to read the key and base URL from. Defaults to env.
        http_client: Optional transport override (tests pass a mock transport).

    Returns:
        An ``AsyncOpenAI`` client with retries disabled.
    """
    settings = settings or get_settings()
    if not settings.cerebras_api_key:
        raise ValueError("CEREBRAS_API_KEY not set")

    # Provider failures are reported to the caller, never retried
    return AsyncOpenAI(
        api_key=settings.cerebras_api_key,
        base_url=settings.cerebras_base_url,
        max_retries=0,
        http_client=http_client,
    )
