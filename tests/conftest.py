"""
Shared fixtures: storage, bus, history, a recording assistant and a stub
completion provider served through ``httpx.MockTransport``.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from polycode.config import Settings
from polycode.core.events import EventBus
from polycode.services.ai import CompletionProxy, get_completion_client
from polycode.services.history import HistoryCache
from polycode.services.orchestrator import ConversionOrchestrator
from polycode.storage.local import InMemoryKeyValueStorage


# =============================================================================
# Helpers
# =============================================================================


def chat_completion(content: str | None) -> dict[str, Any]:
    """A minimal chat-completions reply body."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "llama-3.3-70b",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class StubProvider:
    """Records chat-completion requests and answers with a fixed reply."""

    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None):
        self.status_code = status_code
        self.body = body
        self.text = text
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.body)


class RecordingAssistant:
    """In-process assistant that records calls and returns canned answers."""

    def __init__(
        self,
        output: str = "console.log('hi')",
        explanation: str = "It prints hi.",
        error: Exception | None = None,
    ):
        self.output = output
        self.explanation = explanation
        self.error = error
        self.translate_calls: list[tuple[str, str]] = []
        self.explain_calls: list[tuple[str, str | None]] = []

    async def translate(self, source_code: str, target_language: str) -> str:
        self.translate_calls.append((source_code, target_language))
        if self.error is not None:
            raise self.error
        return self.output

    async def explain(self, code: str, language: str | None = None) -> str:
        self.explain_calls.append((code, language))
        if self.error is not None:
            raise self.error
        return self.explanation


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment."""
    return Settings(_env_file=None, cerebras_api_key="test-key")


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def history(storage, bus):
    return HistoryCache(storage, bus)


@pytest.fixture
def assistant():
    return RecordingAssistant()


@pytest.fixture
def orchestrator(assistant, history, bus):
    return ConversionOrchestrator(assistant, history, bus)


@pytest.fixture
def make_proxy(settings) -> Callable[[StubProvider], CompletionProxy]:
    """Build a CompletionProxy whose provider is ``stub``."""

    def factory(stub: StubProvider) -> CompletionProxy:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
        client = get_completion_client(settings, http_client=http_client)
        return CompletionProxy(client, settings.completion_model)

    return factory
