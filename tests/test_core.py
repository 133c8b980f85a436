"""
Tests for core helpers: languages, time formatting, events, settings.
"""

import asyncio

import pytest

from polycode.config import Settings
from polycode.core.events import EventBus
from polycode.core.languages import (
    SUPPORTED_LANGUAGES,
    LanguageLabel,
    get_file_extension,
    get_language_by_label,
)
from polycode.core.utils import time_ago
from polycode.services.debounce import Debouncer


# =============================================================================
# Languages
# =============================================================================


class TestLanguages:
    def test_supported_excludes_auto(self):
        assert LanguageLabel.AUTO not in SUPPORTED_LANGUAGES
        assert len(SUPPORTED_LANGUAGES) == 18

    @pytest.mark.parametrize(
        "label, ext",
        [("Python", "py"), ("C#", "cs"), ("Bash", "sh"), ("Javascript", "js"), ("Cobol", "txt")],
    )
    def test_file_extension(self, label, ext):
        assert get_file_extension(label) == ext

    @pytest.mark.parametrize(
        "label, expected",
        [("python", LanguageLabel.PYTHON), (" C++ ", LanguageLabel.CPP), ("AUTO", LanguageLabel.AUTO)],
    )
    def test_lookup(self, label, expected):
        assert get_language_by_label(label) is expected

    def test_lookup_unknown(self):
        assert get_language_by_label("Fortran") is None


# =============================================================================
# time_ago
# =============================================================================


class TestTimeAgo:
    NOW = 10_000_000_000

    @pytest.mark.parametrize(
        "elapsed_ms, expected",
        [
            (0, "just now"),
            (9_999, "just now"),
            (10_000, "10s"),
            (59_999, "59s"),
            (60_000, "1m"),
            (3_599_000, "59m"),
            (3_600_000, "1h"),
            (86_399_000, "23h"),
            (86_400_000, "1d"),
            (10 * 86_400_000, "10d"),
        ],
    )
    def test_buckets(self, elapsed_ms, expected):
        assert time_ago(self.NOW - elapsed_ms, now=self.NOW) == expected

    @pytest.mark.parametrize("timestamp", [None, 0])
    def test_missing(self, timestamp):
        assert time_ago(timestamp, now=self.NOW) == ""


# =============================================================================
# Events
# =============================================================================


class TestEventBus:
    @pytest.mark.asyncio
    async def test_wildcard_subscription(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event.event_type)

        bus.subscribe("notice.*", handler)
        await bus.emit("notice.error", message="x")
        await bus.emit("history.changed", count=0)

        assert received == ["notice.error"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        async def working(event):
            received.append(event)

        bus.subscribe("*", broken)
        bus.subscribe("*", working)
        await bus.emit("theme.changed", theme="light")

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_history_is_bounded(self):
        bus = EventBus(max_history=3)
        for n in range(5):
            await bus.emit("busy.changed", busy=bool(n % 2))

        assert len(bus.get_history()) == 3


# =============================================================================
# Debouncer
# =============================================================================


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_runs_once_with_last_arguments(self):
        calls = []
        debouncer = Debouncer(0.01, calls.append)

        debouncer.trigger("a")
        debouncer.trigger("b")
        await debouncer.wait()

        assert calls == ["b"]
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_cancel(self):
        calls = []
        debouncer = Debouncer(0.01, calls.append)

        debouncer.trigger("a")
        debouncer.cancel()
        await asyncio.sleep(0.03)

        assert calls == []

    @pytest.mark.asyncio
    async def test_callback_errors_are_logged(self, caplog):
        def broken(_):
            raise ValueError("nope")

        debouncer = Debouncer(0, broken)
        debouncer.trigger("a")
        await debouncer.wait()

        assert "Debounced callback failed" in caplog.text


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CEREBRAS_API_KEY", "API_PORT", "COMPLETION_MODEL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.api_port == 3000
        assert settings.completion_model == "llama-3.3-70b"
        assert settings.has_api_key is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CEREBRAS_API_KEY", "secret")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

        settings = Settings(_env_file=None)

        assert settings.has_api_key
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
