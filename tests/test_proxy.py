"""
Tests for the completion proxy and code-output cleanup.
"""

import pytest

from polycode.core.errors import MalformedResponseError, ProviderError
from polycode.services.ai.prompts import (
    EXPLAIN_MAX_TOKENS,
    TEMPERATURE,
    TRANSLATE_MAX_TOKENS,
    explain_directive,
    translate_directive,
)
from polycode.services.ai.proxy import clean_code_output

from conftest import StubProvider, chat_completion


# =============================================================================
# clean_code_output
# =============================================================================


class TestCleanCodeOutput:
    def test_strips_tagged_fence(self):
        assert clean_code_output("```python\ndef f(): pass\n```") == "def f(): pass"

    def test_strips_untagged_fence(self):
        assert clean_code_output("```\nx = 1\n```") == "x = 1"

    @pytest.mark.parametrize("tag", ["c++", "objective-c", "c#", "js"])
    def test_tags_with_symbols(self, tag):
        assert clean_code_output(f"```{tag}\nint x;\n```") == "int x;"

    def test_plain_code_is_only_trimmed(self):
        assert clean_code_output("  \nx = 1\n\n") == "x = 1"

    def test_keeps_inner_content(self):
        code = "```go\nfunc main() {\n\tfmt.Println(\"```\")\n}\n```"
        assert clean_code_output(code) == 'func main() {\n\tfmt.Println("```")\n}'

    def test_surrounding_whitespace(self):
        assert clean_code_output("\n\n```rust\nfn main() {}\n```\n\n") == "fn main() {}"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "```",
            "``````",
            "```python\ndef f(): pass\n```",
            "```\n```py\nx\n```\n```",
            "  plain  ",
            "```js\nconsole.log(1)",
            "console.log(1)\n```",
            "a\n```\nb",
        ],
    )
    def test_idempotent(self, text):
        once = clean_code_output(text)
        assert clean_code_output(once) == once


# =============================================================================
# Directives
# =============================================================================


class TestDirectives:
    def test_translate_directive(self):
        directive = translate_directive("x = 1", "Rust")
        assert "Convert the following code to Rust" in directive.prompt
        assert "translate them to English" in directive.prompt
        assert "DO NOT add any new comments" in directive.prompt
        assert "NO markdown" in directive.prompt
        assert directive.prompt.endswith("x = 1")
        assert directive.max_tokens == TRANSLATE_MAX_TOKENS
        assert directive.temperature == TEMPERATURE

    def test_explain_directive(self):
        directive = explain_directive("x = 1", "Python")
        assert directive.prompt.startswith("Explain the following Python")
        assert "Do NOT return code" in directive.prompt
        assert directive.max_tokens == EXPLAIN_MAX_TOKENS

    def test_explain_directive_without_language(self):
        assert explain_directive("x").prompt.startswith("Explain the following code")


# =============================================================================
# CompletionProxy
# =============================================================================


class TestTranslate:
    @pytest.mark.asyncio
    async def test_cleans_fenced_output(self, make_proxy):
        stub = StubProvider(body=chat_completion("```js\nconsole.log('hi')\n```"))
        proxy = make_proxy(stub)

        assert await proxy.translate("print('hi')", "JavaScript") == "console.log('hi')"

    @pytest.mark.asyncio
    async def test_request_shape(self, make_proxy, settings):
        stub = StubProvider(body=chat_completion("x := 1"))
        await make_proxy(stub).translate("x = 1", "Go")

        sent = stub.requests[0]
        assert sent["model"] == settings.completion_model
        assert sent["temperature"] == 0.2
        assert sent["max_tokens"] == 4000
        assert sent["messages"][0]["role"] == "user"
        assert "to Go" in sent["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_provider_status_is_mirrored(self, make_proxy):
        stub = StubProvider(status_code=429, body={"error": {"message": "slow down"}})

        with pytest.raises(ProviderError) as exc_info:
            await make_proxy(stub).translate("x = 1", "Go")

        assert exc_info.value.status_code == 429
        assert "slow down" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_not_retried(self, make_proxy):
        stub = StubProvider(status_code=503, body={"error": "down"})

        with pytest.raises(ProviderError):
            await make_proxy(stub).translate("x = 1", "Go")

        assert len(stub.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"id": "x", "object": "chat.completion", "created": 0, "model": "m", "choices": []},
            {"id": "x", "object": "chat.completion", "created": 0, "model": "m"},
            chat_completion(None),
            chat_completion("   "),
        ],
    )
    async def test_missing_completion_is_malformed(self, make_proxy, body):
        with pytest.raises(MalformedResponseError):
            await make_proxy(StubProvider(body=body)).translate("x = 1", "Go")

    @pytest.mark.asyncio
    async def test_fence_only_completion_is_malformed(self, make_proxy):
        with pytest.raises(MalformedResponseError):
            await make_proxy(StubProvider(body=chat_completion("```\n```"))).translate("x", "Go")


class TestExplain:
    @pytest.mark.asyncio
    async def test_returns_prose_unsanitized(self, make_proxy):
        text = "**Purpose**: prints.\n```\nnot stripped\n```"
        stub = StubProvider(body=chat_completion(f"  {text}  "))

        assert await make_proxy(stub).explain("print(1)", "Python") == text

    @pytest.mark.asyncio
    async def test_smaller_output_budget(self, make_proxy):
        stub = StubProvider(body=chat_completion("It prints."))
        await make_proxy(stub).explain("print(1)")

        assert stub.requests[0]["max_tokens"] == 1000
        assert "following code" in stub.requests[0]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_provider_error(self, make_proxy):
        stub = StubProvider(status_code=500, text="boom")

        with pytest.raises(ProviderError) as exc_info:
            await make_proxy(stub).explain("print(1)")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == "boom"
