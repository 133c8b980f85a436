"""
Completion provider access.

The provider is an OpenAI-compatible chat-completions endpoint. The proxy
shapes directives, validates replies and sanitizes code output.
"""

from polycode.services.ai.client import get_completion_client
from polycode.services.ai.prompts import (
    Directive,
    explain_directive,
    translate_directive,
)
from polycode.services.ai.proxy import CompletionProxy, clean_code_output

__all__ = [
    "get_completion_client",
    "Directive",
    "explain_directive",
    "translate_directive",
    "CompletionProxy",
    "clean_code_output",
]
