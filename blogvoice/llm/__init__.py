"""LLM-facing abstractions for blog text cleanup.

This package defines the prompt library, the OpenAI HTTP clients, and the
sanitizer used by the pipeline's cleanup stage.
"""

from .openai_client import OpenAIChatClient, OpenAIProviderError, OpenAISpeechClient
from .prompts import PromptLibrary
from .sanitizer import OpenAITextSanitizer, TextSanitizer

__all__ = [
    "OpenAIChatClient",
    "OpenAIProviderError",
    "OpenAISpeechClient",
    "OpenAITextSanitizer",
    "PromptLibrary",
    "TextSanitizer",
]
