"""Top-level package for Blogvoice.

This package converts blog posts into spoken audio: a browser reads the page,
an LLM strips non-prose content, a speech model voices the result, and a chat
bot delivers the audio back. The main orchestration entry point is
`ConversionPipeline`.
"""

from .pipeline import ConversionPipeline

__all__ = ["ConversionPipeline", "__version__"]

__version__ = "0.1.0"
