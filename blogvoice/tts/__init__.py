"""Text-to-speech provider abstractions.

This package contains voice profile types and synthesizer interfaces used by the
pipeline speech stage.
"""

from .synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .voices import VoiceProfile

__all__ = ["VoiceProfile", "SpeechSynthesizer", "OpenAISpeechSynthesizer"]
