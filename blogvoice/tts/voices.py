"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent provider voice identities and tuning metadata.
- Decouple pipeline logic from provider-specific naming.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by TTS providers.

    Attributes:
        provider_voice_id: Provider-native voice identifier.
        audio_format: Provider response format (`mp3`, `wav`, ...).
        speaking_rate: Relative speaking rate multiplier.
    """

    provider_voice_id: str = "nova"
    audio_format: str = "mp3"
    speaking_rate: float = 1.0
