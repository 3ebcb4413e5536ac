"""
Speech output configuration.

Defaults live in ``VoiceConfig``; ``VoiceConfig.from_env`` layers environment
overrides on top of them:

    VOICE_TTS_VOICE, VOICE_SPEECH_RATE, VOICE_ENABLED

Configs are immutable; ``updated`` returns a validated copy.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional


class VoiceConfigError(ValueError):
    """Raised when a configuration value is out of range or unreadable."""


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class VoiceConfig:
    tts_voice: str = "bryce"
    speech_rate: float = 0.9
    enabled: bool = True

    def __post_init__(self) -> None:
        if self.speech_rate <= 0:
            raise VoiceConfigError(f"speech_rate must be positive, got {self.speech_rate}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VoiceConfig":
        env = os.environ if environ is None else environ
        overrides: Dict[str, object] = {}

        voice = env.get("VOICE_TTS_VOICE")
        if voice:
            overrides["tts_voice"] = voice

        rate = env.get("VOICE_SPEECH_RATE")
        if rate:
            try:
                overrides["speech_rate"] = float(rate)
            except ValueError as exc:
                raise VoiceConfigError(f"VOICE_SPEECH_RATE must be a number, got {rate!r}") from exc

        enabled = env.get("VOICE_ENABLED")
        if enabled:
            overrides["enabled"] = _parse_bool("VOICE_ENABLED", enabled)

        return cls(**overrides)

    def updated(self, **changes: object) -> "VoiceConfig":
        try:
            return replace(self, **changes)
        except TypeError as exc:
            raise VoiceConfigError(str(exc)) from exc


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise VoiceConfigError(f"{name} must be a boolean flag, got {value!r}")


__all__ = ["VoiceConfig", "VoiceConfigError"]
