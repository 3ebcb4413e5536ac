"""Tests for voice configuration defaults, environment overrides and validation."""

import pytest

from voice_config import VoiceConfig, VoiceConfigError


def test_defaults():
    config = VoiceConfig.from_env({})
    assert config.tts_voice == "bryce"
    assert config.speech_rate == 0.9
    assert config.enabled is True


def test_environment_overrides():
    config = VoiceConfig.from_env(
        {
            "VOICE_TTS_VOICE": "hfc_male",
            "VOICE_SPEECH_RATE": "1.2",
            "VOICE_ENABLED": "off",
        }
    )
    assert config.tts_voice == "hfc_male"
    assert config.speech_rate == 1.2
    assert config.enabled is False


@pytest.mark.parametrize(
    "environ",
    [
        {"VOICE_SPEECH_RATE": "fast"},
        {"VOICE_SPEECH_RATE": "0"},
        {"VOICE_ENABLED": "maybe"},
    ],
)
def test_invalid_environment(environ):
    with pytest.raises(VoiceConfigError):
        VoiceConfig.from_env(environ)


def test_updated_returns_validated_copy():
    config = VoiceConfig()
    changed = config.updated(tts_voice="hfc_male")
    assert changed.tts_voice == "hfc_male"
    assert config.tts_voice == "bryce"

    with pytest.raises(VoiceConfigError):
        config.updated(speech_rate=-1)
    with pytest.raises(VoiceConfigError):
        config.updated(volume=0.8)
