import base64
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from move_confirmation import (
    format_check,
    format_checkmate,
    format_error,
    format_illegal_move,
    format_move_confirmation,
    format_stalemate,
)
from voice_config import VoiceConfig

logger = logging.getLogger(__name__)

PREFERRED_VOICES = ("bryce", "hfc_male")


class TTSGenerationError(Exception):
    """Raised when Piper fails to synthesize audio."""


class PiperTTS:
    """Lightweight helper around the Piper CLI for local text-to-speech."""

    def __init__(self, default_voice: str = "bryce", piper_dir: Optional[Path] = None):
        self.project_root = Path(__file__).resolve().parent
        env_dir = os.getenv("PIPER_DIR")
        if piper_dir is None:
            piper_dir = Path(env_dir) if env_dir else self.project_root / "assets" / "text_to_speech" / "piper"
        self.piper_dir = piper_dir
        self.piper_exe = self.piper_dir / ("piper.exe" if os.name == "nt" else "piper")
        self.voices: Dict[str, Path] = {
            "bryce": Path("bryce-medium") / "en_US-bryce-medium.onnx",
            "hfc_male": Path("hfc_male-medium") / "en_US-hfc_male-medium.onnx",
        }

        if default_voice not in self.voices:
            default_voice = "bryce"
        self.default_voice = default_voice

    def available_voices(self) -> List[str]:
        return [name for name, model in self.voices.items() if (self.piper_dir / model).exists()]

    def select_voice(self, requested: Optional[str] = None, preferred: Sequence[str] = PREFERRED_VOICES) -> str:
        """Pick the requested voice if configured, else the first installed preferred voice."""
        if requested in self.voices:
            return requested
        installed = self.available_voices()
        for name in preferred:
            if name in installed:
                return name
        return installed[0] if installed else self.default_voice

    def synthesize(self, text: str, voice: Optional[str] = None, rate: float = 1.0) -> bytes:
        """Generate spoken audio for the given text and return raw WAV bytes."""
        if not text or not text.strip():
            raise ValueError("Cannot synthesize empty text.")

        if not self.piper_exe.exists():
            raise TTSGenerationError(f"Piper executable not found at {self.piper_exe}")

        voice_name = voice or self.default_voice
        if voice_name not in self.voices:
            raise TTSGenerationError(f"Voice '{voice_name}' is not configured.")

        model_path = self.piper_dir / self.voices[voice_name]
        if not model_path.exists():
            raise TTSGenerationError(f"Piper model not found at {model_path}")

        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as tmp_file:
            tmp_path = Path(tmp_file.name)

        try:
            cmd = [
                str(self.piper_exe),
                "-m",
                str(model_path),
                "-f",
                str(tmp_path),
            ]
            if rate != 1.0:
                # Piper stretches phoneme length; a slower rate means a longer scale.
                cmd.extend(["--length_scale", f"{1.0 / rate:.3f}"])
            subprocess.run(
                cmd,
                input=text.encode("utf-8"),
                check=True,
                cwd=self.piper_dir,
            )
            return tmp_path.read_bytes()
        except subprocess.CalledProcessError as exc:
            raise TTSGenerationError(f"Piper synthesis failed: {exc}") from exc
        finally:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass


_tts_engine: Optional[PiperTTS] = None


def get_tts_engine() -> PiperTTS:
    global _tts_engine
    if _tts_engine is None:
        _tts_engine = PiperTTS()
    return _tts_engine


def synthesize_to_base64(
    text: str,
    voice: Optional[str] = None,
    rate: float = 1.0,
    engine: Optional[PiperTTS] = None,
) -> Optional[str]:
    """Return Piper-generated WAV audio as a base64 string, or None on failure."""
    try:
        engine = engine or get_tts_engine()
        audio_bytes = engine.synthesize(text, voice, rate=rate)
        return base64.b64encode(audio_bytes).decode("ascii")
    except (TTSGenerationError, ValueError) as error:
        logger.warning("TTS synthesis skipped: %s", error)
        return None


class TTSConfirmation:
    """Speaks move confirmations and game announcements.

    Each entry point formats a fixed phrase and returns the payload handed to
    the client (``{"text": ..., "audio": <base64 wav>}``).  ``audio`` is left
    out when Piper is unavailable.  While disabled nothing is synthesized and
    every entry point returns None.
    """

    def __init__(self, config: Optional[VoiceConfig] = None, engine: Optional[PiperTTS] = None):
        self.config = config or VoiceConfig.from_env()
        self.enabled = self.config.enabled
        self._engine = engine

    @property
    def engine(self) -> PiperTTS:
        if self._engine is None:
            self._engine = get_tts_engine()
        return self._engine

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def speak(self, text: str) -> Optional[Dict[str, str]]:
        if not self.enabled or not text or not text.strip():
            return None

        logger.info("TTS: %s", text)
        voice = self.engine.select_voice(self.config.tts_voice)
        payload: Dict[str, str] = {"text": text}
        audio_b64 = synthesize_to_base64(text, voice=voice, rate=self.config.speech_rate, engine=self.engine)
        if audio_b64:
            payload["audio"] = audio_b64
        return payload

    def confirm_move(self, san: str) -> Optional[Dict[str, str]]:
        return self.speak(format_move_confirmation(san))

    def announce_check(self) -> Optional[Dict[str, str]]:
        return self.speak(format_check())

    def announce_checkmate(self, winner: str) -> Optional[Dict[str, str]]:
        return self.speak(format_checkmate(winner))

    def announce_stalemate(self) -> Optional[Dict[str, str]]:
        return self.speak(format_stalemate())

    def announce_error(self, message: str) -> Optional[Dict[str, str]]:
        return self.speak(format_error(message))

    def announce_illegal_move(self) -> Optional[Dict[str, str]]:
        return self.speak(format_illegal_move())
