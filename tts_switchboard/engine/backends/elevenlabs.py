"""
ElevenLabs Adapter - Premium cloud-based text-to-speech.

Usage:
    adapter = ElevenLabsAdapter(api_key="...")
    adapter.set_voice("rachel")
    audio = adapter.synth_to_bytes("Hello!", SynthesisOptions(format="mp3"))

Requires:
    - ELEVENLABS_API_KEY environment variable
    - elevenlabs package: pip install tts-switchboard[elevenlabs]
"""

from __future__ import annotations

import logging
import os

from tts_switchboard.engine.base import BaseTTSAdapter
from tts_switchboard.types import LanguageCode, SynthesisOptions, Voice

logger = logging.getLogger(__name__)


# ElevenLabs voice IDs (common voices)
ELEVENLABS_VOICES = {
    "rachel": "21m00Tcm4TlvDq8ikWAM",      # American female
    "domi": "AZnzlk1XvdvUeBnXmlld",         # American female
    "bella": "EXAVITQu4vr4xnSDxMaL",        # American female
    "antoni": "ErXwobaYiN019PkySvjV",       # American male
    "elli": "MF3mGyEYCl7XYWbV9V6O",         # American female
    "josh": "TxGEqnHWrfWFTfGW9XjX",         # American male
    "arnold": "VR6AewLTigWG4xSOukaG",       # American male
    "adam": "pNInz6obpgDQGcFmaJgB",         # American male
    "sam": "yoZ06aMxZJJ28mfd3POQ",          # American male
}

# API output_format per requested container
OUTPUT_FORMATS = {
    "mp3": "mp3_44100_128",
    "pcm": "pcm_24000",
    "ulaw": "ulaw_8000",
}


class ElevenLabsAdapter(BaseTTSAdapter):
    """ElevenLabs TTS adapter using the ElevenLabs API.

    pitch maps inversely onto stability (more pitch movement, less stable
    delivery); volume maps onto similarity_boost.

    Limitations:
        - Requires API key and internet
        - Paid API (character-based pricing)
        - mp3, pcm and ulaw output only
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        voice: str = "rachel",
        model: str = "eleven_multilingual_v2",
        stability: float = 0.5,
        similarity_boost: float = 0.75,
    ):
        """Initialize ElevenLabs adapter.

        Args:
            api_key: ElevenLabs API key (defaults to ELEVENLABS_API_KEY env var)
            voice: Default voice name or ID
            model: Model to use (eleven_multilingual_v2, eleven_turbo_v2)
            stability: Voice stability (0-1, lower = more expressive)
            similarity_boost: Voice clarity/similarity (0-1)
        """
        super().__init__(default_voice=voice)
        self._api_key = api_key or os.environ.get("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise ValueError(
                "ElevenLabs API key required. Set ELEVENLABS_API_KEY environment "
                "variable or pass api_key parameter."
            )

        self._model = model
        self._stability = stability
        self._similarity_boost = similarity_boost

        # Lazy client
        self._client = None

    def _get_client(self):
        """Lazy-load ElevenLabs client."""
        if self._client is None:
            try:
                from elevenlabs.client import ElevenLabs
                self._client = ElevenLabs(api_key=self._api_key)
            except ImportError:
                raise ImportError(
                    "elevenlabs package required. Install with: "
                    "pip install tts-switchboard[elevenlabs]"
                )
        return self._client

    @property
    def name(self) -> str:
        return "elevenlabs"

    def check_credentials(self) -> bool:
        self._get_client().voices.get_all()
        return True

    def get_voices(self) -> list[Voice]:
        response = self._get_client().voices.get_all()
        voices = []
        for v in response.voices:
            labels = v.labels or {}
            accent = labels.get("accent")
            code = "en-US" if accent in (None, "american") else "en"
            voices.append(
                Voice(
                    id=v.voice_id,
                    name=v.name,
                    engine="elevenlabs",
                    language_codes=(LanguageCode(code, accent or code),),
                    gender=labels["gender"].upper() if labels.get("gender") else None,
                )
            )
        return voices

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        options = options or SynthesisOptions()
        if options.format not in OUTPUT_FORMATS:
            raise ValueError(f"ElevenLabs cannot produce {options.format} audio")

        client = self._get_client()
        stability, similarity = self._calculate_settings()

        try:
            from elevenlabs import VoiceSettings

            audio_generator = client.text_to_speech.convert(
                voice_id=self._resolve_voice(),
                text=text,
                model_id=self._model,
                output_format=OUTPUT_FORMATS[options.format],
                voice_settings=VoiceSettings(
                    stability=stability,
                    similarity_boost=similarity,
                ),
            )
            return b"".join(audio_generator)

        except Exception as e:
            logger.error(f"ElevenLabs synthesis failed: {e}")
            raise

    def _resolve_voice(self) -> str:
        voice_id = self.voice_id or "rachel"
        return ELEVENLABS_VOICES.get(voice_id.lower(), voice_id)

    def _calculate_settings(self) -> tuple[float, float]:
        pitch = float(self.get_property("pitch", 1.0))
        volume = float(self.get_property("volume", 1.0))

        stability = max(0.1, self._stability - abs(pitch - 1.0) * 0.3)
        similarity = min(1.0, self._similarity_boost + (volume - 1.0) * 0.2)
        return stability, max(0.0, similarity)


try:
    import elevenlabs as _elevenlabs_check  # noqa: F401
    ELEVENLABS_AVAILABLE = True
except ImportError:
    ELEVENLABS_AVAILABLE = False
