"""
OpenAI Adapter - Cloud-based text-to-speech.

Voices:
    - alloy: Neutral, balanced
    - echo: Slightly deeper
    - fable: Expressive, British accent
    - onyx: Deep, authoritative
    - nova: Warm, friendly
    - shimmer: Clear, energetic

Requires:
    - OPENAI_API_KEY environment variable
    - openai package: pip install tts-switchboard[openai]
"""

from __future__ import annotations

import logging
import os

from tts_switchboard.engine.base import BaseTTSAdapter
from tts_switchboard.types import LanguageCode, SynthesisOptions, Voice

logger = logging.getLogger(__name__)


# OpenAI TTS voices
OPENAI_VOICES = {
    "alloy": ("Neutral, balanced tone", "NEUTRAL"),
    "echo": ("Slightly deeper voice", "MALE"),
    "fable": ("Expressive, British accent", "MALE"),
    "onyx": ("Deep, authoritative", "MALE"),
    "nova": ("Warm, friendly", "FEMALE"),
    "shimmer": ("Clear, energetic", "FEMALE"),
}

RESPONSE_FORMATS = ("mp3", "opus", "aac", "flac", "wav", "pcm")


class OpenAIAdapter(BaseTTSAdapter):
    """OpenAI TTS adapter using the OpenAI API.

    Only rate has an API counterpart (speed); pitch and volume are ignored.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "tts-1",
        voice: str = "nova",
    ):
        super().__init__(default_voice=voice)
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self._api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._model = model

        # Lazy import openai
        self._client = None

    def _get_client(self):
        """Lazy-load OpenAI client."""
        if self._client is None:
            try:
                from openai import OpenAI
                self._client = OpenAI(api_key=self._api_key)
            except ImportError:
                raise ImportError(
                    "openai package required. Install with: "
                    "pip install tts-switchboard[openai]"
                )
        return self._client

    @property
    def name(self) -> str:
        return "openai"

    def check_credentials(self) -> bool:
        self._get_client().models.retrieve(self._model)
        return True

    def get_voices(self) -> list[Voice]:
        # The API has no voice listing endpoint
        return [
            Voice(
                id=voice_id,
                name=f"{voice_id.title()} ({description})",
                engine="openai",
                language_codes=(LanguageCode("en-US", "English (US)"),),
                gender=gender,
            )
            for voice_id, (description, gender) in OPENAI_VOICES.items()
        ]

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        options = options or SynthesisOptions()
        if options.format not in RESPONSE_FORMATS:
            raise ValueError(f"OpenAI cannot produce {options.format} audio")

        client = self._get_client()
        voice = self.voice_id if self.voice_id in OPENAI_VOICES else "nova"
        # Clamp to OpenAI's range
        speed = max(0.25, min(4.0, float(self.get_property("rate", 1.0))))

        logger.debug(f"OpenAI TTS: {len(text)} chars, voice={voice}, speed={speed}")

        try:
            response = client.audio.speech.create(
                model=self._model,
                voice=voice,
                input=text,
                response_format=options.format,
                speed=speed,
            )
            return response.content

        except Exception as e:
            logger.error(f"OpenAI TTS failed: {e}")
            raise


try:
    import openai as _openai_check  # noqa: F401
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False
