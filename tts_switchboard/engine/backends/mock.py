"""
Mock Adapter - For testing without credentials or models.

Produces a sine tone whose length follows the text, encoded as real audio
so downstream players and tests can decode it.
"""

from __future__ import annotations

from tts_switchboard.engine.audio import encode_audio, sine_wave
from tts_switchboard.engine.base import BaseTTSAdapter
from tts_switchboard.types import LanguageCode, SynthesisOptions, Voice


MOCK_VOICES = (
    Voice(
        id="mock-voice-1",
        name="Mock Voice 1",
        engine="mock",
        language_codes=(LanguageCode("en-US", "English (US)"),),
        gender="FEMALE",
    ),
    Voice(
        id="mock-voice-2",
        name="Mock Voice 2",
        engine="mock",
        language_codes=(LanguageCode("en-GB", "English (UK)"),),
        gender="MALE",
    ),
)


class MockAdapter(BaseTTSAdapter):
    """Mock TTS adapter.

    Duration is ~100ms per character, capped at ``max_duration``.
    rate shortens the output, pitch shifts the tone, volume scales it.
    """

    sample_rate = 22050

    def __init__(
        self,
        frequency: float = 440.0,
        max_duration: float = 5.0,
    ):
        super().__init__(default_voice=MOCK_VOICES[0].id)
        self._frequency = frequency
        self._max_duration = max_duration

    @property
    def name(self) -> str:
        return "mock"

    def get_voices(self) -> list[Voice]:
        return list(MOCK_VOICES)

    def supports_voice(self, voice_id: str) -> bool:
        return True  # Accepts any voice

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        options = options or SynthesisOptions()
        rate = float(self.get_property("rate", 1.0)) or 1.0
        pitch = float(self.get_property("pitch", 1.0))
        volume = float(self.get_property("volume", 1.0))

        duration = max(0.1, min(len(text) * 0.1, self._max_duration)) / rate
        audio = sine_wave(
            duration,
            self.sample_rate,
            frequency=self._frequency * pitch,
            amplitude=min(1.0, 0.3 * volume),
        )
        return encode_audio(audio, self.sample_rate, options.format)
