"""
In-process engines - eSpeak and SherpaOnnx compiled for the browser.

These run inside the client process (a Pyodide page, or any process that
routes in-process). Until the WebAssembly modules are wired in, both render
a synthetic waveform with the engine's real voice catalog, which is enough
to drive routing, playback and tests end to end.

Neural synthesis can be slow, so synth_to_bytes() is a plain blocking call;
the router runs it in a worker thread and bounds it with its timeout.
"""

from __future__ import annotations

from abc import abstractmethod

import numpy as np

from tts_switchboard.engine.audio import encode_audio
from tts_switchboard.engine.base import BaseTTSAdapter
from tts_switchboard.types import LanguageCode, SynthesisOptions, Voice


EN_US = LanguageCode("en-US", "English (US)")
EN_GB = LanguageCode("en-GB", "English (UK)")
ES_ES = LanguageCode("es-ES", "Spanish (Spain)")
FR_FR = LanguageCode("fr-FR", "French (France)")


ESPEAK_VOICES = (
    Voice("espeak-en-us", "eSpeak English (US)", "espeak-wasm", (EN_US,), "NEUTRAL"),
    Voice("espeak-en-gb", "eSpeak English (UK)", "espeak-wasm", (EN_GB,), "NEUTRAL"),
    Voice("espeak-es", "eSpeak Spanish", "espeak-wasm", (ES_ES,), "NEUTRAL"),
)

SHERPAONNX_VOICES = (
    Voice("sherpa-jenny", "SherpaOnnx Jenny (Neural)", "sherpaonnx-wasm", (EN_US,), "FEMALE"),
    Voice("sherpa-ryan", "SherpaOnnx Ryan (Neural)", "sherpaonnx-wasm", (EN_US,), "MALE"),
    Voice(
        "sherpa-multilingual",
        "SherpaOnnx Multilingual",
        "sherpaonnx-wasm",
        (EN_US, ES_ES, FR_FR),
        "NEUTRAL",
    ),
)


class _WasmAdapter(BaseTTSAdapter):
    """Shared duration/prosody handling for the in-process engines."""

    sample_rate = 22050
    seconds_per_char = 0.1
    max_duration = 5.0
    voices: tuple[Voice, ...] = ()

    def __init__(self):
        super().__init__(default_voice=self.voices[0].id if self.voices else None)

    def get_voices(self) -> list[Voice]:
        return list(self.voices)

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        options = options or SynthesisOptions()
        if self.voice_id and not self.supports_voice(self.voice_id):
            raise ValueError(f"{self.name}: unknown voice {self.voice_id}")

        rate = float(self.get_property("rate", 1.0)) or 1.0
        duration = max(0.1, min(len(text) * self.seconds_per_char, self.max_duration)) / rate
        num_samples = max(1, int(duration * self.sample_rate))
        t = np.arange(num_samples, dtype=np.float32) / self.sample_rate

        audio = self._render(t, float(self.get_property("pitch", 1.0)))
        audio *= float(self.get_property("volume", 1.0))
        return encode_audio(audio, self.sample_rate, options.format)

    @abstractmethod
    def _render(self, t: np.ndarray, pitch: float) -> np.ndarray:
        """Samples in [-1, 1] for time points ``t``."""


class EspeakWasmAdapter(_WasmAdapter):
    """eSpeak formant synthesizer, in-process flavour."""

    seconds_per_char = 0.08
    voices = ESPEAK_VOICES

    @property
    def name(self) -> str:
        return "espeak-wasm"

    def _render(self, t: np.ndarray, pitch: float) -> np.ndarray:
        # Ring-modulated buzz, roughly speech-band
        f0 = 200.0 * pitch
        return (
            np.sin(2 * np.pi * f0 * t) * 0.2
            * np.sin(2 * np.pi * f0 * 2.5 * t) * 0.1
        ).astype(np.float32)


class SherpaOnnxWasmAdapter(_WasmAdapter):
    """SherpaOnnx neural TTS, in-process flavour."""

    max_duration = 6.0
    voices = SHERPAONNX_VOICES

    @property
    def name(self) -> str:
        return "sherpaonnx-wasm"

    def _render(self, t: np.ndarray, pitch: float) -> np.ndarray:
        # Wandering fundamental plus two harmonics
        f0 = (150.0 + np.sin(t * 2) * 20.0) * pitch
        phase = 2 * np.pi * f0 * t
        wave = np.sin(phase) * 0.4 + np.sin(2 * phase) * 0.2 + np.sin(3 * phase) * 0.1
        return (wave * 0.3).astype(np.float32)
