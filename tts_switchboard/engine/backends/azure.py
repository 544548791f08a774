"""
Azure Adapter - Microsoft Azure Neural Text-to-Speech.

Usage:
    adapter = AzureAdapter(speech_key="...", speech_region="westeurope")
    adapter.set_voice("en-US-JennyNeural")
    audio = adapter.synth_to_bytes("Hello!")

Requires:
    - MICROSOFT_TOKEN and MICROSOFT_REGION (or AZURE_SPEECH_KEY /
      AZURE_SPEECH_REGION) environment variables
    - azure-cognitiveservices-speech package: pip install tts-switchboard[azure]
"""

from __future__ import annotations

import logging
import os

from tts_switchboard.engine.base import BaseTTSAdapter
from tts_switchboard.types import LanguageCode, SynthesisOptions, Voice

logger = logging.getLogger(__name__)


# Short names accepted by set_voice()
AZURE_VOICES = {
    "jenny": "en-US-JennyNeural",
    "aria": "en-US-AriaNeural",
    "guy": "en-US-GuyNeural",
    "davis": "en-US-DavisNeural",
    "sonia": "en-GB-SoniaNeural",
    "ryan": "en-GB-RyanNeural",
    "natasha": "en-AU-NatashaNeural",
    "william": "en-AU-WilliamNeural",
}

# Output format per requested container
OUTPUT_FORMATS = {
    "wav": "Riff24Khz16BitMonoPcm",
    "mp3": "Audio24Khz48KBitRateMonoMp3",
    "ogg": "Ogg24Khz16BitMonoOpus",
    "pcm": "Raw24Khz16BitMonoPcm",
}


class AzureAdapter(BaseTTSAdapter):
    """Azure Neural TTS through the Speech SDK.

    Limitations:
        - Requires API key and internet
        - Paid API (character-based pricing)
    """

    def __init__(
        self,
        *,
        speech_key: str | None = None,
        speech_region: str | None = None,
        voice: str = "en-US-JennyNeural",
    ):
        super().__init__(default_voice=voice)
        self._speech_key = (
            speech_key
            or os.environ.get("MICROSOFT_TOKEN")
            or os.environ.get("AZURE_SPEECH_KEY")
        )
        self._speech_region = (
            speech_region
            or os.environ.get("MICROSOFT_REGION")
            or os.environ.get("AZURE_SPEECH_REGION")
        )

        if not self._speech_key or not self._speech_region:
            raise ValueError(
                "Azure Speech credentials required. Set MICROSOFT_TOKEN and "
                "MICROSOFT_REGION environment variables."
            )

    @property
    def name(self) -> str:
        return "azure"

    def _speechsdk(self):
        try:
            import azure.cognitiveservices.speech as speechsdk
        except ImportError:
            raise ImportError(
                "azure-cognitiveservices-speech package required. Install with: "
                "pip install tts-switchboard[azure]"
            )
        return speechsdk

    def _synthesizer(self, fmt: str = "wav"):
        speechsdk = self._speechsdk()
        config = speechsdk.SpeechConfig(
            subscription=self._speech_key,
            region=self._speech_region,
        )
        config.set_speech_synthesis_output_format(
            getattr(
                speechsdk.SpeechSynthesisOutputFormat,
                OUTPUT_FORMATS.get(fmt, OUTPUT_FORMATS["wav"]),
            )
        )
        return speechsdk.SpeechSynthesizer(speech_config=config, audio_config=None)

    def check_credentials(self) -> bool:
        """A voice listing round trip proves key and region."""
        speechsdk = self._speechsdk()
        result = self._synthesizer().get_voices_async("").get()
        return result.reason == speechsdk.ResultReason.VoicesListRetrieved

    def get_voices(self) -> list[Voice]:
        speechsdk = self._speechsdk()
        result = self._synthesizer().get_voices_async("").get()

        if result.reason != speechsdk.ResultReason.VoicesListRetrieved:
            raise RuntimeError(f"Azure voice listing failed: {result.reason}")

        return [
            Voice(
                id=v.short_name,
                name=v.local_name or v.short_name,
                engine="azure",
                language_codes=(LanguageCode(v.locale, v.locale),),
                gender=v.gender.name.upper() if v.gender else None,
            )
            for v in result.voices
        ]

    def set_voice(self, voice_id: str) -> None:
        super().set_voice(AZURE_VOICES.get(voice_id.lower(), voice_id))

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        options = options or SynthesisOptions()
        speechsdk = self._speechsdk()

        result = self._synthesizer(options.format).speak_ssml_async(self._build_ssml(text)).get()

        if result.reason == speechsdk.ResultReason.SynthesizingAudioCompleted:
            return bytes(result.audio_data)

        if result.reason == speechsdk.ResultReason.Canceled:
            cancellation = result.cancellation_details
            logger.error(f"Azure TTS canceled: {cancellation.reason}")
            if cancellation.error_details:
                logger.error(f"Error details: {cancellation.error_details}")
            raise RuntimeError(f"Azure TTS failed: {cancellation.reason}")

        raise RuntimeError(f"Unexpected result: {result.reason}")

    def _build_ssml(self, text: str) -> str:
        voice = self.voice_id or "en-US-JennyNeural"
        lang = "-".join(voice.split("-")[:2]) if voice.count("-") >= 2 else "en-US"

        return (
            '<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" '
            f'xml:lang="{lang}">'
            f'<voice name="{voice}">'
            f'<prosody rate="{_percent(self.get_property("rate", 1.0))}" '
            f'pitch="{_percent(self.get_property("pitch", 1.0), scale=50)}" '
            f'volume="{_percent(self.get_property("volume", 1.0))}">'
            f"{_escape_xml(text)}"
            "</prosody></voice></speak>"
        )


def _percent(value: float, scale: int = 100) -> str:
    """1.0 -> "+0%", 1.5 -> "+50%", 0.5 -> "-50%"."""
    percentage = int((float(value) - 1.0) * scale)
    if percentage >= 0:
        return f"+{percentage}%"
    return f"{percentage}%"


def _escape_xml(text: str) -> str:
    return (
        text
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


try:
    import azure.cognitiveservices.speech as _azure_check  # noqa: F401
    AZURE_AVAILABLE = True
except ImportError:
    AZURE_AVAILABLE = False
