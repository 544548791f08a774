"""Tests for the engine module."""

import numpy as np
import pytest

from tts_switchboard.credentials import EngineCredentials
from tts_switchboard.engine import MockAdapter, TTSAdapter, list_adapters, load_adapter
from tts_switchboard.engine.audio import decode_audio, detect_format, encode_audio, sine_wave
from tts_switchboard.engine.backends import (
    AzureAdapter,
    ElevenLabsAdapter,
    EspeakWasmAdapter,
    OpenAIAdapter,
    SherpaOnnxServerAdapter,
    SherpaOnnxWasmAdapter,
)
from tts_switchboard.engine.backends.azure import _escape_xml, _percent
from tts_switchboard.engine.backends.wasm import _WasmAdapter
from tts_switchboard.errors import EngineUnavailable, UnknownEngine
from tts_switchboard.types import Engine, SynthesisOptions


class TestMockAdapter:
    """Tests for MockAdapter."""

    def test_properties(self):
        adapter = MockAdapter()
        assert adapter.name == "mock"
        assert adapter.voice_id == "mock-voice-1"
        assert adapter.check_credentials()

    def test_satisfies_protocol(self):
        assert isinstance(MockAdapter(), TTSAdapter)

    def test_voices(self):
        voices = MockAdapter().get_voices()
        assert [v.id for v in voices] == ["mock-voice-1", "mock-voice-2"]
        assert all(v.engine == "mock" for v in voices)

    def test_synth_returns_wav(self):
        audio = MockAdapter().synth_to_bytes("Hello world!")
        assert detect_format(audio) == "wav"

        samples, sample_rate = decode_audio(audio)
        assert sample_rate == MockAdapter.sample_rate
        assert len(samples) > 0

    def test_duration_scales_with_text(self):
        adapter = MockAdapter()
        short, _ = decode_audio(adapter.synth_to_bytes("Hi"))
        long, _ = decode_audio(adapter.synth_to_bytes("Hello, this is a longer sentence."))
        assert len(long) > len(short)

    def test_rate_shortens_output(self):
        adapter = MockAdapter()
        normal, _ = decode_audio(adapter.synth_to_bytes("Hello there"))
        adapter.set_property("rate", 2.0)
        fast, _ = decode_audio(adapter.synth_to_bytes("Hello there"))
        assert len(fast) < len(normal)

    def test_pcm_format(self):
        audio = MockAdapter().synth_to_bytes("Hi", SynthesisOptions(format="pcm"))
        assert len(audio) % 2 == 0
        assert detect_format(audio) == "pcm"

    def test_unsupported_format(self):
        with pytest.raises(ValueError):
            MockAdapter().synth_to_bytes("Hi", SynthesisOptions(format="mp3"))


class TestWasmAdapters:
    """Tests for the in-process engines."""

    @pytest.mark.parametrize("adapter_class,engine", [
        (EspeakWasmAdapter, "espeak-wasm"),
        (SherpaOnnxWasmAdapter, "sherpaonnx-wasm"),
    ])
    def test_voices_and_audio(self, adapter_class, engine):
        adapter = adapter_class()
        assert adapter.name == engine

        voices = adapter.get_voices()
        assert voices
        assert all(v.engine == engine for v in voices)

        adapter.set_voice(voices[-1].id)
        audio = adapter.synth_to_bytes("Testing one two three")
        samples, _ = decode_audio(audio)
        assert len(samples) > 0
        assert np.any(samples != 0)

    def test_unknown_voice_rejected(self):
        adapter = EspeakWasmAdapter()
        adapter.set_voice("sherpa-jenny")
        with pytest.raises(ValueError):
            adapter.synth_to_bytes("Hello")

    def test_default_voice(self):
        assert EspeakWasmAdapter().voice_id == "espeak-en-us"
        assert SherpaOnnxWasmAdapter().voice_id == "sherpa-jenny"

    def test_render_required(self):
        class Silent(_WasmAdapter):
            voices = EspeakWasmAdapter.voices

            @property
            def name(self):
                return "silent"

        with pytest.raises(TypeError):
            Silent()


class TestAudio:
    """Tests for audio helpers."""

    def test_encode_decode_wav(self):
        tone = sine_wave(0.5, 16000)
        data = encode_audio(tone, 16000, "wav")

        samples, sample_rate = decode_audio(data)
        assert sample_rate == 16000
        assert len(samples) == len(tone)
        assert np.allclose(samples, tone, atol=1e-3)

    def test_encode_clips(self):
        data = encode_audio(np.array([2.0, -2.0], dtype=np.float32), 8000, "pcm")
        assert np.frombuffer(data, dtype="<i2").tolist() == [32767, -32767]

    def test_encode_unknown_format(self):
        with pytest.raises(ValueError):
            encode_audio(sine_wave(0.1, 8000), 8000, "aiff")

    def test_detect_format(self):
        assert detect_format(b"RIFF\x00\x00\x00\x00WAVEfmt ") == "wav"
        assert detect_format(b"ID3\x03") == "mp3"
        assert detect_format(b"\xff\xfb\x90") == "mp3"
        assert detect_format(b"OggS\x00") == "ogg"
        assert detect_format(b"fLaC\x00") == "flac"
        assert detect_format(b"\x01\x02") == "pcm"
        assert detect_format(b"") == "pcm"


class TestLoader:
    """Tests for load_adapter and list_adapters."""

    def test_load_mock(self):
        adapter = load_adapter("mock")
        assert isinstance(adapter, MockAdapter)

    def test_each_call_builds_fresh_adapter(self):
        assert load_adapter(Engine.MOCK) is not load_adapter(Engine.MOCK)

    def test_load_wasm(self):
        assert isinstance(load_adapter("espeak-wasm"), EspeakWasmAdapter)
        assert isinstance(load_adapter("sherpaonnx-wasm"), SherpaOnnxWasmAdapter)

    def test_load_sherpaonnx_server(self):
        adapter = load_adapter("sherpaonnx", base_url="http://tts.local:9000/")
        assert isinstance(adapter, SherpaOnnxServerAdapter)
        assert adapter.base_url == "http://tts.local:9000"

    def test_unknown_engine(self):
        with pytest.raises(UnknownEngine):
            load_adapter("not-an-engine")

    def test_engine_without_adapter(self):
        with pytest.raises(EngineUnavailable) as exc:
            load_adapter("google")
        assert exc.value.engine == "google"

    def test_credentials_passed_through(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        credentials = EngineCredentials(enabled=True, fields={"api_key": "sk-test"})

        adapter = load_adapter("openai", credentials)
        assert isinstance(adapter, OpenAIAdapter)

    def test_list_adapters(self):
        available = list_adapters()
        assert available[0] == Engine.MOCK
        assert Engine.ESPEAK_WASM in available
        assert Engine.GOOGLE not in available


class TestCloudAdapters:
    """Construction rules for the credentialed adapters."""

    def test_azure_requires_key(self, monkeypatch):
        for var in ("MICROSOFT_TOKEN", "AZURE_SPEECH_KEY", "MICROSOFT_REGION", "AZURE_SPEECH_REGION"):
            monkeypatch.delenv(var, raising=False)
        with pytest.raises(ValueError):
            AzureAdapter()

    def test_azure_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MICROSOFT_TOKEN", "key")
        monkeypatch.setenv("MICROSOFT_REGION", "westeurope")
        adapter = AzureAdapter()
        assert adapter.name == "azure"

    def test_azure_short_voice_names(self):
        adapter = AzureAdapter(speech_key="key", speech_region="eastus")
        adapter.set_voice("Sonia")
        assert adapter.voice_id == "en-GB-SoniaNeural"
        adapter.set_voice("en-US-AriaNeural")
        assert adapter.voice_id == "en-US-AriaNeural"

    def test_azure_ssml(self):
        adapter = AzureAdapter(speech_key="key", speech_region="eastus")
        adapter.set_voice("ryan")
        adapter.set_property("rate", 1.5)

        ssml = adapter._build_ssml("Fish & <chips>")
        assert 'xml:lang="en-GB"' in ssml
        assert 'rate="+50%"' in ssml
        assert "Fish &amp; &lt;chips&gt;" in ssml

    def test_ssml_helpers(self):
        assert _percent(1.0) == "+0%"
        assert _percent(0.5) == "-50%"
        assert _percent(2.0, scale=50) == "+50%"
        assert _escape_xml("'\"") == "&apos;&quot;"

    def test_elevenlabs_requires_key(self, monkeypatch):
        monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
        with pytest.raises(ValueError):
            ElevenLabsAdapter()

    def test_openai_requires_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError):
            OpenAIAdapter()

    def test_openai_static_voices(self):
        voices = OpenAIAdapter(api_key="sk-test").get_voices()
        assert {v.id for v in voices} >= {"alloy", "nova", "shimmer"}
        assert all(v.engine == "openai" for v in voices)

    def test_sherpaonnx_requires_voice(self):
        with pytest.raises(ValueError):
            SherpaOnnxServerAdapter().synth_to_bytes("Hello")
