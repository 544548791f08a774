"""Tests for the /voices and /tts endpoint handler."""

import json

import pytest

from tts_switchboard.errors import EngineUnavailable
from tts_switchboard.monitoring import LogLevel, StructuredLogger
from tts_switchboard.server import EndpointHandler, EndpointResponse
from tts_switchboard.testing import AdapterMock, MockConfig, create_test_credentials
from tts_switchboard.types import Voice


class RecordingLoader:
    """Builds one AdapterMock per request, like the real loader."""

    def __init__(self, config=None, error=None):
        self.config = config
        self.error = error
        self.adapters = []

    def __call__(self, engine, credentials=None):
        if self.error is not None:
            raise self.error
        adapter = AdapterMock(engine, self.config)
        self.adapters.append(adapter)
        return adapter


def make_handler(loader=None, engines=("azure", "sherpaonnx", "mock")):
    return EndpointHandler(
        credentials=create_test_credentials(engines),
        loader=loader or RecordingLoader(),
        events=StructuredLogger("test", level=LogLevel.CRITICAL),
    )


def tts_body(**overrides):
    body = {"text": "Hello", "engine": "azure", "voiceId": "en-US-JennyNeural"}
    body.update(overrides)
    return json.dumps(body).encode()


class TestEndpointResponse:
    """Tests for EndpointResponse."""

    def test_error_response(self):
        response = EndpointResponse.error_response("nope", 400)
        assert not response.ok
        assert response.json() == {"error": "nope"}
        assert response.headers["Content-Type"] == "application/json"


class TestRouting:
    """Tests for handle()."""

    def test_dispatch(self):
        handler = make_handler()
        assert handler.handle("GET", "/api/voices", {"engine": "azure"}).ok
        assert handler.handle("post", "/api/tts/", body=tts_body()).ok

    def test_not_found(self):
        response = make_handler().handle("DELETE", "/api/tts")
        assert response.status == 404


class TestVoices:
    """Tests for GET /voices."""

    def test_missing_engine(self):
        response = make_handler().voices({})
        assert response.status == 400
        assert response.json() == {"error": "Missing engine parameter"}

    def test_voices_tagged_with_engine(self):
        config = MockConfig(voices=(Voice("jenny", "Jenny", "something-else"),))
        response = make_handler(RecordingLoader(config)).voices({"engine": "azure"})

        assert response.status == 200
        assert response.json() == [{
            "id": "jenny",
            "name": "Jenny",
            "engine": "azure",
            "languageCodes": [],
        }]

    @pytest.mark.parametrize("engine", ["bogus", "espeak-wasm", "sherpaonnx-wasm"])
    def test_unsupported_engine(self, engine):
        response = make_handler().voices({"engine": engine})
        assert response.status == 400
        assert response.json() == {"error": f"Unsupported engine: {engine}"}

    def test_engine_without_adapter(self):
        loader = RecordingLoader(error=EngineUnavailable("google", "no adapter"))
        response = make_handler(loader).voices({"engine": "google"})
        assert response.status == 400
        assert response.json() == {"error": "Unsupported engine: google"}

    def test_adapter_init_failure(self):
        loader = RecordingLoader(error=ValueError("Azure credentials required"))
        response = make_handler(loader).voices({"engine": "azure"})
        assert response.status == 500
        assert response.json() == {"error": "Failed to initialize azure TTS engine"}

    def test_invalid_credentials(self):
        loader = RecordingLoader(MockConfig(credentials_valid=False))
        response = make_handler(loader).voices({"engine": "azure"})
        assert response.status == 401
        assert response.json() == {"error": "Invalid credentials for azure TTS engine"}

    def test_credential_check_error_for_cloud_engine(self):
        loader = RecordingLoader(MockConfig(credentials_error=ConnectionError("unreachable")))
        response = make_handler(loader).voices({"engine": "azure"})
        assert response.status == 500
        assert "Error checking credentials for azure" in response.json()["error"]

    def test_credential_check_error_tolerated_for_local_engine(self):
        loader = RecordingLoader(MockConfig(credentials_error=ConnectionError("unreachable")))
        response = make_handler(loader).voices({"engine": "sherpaonnx"})
        assert response.status == 200

    def test_listing_failure(self):
        loader = RecordingLoader(MockConfig(fail_on={"get_voices": RuntimeError("quota")}))
        response = make_handler(loader).voices({"engine": "azure"})
        assert response.status == 500
        assert response.json() == {"error": "Error fetching voices: quota"}


class TestTts:
    """Tests for POST /tts."""

    def test_audio_response(self):
        loader = RecordingLoader(MockConfig(audio=b"ID3data"))
        body = tts_body(options={"format": "mp3", "rate": 1.25})

        response = make_handler(loader).tts(body)

        assert response.status == 200
        assert response.body == b"ID3data"
        assert response.headers == {"Content-Type": "audio/mpeg", "Content-Length": "7"}

        adapter = loader.adapters[0]
        assert adapter.voice_id == "en-US-JennyNeural"
        assert [c.args for c in adapter.calls if c.method == "set_property"] == [("rate", 1.25)]

    def test_fresh_adapter_per_request(self):
        loader = RecordingLoader()
        handler = make_handler(loader)
        handler.tts(tts_body())
        handler.tts(tts_body())
        assert len(loader.adapters) == 2

    def test_accepts_mapping(self):
        response = make_handler().tts({"text": "Hi", "engine": "mock", "voiceId": "v"})
        assert response.ok

    def test_invalid_json(self):
        response = make_handler().tts(b"{not json")
        assert response.status == 400
        assert response.json() == {"error": "Invalid JSON body"}

    def test_json_must_be_object(self):
        response = make_handler().tts(b"[1, 2]")
        assert response.status == 400

    @pytest.mark.parametrize("missing", ["text", "engine", "voiceId"])
    def test_missing_parameters(self, missing):
        body = json.loads(tts_body())
        del body[missing]

        response = make_handler().tts(json.dumps(body))

        assert response.status == 400
        assert response.json() == {"error": "Missing required parameters"}

    def test_invalid_options(self):
        response = make_handler().tts(tts_body(options={"rate": "fast"}))
        assert response.status == 400
        assert response.json()["error"].startswith("Invalid options")

    def test_browser_engine_rejected(self):
        response = make_handler().tts(tts_body(engine="espeak-wasm"))
        assert response.status == 400
        assert response.json() == {"error": "Unsupported engine: espeak-wasm"}

    def test_synthesis_failure(self):
        loader = RecordingLoader(MockConfig(fail_on={"synth_to_bytes": RuntimeError("engine crashed")}))
        response = make_handler(loader).tts(tts_body())
        assert response.status == 500
        assert response.json() == {"error": "Failed to process TTS request: engine crashed"}
