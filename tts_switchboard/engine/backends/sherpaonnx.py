"""
SherpaOnnx Adapter - Local neural TTS served by a standalone process.

The native SherpaOnnx runtime lives in its own HTTP server (one per host,
listening on SHERPAONNX_PORT, default 3002) so that its shared libraries
never load into the application process. This adapter is a thin client:

    GET  /voices  -> JSON list of voices
    POST /tts     -> {"text", "voiceId", "options"} -> audio/wav
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request

from tts_switchboard.engine.base import BaseTTSAdapter
from tts_switchboard.types import SynthesisOptions, Voice

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3002


class SherpaOnnxServerAdapter(BaseTTSAdapter):
    """Client for the local SherpaOnnx synthesis server."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        voice: str | None = None,
    ):
        super().__init__(default_voice=voice)
        port = os.environ.get("SHERPAONNX_PORT", str(DEFAULT_PORT))
        self._base_url = (base_url or f"http://localhost:{port}").rstrip("/")
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "sherpaonnx"

    @property
    def base_url(self) -> str:
        return self._base_url

    def check_credentials(self) -> bool:
        """No secrets involved; healthy means the server answers /voices."""
        self._request("GET", "/voices")
        return True

    def get_voices(self) -> list[Voice]:
        data = json.loads(self._request("GET", "/voices"))
        return [Voice.from_dict(entry, engine="sherpaonnx") for entry in data]

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        options = options or SynthesisOptions()
        if not self.voice_id:
            raise ValueError("SherpaOnnx needs a voice; call set_voice() first")

        wire_options = options.to_dict()
        for name, value in self.properties.items():
            if value != self.DEFAULT_PROPERTIES.get(name):
                wire_options.setdefault(name, value)

        payload = {"text": text, "voiceId": self.voice_id, "options": wire_options}
        return self._request("POST", "/tts", payload)

    def _request(self, method: str, path: str, payload: dict | None = None) -> bytes:
        data = json.dumps(payload).encode() if payload is not None else None
        req = urllib.request.Request(
            f"{self._base_url}{path}",
            data=data,
            headers={"Content-Type": "application/json"} if data else {},
            method=method,
        )

        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            message = _error_message(e.read()) or f"{e.code} {e.reason}"
            raise RuntimeError(f"SherpaOnnx server error: {message}") from e
        except (urllib.error.URLError, TimeoutError) as e:
            logger.warning(f"SherpaOnnx server unreachable at {self._base_url}: {e}")
            raise ConnectionError(
                f"SherpaOnnx server is not reachable at {self._base_url}"
            ) from e


def _error_message(body: bytes) -> str | None:
    try:
        return json.loads(body).get("error")
    except (ValueError, AttributeError):
        return None
