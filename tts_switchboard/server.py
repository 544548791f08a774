"""
Endpoint Handler - The server side of the remote path.

Implements ``GET /voices`` and ``POST /tts`` without tying them to a web
framework: each call returns an EndpointResponse (status, headers, body)
that any HTTP layer can write out.

Status codes:
    400  missing parameters, bad JSON, engine not served here
    401  the engine's credential check returned False
    500  adapter initialisation, credential check or synthesis blew up

Local engines that need no credentials (SherpaOnnx) may fail their
credential check without failing the request.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from tts_switchboard.credentials import CredentialStore
from tts_switchboard.engine.base import TTSAdapter
from tts_switchboard.engine.loader import load_adapter
from tts_switchboard.engine.registry import EngineRegistry, default_registry
from tts_switchboard.errors import EngineUnavailable, UnknownEngine
from tts_switchboard.monitoring.logging import StructuredLogger, get_logger
from tts_switchboard.types import Engine, EngineType, SynthesisOptions, mime_type_for

logger = logging.getLogger(__name__)


@dataclass
class EndpointResponse:
    """Framework-neutral HTTP response."""
    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.body)

    @classmethod
    def from_json(cls, data: Any, status: int = 200) -> "EndpointResponse":
        return cls(
            status=status,
            body=json.dumps(data).encode(),
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def error_response(cls, error: str, status: int) -> "EndpointResponse":
        return cls.from_json({"error": error}, status=status)


class _RequestError(Exception):
    """Short-circuits a handler with a ready response."""

    def __init__(self, response: EndpointResponse):
        super().__init__(response.status)
        self.response = response


class EndpointHandler:
    """Serves /voices and /tts for server-side engines.

    A fresh adapter is built for every request, so credential changes in
    the store take effect immediately.
    """

    def __init__(
        self,
        credentials: CredentialStore | None = None,
        registry: EngineRegistry | None = None,
        loader: Callable[..., TTSAdapter] = load_adapter,
        events: StructuredLogger | None = None,
    ):
        self.registry = registry if registry is not None else default_registry
        self.credentials = credentials or CredentialStore.from_env(registry=self.registry)
        self._loader = loader
        self._events = events

    @property
    def events(self) -> StructuredLogger:
        return self._events or get_logger()

    def handle(self, method: str, path: str, query: Mapping[str, str] | None = None,
               body: bytes | str | None = None) -> EndpointResponse:
        """Dispatch by method and path."""
        route = path.rstrip("/").rsplit("/", 1)[-1]
        if method.upper() == "GET" and route == "voices":
            return self.voices(query or {})
        if method.upper() == "POST" and route == "tts":
            return self.tts(body)
        return EndpointResponse.error_response(f"Not found: {method} {path}", 404)

    def voices(self, query: Mapping[str, str]) -> EndpointResponse:
        """GET /voices?engine=<engine>"""
        engine_name = query.get("engine")
        if not engine_name:
            return EndpointResponse.error_response("Missing engine parameter", 400)

        try:
            engine, adapter = self._prepare(engine_name)
            voices = adapter.get_voices()
        except _RequestError as e:
            return e.response
        except Exception as e:
            logger.error(f"Error fetching voices: {e}")
            return EndpointResponse.error_response(f"Error fetching voices: {e}", 500)

        return EndpointResponse.from_json([v.with_engine(engine).to_dict() for v in voices])

    def tts(self, body: bytes | str | Mapping[str, Any] | None) -> EndpointResponse:
        """POST /tts with {text, engine, voiceId, options}"""
        try:
            data = body if isinstance(body, Mapping) else json.loads(body or b"{}")
        except ValueError:
            return EndpointResponse.error_response("Invalid JSON body", 400)
        if not isinstance(data, Mapping):
            return EndpointResponse.error_response("Invalid JSON body", 400)

        text, engine_name, voice_id = data.get("text"), data.get("engine"), data.get("voiceId")
        if not text or not engine_name or not voice_id:
            return EndpointResponse.error_response("Missing required parameters", 400)

        try:
            options = SynthesisOptions.from_dict(data.get("options"))
        except (TypeError, ValueError) as e:
            return EndpointResponse.error_response(f"Invalid options: {e}", 400)

        start = time.perf_counter()
        try:
            engine, adapter = self._prepare(engine_name)
            adapter.set_voice(voice_id)
            for name, value in options.properties().items():
                adapter.set_property(name, value)
            audio = adapter.synth_to_bytes(text, options)
        except _RequestError as e:
            return e.response
        except Exception as e:
            self.events.synthesis_error(e, engine=str(engine_name))
            return EndpointResponse.error_response(f"Failed to process TTS request: {e}", 500)

        self.events.synthesis_complete(
            (time.perf_counter() - start) * 1000,
            audio_bytes=len(audio),
            engine=engine.value,
            path="endpoint",
        )
        return EndpointResponse(
            status=200,
            body=bytes(audio),
            headers={
                "Content-Type": mime_type_for(options.format),
                "Content-Length": str(len(audio)),
            },
        )

    def _prepare(self, engine_name: str) -> tuple[Engine, TTSAdapter]:
        """Validate the engine, build its adapter and check credentials."""
        engine = Engine.parse(engine_name)
        config = self.registry.get(engine_name)
        if engine is None or not config.known or config.type == EngineType.BROWSER:
            raise _RequestError(
                EndpointResponse.error_response(f"Unsupported engine: {engine_name}", 400)
            )

        try:
            adapter = self._loader(engine, self.credentials.get(engine))
        except (EngineUnavailable, UnknownEngine):
            raise _RequestError(
                EndpointResponse.error_response(f"Unsupported engine: {engine_name}", 400)
            )
        except Exception as e:
            logger.error(f"Error creating {engine.value} TTS client: {e}")
            raise _RequestError(
                EndpointResponse.error_response(f"Failed to initialize {engine.value} TTS engine", 500)
            )

        try:
            valid = adapter.check_credentials()
        except Exception as e:
            if config.supports_offline and not config.requires_credentials:
                logger.warning(f"{engine.value} credential check failed, continuing: {e}")
                return engine, adapter
            raise _RequestError(EndpointResponse.error_response(
                f"Error checking credentials for {engine.value} TTS engine: {e}", 500
            ))

        if not valid:
            raise _RequestError(EndpointResponse.error_response(
                f"Invalid credentials for {engine.value} TTS engine", 401
            ))

        return engine, adapter
