"""
Remote Client - Talks to the server-side /voices and /tts endpoint.

    GET  {base_url}/voices?engine=<engine>&mode=<mode>  -> [voice, ...]
    POST {base_url}/tts  {text, engine, voiceId, options} -> audio bytes

Errors come back as JSON ``{"error": "..."}`` with a non-2xx status. All
failures surface as RemoteCallFailed; ``status`` is None when no HTTP
response arrived at all.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from tts_switchboard.errors import RemoteCallFailed
from tts_switchboard.types import Engine, Mode, SynthesisOptions, Voice, mime_type_for

logger = logging.getLogger(__name__)


class RemoteClient:
    """Blocking urllib calls, run in worker threads."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        user_agent: str = "tts-switchboard",
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent

    async def list_voices(self, engine: Engine | str, mode: Mode | str) -> list[Voice]:
        return await asyncio.to_thread(self._list_voices, _value(engine), _value(mode))

    async def synthesize(
        self,
        text: str,
        engine: Engine | str,
        voice_id: str,
        options: SynthesisOptions | None = None,
        mode: Mode | str | None = None,
    ) -> tuple[bytes, str]:
        """Returns (audio, content type).

        ``mode`` travels inside ``options`` so the endpoint can log it.
        """
        options = options or SynthesisOptions()
        wire_options = options.to_dict()
        if mode is not None:
            wire_options["mode"] = _value(mode)

        payload = {
            "text": text,
            "engine": _value(engine),
            "voiceId": voice_id,
            "options": wire_options,
        }
        return await asyncio.to_thread(self._synthesize, payload, options.format)

    def _list_voices(self, engine: str, mode: str) -> list[Voice]:
        query = urllib.parse.urlencode({"engine": engine, "mode": mode})
        req = urllib.request.Request(
            f"{self.base_url}/voices?{query}",
            headers={"Accept": "application/json", "User-Agent": self.user_agent},
            method="GET",
        )
        body, _ = self._send(req, "Failed to fetch voices")

        try:
            data = json.loads(body)
        except ValueError as e:
            raise RemoteCallFailed(f"Invalid voices response: {e}") from e
        if not isinstance(data, list):
            raise RemoteCallFailed("Invalid voices response: expected a list")

        return [Voice.from_dict(entry, engine=engine) for entry in data]

    def _synthesize(self, payload: dict[str, Any], fmt: str) -> tuple[bytes, str]:
        req = urllib.request.Request(
            f"{self.base_url}/tts",
            data=json.dumps(payload).encode(),
            headers={"Content-Type": "application/json", "User-Agent": self.user_agent},
            method="POST",
        )
        body, content_type = self._send(req, "Failed to synthesize speech")
        return body, content_type or mime_type_for(fmt)

    def _send(self, req: urllib.request.Request, failure: str) -> tuple[bytes, str | None]:
        logger.debug(f"{req.get_method()} {req.full_url}")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return response.read(), response.headers.get("Content-Type")

        except urllib.error.HTTPError as e:
            message = _server_error(e) or f"{failure}: {e.code} {e.reason}"
            raise RemoteCallFailed(message, status=e.code) from e

        except (urllib.error.URLError, TimeoutError, OSError) as e:
            reason = getattr(e, "reason", e)
            raise RemoteCallFailed(f"{failure}: {reason}", status=None) from e


def _server_error(error: urllib.error.HTTPError) -> str | None:
    """The endpoint's own error message, if the body carries one."""
    try:
        data = json.loads(error.read())
    except (ValueError, OSError):
        return None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return None


def _value(item: Engine | Mode | str) -> str:
    return item.value if isinstance(item, (Engine, Mode)) else str(item)
