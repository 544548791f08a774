"""
Engine Base - The adapter capability interface.

Every TTS backend, in-process or behind the server endpoint, is driven
through the same five capabilities. The router never looks past them.

ADAPTER CONTRACT:
    Adapters MUST:
        - Report whether their credentials work via check_credentials()
        - Return Voice objects from get_voices()
        - Return encoded audio bytes from synth_to_bytes()
        - Keep prosody defaults for properties that were never set

    Adapters MAY:
        - Implement any method as a coroutine function; the router awaits
          coroutine functions and runs plain functions in a worker thread
        - Report the wrong engine on their voices; callers re-tag them
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

from tts_switchboard.types import SynthesisOptions, Voice


@runtime_checkable
class TTSAdapter(Protocol):
    """Protocol for engine adapters."""

    @property
    def name(self) -> str:
        """Engine identifier (e.g., 'azure', 'mock')."""
        ...

    def check_credentials(self) -> bool:
        ...

    def get_voices(self) -> list[Voice]:
        ...

    def set_voice(self, voice_id: str) -> None:
        ...

    def set_property(self, name: str, value: Any) -> None:
        ...

    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        ...


class BaseTTSAdapter(ABC):
    """Base class for adapters with voice/property bookkeeping."""

    # Prosody defaults; set_property() overrides them per instance
    DEFAULT_PROPERTIES: dict[str, float] = {"rate": 1.0, "pitch": 1.0, "volume": 1.0}

    def __init__(self, default_voice: str | None = None):
        self._voice_id = default_voice
        self._properties: dict[str, Any] = dict(self.DEFAULT_PROPERTIES)

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    def voice_id(self) -> str | None:
        return self._voice_id

    @property
    def properties(self) -> dict[str, Any]:
        return dict(self._properties)

    def check_credentials(self) -> bool:
        """Credential-free adapters are always ready."""
        return True

    @abstractmethod
    def get_voices(self) -> list[Voice]:
        ...

    def set_voice(self, voice_id: str) -> None:
        self._voice_id = voice_id

    def set_property(self, name: str, value: Any) -> None:
        self._properties[name] = value

    def get_property(self, name: str, default: Any = None) -> Any:
        return self._properties.get(name, default)

    @abstractmethod
    def synth_to_bytes(self, text: str, options: SynthesisOptions | None = None) -> bytes:
        ...

    def supports_voice(self, voice_id: str) -> bool:
        voices = self.get_voices()
        return not voices or any(v.id == voice_id for v in voices)
