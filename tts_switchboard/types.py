"""
Core Types - Engines, modes, voices and synthesis payloads.

These are the values that flow between the registry, the mode resolver,
the selector and the execution router. Everything here is plain data:
no I/O, no environment lookups.

Design principle: voices and results are immutable once produced. A voice
list is replaced wholesale on reload, never patched in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Engine(str, Enum):
    """Known TTS backends."""
    # Cloud engines
    AZURE = "azure"
    ELEVENLABS = "elevenlabs"
    GOOGLE = "google"
    OPENAI = "openai"
    PLAYHT = "playht"
    POLLY = "polly"
    WATSON = "watson"
    WITAI = "witai"

    # Local engines with a server and an in-process flavour
    ESPEAK = "espeak"
    ESPEAK_WASM = "espeak-wasm"
    SHERPAONNX = "sherpaonnx"
    SHERPAONNX_WASM = "sherpaonnx-wasm"

    # Testing
    MOCK = "mock"

    @classmethod
    def parse(cls, value: "Engine | str") -> "Engine | None":
        """Return the Engine for a name, or None when the name is unknown."""
        if isinstance(value, Engine):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class EngineType(str, Enum):
    """Where an engine's synthesis logic physically runs."""
    SERVER = "server"
    BROWSER = "browser"
    HYBRID = "hybrid"


class Mode(str, Enum):
    """Requested execution context.

    AUTO is a request, not a place: it is always resolved to one of the
    other three before anything executes.
    """
    SERVER = "server"
    BROWSER = "browser"
    HYBRID = "hybrid"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: "Mode | str | None", default: "Mode | None" = None) -> "Mode":
        if value is None or value == "":
            return default or cls.AUTO
        if isinstance(value, Mode):
            return value
        return cls(str(value).strip().lower())


class Environment(str, Enum):
    """The runtime we are executing in right now."""
    SERVER = "server"
    BROWSER = "browser"


class ExecutionPath(str, Enum):
    """How a request was actually carried out."""
    IN_PROCESS = "in_process"
    REMOTE = "remote"


@dataclass(frozen=True)
class LanguageCode:
    """A language a voice can speak, e.g. LanguageCode("en-US", "English (US)")."""
    code: str
    display: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "display": self.display}


@dataclass(frozen=True)
class Voice:
    """A synthesizable voice.

    ``id`` is only unique within its engine. ``language_codes`` is ordered
    by display priority.
    """
    id: str
    name: str
    engine: str
    language_codes: tuple[LanguageCode, ...] = ()
    gender: str | None = None

    def with_engine(self, engine: "Engine | str") -> "Voice":
        """Copy of this voice owned by ``engine``."""
        value = engine.value if isinstance(engine, Engine) else str(engine)
        if value == self.engine:
            return self
        return replace(self, engine=value)

    def to_dict(self) -> dict[str, Any]:
        """Wire form used by the /voices endpoint."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "engine": self.engine,
            "languageCodes": [lc.to_dict() for lc in self.language_codes],
        }
        if self.gender is not None:
            data["gender"] = self.gender
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], engine: "Engine | str | None" = None) -> "Voice":
        """Parse the wire form.

        Accepts both ``code`` and ``bcp47`` keys for language entries, since
        upstream SDK catalogs use the latter.
        """
        codes = []
        for entry in data.get("languageCodes") or data.get("language_codes") or []:
            if isinstance(entry, str):
                codes.append(LanguageCode(entry, entry))
            else:
                code = entry.get("code") or entry.get("bcp47") or ""
                codes.append(LanguageCode(code, entry.get("display", code)))

        owner = engine if engine is not None else data.get("engine", "")
        if isinstance(owner, Engine):
            owner = owner.value

        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            engine=str(owner),
            language_codes=tuple(codes),
            gender=data.get("gender"),
        )


@dataclass(frozen=True)
class SynthesisOptions:
    """Prosody and output options.

    None means "leave the adapter default alone"; it is never sent as zero.
    """
    rate: float | None = None
    pitch: float | None = None
    volume: float | None = None
    format: str = "wav"

    def properties(self) -> dict[str, float]:
        """Only the prosody properties that were actually set."""
        props = {}
        for name in ("rate", "pitch", "volume"):
            value = getattr(self, name)
            if value is not None:
                props[name] = value
        return props

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.properties())
        data["format"] = self.format
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SynthesisOptions":
        data = data or {}

        def _num(key: str) -> float | None:
            value = data.get(key)
            return float(value) if value is not None else None

        return cls(
            rate=_num("rate"),
            pitch=_num("pitch"),
            volume=_num("volume"),
            format=data.get("format") or "wav",
        )


MIME_TYPES = {
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "opus": "audio/opus",
    "flac": "audio/flac",
    "pcm": "audio/L16",
}


def mime_type_for(fmt: str) -> str:
    return MIME_TYPES.get(fmt.lower(), "application/octet-stream")


@dataclass
class SynthesisRequest:
    """One synthesis call, consumed once by the router."""
    text: str
    voice: Voice
    options: SynthesisOptions = field(default_factory=SynthesisOptions)
    mode: Mode = Mode.AUTO


@dataclass
class SynthesisResult:
    """Audio produced by a synthesis call. Owned by the caller."""
    audio: bytes
    format: str = "wav"
    mime_type: str = "audio/wav"

    # Provenance
    engine: str = ""
    mode: Mode | None = None
    path: ExecutionPath | None = None
    attempts: int = 1

    def __len__(self) -> int:
        return len(self.audio)
