"""
Engine Registry - Static catalog of known engines.

Every Engine has exactly one entry. The catalog is built once at import
time and cannot be modified afterwards.

Usage:
    from tts_switchboard.engine.registry import default_registry

    config = default_registry.get("azure")
    config.type                 # EngineType.SERVER
    default_registry.list_offline()
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Literal, Mapping

from tts_switchboard.errors import UnknownEngine
from tts_switchboard.types import Engine, EngineType, Mode


Rating = Literal["low", "medium", "high"]
Speed = Literal["slow", "medium", "fast"]
Coverage = Literal["limited", "good", "extensive"]


@dataclass(frozen=True)
class Capabilities:
    """Ordinal capability ratings. Informational only."""
    voice_count: Rating = "low"
    quality: Rating = "low"
    speed: Speed = "medium"
    languages: Coverage = "limited"


@dataclass(frozen=True)
class EngineConfig:
    """Registry entry for one engine."""
    id: str
    name: str
    type: EngineType
    requires_credentials: bool
    supports_offline: bool
    description: str = ""
    capabilities: Capabilities = Capabilities()

    # Paired engines (server flavour / in-process flavour)
    server_engine: Engine | None = None
    browser_engine: Engine | None = None

    # False only for the UNKNOWN_ENGINE sentinel
    known: bool = True

    @property
    def engine(self) -> Engine | None:
        return Engine.parse(self.id) if self.known else None


# Returned by EngineRegistry.get() for names that are not registered.
# Typed as server + credentials so nothing treats it as runnable in-process.
UNKNOWN_ENGINE = EngineConfig(
    id="unknown",
    name="Unknown engine",
    type=EngineType.SERVER,
    requires_credentials=True,
    supports_offline=False,
    description="Engine is not registered",
    known=False,
)


_CLOUD = dict(requires_credentials=True, supports_offline=False)
_LOCAL = dict(requires_credentials=False, supports_offline=True)

ENGINE_CONFIGS: Mapping[Engine, EngineConfig] = MappingProxyType({
    # Cloud engines (server only)
    Engine.AZURE: EngineConfig(
        id="azure",
        name="Microsoft Azure",
        type=EngineType.SERVER,
        description="Neural voices from Azure Cognitive Services",
        capabilities=Capabilities("high", "high", "fast", "extensive"),
        **_CLOUD,
    ),
    Engine.ELEVENLABS: EngineConfig(
        id="elevenlabs",
        name="ElevenLabs",
        type=EngineType.SERVER,
        description="AI voice synthesis with natural-sounding voices",
        capabilities=Capabilities("medium", "high", "medium", "good"),
        **_CLOUD,
    ),
    Engine.GOOGLE: EngineConfig(
        id="google",
        name="Google Cloud TTS",
        type=EngineType.SERVER,
        description="Google Cloud Text-to-Speech with WaveNet voices",
        capabilities=Capabilities("high", "high", "fast", "extensive"),
        **_CLOUD,
    ),
    Engine.OPENAI: EngineConfig(
        id="openai",
        name="OpenAI TTS",
        type=EngineType.SERVER,
        description="OpenAI text-to-speech",
        capabilities=Capabilities("low", "high", "fast", "good"),
        **_CLOUD,
    ),
    Engine.PLAYHT: EngineConfig(
        id="playht",
        name="PlayHT",
        type=EngineType.SERVER,
        description="AI voice generation platform",
        capabilities=Capabilities("high", "high", "medium", "good"),
        **_CLOUD,
    ),
    Engine.POLLY: EngineConfig(
        id="polly",
        name="Amazon Polly",
        type=EngineType.SERVER,
        description="Amazon Polly text-to-speech",
        capabilities=Capabilities("high", "high", "fast", "extensive"),
        **_CLOUD,
    ),
    Engine.WATSON: EngineConfig(
        id="watson",
        name="IBM Watson",
        type=EngineType.SERVER,
        description="IBM Watson Text to Speech",
        capabilities=Capabilities("medium", "high", "medium", "good"),
        **_CLOUD,
    ),
    Engine.WITAI: EngineConfig(
        id="witai",
        name="Wit.ai",
        type=EngineType.SERVER,
        description="Meta Wit.ai speech synthesis",
        capabilities=Capabilities("low", "medium", "medium", "limited"),
        **_CLOUD,
    ),

    # Local engines, each with a server and an in-process flavour
    Engine.ESPEAK: EngineConfig(
        id="espeak",
        name="eSpeak (Server)",
        type=EngineType.SERVER,
        description="Open-source formant synthesizer (server-side)",
        capabilities=Capabilities("medium", "medium", "fast", "extensive"),
        server_engine=Engine.ESPEAK,
        browser_engine=Engine.ESPEAK_WASM,
        **_LOCAL,
    ),
    Engine.ESPEAK_WASM: EngineConfig(
        id="espeak-wasm",
        name="eSpeak (Browser)",
        type=EngineType.BROWSER,
        description="Open-source formant synthesizer (WebAssembly)",
        capabilities=Capabilities("medium", "medium", "fast", "extensive"),
        server_engine=Engine.ESPEAK,
        browser_engine=Engine.ESPEAK_WASM,
        **_LOCAL,
    ),
    Engine.SHERPAONNX: EngineConfig(
        id="sherpaonnx",
        name="SherpaOnnx (Server)",
        type=EngineType.SERVER,
        description="Neural TTS (server-side)",
        capabilities=Capabilities("high", "high", "medium", "extensive"),
        server_engine=Engine.SHERPAONNX,
        browser_engine=Engine.SHERPAONNX_WASM,
        **_LOCAL,
    ),
    Engine.SHERPAONNX_WASM: EngineConfig(
        id="sherpaonnx-wasm",
        name="SherpaOnnx (Browser)",
        type=EngineType.BROWSER,
        description="Neural TTS (WebAssembly)",
        capabilities=Capabilities("high", "high", "medium", "extensive"),
        server_engine=Engine.SHERPAONNX,
        browser_engine=Engine.SHERPAONNX_WASM,
        **_LOCAL,
    ),

    Engine.MOCK: EngineConfig(
        id="mock",
        name="Mock TTS",
        type=EngineType.HYBRID,
        description="Mock engine for testing",
        capabilities=Capabilities("low", "low", "fast", "limited"),
        **_LOCAL,
    ),
})


# Engine types each effective mode may use. AUTO is never effective but
# is listed so lookups stay total.
MODE_ENGINE_TYPES: Mapping[Mode, frozenset[EngineType]] = MappingProxyType({
    Mode.SERVER: frozenset({EngineType.SERVER, EngineType.HYBRID}),
    Mode.BROWSER: frozenset({EngineType.BROWSER, EngineType.HYBRID}),
    Mode.HYBRID: frozenset(EngineType),
    Mode.AUTO: frozenset(EngineType),
})


class EngineRegistry:
    """Read-only view over an engine catalog.

    get() never raises: unknown names return UNKNOWN_ENGINE so callers can
    degrade gracefully. Use require() for the strict lookup.
    """

    def __init__(self, configs: Mapping[Engine, EngineConfig] = ENGINE_CONFIGS):
        self._configs = MappingProxyType(dict(configs))

    def get(self, engine: Engine | str) -> EngineConfig:
        key = Engine.parse(engine)
        if key is None:
            return UNKNOWN_ENGINE
        return self._configs.get(key, UNKNOWN_ENGINE)

    def require(self, engine: Engine | str) -> EngineConfig:
        config = self.get(engine)
        if not config.known:
            raise UnknownEngine(str(getattr(engine, "value", engine)))
        return config

    def is_known(self, engine: Engine | str) -> bool:
        return self.get(engine).known

    def type_of(self, engine: Engine | str) -> EngineType | None:
        config = self.get(engine)
        return config.type if config.known else None

    def list_by_type(self, engine_type: EngineType | str) -> frozenset[Engine]:
        wanted = EngineType(engine_type)
        return frozenset(e for e, c in self._configs.items() if c.type == wanted)

    def list_offline(self) -> frozenset[Engine]:
        return frozenset(e for e, c in self._configs.items() if c.supports_offline)

    def server_engines(self) -> frozenset[Engine]:
        """Engines reachable through a server endpoint."""
        return self.engines_for_mode(Mode.SERVER)

    def browser_engines(self) -> frozenset[Engine]:
        """Engines that can run in-process on the client side."""
        return self.engines_for_mode(Mode.BROWSER)

    def engines_for_mode(self, mode: Mode | str) -> frozenset[Engine]:
        allowed = MODE_ENGINE_TYPES[Mode.parse(mode)]
        return frozenset(e for e, c in self._configs.items() if c.type in allowed)

    def __contains__(self, engine: object) -> bool:
        if not isinstance(engine, (str, Engine)):
            return False
        return self.is_known(engine)

    def __iter__(self) -> Iterator[Engine]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)


default_registry = EngineRegistry()
