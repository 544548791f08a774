"""
Engine module - The registry of known engines and their adapters.

The registry is static data; adapters are built on demand by the loader
and owned by the runtime's adapter cache.
"""

from tts_switchboard.engine.base import TTSAdapter, BaseTTSAdapter
from tts_switchboard.engine.loader import load_adapter, list_adapters
from tts_switchboard.engine.registry import (
    Capabilities,
    EngineConfig,
    EngineRegistry,
    ENGINE_CONFIGS,
    MODE_ENGINE_TYPES,
    UNKNOWN_ENGINE,
    default_registry,
)
from tts_switchboard.engine.backends import (
    MockAdapter,
    AZURE_AVAILABLE,
    ELEVENLABS_AVAILABLE,
    OPENAI_AVAILABLE,
)

__all__ = [
    "TTSAdapter",
    "BaseTTSAdapter",
    "load_adapter",
    "list_adapters",
    "Capabilities",
    "EngineConfig",
    "EngineRegistry",
    "ENGINE_CONFIGS",
    "MODE_ENGINE_TYPES",
    "UNKNOWN_ENGINE",
    "default_registry",
    "MockAdapter",
    "AZURE_AVAILABLE",
    "ELEVENLABS_AVAILABLE",
    "OPENAI_AVAILABLE",
]
