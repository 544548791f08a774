"""
TTS Switchboard - Route text-to-speech between server and in-process engines.

Architecture:
    requested mode → ModeResolver → effective mode
                   → EngineSelector → engine
                   → ExecutionRouter → in-process adapter | remote endpoint

Public API (stable):
    Switchboard     - Main interface. resolve, select, list voices, synthesize.
    RouterConfig    - Endpoint, timeout and fallback configuration.
    CredentialStore - Which engines are enabled, with what secrets.
    Voice           - A synthesizable voice. Returned by list_voices().
    SynthesisResult - Returned by synthesize(). Contains .audio and provenance.

Internals (for advanced users):
    tts_switchboard.modes       - ModeResolver, mode compatibility rules
    tts_switchboard.selector    - EngineSelector, preference table
    tts_switchboard.engine      - Registry, adapter protocol, adapters
    tts_switchboard.runtime     - AdapterCache, RemoteClient, ExecutionRouter
    tts_switchboard.server      - EndpointHandler for /voices and /tts
    tts_switchboard.testing     - AdapterMock, FakeRemoteClient, fixtures

Example:
    import asyncio
    from tts_switchboard import Switchboard, Mode

    board = Switchboard()
    engine = board.best_engine(Mode.AUTO)
    voices = asyncio.run(board.list_voices(engine))
    result = asyncio.run(board.synthesize("Hello world!", voices[0]))
"""

from tts_switchboard.api import Switchboard
from tts_switchboard.config import RouterConfig
from tts_switchboard.credentials import CredentialStore, EngineCredentials
from tts_switchboard.environment import (
    EnvironmentDetector,
    RuntimeEnvironmentDetector,
    StaticEnvironment,
)
from tts_switchboard.errors import (
    SwitchboardError,
    UnknownEngine,
    EngineUnavailable,
    ModeIncompatible,
    RemoteCallFailed,
    SynthesisFailed,
)
from tts_switchboard.modes import ModeResolver, ModeInfo
from tts_switchboard.selector import EngineSelector, select_best, PREFERENCE_ORDER
from tts_switchboard.types import (
    Engine,
    EngineType,
    Environment,
    ExecutionPath,
    LanguageCode,
    Mode,
    SynthesisOptions,
    SynthesisRequest,
    SynthesisResult,
    Voice,
)

__version__ = "1.0.0"

__all__ = [
    # Main API
    "Switchboard",
    "RouterConfig",
    "CredentialStore",
    "EngineCredentials",
    # Environment
    "EnvironmentDetector",
    "RuntimeEnvironmentDetector",
    "StaticEnvironment",
    # Resolution
    "ModeResolver",
    "ModeInfo",
    "EngineSelector",
    "select_best",
    "PREFERENCE_ORDER",
    # Types
    "Engine",
    "EngineType",
    "Environment",
    "ExecutionPath",
    "LanguageCode",
    "Mode",
    "SynthesisOptions",
    "SynthesisRequest",
    "SynthesisResult",
    "Voice",
    # Errors
    "SwitchboardError",
    "UnknownEngine",
    "EngineUnavailable",
    "ModeIncompatible",
    "RemoteCallFailed",
    "SynthesisFailed",
    # Version
    "__version__",
]
