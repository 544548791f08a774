"""
Engine Loader - Build the adapter for an engine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tts_switchboard.engine.base import TTSAdapter
from tts_switchboard.errors import EngineUnavailable, UnknownEngine
from tts_switchboard.types import Engine

if TYPE_CHECKING:
    from tts_switchboard.credentials import EngineCredentials

logger = logging.getLogger(__name__)


def load_adapter(
    engine: Engine | str,
    credentials: EngineCredentials | None = None,
    **kwargs,
) -> TTSAdapter:
    """Construct a fresh adapter for ``engine``.

    Args:
        engine: Engine name
        credentials: Secrets for engines that need them
        **kwargs: Additional adapter-specific options

    Raises:
        UnknownEngine: If the name is not a known engine
        EngineUnavailable: If there is no adapter for the engine
        ImportError / ValueError: If the adapter itself cannot start
    """
    parsed = Engine.parse(engine)
    if parsed is None:
        raise UnknownEngine(str(engine))

    fields = credentials.fields if credentials is not None else {}

    if parsed == Engine.MOCK:
        from tts_switchboard.engine.backends.mock import MockAdapter
        return MockAdapter(**kwargs)

    if parsed == Engine.ESPEAK_WASM:
        from tts_switchboard.engine.backends.wasm import EspeakWasmAdapter
        return EspeakWasmAdapter()

    if parsed == Engine.SHERPAONNX_WASM:
        from tts_switchboard.engine.backends.wasm import SherpaOnnxWasmAdapter
        return SherpaOnnxWasmAdapter()

    if parsed == Engine.SHERPAONNX:
        from tts_switchboard.engine.backends.sherpaonnx import SherpaOnnxServerAdapter
        return SherpaOnnxServerAdapter(**kwargs)

    if parsed == Engine.AZURE:
        from tts_switchboard.engine.backends.azure import AzureAdapter
        return AzureAdapter(
            speech_key=fields.get("subscription_key"),
            speech_region=fields.get("region"),
            **kwargs,
        )

    if parsed == Engine.ELEVENLABS:
        from tts_switchboard.engine.backends.elevenlabs import ElevenLabsAdapter
        return ElevenLabsAdapter(api_key=fields.get("api_key"), **kwargs)

    if parsed == Engine.OPENAI:
        from tts_switchboard.engine.backends.openai import OpenAIAdapter
        return OpenAIAdapter(api_key=fields.get("api_key"), **kwargs)

    raise EngineUnavailable(parsed.value, f"No adapter available for engine: {parsed.value}")


def list_adapters() -> list[Engine]:
    """Engines with an in-tree adapter whose dependencies are importable."""
    from tts_switchboard.engine.backends import (
        AZURE_AVAILABLE,
        ELEVENLABS_AVAILABLE,
        OPENAI_AVAILABLE,
    )

    available = [
        Engine.MOCK,  # Always available
        Engine.ESPEAK_WASM,
        Engine.SHERPAONNX_WASM,
        Engine.SHERPAONNX,
    ]

    if AZURE_AVAILABLE:
        available.append(Engine.AZURE)
    if ELEVENLABS_AVAILABLE:
        available.append(Engine.ELEVENLABS)
    if OPENAI_AVAILABLE:
        available.append(Engine.OPENAI)

    return available
