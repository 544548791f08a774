"""
Engine adapters.

Cloud adapters import their SDK lazily, so every module here imports
cleanly; the *_AVAILABLE flags say whether the SDK is installed.
"""

from tts_switchboard.engine.backends.mock import MockAdapter
from tts_switchboard.engine.backends.wasm import EspeakWasmAdapter, SherpaOnnxWasmAdapter
from tts_switchboard.engine.backends.sherpaonnx import SherpaOnnxServerAdapter
from tts_switchboard.engine.backends.azure import AzureAdapter, AZURE_AVAILABLE
from tts_switchboard.engine.backends.elevenlabs import ElevenLabsAdapter, ELEVENLABS_AVAILABLE
from tts_switchboard.engine.backends.openai import OpenAIAdapter, OPENAI_AVAILABLE

__all__ = [
    "MockAdapter",
    "EspeakWasmAdapter",
    "SherpaOnnxWasmAdapter",
    "SherpaOnnxServerAdapter",
    "AzureAdapter",
    "AZURE_AVAILABLE",
    "ElevenLabsAdapter",
    "ELEVENLABS_AVAILABLE",
    "OpenAIAdapter",
    "OPENAI_AVAILABLE",
]
