"""
Test fixtures - Pre-wired switchboards with test doubles.
"""

from __future__ import annotations

from typing import Iterable

from tts_switchboard.api import Switchboard
from tts_switchboard.config import RouterConfig
from tts_switchboard.credentials import CredentialStore, EngineCredentials
from tts_switchboard.environment import StaticEnvironment
from tts_switchboard.errors import EngineUnavailable
from tts_switchboard.monitoring.logging import LogLevel, StructuredLogger
from tts_switchboard.runtime.cache import AdapterCache
from tts_switchboard.testing.mock import AdapterMock, FakeRemoteClient
from tts_switchboard.types import Engine, Environment


SAMPLE_TEXTS = {
    "short": "Hello!",
    "sentence": "The quick brown fox jumps over the lazy dog.",
}


def create_test_credentials(engines: Iterable[Engine | str]) -> CredentialStore:
    """Only ``engines`` enabled, each with a dummy secret."""
    return CredentialStore({
        engine: EngineCredentials(enabled=True, fields={"api_key": "test"})
        for engine in engines
    })


def create_test_switchboard(
    engines: Iterable[Engine | str] = (Engine.MOCK,),
    environment: Environment = Environment.SERVER,
    network: bool = True,
    adapters: dict[Engine, AdapterMock] | None = None,
    remote: FakeRemoteClient | None = None,
    **config,
) -> Switchboard:
    """A switchboard that never touches the network or a real engine.

    Adapters come from ``adapters``; an engine missing there gets a fresh
    AdapterMock. Structured events are discarded.
    """
    adapters = adapters if adapters is not None else {}

    def loader(engine: Engine, credentials=None) -> AdapterMock:
        if engine not in adapters:
            adapters[engine] = AdapterMock(engine)
        adapter = adapters[engine]
        if adapter is None:
            raise EngineUnavailable(engine.value, f"No adapter available for engine: {engine.value}")
        return adapter

    credentials = create_test_credentials(engines)
    return Switchboard(
        config=RouterConfig(**config),
        credentials=credentials,
        environment=StaticEnvironment(environment, network=network),
        cache=AdapterCache(credentials=credentials, loader=loader),
        remote=remote or FakeRemoteClient(),
        events=StructuredLogger("test", level=LogLevel.CRITICAL),
    )
