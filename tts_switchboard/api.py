"""
Public API - The Switchboard facade.

This is the surface a UI layer calls: mode resolution, engine selection,
voice listing and synthesis, all wired from one configuration.
"""

from __future__ import annotations

import logging
from typing import Iterable

from tts_switchboard.config import RouterConfig
from tts_switchboard.credentials import CredentialStore
from tts_switchboard.engine.registry import EngineRegistry, default_registry
from tts_switchboard.environment import EnvironmentDetector, detector_from_env
from tts_switchboard.modes import ModeInfo, ModeResolver, mode_info
from tts_switchboard.monitoring.logging import StructuredLogger
from tts_switchboard.monitoring.metrics import MetricsCollector
from tts_switchboard.runtime.cache import AdapterCache
from tts_switchboard.runtime.remote import RemoteClient
from tts_switchboard.runtime.router import ExecutionRouter
from tts_switchboard.selector import EngineSelector
from tts_switchboard.types import (
    Engine,
    Mode,
    SynthesisOptions,
    SynthesisRequest,
    SynthesisResult,
    Voice,
)

logger = logging.getLogger(__name__)


class Switchboard:
    """Switchboard - Main TTS routing interface.

    Example:
        board = Switchboard()
        engine = board.best_engine()
        voices = await board.list_voices(engine)
        result = await board.synthesize("Hello world!", voices[0])
        open("hello.wav", "wb").write(result.audio)

    Any component can be injected; the rest are built from ``config`` and
    the environment.
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        credentials: CredentialStore | None = None,
        environment: EnvironmentDetector | None = None,
        registry: EngineRegistry | None = None,
        cache: AdapterCache | None = None,
        remote: RemoteClient | None = None,
        selector: EngineSelector | None = None,
        metrics: MetricsCollector | None = None,
        events: StructuredLogger | None = None,
    ):
        self.config = config or RouterConfig.from_env()
        self.registry = registry if registry is not None else default_registry
        self.credentials = credentials or CredentialStore.from_env(registry=self.registry)
        self.metrics = metrics or MetricsCollector()
        self.selector = selector or EngineSelector()

        self.resolver = ModeResolver(
            registry=self.registry,
            environment=environment or detector_from_env(),
            events=events,
            metrics=self.metrics,
        )
        if cache is None:
            cache = AdapterCache(credentials=self.credentials, registry=self.registry)
        self.cache = cache
        self.remote = remote or RemoteClient(
            self.config.base_url,
            timeout=self.config.timeout_seconds,
            user_agent=self.config.user_agent,
        )
        self.router = ExecutionRouter(
            self.resolver,
            self.cache,
            self.remote,
            self.credentials,
            config=self.config,
            metrics=self.metrics,
            events=events,
        )

        logger.debug(
            f"Switchboard ready: environment={self.resolver.current_environment().value}, "
            f"enabled={[e.value for e in self.credentials.enabled_engines()]}"
        )

    def _enabled(self, engines: Iterable[Engine | str] | None) -> list[Engine | str]:
        if engines is None:
            return list(self.credentials.enabled_engines())
        return list(engines)

    def _mode(self, mode: Mode | str | None) -> Mode:
        return Mode.parse(mode, default=self.config.default_mode)

    # Resolution and selection

    def resolve_effective_mode(
        self,
        requested: Mode | str | None = None,
        enabled_engines: Iterable[Engine | str] | None = None,
    ) -> Mode:
        """Effective mode; defaults to the configured mode and enabled engines."""
        return self.resolver.resolve_effective_mode(self._mode(requested), self._enabled(enabled_engines))

    def compatible_engines(
        self,
        mode: Mode | str | None = None,
        enabled_engines: Iterable[Engine | str] | None = None,
    ) -> list[Engine]:
        return self.resolver.compatible_engines(self._mode(mode), self._enabled(enabled_engines))

    def select_best(
        self,
        mode: Mode | str,
        compatible_engines: Iterable[Engine | str],
    ) -> Engine | str | None:
        return self.selector.select_best(mode, compatible_engines)

    def best_engine(
        self,
        mode: Mode | str | None = None,
        enabled_engines: Iterable[Engine | str] | None = None,
    ) -> Engine | None:
        return self.resolver.best_engine(
            self._mode(mode), self._enabled(enabled_engines), selector=self.selector
        )

    def mode_info(self, mode: Mode | str | None = None) -> ModeInfo:
        return mode_info(self._mode(mode))

    def is_offline_available(self) -> bool:
        return self.resolver.is_offline_available(self.credentials.enabled_engines())

    # Execution

    async def list_voices(self, engine: Engine | str, mode: Mode | str | None = None) -> list[Voice]:
        return await self.router.list_voices(engine, self._mode(mode))

    async def list_all_voices(self, mode: Mode | str | None = None) -> list[Voice]:
        return await self.router.list_all_voices(self._mode(mode))

    async def is_engine_available(self, engine: Engine | str, mode: Mode | str | None = None) -> bool:
        return await self.router.is_engine_available(engine, self._mode(mode))

    async def synthesize(
        self,
        text: str,
        voice: Voice,
        options: SynthesisOptions | None = None,
        mode: Mode | str | None = None,
    ) -> SynthesisResult:
        return await self.router.synthesize(text, voice, options, self._mode(mode))

    async def run(self, request: SynthesisRequest) -> SynthesisResult:
        """Execute a prepared SynthesisRequest."""
        return await self.synthesize(request.text, request.voice, request.options, request.mode)

    def close(self) -> None:
        """Release every cached adapter."""
        self.cache.clear()
