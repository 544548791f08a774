"""
Mode Resolution - From a requested mode to an effective one.

A caller asks for server, browser, hybrid or auto. The resolver decides
which of server/browser/hybrid actually applies in the current
environment, and which enabled engines can be used under it.

Rules:
    - A compatible non-auto request is returned unchanged.
    - An incompatible request silently falls through to auto-resolution.
      The fallback is logged, never raised.
    - auto never escapes: resolution always yields server, browser or
      hybrid. hybrid is compatible everywhere, so it is the last resort.
    - With no enabled engines every request resolves to hybrid.

Usage:
    resolver = ModeResolver(environment=StaticEnvironment(Environment.BROWSER))
    resolver.resolve_effective_mode(Mode.AUTO, ["azure", "sherpaonnx-wasm"])
    # Mode.BROWSER
    resolver.compatible_engines(Mode.AUTO, ["azure", "sherpaonnx-wasm"])
    # [Engine.SHERPAONNX_WASM]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from tts_switchboard.engine.registry import (
    EngineRegistry,
    MODE_ENGINE_TYPES,
    default_registry,
)
from tts_switchboard.environment import EnvironmentDetector, RuntimeEnvironmentDetector
from tts_switchboard.monitoring.logging import StructuredLogger, get_logger
from tts_switchboard.monitoring.metrics import MetricsCollector
from tts_switchboard.selector import EngineSelector
from tts_switchboard.types import Engine, EngineType, Environment, Mode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeInfo:
    """Static description of a mode."""
    mode: Mode
    is_server: bool
    is_browser: bool
    supports_offline: bool
    description: str


MODE_INFO: Mapping[Mode, ModeInfo] = MappingProxyType({
    Mode.SERVER: ModeInfo(
        Mode.SERVER, True, False, False,
        "Server-side synthesis with cloud engines for best quality and voice selection",
    ),
    Mode.BROWSER: ModeInfo(
        Mode.BROWSER, False, True, True,
        "Client-side synthesis with in-process engines for offline use",
    ),
    Mode.HYBRID: ModeInfo(
        Mode.HYBRID, True, True, True,
        "Uses both server and in-process engines",
    ),
    Mode.AUTO: ModeInfo(
        Mode.AUTO, True, True, True,
        "Picks the best mode for the environment and enabled engines",
    ),
})


def mode_info(mode: Mode | str) -> ModeInfo:
    return MODE_INFO[Mode.parse(mode)]


def unique_engines(engines: Iterable[Engine | str], registry: EngineRegistry) -> list[Engine]:
    """Known engines from ``engines``, first occurrence order, no duplicates."""
    seen: set[Engine] = set()
    result = []
    for name in engines:
        engine = Engine.parse(name)
        if engine is None or engine in seen or not registry.is_known(engine):
            continue
        seen.add(engine)
        result.append(engine)
    return result


class ModeResolver:
    """Resolves requested modes and filters engines for them.

    Nothing here is cached: the environment and the enabled engine set are
    re-read on every call.
    """

    def __init__(
        self,
        registry: EngineRegistry | None = None,
        environment: EnvironmentDetector | None = None,
        events: StructuredLogger | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.registry = registry if registry is not None else default_registry
        self.environment = environment or RuntimeEnvironmentDetector()
        self._events = events
        self._metrics = metrics

    @property
    def events(self) -> StructuredLogger:
        return self._events or get_logger()

    def current_environment(self) -> Environment:
        return self.environment.current_environment()

    def is_compatible(self, mode: Mode | str, environment: Environment | None = None) -> bool:
        """Whether ``mode`` can run in ``environment`` (default: current)."""
        mode = Mode.parse(mode)
        env = environment or self.current_environment()

        if mode == Mode.SERVER:
            # A browser can still use the server through HTTP
            return env == Environment.SERVER or (
                env == Environment.BROWSER and self.environment.can_reach_network()
            )
        if mode == Mode.BROWSER:
            return env == Environment.BROWSER
        # HYBRID and AUTO
        return True

    def auto_detect_mode(
        self,
        enabled_engines: Iterable[Engine | str],
        environment: Environment | None = None,
    ) -> Mode:
        """Best mode for the environment given what is enabled."""
        env = environment or self.current_environment()
        types = {
            self.registry.get(engine).type
            for engine in unique_engines(enabled_engines, self.registry)
        }

        if env == Environment.BROWSER:
            if types & {EngineType.BROWSER, EngineType.HYBRID}:
                return Mode.BROWSER
            return Mode.HYBRID

        if types & {EngineType.SERVER, EngineType.HYBRID}:
            return Mode.SERVER
        return Mode.HYBRID

    def resolve_effective_mode(
        self,
        requested: Mode | str,
        enabled_engines: Iterable[Engine | str],
    ) -> Mode:
        """The mode that will actually be used. Never AUTO, never raises."""
        requested = Mode.parse(requested)
        engines = unique_engines(enabled_engines, self.registry)
        env = self.current_environment()

        # Nothing enabled: no specific mode has anything to run
        if not engines:
            return Mode.HYBRID

        if requested == Mode.AUTO:
            return self.auto_detect_mode(engines, env)

        if self.is_compatible(requested, env):
            return requested

        effective = self.auto_detect_mode(engines, env)
        self.events.mode_fallback(requested.value, effective.value, environment=env.value)
        if self._metrics is not None:
            self._metrics.record_mode_fallback(requested.value, effective.value)
        return effective

    def can_execute(self, engine: Engine | str, effective_mode: Mode, environment: Environment) -> bool:
        """Whether an engine of this type can physically run here."""
        engine_type = self.registry.type_of(engine)
        if engine_type is None:
            return False

        if engine_type == EngineType.SERVER:
            if effective_mode == Mode.BROWSER:
                return False
            if environment == Environment.BROWSER and not self.environment.can_reach_network():
                return False

        if engine_type == EngineType.BROWSER:
            if effective_mode == Mode.SERVER and environment == Environment.SERVER:
                return False

        return True

    def compatible_engines(
        self,
        mode: Mode | str,
        enabled_engines: Iterable[Engine | str],
    ) -> list[Engine]:
        """Enabled engines usable under the effective form of ``mode``.

        Input order is preserved. Empty in, empty out.
        """
        engines = unique_engines(enabled_engines, self.registry)
        if not engines:
            return []

        effective = self.resolve_effective_mode(mode, engines)
        env = self.current_environment()
        allowed = MODE_ENGINE_TYPES[effective]

        return [
            engine for engine in engines
            if self.registry.get(engine).type in allowed
            and self.can_execute(engine, effective, env)
        ]

    def is_offline_available(self, enabled_engines: Iterable[Engine | str]) -> bool:
        return bool(self.offline_engines(enabled_engines))

    def offline_engines(self, enabled_engines: Iterable[Engine | str]) -> list[Engine]:
        return [
            engine for engine in unique_engines(enabled_engines, self.registry)
            if self.registry.get(engine).supports_offline
        ]

    def best_engine(
        self,
        mode: Mode | str,
        enabled_engines: Iterable[Engine | str],
        selector: EngineSelector | None = None,
    ) -> Engine | None:
        """Resolve, filter and pick in one step."""
        engines = unique_engines(enabled_engines, self.registry)
        effective = self.resolve_effective_mode(mode, engines)
        compatible = self.compatible_engines(effective, engines)
        return (selector or EngineSelector()).select_best(effective, compatible)
