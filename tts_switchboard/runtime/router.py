"""
Execution Router - Run voice listing and synthesis on the right path.

Every request is routed one of two ways:

    in-process  the adapter runs inside this process (browser mode, or
                hybrid mode inside a browser for non-server engines)
    remote      the request goes to the /voices or /tts endpoint

Synthesis failures are retried through an explicit fallback plan: browser,
then server, each tried at most once and strictly one after the other. A
retry never plans retries of its own. When every attempt fails the last
error propagates unchanged.

Voice listing never falls back.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
import weakref
from typing import Any, Iterable

from tts_switchboard.config import RouterConfig
from tts_switchboard.credentials import CredentialStore
from tts_switchboard.engine.base import TTSAdapter
from tts_switchboard.engine.registry import EngineRegistry
from tts_switchboard.errors import (
    EngineUnavailable,
    RemoteCallFailed,
    SwitchboardError,
    SynthesisFailed,
    UnknownEngine,
)
from tts_switchboard.modes import ModeResolver
from tts_switchboard.monitoring.logging import StructuredLogger, get_logger
from tts_switchboard.monitoring.metrics import MetricsCollector
from tts_switchboard.runtime.cache import AdapterCache, call_adapter
from tts_switchboard.runtime.remote import RemoteClient
from tts_switchboard.types import (
    Engine,
    EngineType,
    Environment,
    ExecutionPath,
    Mode,
    SynthesisOptions,
    SynthesisResult,
    Voice,
    mime_type_for,
)

logger = logging.getLogger(__name__)


class ExecutionRouter:
    """Routes list_voices() and synthesize() calls.

    Example:
        router = ExecutionRouter(resolver, cache, remote, credentials)
        voices = await router.list_voices(Engine.MOCK, Mode.BROWSER)
        result = await router.synthesize("Hello", voices[0])
    """

    def __init__(
        self,
        resolver: ModeResolver,
        cache: AdapterCache,
        remote: RemoteClient,
        credentials: CredentialStore,
        config: RouterConfig | None = None,
        metrics: MetricsCollector | None = None,
        events: StructuredLogger | None = None,
    ):
        self.resolver = resolver
        self.cache = cache
        self.remote = remote
        self.credentials = credentials
        self.config = config or RouterConfig()
        self.metrics = metrics or MetricsCollector()
        self._events = events

        # Serializes set_voice/set_property/synth_to_bytes on one adapter
        self._adapter_locks: dict[Engine, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        # Same for adapters with coroutine methods, per event loop
        self._async_locks: weakref.WeakKeyDictionary[
            asyncio.AbstractEventLoop, dict[Engine, asyncio.Lock]
        ] = weakref.WeakKeyDictionary()

    @property
    def registry(self) -> EngineRegistry:
        return self.resolver.registry

    @property
    def events(self) -> StructuredLogger:
        return self._events or get_logger()

    def _parse(self, engine: Engine | str) -> Engine:
        parsed = Engine.parse(engine)
        if parsed is None or not self.registry.is_known(parsed):
            raise UnknownEngine(str(engine))
        return parsed

    def _mode(self, mode: Mode | str | None) -> Mode:
        return Mode.parse(mode, default=self.config.default_mode)

    # Path decisions

    def synthesis_path(self, effective: Mode, engine: Engine | str) -> ExecutionPath:
        env = self.resolver.current_environment()
        if effective == Mode.BROWSER:
            return ExecutionPath.IN_PROCESS
        if (
            effective == Mode.HYBRID
            and env == Environment.BROWSER
            and self.registry.get(engine).type != EngineType.SERVER
        ):
            return ExecutionPath.IN_PROCESS
        return ExecutionPath.REMOTE

    def listing_path(self, effective: Mode, engine: Engine | str) -> ExecutionPath:
        env = self.resolver.current_environment()
        runs_here = effective == Mode.BROWSER or (
            effective == Mode.HYBRID and env == Environment.BROWSER
        )
        engine_type = self.registry.get(engine).type
        if runs_here and engine_type in (EngineType.BROWSER, EngineType.HYBRID):
            return ExecutionPath.IN_PROCESS
        return ExecutionPath.REMOTE

    # Voice listing

    async def list_voices(self, engine: Engine | str, mode: Mode | str | None = None) -> list[Voice]:
        """Voices of one engine, each tagged with that engine.

        Raises:
            UnknownEngine, EngineUnavailable: In-process adapter unusable
            RemoteCallFailed: Endpoint unreachable or non-2xx
        """
        parsed = self._parse(engine)
        effective = self.resolver.resolve_effective_mode(self._mode(mode), [parsed])

        if self.listing_path(effective, parsed) == ExecutionPath.IN_PROCESS:
            self.metrics.record_in_process_call("voices", parsed.value)
            voices = await self._bounded(
                self._list_in_process(parsed),
                lambda: EngineUnavailable(parsed.value, f"{parsed.value} voice listing timed out"),
            )
        else:
            self.metrics.record_remote_call("voices", parsed.value)
            voices = await self._bounded(
                self.remote.list_voices(parsed, effective),
                lambda: RemoteCallFailed("Failed to fetch voices: timed out"),
            )

        return [voice.with_engine(parsed) for voice in voices]

    async def _list_in_process(self, engine: Engine) -> list[Voice]:
        adapter = await self.cache.get(engine)
        try:
            return await call_adapter(adapter.get_voices)
        except SwitchboardError:
            raise
        except Exception as e:
            raise EngineUnavailable(engine.value, f"Error getting {engine.value} voices: {e}") from e

    async def list_all_voices(self, mode: Mode | str | None = None) -> list[Voice]:
        """Voices of every engine in the mode's pool, fetched concurrently.

        An engine that fails contributes no voices; the failure is logged.
        """
        requested = self._mode(mode)
        effective = self.resolver.resolve_effective_mode(
            requested, self.credentials.enabled_engines()
        )
        if effective == Mode.BROWSER:
            engines = self.credentials.browser_pool()
        elif effective == Mode.SERVER:
            engines = self.credentials.server_pool()
        else:
            engines = self.credentials.enabled_engines()

        results = await asyncio.gather(
            *(self.list_voices(engine, requested) for engine in engines),
            return_exceptions=True,
        )

        voices: list[Voice] = []
        for engine, result in zip(engines, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(f"Error loading {engine.value} voices: {result}")
                self.metrics.record_error(type(result).__name__)
                continue
            voices.extend(result)
        return voices

    async def is_engine_available(self, engine: Engine | str, mode: Mode | str | None = None) -> bool:
        """Enabled, allowed in ``mode``, and for in-process engines, constructible."""
        parsed = Engine.parse(engine)
        if parsed is None or not self.credentials.is_enabled(parsed):
            return False

        target = self._mode(mode)
        engine_type = self.registry.get(parsed).type

        if target == Mode.BROWSER and engine_type == EngineType.SERVER:
            return False
        if (
            target == Mode.SERVER
            and engine_type == EngineType.BROWSER
            and not self.resolver.environment.can_reach_network()
        ):
            return False

        if target == Mode.BROWSER or engine_type == EngineType.BROWSER:
            try:
                await self.cache.get(parsed)
            except SwitchboardError as e:
                logger.info(f"{parsed.value} not available: {e}")
                return False

        return True

    # Synthesis

    async def synthesize(
        self,
        text: str,
        voice: Voice,
        options: SynthesisOptions | None = None,
        mode: Mode | str | None = None,
    ) -> SynthesisResult:
        """Synthesize ``text`` with ``voice``, falling back on failure.

        Raises:
            SwitchboardError: The last attempt's error, once every planned
                attempt has failed
        """
        options = options or SynthesisOptions(format=self.config.default_format)
        engine = self._parse(voice.engine)
        requested = self._mode(mode)
        effective = self.resolver.resolve_effective_mode(requested, [engine])

        events = self.events.bind(engine=engine.value, voice=voice.id)
        events.synthesis_start(text, voice=voice.id, engine=engine.value, mode=effective.value)

        attempts = 1
        try:
            return await self._attempt(text, voice, engine, options, effective, attempts)
        except SwitchboardError as e:
            last_error = e
            failed_mode = effective
            events.synthesis_error(e, mode=effective.value)
            self.metrics.record_error(type(e).__name__)

        for fallback in self._fallback_plan(engine, failed_mode):
            if not self.resolver.is_compatible(fallback):
                logger.debug(f"Skipping {fallback.value} fallback, not compatible here")
                continue

            attempts += 1
            events.synthesis_retry(engine.value, fallback.value, previous_mode=failed_mode.value)
            self.metrics.record_fallback(engine.value, fallback.value)
            try:
                return await self._attempt(text, voice, engine, options, fallback, attempts)
            except SwitchboardError as e:
                last_error = e
                events.synthesis_error(e, mode=fallback.value)
                self.metrics.record_error(type(e).__name__)

        raise last_error

    def _fallback_plan(self, engine: Engine, failed_mode: Mode) -> list[Mode]:
        """Modes to retry in, computed once from the first failure."""
        plan = []
        if (
            self.config.fallback_to_browser
            and failed_mode != Mode.BROWSER
            and engine in self.credentials.browser_pool()
        ):
            plan.append(Mode.BROWSER)
        if (
            self.config.fallback_to_server
            and failed_mode != Mode.SERVER
            and engine in self.credentials.server_pool()
        ):
            plan.append(Mode.SERVER)
        return plan

    async def _attempt(
        self,
        text: str,
        voice: Voice,
        engine: Engine,
        options: SynthesisOptions,
        mode: Mode,
        attempts: int,
    ) -> SynthesisResult:
        path = self.synthesis_path(mode, engine)
        start = time.perf_counter()

        if path == ExecutionPath.IN_PROCESS:
            self.metrics.record_in_process_call("tts", engine.value)
            audio, mime_type = await self._bounded(
                self._synthesize_in_process(text, voice, engine, options),
                lambda: SynthesisFailed(engine.value, f"{engine.value} synthesis timed out"),
            )
        else:
            self.metrics.record_remote_call("tts", engine.value)
            audio, mime_type = await self._bounded(
                self.remote.synthesize(text, engine, voice.id, options, mode=mode),
                lambda: RemoteCallFailed("Failed to synthesize speech: timed out"),
            )

        duration_ms = (time.perf_counter() - start) * 1000
        self.metrics.record_synthesis(duration_ms, path.value)
        self.events.synthesis_complete(
            duration_ms,
            audio_bytes=len(audio),
            engine=engine.value,
            mode=mode.value,
            path=path.value,
        )

        return SynthesisResult(
            audio=audio,
            format=options.format,
            mime_type=mime_type,
            engine=engine.value,
            mode=mode,
            path=path,
            attempts=attempts,
        )

    async def _synthesize_in_process(
        self,
        text: str,
        voice: Voice,
        engine: Engine,
        options: SynthesisOptions,
    ) -> tuple[bytes, str]:
        if self.registry.get(engine).type == EngineType.SERVER:
            raise EngineUnavailable(engine.value, f"{engine.value} cannot run in-process")

        adapter = await self.cache.get(engine)
        properties = options.properties()

        try:
            if _has_async_methods(adapter):
                async with self._async_adapter_lock(engine):
                    await call_adapter(adapter.set_voice, voice.id)
                    for name, value in properties.items():
                        await call_adapter(adapter.set_property, name, value)
                    audio = await call_adapter(adapter.synth_to_bytes, text, options)
            else:
                audio = await asyncio.to_thread(
                    self._synthesize_blocking, engine, adapter, voice.id, properties, text, options
                )
        except SwitchboardError:
            raise
        except Exception as e:
            raise SynthesisFailed(engine.value, f"{engine.value} synthesis failed: {e}") from e

        return bytes(audio), mime_type_for(options.format)

    def _synthesize_blocking(
        self,
        engine: Engine,
        adapter: TTSAdapter,
        voice_id: str,
        properties: dict[str, float],
        text: str,
        options: SynthesisOptions,
    ) -> bytes:
        with self._adapter_lock(engine):
            adapter.set_voice(voice_id)
            for name, value in properties.items():
                adapter.set_property(name, value)
            return adapter.synth_to_bytes(text, options)

    def _adapter_lock(self, engine: Engine) -> threading.Lock:
        with self._locks_guard:
            return self._adapter_locks.setdefault(engine, threading.Lock())

    def _async_adapter_lock(self, engine: Engine) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        with self._locks_guard:
            locks = self._async_locks.setdefault(loop, {})
            return locks.setdefault(engine, asyncio.Lock())

    async def _bounded(self, awaitable, on_timeout) -> Any:
        """Await with the configured timeout; expiry raises ``on_timeout()``."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.config.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise on_timeout() from e


def _has_async_methods(adapter: TTSAdapter, names: Iterable[str] = (
    "set_voice", "set_property", "synth_to_bytes", "get_voices",
)) -> bool:
    return any(inspect.iscoroutinefunction(getattr(adapter, name, None)) for name in names)
