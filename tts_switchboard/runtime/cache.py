"""
Adapter Cache - At most one live adapter per engine.

Provides:
- Lazy construction through the engine loader
- One shared in-flight construction per engine under concurrency
- Credential check before an adapter is handed out
- Statistics tracking

Failed constructions are never stored: every caller that was waiting on
the failed attempt gets EngineUnavailable, and the next call starts over.

Usage:
    cache = AdapterCache(credentials=CredentialStore.from_env())
    adapter = await cache.get(Engine.SHERPAONNX_WASM)
    cache.clear()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from tts_switchboard.credentials import CredentialStore, EngineCredentials
from tts_switchboard.engine.base import TTSAdapter
from tts_switchboard.engine.loader import load_adapter
from tts_switchboard.engine.registry import EngineRegistry, default_registry
from tts_switchboard.errors import EngineUnavailable, UnknownEngine
from tts_switchboard.types import Engine

logger = logging.getLogger(__name__)

AdapterLoader = Callable[[Engine, "EngineCredentials | None"], Any]


async def call_adapter(fn: Callable[..., Any], *args: Any) -> Any:
    """Await coroutine functions, run plain functions in a worker thread."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    result = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(result):
        return await result
    return result


@dataclass
class CacheStats:
    """Cache statistics."""
    hits: int = 0
    misses: int = 0
    failures: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def reset(self):
        self.hits = 0
        self.misses = 0
        self.failures = 0


class AdapterCache:
    """Engine -> constructed adapter, with single-flight construction.

    The lock only guards the two dicts and is never held across an await,
    so one cache can serve several event loops in turn.
    """

    def __init__(
        self,
        credentials: CredentialStore | None = None,
        loader: AdapterLoader = load_adapter,
        registry: EngineRegistry | None = None,
    ):
        self.credentials = credentials
        self.registry = registry if registry is not None else default_registry
        self._loader = loader
        self._adapters: dict[Engine, TTSAdapter] = {}
        self._pending: dict[Engine, asyncio.Task] = {}
        self._lock = threading.Lock()
        self._stats = CacheStats()

    async def get(self, engine: Engine | str) -> TTSAdapter:
        """The adapter for ``engine``, constructing it on first use.

        Construction runs as its own task. Every caller, the first one
        included, waits on it through a shield, so a caller that is
        cancelled or times out leaves the construction running for the rest.

        Raises:
            UnknownEngine: If the engine is not in the registry
            EngineUnavailable: If construction or the credential check failed
        """
        key = Engine.parse(engine)
        if key is None or not self.registry.is_known(key):
            raise UnknownEngine(str(engine))

        loop = asyncio.get_running_loop()
        with self._lock:
            adapter = self._adapters.get(key)
            if adapter is not None:
                self._stats.hits += 1
                return adapter

            task = self._pending.get(key)
            if task is None or task.get_loop() is not loop:
                self._stats.misses += 1
                task = loop.create_task(self._construct_and_store(key))
                task.add_done_callback(_retrieve_exception)
                self._pending[key] = task

        return await asyncio.shield(task)

    async def _construct_and_store(self, key: Engine) -> TTSAdapter:
        try:
            adapter = await self._construct(key)
        except EngineUnavailable:
            with self._lock:
                self._pending.pop(key, None)
                self._stats.failures += 1
            raise
        except BaseException:
            with self._lock:
                self._pending.pop(key, None)
            raise

        with self._lock:
            self._adapters[key] = adapter
            self._pending.pop(key, None)
            self._stats.size = len(self._adapters)
        logger.info(f"Initialized {key.value} adapter")
        return adapter

    async def _construct(self, engine: Engine) -> TTSAdapter:
        creds = self.credentials.get(engine) if self.credentials is not None else None

        try:
            adapter = await call_adapter(self._loader, engine, creds)
        except EngineUnavailable:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize {engine.value}: {e}")
            raise EngineUnavailable(
                engine.value,
                f"Failed to initialize {engine.value}: {e}",
            ) from e

        await self._check_credentials(engine, adapter)
        return adapter

    async def _check_credentials(self, engine: Engine, adapter: TTSAdapter) -> None:
        config = self.registry.get(engine)
        # Local engines have nothing to reject; a failing check is not fatal
        tolerant = config.supports_offline and not config.requires_credentials

        try:
            valid = await call_adapter(adapter.check_credentials)
        except Exception as e:
            if tolerant:
                logger.warning(f"Credential check for {engine.value} failed, continuing: {e}")
                return
            raise EngineUnavailable(
                engine.value,
                f"Error checking {engine.value} credentials: {e}",
            ) from e

        if not valid:
            raise EngineUnavailable(engine.value, f"Invalid credentials for {engine.value}")

    def peek(self, engine: Engine | str) -> TTSAdapter | None:
        """The cached adapter, without constructing one."""
        key = Engine.parse(engine)
        with self._lock:
            return self._adapters.get(key) if key else None

    def evict(self, engine: Engine | str) -> bool:
        key = Engine.parse(engine)
        with self._lock:
            removed = self._adapters.pop(key, None) is not None if key else False
            self._stats.size = len(self._adapters)
        return removed

    def clear(self) -> None:
        """Drop every cached adapter."""
        with self._lock:
            self._adapters.clear()
            self._stats.size = 0
        logger.debug("Adapter cache cleared")

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def __contains__(self, engine: object) -> bool:
        return self.peek(engine) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._adapters)


def _retrieve_exception(task: asyncio.Task) -> None:
    # Failures nobody awaited any more must not be reported as unretrieved
    if not task.cancelled():
        task.exception()
