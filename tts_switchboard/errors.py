"""
Switchboard Errors - Domain-specific error types.

Error hierarchy:
    SwitchboardError (base)
    ├── UnknownEngine
    ├── EngineUnavailable
    ├── ModeIncompatible (never surfaced through the public API)
    ├── RemoteCallFailed
    └── SynthesisFailed

Selection functions never raise; "no engine available" is an ordinary
result. list_voices() raises directly, synthesize() raises only after its
configured fallbacks are exhausted.
"""

from __future__ import annotations

from typing import Any


class SwitchboardError(Exception):
    """Base error for all switchboard errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownEngine(SwitchboardError):
    """Raised when an engine name is not in the registry.

    Callers should treat this as "feature unavailable".
    """

    def __init__(self, engine: str, details: dict[str, Any] | None = None):
        super().__init__(f"Unknown TTS engine: {engine}", details)
        self.engine = engine


class EngineUnavailable(SwitchboardError):
    """Raised when an engine is known but cannot be used right now.

    Typical causes: no adapter for the engine, adapter construction failed,
    or the credential check rejected the configured secrets.
    """

    def __init__(self, engine: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.engine = engine


class ModeIncompatible(SwitchboardError):
    """A mode cannot run in the current environment.

    Mode mismatches are resolved by auto-fallback inside the resolver, so
    this is only used internally and in diagnostics.
    """

    def __init__(self, mode: str, environment: str):
        super().__init__(
            f"Mode {mode} is not compatible with {environment} environment",
            details={"mode": mode, "environment": environment},
        )
        self.mode = mode
        self.environment = environment


class RemoteCallFailed(SwitchboardError):
    """Network failure or non-2xx response on the remote path.

    ``status`` is None when the request never got an HTTP response.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status = status


class SynthesisFailed(SwitchboardError):
    """Adapter-level failure on the in-process path."""

    def __init__(self, engine: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.engine = engine
