"""
Environment Detection - Where are we running, and can we reach the network?

These two facts are the only things about the runtime that the rest of the
switchboard is allowed to depend on.

A Python interpreter embedded in a web page (Pyodide, ``sys.platform ==
"emscripten"``) is the browser environment; any other process is the
server environment.
"""

from __future__ import annotations

import importlib
import logging
import os
import sys
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tts_switchboard.types import Environment

logger = logging.getLogger(__name__)

ENVIRONMENT_ENV_VAR = "TTS_SWITCHBOARD_ENVIRONMENT"


@runtime_checkable
class EnvironmentDetector(Protocol):
    """Answers the two environment questions. Must be side-effect free."""

    def current_environment(self) -> Environment:
        ...

    def can_reach_network(self) -> bool:
        ...


class RuntimeEnvironmentDetector:
    """Queries the ambient interpreter on every call."""

    def current_environment(self) -> Environment:
        if sys.platform == "emscripten":
            return Environment.BROWSER
        return Environment.SERVER

    def can_reach_network(self) -> bool:
        if self.current_environment() == Environment.SERVER:
            return True
        # Browser side: outbound requests go through the page's fetch()
        try:
            js = importlib.import_module("js")
        except ImportError:
            return False
        return hasattr(js, "fetch")


@dataclass(frozen=True)
class StaticEnvironment:
    """Fixed answers. Used for injection and tests."""
    environment: Environment = Environment.SERVER
    network: bool = True

    def current_environment(self) -> Environment:
        return self.environment

    def can_reach_network(self) -> bool:
        return self.network


def detector_from_env() -> EnvironmentDetector:
    """Runtime detection unless TTS_SWITCHBOARD_ENVIRONMENT pins a value."""
    pinned = os.environ.get(ENVIRONMENT_ENV_VAR, "").strip().lower()
    if not pinned:
        return RuntimeEnvironmentDetector()

    try:
        environment = Environment(pinned)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENVIRONMENT_ENV_VAR}={pinned!r}")
        return RuntimeEnvironmentDetector()

    return StaticEnvironment(environment=environment, network=True)
