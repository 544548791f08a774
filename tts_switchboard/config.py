"""
Router configuration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from tts_switchboard.types import Mode

logger = logging.getLogger(__name__)

ENV_PREFIX = "TTS_SWITCHBOARD_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class RouterConfig:
    """Execution router configuration.

    ``base_url`` is the prefix of the remote endpoint; ``/voices`` and
    ``/tts`` are appended to it.
    """
    base_url: str = "http://localhost:3000/api"
    timeout_seconds: float = 30.0
    fallback_to_browser: bool = True
    fallback_to_server: bool = True
    default_mode: Mode = Mode.AUTO
    default_format: str = "wav"
    user_agent: str = "tts-switchboard"

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        self.default_mode = Mode.parse(self.default_mode)
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides) -> "RouterConfig":
        """Defaults, then TTS_SWITCHBOARD_* variables, then ``overrides``."""
        environ = os.environ if environ is None else environ
        values: dict = {}

        base_url = environ.get(f"{ENV_PREFIX}BASE_URL")
        if base_url:
            values["base_url"] = base_url

        timeout = environ.get(f"{ENV_PREFIX}TIMEOUT")
        if timeout:
            try:
                values["timeout_seconds"] = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}TIMEOUT={timeout!r}")

        for key, name in (
            ("fallback_to_browser", "FALLBACK_BROWSER"),
            ("fallback_to_server", "FALLBACK_SERVER"),
        ):
            flag = _parse_bool(environ.get(f"{ENV_PREFIX}{name}"))
            if flag is not None:
                values[key] = flag

        mode = environ.get(f"{ENV_PREFIX}MODE")
        if mode:
            try:
                values["default_mode"] = Mode.parse(mode)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}MODE={mode!r}")

        values.update(overrides)
        return cls(**values)


def _parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    value = value.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None
