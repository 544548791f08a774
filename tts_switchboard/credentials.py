"""
Credential Store - Which engines are enabled, and with what secrets.

The routing core only asks two questions of this store: is an engine
enabled, and does it have its credentials. Secret values are passed
through to adapter constructors and never logged.

Credentials are normally loaded from environment variables:

    store = CredentialStore.from_env()
    store.enabled_engines()   # [Engine.ESPEAK, Engine.SHERPAONNX, ...]
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from tts_switchboard.engine.registry import EngineRegistry, default_registry
from tts_switchboard.errors import UnknownEngine
from tts_switchboard.types import Engine, EngineType

logger = logging.getLogger(__name__)


# Credential field -> environment variable, per engine.
# Engines missing here need no credentials.
ENV_VAR_MAPPING: Mapping[Engine, Mapping[str, str]] = MappingProxyType({
    Engine.AZURE: {
        "subscription_key": "MICROSOFT_TOKEN",
        "region": "MICROSOFT_REGION",
    },
    Engine.ELEVENLABS: {
        "api_key": "ELEVENLABS_API_KEY",
    },
    Engine.GOOGLE: {
        "key_filename": "GOOGLE_SA_PATH",
    },
    Engine.OPENAI: {
        "api_key": "OPENAI_API_KEY",
    },
    Engine.PLAYHT: {
        "api_key": "PLAYHT_API_KEY",
        "user_id": "PLAYHT_USER_ID",
    },
    Engine.POLLY: {
        "access_key_id": "POLLY_AWS_KEY_ID",
        "secret_access_key": "POLLY_AWS_ACCESS_KEY",
        "region": "POLLY_REGION",
    },
    Engine.WATSON: {
        "api_key": "WATSON_API_KEY",
        "url": "WATSON_URL",
        "region": "WATSON_REGION",
        "instance_id": "WATSON_INSTANCE_ID",
    },
    Engine.WITAI: {
        "token": "WITAI_TOKEN",
    },
})


@dataclass
class EngineCredentials:
    """Enablement flag plus secret fields for one engine."""
    enabled: bool = False
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def has_credentials(self) -> bool:
        """Every field present and non-blank."""
        return bool(self.fields) and all(
            value is not None and str(value).strip() for value in self.fields.values()
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.fields.get(name, default)

    def __repr__(self) -> str:
        """Hide values in repr."""
        return f"EngineCredentials(enabled={self.enabled}, fields={sorted(self.fields)})"


class CredentialStore:
    """Thread-safe mapping Engine -> EngineCredentials.

    An engine counts as enabled when its flag is set and, if the registry
    says it needs credentials, all of them are present.
    """

    def __init__(
        self,
        credentials: Mapping[Engine | str, EngineCredentials] | None = None,
        registry: EngineRegistry | None = None,
    ):
        self.registry = registry if registry is not None else default_registry
        self._lock = threading.Lock()
        self._credentials: dict[Engine, EngineCredentials] = {}
        for engine, creds in (credentials or {}).items():
            self._credentials[self._engine(engine)] = creds

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        registry: EngineRegistry | None = None,
    ) -> "CredentialStore":
        """Load credentials from environment variables.

        Engines that need no credentials are enabled outright. Credentialed
        engines are enabled when every one of their variables is set.
        """
        environ = os.environ if environ is None else environ
        registry = registry if registry is not None else default_registry
        credentials: dict[Engine | str, EngineCredentials] = {}

        for engine in registry:
            mapping = ENV_VAR_MAPPING.get(engine)
            if not mapping:
                credentials[engine] = EngineCredentials(enabled=True)
                continue

            fields = {
                name: environ[var]
                for name, var in mapping.items()
                if environ.get(var, "").strip()
            }
            complete = len(fields) == len(mapping)
            if fields and not complete:
                missing = [var for name, var in mapping.items() if name not in fields]
                logger.info(f"{engine.value}: missing {', '.join(missing)}, leaving disabled")
            credentials[engine] = EngineCredentials(enabled=complete, fields=fields)

        return cls(credentials, registry=registry)

    def _engine(self, engine: Engine | str) -> Engine:
        parsed = Engine.parse(engine)
        if parsed is None:
            raise UnknownEngine(str(engine))
        return parsed

    def get(self, engine: Engine | str) -> EngineCredentials:
        """Credentials for an engine; an empty disabled entry if none."""
        parsed = Engine.parse(engine)
        with self._lock:
            creds = self._credentials.get(parsed) if parsed else None
        return creds or EngineCredentials()

    def is_enabled(self, engine: Engine | str) -> bool:
        config = self.registry.get(engine)
        if not config.known:
            return False
        creds = self.get(engine)
        if not creds.enabled:
            return False
        return not config.requires_credentials or creds.has_credentials

    def enabled_engines(self) -> list[Engine]:
        """Enabled engines in registry order."""
        return [engine for engine in self.registry if self.is_enabled(engine)]

    def server_pool(self) -> list[Engine]:
        """Enabled engines that can run server-side."""
        return self._pool({EngineType.SERVER, EngineType.HYBRID})

    def browser_pool(self) -> list[Engine]:
        """Enabled engines that can run in-process."""
        return self._pool({EngineType.BROWSER, EngineType.HYBRID})

    def _pool(self, types: set[EngineType]) -> list[Engine]:
        return [e for e in self.enabled_engines() if self.registry.get(e).type in types]

    def enable(self, engine: Engine | str) -> None:
        key = self._engine(engine)
        with self._lock:
            self._credentials.setdefault(key, EngineCredentials()).enabled = True

    def disable(self, engine: Engine | str) -> None:
        key = self._engine(engine)
        with self._lock:
            if key in self._credentials:
                self._credentials[key].enabled = False

    def set_credentials(
        self,
        engine: Engine | str,
        enabled: bool = True,
        **fields: str,
    ) -> EngineCredentials:
        """Replace an engine's secrets."""
        key = self._engine(engine)
        creds = EngineCredentials(enabled=enabled, fields=dict(fields))
        with self._lock:
            self._credentials[key] = creds
        return creds

    def restrict_to(self, engines: Iterable[Engine | str]) -> None:
        """Disable everything not listed."""
        keep = {self._engine(e) for e in engines}
        for engine in self.registry:
            if engine not in keep:
                self.disable(engine)
