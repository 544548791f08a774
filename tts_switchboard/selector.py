"""
Engine Selection - Pick one engine from a compatible set.

The tie-break is a static, hand-curated preference table keyed by mode.
Walk the mode's list, return the first engine present; if none of the
preferred engines are present, return the first candidate in input order.
Selection only comes back empty when there are no candidates at all.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from tts_switchboard.types import Engine, Mode


PREFERENCE_ORDER: Mapping[Mode, tuple[Engine, ...]] = MappingProxyType({
    # Cloud quality first, then local engines
    Mode.SERVER: (
        Engine.AZURE,
        Engine.GOOGLE,
        Engine.ELEVENLABS,
        Engine.OPENAI,
        Engine.POLLY,
        Engine.SHERPAONNX,
        Engine.ESPEAK,
    ),
    # Neural before formant, mock last
    Mode.BROWSER: (
        Engine.SHERPAONNX_WASM,
        Engine.ESPEAK_WASM,
        Engine.MOCK,
    ),
    Mode.HYBRID: (
        Engine.SHERPAONNX,
        Engine.ESPEAK,
        Engine.SHERPAONNX_WASM,
        Engine.ESPEAK_WASM,
    ),
    Mode.AUTO: (
        Engine.AZURE,
        Engine.GOOGLE,
        Engine.SHERPAONNX,
        Engine.ELEVENLABS,
        Engine.SHERPAONNX_WASM,
        Engine.ESPEAK_WASM,
    ),
})


class EngineSelector:
    """Deterministic best-engine choice.

    Example:
        selector = EngineSelector()
        selector.select_best(Mode.BROWSER, ["mock", "espeak-wasm"])
        # Engine.ESPEAK_WASM
    """

    def __init__(self, preferences: Mapping[Mode, Iterable[Engine]] = PREFERENCE_ORDER):
        self._preferences = MappingProxyType({
            Mode.parse(mode): tuple(engines) for mode, engines in preferences.items()
        })

    def preference_order(self, mode: Mode | str) -> tuple[Engine, ...]:
        return self._preferences.get(Mode.parse(mode), ())

    def select_best(
        self,
        mode: Mode | str,
        compatible_engines: Iterable[Engine | str],
    ) -> Engine | str | None:
        candidates = list(dict.fromkeys(compatible_engines))
        if not candidates:
            return None

        # Returned values are the caller's own objects so membership checks
        # against the input hold for plain strings too
        parsed = {}
        for candidate in candidates:
            parsed.setdefault(Engine.parse(candidate), candidate)

        for engine in self.preference_order(mode):
            if engine in parsed:
                return parsed[engine]

        # Unranked: first in input order
        return candidates[0]


def select_best(mode: Mode | str, compatible_engines: Iterable[Engine | str]) -> Engine | str | None:
    """Module-level shortcut using the default preference table."""
    return _default_selector.select_best(mode, compatible_engines)


_default_selector = EngineSelector()
