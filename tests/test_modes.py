"""Tests for mode resolution and engine compatibility."""

import io
import json

import pytest

from tts_switchboard.environment import StaticEnvironment
from tts_switchboard.modes import MODE_INFO, ModeResolver, mode_info, unique_engines
from tts_switchboard.monitoring import LogLevel, MetricsCollector, StructuredLogger
from tts_switchboard.engine.registry import default_registry
from tts_switchboard.types import Engine, Environment, Mode


def make_resolver(environment=Environment.SERVER, network=True, events=None, metrics=None):
    return ModeResolver(
        environment=StaticEnvironment(environment, network=network),
        events=events or StructuredLogger("test", level=LogLevel.CRITICAL),
        metrics=metrics,
    )


ALL_ENVIRONMENTS = [
    (Environment.SERVER, True),
    (Environment.BROWSER, True),
    (Environment.BROWSER, False),
]


class TestCompatibility:
    """Tests for is_compatible."""

    @pytest.mark.parametrize("environment,network", ALL_ENVIRONMENTS)
    def test_hybrid_and_auto_always_compatible(self, environment, network):
        resolver = make_resolver(environment, network)
        assert resolver.is_compatible(Mode.HYBRID)
        assert resolver.is_compatible(Mode.AUTO)

    def test_server_mode(self):
        assert make_resolver(Environment.SERVER).is_compatible(Mode.SERVER)
        assert make_resolver(Environment.BROWSER, network=True).is_compatible(Mode.SERVER)
        assert not make_resolver(Environment.BROWSER, network=False).is_compatible(Mode.SERVER)

    def test_browser_mode(self):
        assert make_resolver(Environment.BROWSER).is_compatible(Mode.BROWSER)
        assert not make_resolver(Environment.SERVER).is_compatible(Mode.BROWSER)

    def test_explicit_environment_argument(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.is_compatible("browser", Environment.BROWSER)


class TestResolveEffectiveMode:
    """Tests for resolve_effective_mode."""

    @pytest.mark.parametrize("mode", list(Mode))
    @pytest.mark.parametrize("environment,network", ALL_ENVIRONMENTS)
    def test_empty_engines_never_auto(self, mode, environment, network):
        resolver = make_resolver(environment, network)
        effective = resolver.resolve_effective_mode(mode, [])
        assert effective != Mode.AUTO
        assert effective == Mode.HYBRID
        assert resolver.compatible_engines(mode, []) == []

    def test_compatible_request_unchanged(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.resolve_effective_mode(Mode.HYBRID, ["azure"]) == Mode.HYBRID
        assert resolver.resolve_effective_mode(Mode.SERVER, ["sherpaonnx-wasm"]) == Mode.SERVER

    def test_server_in_browser_with_network_stays_server(self):
        resolver = make_resolver(Environment.BROWSER, network=True)
        assert resolver.is_compatible(Mode.SERVER, Environment.BROWSER)
        assert resolver.resolve_effective_mode(Mode.SERVER, ["azure"]) == Mode.SERVER

    def test_browser_in_server_falls_back_to_auto(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.resolve_effective_mode(Mode.BROWSER, ["azure"]) == Mode.SERVER
        assert resolver.resolve_effective_mode(Mode.BROWSER, ["espeak-wasm"]) == Mode.HYBRID

    def test_auto_in_browser(self):
        resolver = make_resolver(Environment.BROWSER)
        assert resolver.resolve_effective_mode(Mode.AUTO, ["azure", "sherpaonnx-wasm"]) == Mode.BROWSER
        assert resolver.resolve_effective_mode(Mode.AUTO, ["mock"]) == Mode.BROWSER
        assert resolver.resolve_effective_mode(Mode.AUTO, ["azure"]) == Mode.HYBRID

    def test_auto_in_server(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.resolve_effective_mode(Mode.AUTO, ["azure"]) == Mode.SERVER
        assert resolver.resolve_effective_mode(Mode.AUTO, ["mock"]) == Mode.SERVER
        assert resolver.resolve_effective_mode(Mode.AUTO, ["espeak-wasm"]) == Mode.HYBRID

    def test_auto_is_idempotent(self):
        resolver = make_resolver(Environment.BROWSER)
        engines = ["azure", "espeak-wasm", "mock"]
        first = resolver.resolve_effective_mode(Mode.AUTO, engines)
        assert resolver.resolve_effective_mode(Mode.AUTO, engines) == first
        assert resolver.resolve_effective_mode(first, engines) == first

    def test_unknown_engines_ignored(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.resolve_effective_mode(Mode.AUTO, ["bogus"]) == Mode.HYBRID

    def test_accepts_strings(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.resolve_effective_mode("auto", ["azure"]) == Mode.SERVER

    def test_fallback_logged_and_counted(self):
        output = io.StringIO()
        metrics = MetricsCollector()
        resolver = make_resolver(
            Environment.SERVER,
            events=StructuredLogger("test", output=output),
            metrics=metrics,
        )

        resolver.resolve_effective_mode(Mode.BROWSER, ["azure"])

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "mode_fallback"
        assert record["requested"] == "browser"
        assert record["effective"] == "server"
        assert metrics.mode_fallbacks.get(requested="browser", effective="server") == 1

    def test_compatible_request_not_logged(self):
        output = io.StringIO()
        resolver = make_resolver(Environment.SERVER, events=StructuredLogger("test", output=output))
        resolver.resolve_effective_mode(Mode.SERVER, ["azure"])
        assert output.getvalue() == ""


class TestCompatibleEngines:
    """Tests for compatible_engines."""

    def test_browser_scenario_excludes_server_engine(self):
        resolver = make_resolver(Environment.BROWSER, network=True)
        engines = ["azure", "sherpaonnx-wasm"]

        assert resolver.resolve_effective_mode(Mode.AUTO, engines) == Mode.BROWSER
        assert resolver.compatible_engines(Mode.AUTO, engines) == [Engine.SHERPAONNX_WASM]

    def test_server_mode_allows_server_and_hybrid(self):
        resolver = make_resolver(Environment.SERVER)
        engines = ["espeak-wasm", "azure", "mock", "sherpaonnx"]
        assert resolver.compatible_engines(Mode.SERVER, engines) == [
            Engine.AZURE, Engine.MOCK, Engine.SHERPAONNX,
        ]

    def test_hybrid_in_server_allows_everything(self):
        resolver = make_resolver(Environment.SERVER)
        engines = ["espeak-wasm", "azure", "mock"]
        assert resolver.compatible_engines(Mode.HYBRID, engines) == [
            Engine.ESPEAK_WASM, Engine.AZURE, Engine.MOCK,
        ]

    def test_hybrid_in_offline_browser_drops_server_engines(self):
        resolver = make_resolver(Environment.BROWSER, network=False)
        engines = ["azure", "espeak-wasm", "mock"]
        assert resolver.compatible_engines(Mode.HYBRID, engines) == [
            Engine.ESPEAK_WASM, Engine.MOCK,
        ]

    def test_order_preserved_and_duplicates_dropped(self):
        resolver = make_resolver(Environment.SERVER)
        engines = ["mock", "azure", Engine.MOCK, "azure"]
        assert resolver.compatible_engines(Mode.SERVER, engines) == [Engine.MOCK, Engine.AZURE]

    def test_unknown_engines_never_compatible(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.compatible_engines(Mode.HYBRID, ["bogus", "mock"]) == [Engine.MOCK]

    def test_can_execute(self):
        resolver = make_resolver(Environment.SERVER)
        assert not resolver.can_execute("azure", Mode.BROWSER, Environment.BROWSER)
        assert not resolver.can_execute("espeak-wasm", Mode.SERVER, Environment.SERVER)
        assert resolver.can_execute("espeak-wasm", Mode.SERVER, Environment.BROWSER)
        assert resolver.can_execute("mock", Mode.BROWSER, Environment.BROWSER)
        assert not resolver.can_execute("bogus", Mode.HYBRID, Environment.SERVER)


class TestHelpers:
    """Tests for offline helpers, best_engine and mode info."""

    def test_offline_engines(self):
        resolver = make_resolver()
        assert resolver.offline_engines(["azure", "espeak", "mock"]) == [Engine.ESPEAK, Engine.MOCK]
        assert resolver.is_offline_available(["mock"])
        assert not resolver.is_offline_available(["azure", "openai"])

    def test_best_engine(self):
        resolver = make_resolver(Environment.SERVER)
        assert resolver.best_engine(Mode.AUTO, ["espeak", "azure"]) == Engine.AZURE
        assert resolver.best_engine(Mode.SERVER, []) is None

    def test_best_engine_in_browser(self):
        resolver = make_resolver(Environment.BROWSER)
        engines = ["azure", "mock", "espeak-wasm"]
        assert resolver.best_engine(Mode.AUTO, engines) == Engine.ESPEAK_WASM

    def test_mode_info(self):
        assert set(MODE_INFO) == set(Mode)
        assert mode_info("browser").supports_offline
        assert not mode_info(Mode.SERVER).is_browser

    def test_unique_engines(self):
        assert unique_engines(["mock", "bogus", "mock"], default_registry) == [Engine.MOCK]
