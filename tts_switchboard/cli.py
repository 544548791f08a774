"""
CLI - Command-line interface.

Thin wrapper over the Switchboard facade.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from tts_switchboard.api import Switchboard
from tts_switchboard.config import RouterConfig
from tts_switchboard.errors import SwitchboardError
from tts_switchboard.monitoring.logging import configure_logging
from tts_switchboard.types import Engine, Mode, SynthesisOptions, Voice

MODES = [m.value for m in Mode]


def main(args: list[str] | None = None, switchboard: Switchboard | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="tts-switchboard",
        description="Route text-to-speech between server and in-process engines",
    )
    parser.add_argument("--base-url", help="Remote endpoint prefix (default: from environment)")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Routing event log level (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # engines command
    engines_parser = subparsers.add_parser("engines", help="List engines and their status")
    engines_parser.add_argument("-m", "--mode", choices=MODES, help="Mode to check compatibility for")

    # mode command
    mode_parser = subparsers.add_parser("mode", help="Show how a mode resolves here")
    mode_parser.add_argument("mode", nargs="?", choices=MODES, help="Requested mode (default: configured)")

    # voices command
    voices_parser = subparsers.add_parser("voices", help="List voices of an engine")
    voices_parser.add_argument("engine", nargs="?", help="Engine name (default: all enabled)")
    voices_parser.add_argument("-m", "--mode", choices=MODES, help="Requested mode")

    # speak command
    speak_parser = subparsers.add_parser("speak", help="Synthesize text to an audio file")
    speak_parser.add_argument("text", help="Text to speak")
    speak_parser.add_argument("-e", "--engine", help="Engine (default: best for the mode)")
    speak_parser.add_argument("-v", "--voice", help="Voice ID (default: engine's first voice)")
    speak_parser.add_argument("-m", "--mode", choices=MODES, help="Requested mode")
    speak_parser.add_argument("-r", "--rate", type=float, help="Speaking rate multiplier")
    speak_parser.add_argument("-p", "--pitch", type=float, help="Pitch multiplier")
    speak_parser.add_argument("--volume", type=float, help="Volume multiplier")
    speak_parser.add_argument("-f", "--format", default="wav", help="Audio format (default: wav)")
    speak_parser.add_argument("-o", "--output", help="Output filename (default: output.<format>)")

    # version command
    subparsers.add_parser("version", help="Show version")

    parsed = parser.parse_args(args)

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.command == "version":
        from tts_switchboard import __version__
        print(f"tts-switchboard {__version__}")
        return 0

    configure_logging(level=parsed.log_level, json_format=False)

    if switchboard is None:
        overrides = {"base_url": parsed.base_url} if parsed.base_url else {}
        switchboard = Switchboard(config=RouterConfig.from_env(**overrides))

    try:
        if parsed.command == "engines":
            return _cmd_engines(switchboard, parsed)
        if parsed.command == "mode":
            return _cmd_mode(switchboard, parsed)
        if parsed.command == "voices":
            return asyncio.run(_cmd_voices(switchboard, parsed))
        if parsed.command == "speak":
            return asyncio.run(_cmd_speak(switchboard, parsed))
    except SwitchboardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        switchboard.close()

    return 1


def _cmd_engines(board: Switchboard, args: argparse.Namespace) -> int:
    """List engines with type, enablement and compatibility."""
    enabled = set(board.credentials.enabled_engines())
    compatible = set(board.compatible_engines(args.mode))
    effective = board.resolve_effective_mode(args.mode)

    print(f"Engines (mode: {effective.value}):")
    print()
    for engine in board.registry:
        config = board.registry.get(engine)
        flags = []
        if engine in enabled:
            flags.append("enabled")
        if engine in compatible:
            flags.append("compatible")
        if config.supports_offline:
            flags.append("offline")
        print(f"  {engine.value:16} {config.type.value:8} {', '.join(flags) or '-'}")

    best = board.best_engine(args.mode)
    print()
    print(f"Best engine: {best.value if best else 'none'}")
    return 0


def _cmd_mode(board: Switchboard, args: argparse.Namespace) -> int:
    """Show requested vs effective mode."""
    requested = Mode.parse(args.mode, default=board.config.default_mode)
    effective = board.resolve_effective_mode(requested)
    info = board.mode_info(effective)

    print(f"Environment: {board.resolver.current_environment().value}")
    print(f"Requested:   {requested.value}")
    print(f"Effective:   {effective.value}")
    print(f"             {info.description}")
    print(f"Offline:     {'yes' if board.is_offline_available() else 'no'}")
    return 0


async def _cmd_voices(board: Switchboard, args: argparse.Namespace) -> int:
    """List voices of one engine or every enabled engine."""
    if args.engine:
        voices = await board.list_voices(args.engine, args.mode)
    else:
        voices = await board.list_all_voices(args.mode)

    if not voices:
        print("No voices available.")
        return 0

    print("Available voices:")
    print()
    for voice in voices:
        languages = ", ".join(lc.code for lc in voice.language_codes) or "-"
        gender = voice.gender or "-"
        print(f"  {voice.engine:16} {voice.id:28} {voice.name} ({languages}, {gender})")
    return 0


async def _cmd_speak(board: Switchboard, args: argparse.Namespace) -> int:
    """Synthesize to a file."""
    engine = Engine.parse(args.engine) if args.engine else board.best_engine(args.mode)
    if engine is None:
        print("Error: no usable engine", file=sys.stderr)
        return 1

    if args.voice:
        voice = Voice(id=args.voice, name=args.voice, engine=engine.value)
    else:
        voices = await board.list_voices(engine, args.mode)
        if not voices:
            print(f"Error: {engine.value} has no voices", file=sys.stderr)
            return 1
        voice = voices[0]

    options = SynthesisOptions(
        rate=args.rate,
        pitch=args.pitch,
        volume=args.volume,
        format=args.format,
    )
    result = await board.synthesize(args.text, voice, options, args.mode)

    output = Path(args.output or f"output.{result.format}")
    output.write_bytes(result.audio)

    print(f"Audio saved to: {output}")
    print(f"Engine: {result.engine} ({result.path.value if result.path else '-'}, "
          f"{result.mode.value if result.mode else '-'} mode)")
    print(f"Voice: {voice.id}")
    if result.attempts > 1:
        print(f"Attempts: {result.attempts}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
