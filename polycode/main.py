"""
Polycode - main entry point.

    polycode serve                          # run the backend
    polycode convert app.py --to Go         # translate a file via the backend
    polycode explain app.go                 # explain a file
    polycode detect snippet.txt             # guess a file's language
    polycode history [--clear]              # list or clear past conversions
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from polycode.config import Settings, get_settings
from polycode.core.detection import classify, classify_by_extension
from polycode.core.events import EventBus
from polycode.core.languages import get_language_by_label
from polycode.services.backend import BackendClient
from polycode.services.history import HistoryCache
from polycode.services.orchestrator import ConversionOrchestrator
from polycode.services.theme import ThemeStore
from polycode.services.workspace import Workspace
from polycode.storage.local import create_local_storage

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="polycode", description="Translate code between programming languages.")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("serve", help="Run the backend API.")
    s.add_argument("--host", default=None, help="Bind address (default: API_HOST).")
    s.add_argument("--port", type=int, default=None, help="Port (default: API_PORT).")
    s.add_argument("--reload", action="store_true", help="Reload on code changes.")

    c = sub.add_parser("convert", help="Translate a source file.")
    c.add_argument("file", help="Path to the source file")
    c.add_argument("--to", dest="target", required=True, help="Target language, e.g. Go")
    c.add_argument("--from", dest="source", default=None, help="Source language (default: detect)")
    c.add_argument("--out", default=None, help="Directory to write converted_code.<ext> into")

    e = sub.add_parser("explain", help="Explain a source file in plain English.")
    e.add_argument("file", help="Path to the source file")
    e.add_argument("--language", default=None, help="Language of the file (default: detect)")

    d = sub.add_parser("detect", help="Guess the language of a source file.")
    d.add_argument("file", help="Path to the source file")

    h = sub.add_parser("history", help="List past conversions.")
    h.add_argument("--clear", action="store_true", help="Delete the history.")

    return p


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_workspace(settings: Settings) -> Workspace:
    storage = create_local_storage(settings.data_dir)
    bus = EventBus()
    history = HistoryCache(storage, bus)
    orchestrator = ConversionOrchestrator(BackendClient(settings.backend_url), history, bus)
    return Workspace(
        orchestrator,
        theme=ThemeStore(storage, bus),
        detect_delay=settings.detect_delay_seconds,
    )


# =============================================================================
# Commands
# =============================================================================


def serve(args: argparse.Namespace, settings: Settings) -> int:
    if not settings.has_api_key:
        logger.error("CEREBRAS_API_KEY is not set in environment or .env file")
        return 1

    import uvicorn

    uvicorn.run(
        "polycode.api.app:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
    )
    return 0


async def convert(args: argparse.Namespace, settings: Settings) -> int:
    path = Path(args.file)
    text = _read_source(path)
    if text is None:
        return 1

    workspace = build_workspace(settings)
    await workspace.startup()
    await workspace.upload(path.name, text)
    if args.source:
        workspace.select_source_language(_label(args.source))
    elif workspace.source_language == "Auto":
        detected = classify(workspace.source_code)
        if detected is not None:
            workspace.select_source_language(detected.value)
    workspace.select_target_language(_label(args.target))

    try:
        result = await workspace.convert()
    finally:
        await workspace.orchestrator.assistant.aclose()

    if not result.ok:
        print(result.message, file=sys.stderr)
        return 1

    if args.out:
        exported = await workspace.export_output()
        if exported is not None:
            name, contents = exported
            out_path = Path(args.out) / name
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(contents + "\n", encoding="utf-8")
            print(f"Wrote {out_path}", file=sys.stderr)
            return 0

    print(workspace.output)
    return 0


async def explain(args: argparse.Namespace, settings: Settings) -> int:
    path = Path(args.file)
    code = _read_source(path)
    if code is None:
        return 1

    language = args.language
    if language is None:
        detected = classify_by_extension(path.name) or classify(code)
        language = detected.value if detected else None

    workspace = build_workspace(settings)
    try:
        result = await workspace.orchestrator.explain(code, language)
    finally:
        await workspace.orchestrator.assistant.aclose()

    if not result.ok:
        print(result.message, file=sys.stderr)
        return 1

    print(result.explanation)
    return 0


def detect(args: argparse.Namespace) -> int:
    path = Path(args.file)
    code = _read_source(path)
    if code is None:
        return 1

    label = classify_by_extension(path.name) or classify(code)
    if label is None:
        print("unknown")
        return 1
    print(label.value)
    return 0


async def history(args: argparse.Namespace, settings: Settings) -> int:
    workspace = build_workspace(settings)
    await workspace.startup()

    if args.clear:
        await workspace.clear_history()
        print("History cleared")
        return 0

    entries = workspace.history_entries()
    if not entries:
        print("No history yet")
        return 0

    for entry in entries:
        print(f"[{entry.index}] {entry.languages}  ({entry.age})  {entry.preview}")
    return 0


def _read_source(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Cannot read {path}: {e.strerror}", file=sys.stderr)
    except UnicodeDecodeError:
        print(f"Cannot read {path}: not UTF-8 text", file=sys.stderr)
    return None


def _label(value: str) -> str:
    label = get_language_by_label(value)
    return label.value if label else value


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    if args.cmd == "serve":
        return serve(args, settings)
    if args.cmd == "convert":
        return asyncio.run(convert(args, settings))
    if args.cmd == "explain":
        return asyncio.run(explain(args, settings))
    if args.cmd == "detect":
        return detect(args)
    if args.cmd == "history":
        return asyncio.run(history(args, settings))
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
