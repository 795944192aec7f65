"""CLI for snipmate - live Python snippets kept in a markdown document."""

import argparse
import asyncio
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .example import create_example_document
from .runtime import build_runtime
from .watch import watch_document


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _version_string() -> str:
    return (
        f"snipmate {__version__} "
        f"(python {platform.python_version()}, platform {platform.platform()})"
    )


def cmd_load(args: argparse.Namespace, rt: Any) -> int:
    """Run one reload cycle of the snippet document."""
    report = asyncio.run(rt.coordinator.reload())

    if args.json:
        print(json.dumps({
            "document": report.document_path,
            "status": report.status,
            "blocks": report.blocks,
            "names": sorted(k for k in rt.registry if k != "config"),
            "errors": [
                {"index": d.index, "type": d.error_type, "message": d.message}
                for d in report.diagnostics
            ],
        }, indent=2))
    elif not args.quiet:
        if report.status == "missing":
            print(f"{report.document_path} not found, nothing loaded")
        elif report.status == "ok":
            print(f"Loaded {report.blocks} snippet(s) from {report.document_path}")
            names = sorted(k for k in rt.registry if k != "config")
            if names:
                print(f"Defined: {', '.join(names)}")
        for d in report.diagnostics:
            print(f"#{d.index}: {d.error_type}: {d.message}", file=sys.stderr)

    return 1 if report.failed else 0


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Reload snippets whenever the snippet document changes."""
    debounce_ms = args.debounce_ms
    if debounce_ms is None:
        debounce_ms = rt.config.watch.debounce_ms
    return watch_document(rt, debounce_ms=debounce_ms, quiet=args.quiet, json_output=args.json)


def cmd_render(args: argparse.Namespace, rt: Any) -> int:
    """Render and evaluate the snipmate blocks of any markdown file."""
    path: Path = args.file
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 1

    html, blocks = rt.renderer.render_document(path.read_text(encoding="utf-8"))

    if args.json:
        print(json.dumps([
            {"ok": b.result.ok, "message": b.result.message, "html": b.html}
            for b in blocks
        ], indent=2))
    else:
        print(html)

    return 0 if all(b.result.ok for b in blocks) else 1


def cmd_init(args: argparse.Namespace, rt: Any) -> int:
    """Create the example snippet document."""
    created, message = asyncio.run(
        create_example_document(rt.store, rt.settings.document_path())
    )
    if not args.quiet or not created:
        print(message, file=sys.stdout if created else sys.stderr)
    return 0 if created else 1


def cmd_settings_show(args: argparse.Namespace, rt: Any) -> int:
    """Show the effective settings."""
    data = rt.settings.settings.to_dict()
    data["effective_document_path"] = rt.settings.document_path()
    if args.json:
        print(json.dumps(data, indent=2))
    else:
        for key, value in data.items():
            print(f"{key}: {value}")
    return 0


def cmd_settings_set_path(args: argparse.Namespace, rt: Any) -> int:
    """Persist a new snippet document path and load from it."""

    async def apply() -> Any:
        await rt.settings.set_document_path(args.path)
        return await rt.coordinator.reload()

    report = asyncio.run(apply())
    if not args.quiet:
        print(f"document_path: {rt.settings.document_path()}")
        if report.status == "missing":
            print(f"{report.document_path} not found, nothing loaded")
    return 1 if report.failed else 0


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="snipmate", description="SnipMate CLI"
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/snipmate.toml, vault/snipmate.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: from config, WARNING)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # load command
    subparsers.add_parser("load", help="Evaluate the snippet document once")

    # watch command
    parser_watch = subparsers.add_parser(
        "watch", help="Reload snippets when the snippet document changes"
    )
    parser_watch.add_argument(
        "--debounce-ms", dest="debounce_ms", type=int, default=None,
        help="Debounce window in milliseconds (default: from config, 150)"
    )

    # render command
    parser_render = subparsers.add_parser(
        "render", help="Render and evaluate snipmate blocks of a markdown file"
    )
    parser_render.add_argument("file", type=Path, help="Markdown file")

    # init command
    subparsers.add_parser("init", help="Create an example snippet document")

    # settings command
    parser_settings = subparsers.add_parser("settings", help="Show or change settings")
    settings_sub = parser_settings.add_subparsers(dest="settings_cmd", required=True)
    settings_sub.add_parser("show", help="Show effective settings")
    parser_set_path = settings_sub.add_parser(
        "set-path", help="Set the snippet document path (vault-relative)"
    )
    parser_set_path.add_argument("path", help="Document path; empty for the default")

    args = parser.parse_args(argv)

    try:
        rt = build_runtime(vault_path=args.vault, config_path=args.config)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _setup_logging(args.log_level or rt.config.log.level)

    handlers = {
        "load": cmd_load,
        "watch": cmd_watch,
        "render": cmd_render,
        "init": cmd_init,
    }

    if args.cmd == "settings":
        settings_handlers = {
            "show": cmd_settings_show,
            "set-path": cmd_settings_set_path,
        }
        handler = settings_handlers.get(args.settings_cmd)
    else:
        handler = handlers.get(args.cmd)

    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
