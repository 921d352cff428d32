from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Tuple

from lsprotocol import types

from .completions import completion_list_for_position
from .config import CONFIG_FILENAME, load_config
from .loader import CatalogLoader
from .server import create_server
from .tracing import logging_sink

log = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vectric-ls", description="Vectric Lua gadget language server")
    server = parser.add_argument_group("server")
    server.add_argument("--tcp", action="store_true", help="Listen on TCP instead of stdio")
    server.add_argument("--host", default="127.0.0.1", help="TCP host (with --tcp)")
    server.add_argument("--port", type=int, default=2087, help="TCP port (with --tcp)")
    server.add_argument("--stdio", action="store_true", help="Use stdio (the default; accepted for editor clients)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    query = parser.add_argument_group("one-shot completion")
    query.add_argument("--complete", metavar="FILE", type=Path, help="Print completions for a position in FILE and exit")
    query.add_argument("--line", type=int, default=1, help="1-based line (default: 1)")
    query.add_argument("--character", type=int, default=None, help="1-based column (default: end of line)")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    if args.complete is not None:
        if args.tcp:
            parser.error("--complete cannot be combined with --tcp")
        sys.exit(_run_completion(args.complete, args.line, args.character))

    server = create_server()
    if args.tcp:
        log.info("Starting vectric-ls on %s:%d", args.host, args.port)
        server.start_tcp(args.host, args.port)
    else:
        server.start_io()


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=numeric if isinstance(numeric, int) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _run_completion(path: Path, line: int, character: int | None) -> int:
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    workspace_root = _discover_workspace_root(path)
    log.info("Completing in %s (workspace root: %s)", path, workspace_root)

    config, warnings = load_config(workspace_root)
    for warning in warnings:
        log.warning(warning)
    catalog = CatalogLoader(config).load()

    source = path.read_text()
    line_idx, char_idx = _cursor_position(source, line, character)
    sink = logging_sink(logging.INFO if config.inference.trace else logging.DEBUG)
    result = completion_list_for_position(
        source, line_idx, char_idx, catalog, window=config.inference.window_lines, sink=sink
    )
    _print_completions(f"{path}:{line_idx + 1}:{char_idx + 1}", result.items)
    return 0 if result.items else 1


def _cursor_position(source: str, line: int, character: int | None) -> Tuple[int, int]:
    """Convert 1-based CLI coordinates to a 0-based LSP position."""
    lines = source.splitlines()
    line_idx = max(line - 1, 0)
    if character is not None:
        return line_idx, max(character - 1, 0)
    return line_idx, len(lines[line_idx]) if line_idx < len(lines) else 0


def _discover_workspace_root(target: Path) -> Path:
    start = target if target.is_dir() else target.parent
    return next((folder for folder in (start, *start.parents) if (folder / CONFIG_FILENAME).is_file()), start)


def _print_completions(location: str, items: Iterable[types.CompletionItem]) -> None:
    ranked = list(items)
    if not ranked:
        print(f"{location}: no completions")
        return

    for item in ranked:
        marker = "*" if item.preselect else " "
        detail = f"  {item.detail}" if item.detail else ""
        print(f"{marker} {item.label} [{_kind_label(item.kind)}]{detail}")


def _kind_label(kind: types.CompletionItemKind | None) -> str:
    if kind is None:
        return "text"
    return types.CompletionItemKind(kind).name.lower()


if __name__ == "__main__":
    main()
