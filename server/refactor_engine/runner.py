"""
CLI runner for the refactoring engine.

This module provides the command line entry point for listing refactors at a
position, applying an action, listing diagnostics and running code fixes.
"""

import argparse
import difflib
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .config import EngineConfig, find_config_file, load_config
from .errors import RefactorError
from .registry import get_adapter_for_file, load_default_adapters
from .service import RefactorService

logger = logging.getLogger(__name__)


def read_source(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def write_source(path: str, text: str) -> None:
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(text)


def parse_position(file_path: str, text: str, position: str) -> int:
    """
    Convert a ``--position`` argument to a byte offset.

    Accepts a 0-based byte offset (``120``) or a 1-based ``LINE:COL`` pair
    (``7:15``).
    """
    if ":" not in position:
        return int(position)
    line, col = position.split(":", 1)
    load_default_adapters()
    adapter = get_adapter_for_file(file_path)
    if adapter is None:
        raise ValueError(f"Cannot resolve LINE:COL for unsupported file '{file_path}'")
    return adapter.line_col_to_byte(text, int(line), int(col))


def unified_diff(file_path: str, before: str, after: str) -> str:
    lines = difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
    )
    return "".join(lines)


def configure_logging(config: EngineConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, str(config.log_level).upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


# === Commands ===

def cmd_list(service: RefactorService, args) -> int:
    text = read_source(args.file)
    position = parse_position(args.file, text, args.position)
    infos = service.get_available_refactors(args.file, text, position)
    _print_json({
        "file": args.file,
        "position": position,
        "refactors": [asdict(info) for info in infos],
    })
    return 0


def cmd_apply(service: RefactorService, args) -> int:
    text = read_source(args.file)
    position = parse_position(args.file, text, args.position)
    _result, new_text = service.apply_refactor(args.file, text, position, args.refactor, args.action)
    return _emit(args, text, new_text)


def cmd_diagnostics(service: RefactorService, args) -> int:
    text = read_source(args.file)
    context = service.create_context(args.file, text)
    output: List[Dict[str, Any]] = []
    for diagnostic in context.checker.get_diagnostics():
        line, col = context.adapter.byte_to_linecol(text, diagnostic.start_byte)
        entry = asdict(diagnostic)
        entry["line"] = line
        entry["column"] = col
        output.append(entry)
    _print_json(output)
    return 0


def cmd_fix(service: RefactorService, args) -> int:
    text = read_source(args.file)
    if args.fix_id:
        _combined, new_text = service.fix_all(args.file, text, args.fix_id)
        applied = [args.fix_id] if new_text != text else []
    else:
        applied, new_text = service.fix_everything(args.file, text)
    print(f"Applied fixes: {', '.join(applied) if applied else 'none'}", file=sys.stderr)
    return _emit(args, text, new_text)


def _emit(args, before: str, after: str) -> int:
    if args.write:
        if after != before:
            write_source(args.file, after)
            print(f"Wrote {args.file}", file=sys.stderr)
    elif args.diff:
        sys.stdout.write(unified_diff(args.file, before, after))
    else:
        sys.stdout.write(after)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tree-sitter refactoring engine for JavaScript and TypeScript",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m refactor_engine.runner list src/app.ts --position 12:9
  python -m refactor_engine.runner apply src/app.ts --position 12:9 --refactor "Inline local" --action "Inline all" --diff
  python -m refactor_engine.runner diagnostics src/app.ts
  python -m refactor_engine.runner fix src/app.ts --fix-id fixSpelling --write
        """
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file (default: nearest .refactor.yml above the file)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List refactors available at a position")
    list_parser.add_argument("file", help="Source file")
    list_parser.add_argument("--position", "-p", required=True, help="Byte offset or LINE:COL (1-based)")

    apply_parser = subparsers.add_parser("apply", help="Apply a refactor action at a position")
    apply_parser.add_argument("file", help="Source file")
    apply_parser.add_argument("--position", "-p", required=True, help="Byte offset or LINE:COL (1-based)")
    apply_parser.add_argument("--refactor", "-r", required=True, help="Refactor name, e.g. 'Inline local'")
    apply_parser.add_argument("--action", "-a", required=True, help="Action name, e.g. 'Inline all'")

    diagnostics_parser = subparsers.add_parser("diagnostics", help="List checker diagnostics")
    diagnostics_parser.add_argument("file", help="Source file")

    fix_parser = subparsers.add_parser("fix", help="Apply code fixes to every matching diagnostic")
    fix_parser.add_argument("file", help="Source file")
    fix_parser.add_argument("--fix-id", help="Run only this fix (default: every enabled fix)")

    for sub in (apply_parser, fix_parser):
        output = sub.add_mutually_exclusive_group()
        output.add_argument("--write", "-w", action="store_true", help="Write the result back to the file")
        output.add_argument("--diff", action="store_true", help="Print a unified diff instead of the new text")

    return parser


COMMANDS = {
    "list": cmd_list,
    "apply": cmd_apply,
    "diagnostics": cmd_diagnostics,
    "fix": cmd_fix,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config_path = args.config or find_config_file(args.file)
    config = load_config(config_path)
    configure_logging(config, args.verbose)

    if args.verbose:
        print(f"Using config: {config_path or 'defaults'}", file=sys.stderr)

    service = RefactorService(config)
    logger.debug(f"Running '{args.command}' on {args.file}")
    try:
        return COMMANDS[args.command](service, args)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except (RefactorError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
