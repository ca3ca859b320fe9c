# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""tubefilter CLI: compile, filter, rules commands.

Usage:
    python -m tubefilter.cli compile CONFIG [-o OUT]
    python -m tubefilter.cli filter CONFIG DOCUMENT [--rules TABLE] [--compiled] [-o OUT]
    python -m tubefilter.cli rules [--table TABLE]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .config import CompiledConfig, compile_all, load_raw_config
from .engine import ObjectFilter
from .errors import ConfigError, TubeFilterError
from .logging_config import configure_from_env
from .rules import RULE_TABLES, get_rule_table

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Any:
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"{p} is not valid JSON: {e}") from e


def _write_json(data: Any, output: str | None) -> None:
    """Write to ``output`` (parents created) or stdout."""
    text = json.dumps(data, ensure_ascii=False, indent=2)
    if not output:
        print(text)
        return
    p = Path(output)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text + "\n", encoding="utf-8")
    logger.info("Wrote %s", p)


def _load_config(path: str, compiled: bool) -> CompiledConfig:
    if compiled:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: compiled config must be a JSON object")
        return CompiledConfig.from_dict(data)
    return compile_all(load_raw_config(path))


def cmd_compile(args: argparse.Namespace) -> None:
    """Compile raw settings into the transport form."""
    config = compile_all(load_raw_config(args.config))
    _write_json(config.to_dict(), args.output)


def cmd_filter(args: argparse.Namespace) -> None:
    """Filter a JSON document with the given settings."""
    config = _load_config(args.config, args.compiled)
    document = _read_json(args.document)

    result = ObjectFilter(config, get_rule_table(args.rules)).filter(document)
    if result.nothing_to_filter:
        logger.info("Nothing to filter: config has no active rules")
    else:
        logger.info(
            "Removed %d item(s), pruned %d container(s): %s",
            result.removed,
            result.pruned,
            result.removal_reasons,
        )
    _write_json(result.document, args.output)


def cmd_rules(args: argparse.Namespace) -> None:
    """List node types of one rule table."""
    table = get_rule_table(args.table)
    for node_type, rule in table.items():
        categories = ",".join(sorted(rule.categories))
        print(f"{node_type}\t{categories}" if categories else node_type)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="tubefilter CLI",
        prog="tubefilter",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--log-json", action="store_true", default=None, help="Emit JSON log lines on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_compile = subparsers.add_parser("compile", help="Compile raw settings (YAML/JSON) to transport JSON")
    p_compile.add_argument("config", metavar="CONFIG", help="Raw settings file")
    p_compile.add_argument("-o", "--output", type=str, metavar="PATH", help="Output file (default: stdout)")

    _filter_epilog = """\
examples:
  %(prog)s settings.yaml page.json                   Filter with raw settings
  %(prog)s compiled.json page.json --compiled        Reuse a compiled config
  %(prog)s settings.yaml next.json --rules merged    Watch page with comments
"""
    p_filter = subparsers.add_parser(
        "filter",
        help="Filter a JSON document",
        epilog=_filter_epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_filter.add_argument("config", metavar="CONFIG", help="Settings file")
    p_filter.add_argument("document", metavar="DOCUMENT", help="JSON document to filter")
    p_filter.add_argument("--rules", choices=list(RULE_TABLES), default="main", help="Rule table (default: main)")
    p_filter.add_argument("--compiled", action="store_true", help="CONFIG is output of the compile command")
    p_filter.add_argument("-o", "--output", type=str, metavar="PATH", help="Output file (default: stdout)")

    p_rules = subparsers.add_parser("rules", help="List node types a rule table handles")
    p_rules.add_argument("--table", choices=list(RULE_TABLES), default="main", help="Rule table (default: main)")

    commands = {"compile": cmd_compile, "filter": cmd_filter, "rules": cmd_rules}

    args = parser.parse_args(argv)

    configure_from_env(json_output=args.log_json, level="DEBUG" if args.verbose else None)

    try:
        commands[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except TubeFilterError as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
