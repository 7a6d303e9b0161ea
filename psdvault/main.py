"""CLI entrypoint for psdvault.

Usage:
    psdvault fix                     # generate previews/archives, drop redundant PSDs
    psdvault fix --ledger fix.jsonl  # also append every action to a JSONL ledger
    psdvault test                    # read-only audit (alias: audit)
    psdvault test --json --root art/

Exit codes:
    0 = Compliant / all actions succeeded
    1 = Violations found (test) or a file action failed (fix)
    2 = Error (bad config, unreadable tree)
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from psdvault.config import load_config
from psdvault.generator import ArtifactGenerator
from psdvault.ledger import ActionLedger
from psdvault.models import ComplianceError, ConfigError
from psdvault.output import format_result
from psdvault.walker import audit, reconcile

logger = logging.getLogger("psdvault")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"


def _configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def cmd_fix(args: argparse.Namespace) -> int:
    """Reconcile the tree in place."""
    root = Path(args.root)
    try:
        config = load_config(root, args.config)
    except ConfigError as e:
        print(json.dumps({"status": "FAIL", "error": str(e)}), file=sys.stderr)
        return 2

    ledger = ActionLedger(Path(args.ledger)) if args.ledger else None
    try:
        result = reconcile(root, config, ArtifactGenerator.default(config), ledger)
    except OSError as e:
        logger.error("Cannot read tree under %s: %s", root, e)
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0 if result.success else 1


def cmd_test(args: argparse.Namespace) -> int:
    """Audit the tree without touching it."""
    root = Path(args.root)
    try:
        config = load_config(root, args.config)
    except ConfigError as e:
        print(json.dumps({"status": "FAIL", "error": str(e)}), file=sys.stderr)
        return 2

    try:
        result = audit(root, config)
    except OSError as e:
        logger.error("Cannot read tree under %s: %s", root, e)
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))

    try:
        result.raise_for_violations()
    except ComplianceError as e:
        logger.error("%s", e)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="psdvault",
        description="Keep PSD assets archived as .7z with a PNG preview",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--root", default=".", help="Directory to scan (default: cwd)")
    common.add_argument("--config", type=Path, default=None,
                        help="Config file (default: <root>/psdvault.yaml if present)")
    common.add_argument("--json", action="store_true", help="Print the result as JSON")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    p_fix = subparsers.add_parser("fix", parents=[common],
                                  help="Generate missing previews/archives")
    p_fix.add_argument("--ledger", default=None, help="Append actions to this JSONL file")

    subparsers.add_parser("test", parents=[common], aliases=["audit"],
                          help="Report violations without changing anything")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    _configure_logging(args.verbose)

    dispatch = {
        "fix": cmd_fix,
        "test": cmd_test,
        "audit": cmd_test,
    }
    exit_code = dispatch[args.command](args)
    sys.exit(exit_code)
