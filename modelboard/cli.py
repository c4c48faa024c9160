"""Command-line access to a board: list slots and versions, show metadata and metrics."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from modelboard.artifacts.factory import get_store
from modelboard.common.exceptions import BoardError
from modelboard.config import Settings, settings
from modelboard.monitoring.service import read_metrics

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="modelboard", description=__doc__)
    parser.add_argument("--board-type", default=None, help="local, memory, s3 or sql")
    parser.add_argument("--board-path", default=None, help="Directory of a local board")
    parser.add_argument("--log-level", default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("slots", help="List slots on the board")

    versions = sub.add_parser("versions", help="List versions of a slot")
    versions.add_argument("slot")

    metadata = sub.add_parser("metadata", help="Show metadata of a version")
    metadata.add_argument("slot")
    metadata.add_argument("--version", default=None)

    metrics = sub.add_parser("metrics", help="Show a persisted metrics table")
    metrics.add_argument("slot")
    metrics.add_argument("--version", default=None)

    return parser


def _resolve_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.board_type:
        overrides["BOARD_TYPE"] = args.board_type
    if args.board_path:
        overrides["BOARD_PATH"] = args.board_path
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    return settings.model_copy(update=overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = _resolve_settings(args)
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    try:
        store = get_store(config)

        if args.command == "slots":
            for slot in store.list_slots():
                print(slot)
        elif args.command == "versions":
            for version in store.list_versions(args.slot):
                info = store.version_info(args.slot, version)
                print(f"{version}\t{info.created_at.isoformat()}\t{info.size}")
        elif args.command == "metadata":
            meta = store.read_metadata(args.slot, args.version)
            print(json.dumps(meta.model_dump(mode="json"), indent=2))
        elif args.command == "metrics":
            table = read_metrics(store, args.slot, args.version)
            print(table.to_string(index=False))
    except (BoardError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0
