#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import load_config, setup_logging
from .postprocess import postprocess_message
from .safety import sanitize_stream_text
from .site_search import SiteSearch

logger = logging.getLogger("feed_assistant")


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _cmd_search(args: argparse.Namespace, searcher: SiteSearch) -> int:
    response = searcher.search(args.section, args.query)
    _print_json(response.to_dict())
    return 0 if response.message is None else 1


def _cmd_related(args: argparse.Namespace, searcher: SiteSearch) -> int:
    response = searcher.related(args.section, args.query)
    _print_json(response.to_dict())
    return 0 if response.message is None else 1


def _cmd_stats(args: argparse.Namespace, searcher: SiteSearch) -> int:
    searcher.cache.preload_all()
    _print_json(searcher.cache.stats())
    return 0


def _cmd_preload(args: argparse.Namespace, searcher: SiteSearch) -> int:
    results = searcher.cache.preload_all()
    _print_json(results)
    return 0 if all(results.values()) else 1


def _cmd_sanitize(args: argparse.Namespace, searcher: SiteSearch) -> int:
    if args.stream:
        for piece in sanitize_stream_text(sys.stdin):
            sys.stdout.write(piece)
    else:
        sys.stdout.write(postprocess_message(sys.stdin.read(), args.max_chars))
    sys.stdout.write("\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Feed search and response sanitizer")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="Path to a JSON config file")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search a cached section")
    search.add_argument("section")
    search.add_argument("query")
    search.set_defaults(func=_cmd_search)

    related = sub.add_parser("related", help="Find items related to a search")
    related.add_argument("section")
    related.add_argument("query")
    related.set_defaults(func=_cmd_related)

    stats = sub.add_parser("stats", help="Load every section and print cache stats")
    stats.set_defaults(func=_cmd_stats)

    preload = sub.add_parser("preload", help="Refresh every configured section")
    preload.set_defaults(func=_cmd_preload)

    sanitize = sub.add_parser("sanitize", help="Redact structured data read from stdin")
    sanitize.add_argument(
        "--stream", action="store_true", help="Use the incremental stream filter"
    )
    sanitize.add_argument("--max-chars", type=int, default=2000)
    sanitize.set_defaults(func=_cmd_sanitize)
    return parser


# --- Entrypoint ---
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    config = load_config(args.config)

    try:
        searcher = SiteSearch(config)
        return args.func(args, searcher)
    except Exception as e:
        logger.exception("Command %s crashed: %s", args.command, e)
        print(f"Command {args.command} crashed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
