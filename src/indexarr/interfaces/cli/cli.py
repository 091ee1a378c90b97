from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from indexarr.domain.entities import Candidate, ProbeResult, SearchBadRequest, SearchSelection
from indexarr.domain.indexers import IndexerDefinition, IndexerError
from indexarr.infrastructure.composition import Runtime, runtime
from indexarr.infrastructure.config import AppConfig, load_config
from indexarr.infrastructure.logging.setup import configure_logging, shutdown_logging

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="indexarr",
        description="Search and probe torrent indexers described by YAML definitions.",
    )

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--definitions-dir",
        default=None,
        help="Override indexer definitions directory.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List loaded indexer definitions.")

    probe = commands.add_parser("probe", help="Check indexer reachability.")
    probe.add_argument("ids", nargs="*", help="Definition ids (default: all).")
    probe.add_argument(
        "--relay",
        action="store_true",
        help="Probe through the anti-bot relay.",
    )

    search = commands.add_parser("search", help="Search indexers and select the best result.")
    search.add_argument("keywords", help="Search keywords.")
    search.add_argument(
        "--min-seeders",
        type=int,
        default=0,
        help="Minimum seeders for the selected result.",
    )
    search.add_argument("--category", default=None, help="Restrict to a category.")
    search.add_argument(
        "--indexer",
        action="append",
        default=None,
        dest="indexers",
        help="Only search this definition id (repeatable).",
    )
    search.add_argument(
        "--resolve-download",
        action="store_true",
        help="Follow the selected result's details page to its download link.",
    )
    search.add_argument(
        "--relay",
        action="store_true",
        help="Fetch every indexer through the anti-bot relay.",
    )

    return parser.parse_args(argv)


def _candidate_dict(c: Candidate) -> dict[str, Any]:
    return {
        "title": c.title,
        "magnet": c.magnet,
        "indexer": c.indexer,
        "size": c.size,
        "seeders": c.seeders,
        "leechers": c.leechers,
        "published_at": c.published_at.isoformat() if c.published_at else None,
        "details": c.details,
    }


def selection_to_dict(selection: SearchSelection) -> dict[str, Any]:
    return {
        "outcome": selection.outcome.value,
        "min_seeders": selection.min_seeders,
        "total_results": selection.total_results,
        "selected": _candidate_dict(selection.selected) if selection.selected else None,
        "ranked": [_candidate_dict(c) for c in selection.ranked],
        "failures": [
            {"indexer": f.indexer, "kind": f.kind, "message": f.message}
            for f in selection.failures
        ],
    }


def probe_to_dict(result: ProbeResult) -> dict[str, Any]:
    return {
        "indexer": result.indexer,
        "healthy": result.ok,
        "reason": result.reason,
        "target_url": result.target_url,
        "http_status": result.http_status,
        "via_relay": result.via_relay,
        "checked_at": result.started_at.isoformat(),
        "duration_ms": round(result.duration_ms, 1),
    }


def _definition_dict(d: IndexerDefinition) -> dict[str, Any]:
    return {
        "id": d.id,
        "name": d.name,
        "type": d.type,
        "links": list(d.links),
        "wants_relay": d.wants_relay,
    }


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def _error(message: str) -> None:
    sys.stderr.write(f"indexarr: error: {message}\n")


async def _cmd_list(rt: Runtime, _args: argparse.Namespace) -> int:
    definitions = rt.registry.load_all(strict=False)
    _emit([_definition_dict(d) for d in definitions])
    return EXIT_OK


async def _cmd_probe(rt: Runtime, args: argparse.Namespace) -> int:
    if args.ids:
        definitions = [rt.registry.get(i) for i in args.ids]
    else:
        definitions = rt.registry.load_all(strict=False)

    results = await rt.prober.probe_all(
        definitions,
        concurrency=rt.config.probe_concurrency,
        use_relay=True if args.relay else None,
    )
    _emit([probe_to_dict(r) for r in results.values()])
    healthy = bool(results) and all(r.ok for r in results.values())
    return EXIT_OK if healthy else EXIT_NOT_FOUND


async def _cmd_search(rt: Runtime, args: argparse.Namespace) -> int:
    definitions = rt.registry.load_all(strict=False)
    selection = await rt.aggregator.search(
        definitions,
        args.keywords,
        args.min_seeders,
        category=args.category,
        indexer_ids=args.indexers,
        resolve_download=args.resolve_download,
    )
    _emit(selection_to_dict(selection))
    return EXIT_OK if selection.found else EXIT_NOT_FOUND


_COMMANDS = {
    "list": _cmd_list,
    "probe": _cmd_probe,
    "search": _cmd_search,
}


async def run(config: AppConfig, args: argparse.Namespace) -> int:
    """Execute the parsed command against a freshly built runtime."""
    use_relay = True if getattr(args, "relay", False) else None
    async with runtime(config, use_relay=use_relay) as rt:
        try:
            return await _COMMANDS[args.command](rt, args)
        except SearchBadRequest as e:
            _error(str(e))
            return EXIT_USAGE
        except IndexerError as e:
            log.error("command_failed", command=args.command, error=str(e))
            _error(str(e))
            return EXIT_USAGE


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Config is loaded exactly once here, then handed to the runtime.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.definitions_dir:
        cli_overrides["definitions_dir"] = args.definitions_dir
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    try:
        config = load_config(
            config_path=config_path,
            dotenv_path=dotenv_path,
            cli_overrides=cli_overrides,
        )
    except (FileNotFoundError, ValueError) as e:
        _error(f"invalid configuration: {e}")
        return EXIT_USAGE

    configure_logging(config)
    try:
        return asyncio.run(run(config, args))
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(start())
