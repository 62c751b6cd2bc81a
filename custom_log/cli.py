"""Command-line entry points: custom-log-play and custom-log-query."""

import logging
import sys
from argparse import ArgumentParser
from dataclasses import replace

from custom_log.config import Config, load_config, load_yaml_config
from custom_log.errors import FormatSyntaxError
from custom_log.player import LogPlayer
from custom_log.query import LogQuery, QueryError, format_results
from custom_log.reader import expand_paths

logger = logging.getLogger(__name__)


def setup_logging(config: Config):
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )


def build_play_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="custom-log-play",
        description="Replay GET/HEAD requests from an Apache access log.",
    )
    parser.add_argument(
        "-f", "--file",
        required=True,
        help='Access log file ("-" reads stdin)',
    )
    parser.add_argument(
        "-d", "--domain",
        help="Host to send requests to (default: localhost)",
    )
    parser.add_argument(
        "-r", "--rate",
        type=float,
        help="Playback speed factor; 0.5 plays twice as fast (default: 1)",
    )
    parser.add_argument("--config", help="Optional YAML config file")
    return parser


def build_query_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="custom-log-query",
        description="Run an SQL query over Apache access logs (table: records).",
    )
    parser.add_argument("query", help="SQL query string")
    parser.add_argument(
        "files",
        nargs="+",
        help="Log file path(s) or glob pattern(s)",
    )
    parser.add_argument("--config", help="Optional YAML config file")
    return parser


def play_main(argv: list[str] | None = None) -> int:
    args = build_play_parser().parse_args(argv)
    try:
        config = load_config(load_yaml_config(args.config))
        if args.domain:
            config = replace(config, domain=args.domain)
        if args.rate is not None:
            config = replace(config, rate=args.rate)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(config)

    try:
        player = LogPlayer(args.file, config)
        submitted = player.play()
    except FormatSyntaxError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    logger.info("Replayed %d records from %s", submitted, args.file)
    return 0


def query_main(argv: list[str] | None = None) -> int:
    args = build_query_parser().parse_args(argv)
    try:
        config = load_config(load_yaml_config(args.config))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(config)

    try:
        paths = expand_paths(args.files)
        rows = LogQuery(args.query, paths, config).execute()
    except (FileNotFoundError, FormatSyntaxError, QueryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    output = format_results(rows)
    if output:
        print(output)
    return 0


def _run(entry) -> None:
    try:
        sys.exit(entry())
    except KeyboardInterrupt:
        sys.exit(0)
    except BrokenPipeError:
        sys.exit(0)


def play():
    _run(play_main)


def query():
    _run(query_main)
