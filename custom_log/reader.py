"""Generator-based line reading and skip-and-continue record parsing."""

import glob
import logging
import os
import sys
from contextlib import contextmanager
from typing import Generator, Iterable, TextIO

from custom_log.errors import LogParseError
from custom_log.parser import LogParser
from custom_log.record import LogRecord

logger = logging.getLogger(__name__)

STDIN_NAME = "-"


@contextmanager
def open_source(path: str, encoding: str = "utf-8") -> Generator[TextIO, None, None]:
    """Open *path* for reading; "-" yields stdin, which is left open."""
    if path == STDIN_NAME:
        yield sys.stdin
        return
    with open(path, "r", encoding=encoding) as f:
        yield f


def read_lines(path: str, encoding: str = "utf-8") -> Generator[tuple[int, str], None, None]:
    """Yield (line_number, line) with the trailing newline stripped."""
    with open_source(path, encoding) as f:
        for number, line in enumerate(f, start=1):
            yield number, line.rstrip("\r\n")


def expand_paths(raw_paths: list[str]) -> list[str]:
    """Expand globs, deduplicate, and validate that files exist.

    Raises FileNotFoundError if a non-glob path doesn't exist.
    Raises FileNotFoundError if expansion produces zero files.
    """
    expanded = []
    seen = set()

    for raw in raw_paths:
        if raw == STDIN_NAME:
            candidates = [raw]
        elif any(c in raw for c in ("*", "?", "[")):
            candidates = sorted(glob.glob(raw))
        else:
            if not os.path.isfile(raw):
                raise FileNotFoundError(f"File not found: {raw}")
            candidates = [raw]
        for path in candidates:
            if path not in seen:
                seen.add(path)
                expanded.append(path)

    if not expanded:
        raise FileNotFoundError("No log files found matching the given paths")

    return expanded


def parse_lines(
    parser: LogParser,
    lines: Iterable[tuple[int, str]],
    source: str = STDIN_NAME,
) -> Generator[LogRecord, None, None]:
    """Parse numbered lines, logging and skipping the ones that fail."""
    for number, line in lines:
        if not line.strip():
            continue
        try:
            yield parser.parse_line(line)
        except LogParseError as e:
            logger.warning("Parse error at line %d in %s: %s", number, source, e)


def read_records(parser: LogParser, paths: list[str], encoding: str = "utf-8") -> list[LogRecord]:
    """Parse every file in *paths*; unreadable files are logged and skipped."""
    records: list[LogRecord] = []
    for path in paths:
        try:
            records.extend(parse_lines(parser, read_lines(path, encoding), source=path))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Read error in file %s: %s", path, e)
    return records
