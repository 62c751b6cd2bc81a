"""Run SQL over parsed access-log records with an in-memory SQLite table.

Example:

    SELECT to_char(request_time, '%Y-%m-%d %H:00'), count(*)
      FROM records WHERE status >= 500 GROUP BY 1
"""

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Iterable

from custom_log.config import Config
from custom_log.errors import CustomLogError
from custom_log.parser import LogParser
from custom_log.reader import read_records
from custom_log.record import LogRecord

logger = logging.getLogger(__name__)

TABLE_NAME = "records"
COLUMNS = (
    "remote_host",
    "remote_logname",
    "remote_user",
    "request_time",
    "request_line",
    "method",
    "request_uri",
    "protocol_version",
    "request_path",
    "status",
    "response_size",
    "referer",
    "user_agent",
    "params",
    "headers",
)
_INTEGER_COLUMNS = {"status", "response_size"}


class QueryError(CustomLogError):
    """Raised when the query cannot be compiled or executed."""


def to_char(timestamp: str | None, fmt: str) -> str | None:
    """SQL function: format an ISO-8601 request_time with a strftime pattern."""
    if timestamp is None:
        return None
    return datetime.fromisoformat(timestamp).strftime(fmt)


def record_to_row(record: LogRecord) -> tuple[Any, ...]:
    data = record.to_dict()
    data["params"] = json.dumps(data["params"])
    data["headers"] = json.dumps(data["headers"])
    return tuple(data[column] for column in COLUMNS)


def create_connection(records: Iterable[LogRecord]) -> sqlite3.Connection:
    """Open an in-memory database holding *records* in the records table."""
    conn = sqlite3.connect(":memory:")
    conn.create_function("to_char", 2, to_char)
    column_defs = ", ".join(
        f"{c} INTEGER" if c in _INTEGER_COLUMNS else f"{c} TEXT" for c in COLUMNS
    )
    conn.execute(f"CREATE TABLE {TABLE_NAME} ({column_defs})")
    placeholders = ", ".join("?" for _ in COLUMNS)
    conn.executemany(
        f"INSERT INTO {TABLE_NAME} VALUES ({placeholders})",
        (record_to_row(r) for r in records),
    )
    return conn


def format_results(rows: Iterable[tuple[Any, ...]]) -> str:
    """One line per row, columns separated by tabs, NULL as empty."""
    return "\n".join(
        "\t".join("" if v is None else str(v) for v in row) for row in rows
    )


class LogQuery:
    """Parses the given log files and runs one SQL query over them."""

    def __init__(self, query: str, paths: list[str], config: Config | None = None):
        if not query:
            raise ValueError("query is empty")
        if not paths:
            raise ValueError("paths is empty")
        self.query = query
        self.paths = list(paths)
        self.config = config or Config()

    def read_logs(self) -> list[LogRecord]:
        parser = LogParser(self.config.log_format)
        records = read_records(parser, self.paths, self.config.encoding)
        logger.info("Loaded %d records from %d file(s)", len(records), len(self.paths))
        return records

    def execute(self) -> list[tuple[Any, ...]]:
        conn = create_connection(self.read_logs())
        try:
            return conn.execute(self.query).fetchall()
        except (sqlite3.Error, ValueError) as e:
            raise QueryError(str(e)) from e
        finally:
            conn.close()
