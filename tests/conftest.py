"""Shared pytest fixtures for the custom_log test suite."""

import pytest

from custom_log.parser import COMBINED_LOG_FORMAT, LogParser

COMMON_LINE = (
    '127.0.0.1 - - [19/Dec/2008:09:03:24 +0900] '
    '"GET /a.cgi?x=1&y HTTP/1.1" 200 123'
)

COMBINED_LINES = [
    '10.0.0.1 - frank [19/Dec/2008:09:03:24 +0900] "GET /index.html HTTP/1.1" 200 512 '
    '"http://example.com/" "Mozilla/5.0 (X11)"',
    '10.0.0.2 - - [19/Dec/2008:09:03:25 +0900] "POST /login HTTP/1.1" 302 - "-" "curl/8.0"',
    '10.0.0.1 - - [19/Dec/2008:09:04:00 +0900] "GET /missing HTTP/1.1" 404 0 "-" "curl/8.0"',
    '10.0.0.3 - - [19/Dec/2008:10:15:00 +0900] "HEAD /health HTTP/1.0" 500 0 "-" "healthcheck"',
]


@pytest.fixture()
def parser() -> LogParser:
    """Parser for the default common log format."""
    return LogParser()


@pytest.fixture()
def combined_parser() -> LogParser:
    return LogParser(COMBINED_LOG_FORMAT)


@pytest.fixture()
def combined_log(tmp_path):
    """Write COMBINED_LINES plus one broken line to access.log and return its path."""
    path = tmp_path / "access.log"
    lines = COMBINED_LINES[:2] + ['10.0.0.9 - - [bad timestamp] "GET / HTTP/1.1" 200 1'] + COMBINED_LINES[2:]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)
