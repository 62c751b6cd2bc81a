"""LogRecord: one parsed access-log entry, plus its request-line breakdown.

Field reference: https://httpd.apache.org/docs/2.4/mod/mod_log_config.html
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RequestLine:
    """Method, URI and protocol of a request line such as
    ``GET /a.cgi?category=aaa HTTP/1.1``.

    ``params`` maps query keys to values without percent-decoding; a key
    given without ``=`` maps to None.
    """

    method: str
    request_uri: str | None = None
    protocol_version: str | None = None
    request_path: str | None = None
    params: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def parse(cls, line: str) -> "RequestLine":
        parts = line.split(" ", 2)
        if len(parts) == 1:
            return cls(method=line)
        method, request_uri = parts[0], parts[1]
        protocol_version = parts[2] if len(parts) == 3 else None
        request_path, params = parse_uri(request_uri)
        return cls(
            method=method,
            request_uri=request_uri,
            protocol_version=protocol_version,
            request_path=request_path,
            params=params,
        )


def parse_uri(request_uri: str) -> tuple[str, dict[str, str | None]]:
    """Split '/a.cgi?x=1&y' → ('/a.cgi', {'x': '1', 'y': None})."""
    path, sep, query = request_uri.partition("?")
    if not sep:
        return path, {}
    params: dict[str, str | None] = {}
    for pair in query.split("&"):
        key, eq, value = pair.partition("=")
        if eq:
            params[key] = value
        else:
            params[pair] = None
    return path, params


@dataclass
class LogRecord:
    remote_host: str | None = None
    remote_logname: str | None = None
    remote_user: str | None = None
    request_time: datetime | None = None
    request_line: str | None = None
    status: int = 0
    response_size: int = 0
    referer: str | None = None
    user_agent: str | None = None
    _headers: dict[str, str] | None = field(default=None, repr=False)
    _request: RequestLine | None = field(default=None, repr=False)

    def set_request_line(self, request_line: str):
        """Store the raw request line and break it down immediately."""
        self.request_line = request_line
        self._request = RequestLine.parse(request_line)

    def set_request_header(self, name: str, value: str):
        if self._headers is None:
            self._headers = {}
        self._headers[name] = value

    @property
    def headers(self) -> dict[str, str]:
        return self._headers if self._headers is not None else {}

    @property
    def method(self) -> str | None:
        return self._request.method if self._request else None

    @property
    def request_uri(self) -> str | None:
        return self._request.request_uri if self._request else None

    @property
    def protocol_version(self) -> str | None:
        return self._request.protocol_version if self._request else None

    @property
    def request_path(self) -> str | None:
        return self._request.request_path if self._request else None

    @property
    def params(self) -> dict[str, str | None]:
        return self._request.params if self._request else {}

    def to_dict(self) -> dict[str, Any]:
        """Flatten the record, derived fields included, for JSON or SQL rows."""
        return {
            "remote_host": self.remote_host,
            "remote_logname": self.remote_logname,
            "remote_user": self.remote_user,
            "request_time": self.request_time.isoformat() if self.request_time else None,
            "request_line": self.request_line,
            "method": self.method,
            "request_uri": self.request_uri,
            "protocol_version": self.protocol_version,
            "request_path": self.request_path,
            "status": self.status,
            "response_size": self.response_size,
            "referer": self.referer,
            "user_agent": self.user_agent,
            "params": dict(self.params),
            "headers": dict(self.headers),
        }
