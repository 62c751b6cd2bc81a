"""Compile a LogFormat directive into positional field extractors.

Each directive token ``%X``, ``%>X`` or ``%{param}X`` becomes one
FieldExtractor chosen by its kind character X. Supported kinds:

  h  remote host          r  first line of request
  l  remote logname       s  status (%s and %>s are not distinguished)
  u  remote user          b  response size, "-" meaning 0
  t  request time         i  request header named by the parameter

Any other kind compiles to an extractor that discards its value.
"""

import re
from dataclasses import dataclass
from typing import Callable

from custom_log.dates import DateDecoder
from custom_log.errors import DateDecodeError, FormatSyntaxError, LineParseError, TokenizeError
from custom_log.record import LogRecord
from custom_log.tokenizer import Tokenizer

Apply = Callable[[LogRecord, str], None]
Factory = Callable[[str, DateDecoder], Apply]

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class FieldExtractor:
    token: str
    kind: str
    param: str
    apply: Apply

    def __call__(self, record: LogRecord, value: str):
        self.apply(record, value)


# ---------------------------------------------------------------------------
# Value conversion helpers
# ---------------------------------------------------------------------------


def _parse_int(value: str, name: str) -> int:
    # int() alone would also take "2_00" and padded "200 "
    if not _INTEGER_RE.fullmatch(value):
        raise LineParseError(f"Failed to parse {name}: {value!r}")
    return int(value)


def _setter(attr: str) -> Factory:
    def factory(param: str, decoder: DateDecoder) -> Apply:
        def apply(record: LogRecord, value: str):
            setattr(record, attr, value)
        return apply
    return factory


# ---------------------------------------------------------------------------
# Per-kind factories
# ---------------------------------------------------------------------------


def _request_time(param: str, decoder: DateDecoder) -> Apply:
    # TODO: treat a non-empty param as an strftime layout ("%{%Y-%m-%d}t")
    def apply(record: LogRecord, value: str):
        try:
            record.request_time = decoder.decode(value)
        except DateDecodeError as exc:
            raise LineParseError(f"Failed to parse request time: {value!r}") from exc
    return apply


def _request_line(param: str, decoder: DateDecoder) -> Apply:
    def apply(record: LogRecord, value: str):
        record.set_request_line(value)
    return apply


def _status(param: str, decoder: DateDecoder) -> Apply:
    def apply(record: LogRecord, value: str):
        record.status = _parse_int(value, "status")
    return apply


def _response_size(param: str, decoder: DateDecoder) -> Apply:
    def apply(record: LogRecord, value: str):
        record.response_size = 0 if value == "-" else _parse_int(value, "response size")
    return apply


def _request_header(param: str, decoder: DateDecoder) -> Apply:
    lowered = param.lower()
    if lowered == "referer":
        return _setter("referer")(param, decoder)
    if lowered == "user-agent":
        return _setter("user_agent")(param, decoder)

    def apply(record: LogRecord, value: str):
        record.set_request_header(param, value)
    return apply


def _ignore(record: LogRecord, value: str):
    pass


FACTORIES: dict[str, Factory] = {
    "h": _setter("remote_host"),
    "l": _setter("remote_logname"),
    "u": _setter("remote_user"),
    "t": _request_time,
    "r": _request_line,
    "s": _status,
    "b": _response_size,
    "i": _request_header,
}


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


def split_token(token: str) -> tuple[str, str]:
    """'%{Referer}i' → ('i', 'Referer'); '%>s' → ('s', '>')."""
    if len(token) < 2 or not token.startswith("%"):
        raise FormatSyntaxError(f"Illegal format token: {token!r}")
    kind = token[-1]
    param = token[1:-1]
    if len(param) >= 2 and param.startswith("{") and param.endswith("}"):
        param = param[1:-1]
    return kind, param


def compile_format(
    directive: str,
    tokenizer: Tokenizer | None = None,
    decoder: DateDecoder | None = None,
) -> tuple[FieldExtractor, ...]:
    """Build one FieldExtractor per directive token, in order.

    *decoder* is shared by every %t extractor; pass the owning parser's
    decoder so its day cache is reused across lines.
    """
    if directive is None:
        raise FormatSyntaxError("Format directive is None")
    tokenizer = tokenizer or Tokenizer()
    decoder = decoder or DateDecoder()
    try:
        tokens = tokenizer.tokenize(directive)
    except TokenizeError as exc:
        raise FormatSyntaxError(f"Illegal format specified: {directive!r}") from exc

    extractors = []
    for token in tokens:
        kind, param = split_token(token)
        factory = FACTORIES.get(kind)
        apply = factory(param, decoder) if factory else _ignore
        extractors.append(FieldExtractor(token=token, kind=kind, param=param, apply=apply))
    return tuple(extractors)
