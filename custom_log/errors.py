"""Exception hierarchy for format compilation and per-line parsing."""


class CustomLogError(Exception):
    """Base class for every error raised by custom_log."""


class FormatSyntaxError(CustomLogError):
    """Raised when a LogFormat directive cannot be compiled."""


class LogParseError(CustomLogError):
    """Raised when a single log line cannot be parsed."""


class TokenizeError(LogParseError):
    """Raised when a quote or bracket is left open at end of input."""


class LineParseError(LogParseError):
    """Raised when a tokenized line does not fit the compiled directive."""


class DateDecodeError(LogParseError):
    """Raised when a CLF timestamp token is malformed."""
