"""LogParser: turns access-log lines into LogRecords for one LogFormat."""

from custom_log.dates import DateDecoder
from custom_log.errors import LineParseError, TokenizeError
from custom_log.extractors import FieldExtractor, compile_format
from custom_log.record import LogRecord
from custom_log.tokenizer import Tokenizer

DEFAULT_LOG_FORMAT = '%h %l %u %t "%r" %>s %b'
COMBINED_LOG_FORMAT = DEFAULT_LOG_FORMAT + ' "%{Referer}i" "%{User-Agent}i"'


class LogParser:
    """Parses lines positionally against a compiled LogFormat directive.

    The extractors are compiled once in __init__, so a bad directive fails
    here and never yields a half-built parser. A line with fewer fields than
    the directive is accepted and leaves the trailing fields at their
    defaults; a line with more fields is rejected.

    Not thread-safe: the tokenizer buffer and the date cache are owned by
    this instance. Use one parser per worker.
    """

    def __init__(self, log_format: str = DEFAULT_LOG_FORMAT):
        self.log_format = log_format
        self._tokenizer = Tokenizer()
        self.date_decoder = DateDecoder()
        self.extractors: tuple[FieldExtractor, ...] = compile_format(
            log_format, self._tokenizer, self.date_decoder
        )

    def parse_line(self, line: str) -> LogRecord:
        if line is None:
            raise LineParseError("null input")

        record = LogRecord()
        extractors = self.extractors
        count = 0
        try:
            for value in self._tokenizer.split(line):
                if count >= len(extractors):
                    raise LineParseError(f"too many fields (directive has {count})")
                extractors[count](record, value)
                count += 1
        except TokenizeError as exc:
            raise LineParseError(str(exc)) from exc
        return record
