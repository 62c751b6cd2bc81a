"""Field tokenizer shared by LogFormat directives and access-log lines.

Grammar:
  - fields are separated by single spaces; empty runs are dropped
  - "..." groups one field, emitted even when empty
  - [...] groups one field (the CLF timestamp), emitted even when empty
  - a backslash takes the next character literally, in any mode
"""

from enum import Enum
from typing import Iterator

from custom_log.errors import TokenizeError

ESCAPE_CHAR = "\\"
SEPARATOR = " "
QUOTE = '"'
DATE_OPENER = "["
DATE_CLOSER = "]"


class Mode(Enum):
    NORMAL = "normal"
    QUOTING = "quoting"
    IN_DATE_PART = "in_date_part"


class Tokenizer:
    """Splits one line into its fields.

    The instance reuses a scratch buffer between calls, so it must not be
    shared by concurrent callers.
    """

    def __init__(self):
        self._buffer: list[str] = []

    def split(self, line: str) -> Iterator[str]:
        """Yield each field of *line* as it is found.

        Raises TokenizeError after the last complete field if a quote or
        bracket is still open at end of input.
        """
        buffer = self._buffer
        buffer.clear()
        mode = Mode.NORMAL
        escaping = False
        start = 0
        length = len(line)

        for pos in range(length):
            c = line[pos]
            if escaping:
                escaping = False
                start = pos
            elif c == ESCAPE_CHAR:
                escaping = True
                if pos > start:
                    buffer.append(line[start:pos])
                start = pos + 1
            elif mode is Mode.NORMAL:
                if c == SEPARATOR:
                    if pos > start or buffer:
                        yield self._take(line, start, pos)
                    start = pos + 1
                elif c == QUOTE:
                    mode = Mode.QUOTING
                    start = pos + 1
                elif c == DATE_OPENER:
                    mode = Mode.IN_DATE_PART
                    start = pos + 1
            elif mode is Mode.QUOTING:
                if c == QUOTE:
                    mode = Mode.NORMAL
                    yield self._take(line, start, pos)
                    start = pos + 1
            elif c == DATE_CLOSER:
                mode = Mode.NORMAL
                yield self._take(line, start, pos)
                start = pos + 1

        if mode is not Mode.NORMAL:
            raise TokenizeError(f"Unbalanced special character ({mode.value}) in: {line!r}")
        if length > start or buffer:
            yield self._take(line, start, length)

    def tokenize(self, line: str) -> list[str]:
        """Return all fields of *line* as a list."""
        return list(self.split(line))

    def _take(self, line: str, start: int, end: int) -> str:
        """Join any escaped fragments with line[start:end] and reset the buffer."""
        buffer = self._buffer
        if not buffer:
            return line[start:end]
        if end > start:
            buffer.append(line[start:end])
        value = "".join(buffer)
        buffer.clear()
        return value
