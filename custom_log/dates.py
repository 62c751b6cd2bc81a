"""Fast decoder for the Common Log Format timestamp.

Layout (26 characters):

    19/Dec/2008:09:03:24 +0900
    |-- day ---||- time -|| zone

Midnight of each (day, zone) pair is resolved once with strptime and cached;
the time of day is added with plain digit arithmetic.
"""

from datetime import datetime, timedelta

from custom_log.errors import DateDecodeError

TOKEN_LENGTH = 26
MIDNIGHT_FORMAT = "%d/%b/%Y:%H:%M:%S %z"

_DAY_END = 12
_ZONE_START = 21
_ZERO = ord("0")


class DateDecoder:
    """Parse-only CLF timestamp decoder with a per-instance day cache.

    The cache is never evicted; it holds one entry per distinct day and
    zone seen by this instance.
    """

    def __init__(self):
        self._day_cache: dict[str, datetime] = {}

    @property
    def cache_size(self) -> int:
        return len(self._day_cache)

    def decode(self, token: str, offset: int = 0) -> datetime:
        """Decode the 26-character timestamp that fills *token* from *offset* on."""
        if len(token) - offset != TOKEN_LENGTH:
            raise DateDecodeError(f"Timestamp must be {TOKEN_LENGTH} characters: {token!r}")
        if token[offset + 14] != ":" or token[offset + 17] != ":" or token[offset + 20] != " ":
            raise DateDecodeError(f"Malformed time of day: {token!r}")

        hour = self._two_digits(token, offset + 12, 23)
        minute = self._two_digits(token, offset + 15, 59)
        second = self._two_digits(token, offset + 18, 59)

        day_string = token[offset:offset + _DAY_END]
        zone_string = token[offset + _ZONE_START:offset + TOKEN_LENGTH]
        midnight = self._midnight(day_string, zone_string)

        millis = ((hour * 60 + minute) * 60 + second) * 1000
        return midnight + timedelta(milliseconds=millis)

    def _midnight(self, day_string: str, zone_string: str) -> datetime:
        key = day_string + zone_string
        midnight = self._day_cache.get(key)
        if midnight is None:
            try:
                midnight = datetime.strptime(
                    f"{day_string}00:00:00 {zone_string}", MIDNIGHT_FORMAT
                )
            except ValueError as exc:
                raise DateDecodeError(
                    f"Malformed day or zone: {day_string!r} {zone_string!r}"
                ) from exc
            self._day_cache[key] = midnight
        return midnight

    @staticmethod
    def _two_digits(token: str, pos: int, maximum: int) -> int:
        high = ord(token[pos]) - _ZERO
        low = ord(token[pos + 1]) - _ZERO
        if not (0 <= high <= 9 and 0 <= low <= 9):
            raise DateDecodeError(f"Malformed time of day: {token!r}")
        value = high * 10 + low
        if value > maximum:
            raise DateDecodeError(f"Time of day out of range: {token!r}")
        return value
