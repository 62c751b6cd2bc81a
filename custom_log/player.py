"""Replay an access log against a live host, keeping the logged pacing.

Each record is scheduled relative to the first timestamped record:
a request logged 10s after the first one is sent 10s * rate after playback
started. Only GET and HEAD are replayed.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime

import requests

from custom_log.config import Config
from custom_log.parser import LogParser
from custom_log.reader import parse_lines, read_lines
from custom_log.record import LogRecord

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "HEAD")


@dataclass(frozen=True)
class PlayerSettings:
    domain: str
    rate: float
    start_time: float
    record_origin: datetime


def compute_delay(record: LogRecord, settings: PlayerSettings, now: float) -> float:
    """Seconds to wait before replaying *record*; negative means late."""
    offset = (record.request_time - settings.record_origin).total_seconds()
    return offset * settings.rate - (now - settings.start_time)


def build_headers(record: LogRecord) -> dict[str, str]:
    headers = dict(record.headers)
    if record.referer and record.referer != "-":
        headers["Referer"] = record.referer
    if record.user_agent:
        headers["User-Agent"] = record.user_agent
    return headers


class RecordPlayer:
    """Replays one record; runs on a worker thread."""

    def __init__(self, record: LogRecord, settings: PlayerSettings, timeout: float = 10.0):
        self.record = record
        self.settings = settings
        self.timeout = timeout

    def __call__(self) -> requests.Response | None:
        try:
            return self.play()
        except Exception:
            logger.exception("Replay failed for %s", self.record.request_uri)
            return None

    def play(self) -> requests.Response | None:
        record = self.record
        method = (record.method or "").upper()
        if method not in SUPPORTED_METHODS or record.request_uri is None:
            return None

        delay = compute_delay(record, self.settings, time.time())
        if delay > 0:
            logger.debug("waiting (%d msec)", delay * 1000)
            time.sleep(delay)
        else:
            logger.warning("delaying (%d msec)", -delay * 1000)

        response = requests.request(
            method,
            f"http://{self.settings.domain}{record.request_uri}",
            headers=build_headers(record),
            allow_redirects=False,
            timeout=self.timeout,
        )
        logger.debug("[%s] %s : %d", record.request_time, record.request_uri, response.status_code)
        if response.status_code == 302:
            logger.debug("  to: %s", response.headers.get("Location"))
        return response


class LogPlayer:
    """Reads a log file (or stdin via "-") and replays it on a thread pool."""

    def __init__(self, path: str, config: Config):
        self.path = path
        self.config = config
        self.settings: PlayerSettings | None = None

    def play(self) -> int:
        """Replay every timestamped record; returns how many were submitted."""
        logger.debug("start playing: %s", self.path)
        submitted = 0
        with ThreadPoolExecutor(max_workers=self.config.thread_count) as executor:
            try:
                submitted = self._play_with(executor)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Error occurs while processing file %s: %s", self.path, e)
        logger.debug("complete")
        return submitted

    def _play_with(self, executor: ThreadPoolExecutor) -> int:
        parser = LogParser(self.config.log_format)
        submitted = 0
        lines = read_lines(self.path, self.config.encoding)
        for record in parse_lines(parser, lines, source=self.path):
            if record.request_time is None:
                continue
            if self.settings is None:
                self.settings = PlayerSettings(
                    domain=self.config.domain,
                    rate=self.config.rate,
                    start_time=time.time(),
                    record_origin=record.request_time,
                )
            executor.submit(RecordPlayer(record, self.settings, self.config.request_timeout))
            submitted += 1
        return submitted
