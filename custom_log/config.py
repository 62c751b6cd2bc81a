"""Configuration from defaults, an optional YAML file, and environment variables.

Precedence (lowest to highest): Config defaults, YAML keys, env vars.
Command-line options are applied on top by the caller with
dataclasses.replace().
"""

import logging
import os
from dataclasses import dataclass

import yaml

from custom_log.parser import COMBINED_LOG_FORMAT

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# field name -> environment variable
ENV_VARS = {
    "log_format": "CUSTOM_LOG_FORMAT",
    "encoding": "CUSTOM_LOG_ENCODING",
    "domain": "CUSTOM_LOG_DOMAIN",
    "rate": "CUSTOM_LOG_RATE",
    "thread_count": "CUSTOM_LOG_THREADS",
    "request_timeout": "CUSTOM_LOG_TIMEOUT",
    "log_level": "LOG_LEVEL",
}


@dataclass(frozen=True)
class Config:
    log_format: str = COMBINED_LOG_FORMAT
    encoding: str = "utf-8"
    domain: str = "localhost"
    rate: float = 1.0
    thread_count: int = 30
    request_timeout: float = 10.0
    log_level: str = "INFO"

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")
        if self.thread_count < 1:
            raise ValueError(f"thread_count must be at least 1, got {self.thread_count}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")


def load_yaml_config(path: str | None) -> dict:
    """Read custom-log settings from a YAML mapping.

    Keys are Config field names (log_format, domain, rate, thread_count, ...).
    No path or a missing file gives {} so the built-in defaults apply. A file
    that is not valid YAML or not a mapping raises ValueError.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Settings file %s not found, keeping built-in defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in settings file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must hold a mapping, got {type(data).__name__}")
    logger.info("Loaded %d setting(s) from %s", len(data), path)
    return data


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from YAML data and environment variables."""
    values = {k: v for k, v in (yaml_data or {}).items() if k in ENV_VARS}
    for name, env_var in ENV_VARS.items():
        if env_var in os.environ:
            values[name] = os.environ[env_var]

    return Config(
        log_format=str(values.get("log_format", Config.log_format)),
        encoding=str(values.get("encoding", Config.encoding)),
        domain=str(values.get("domain", Config.domain)),
        rate=float(values.get("rate", Config.rate)),
        thread_count=int(values.get("thread_count", Config.thread_count)),
        request_timeout=float(values.get("request_timeout", Config.request_timeout)),
        log_level=str(values.get("log_level", Config.log_level)).upper(),
    )
