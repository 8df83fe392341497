"""Logging setup: JSON lines on stderr, optional rotating file, password redaction."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

import orjson

from unifi_poller.config import LogFileConfig

REDACTED = "[REDACTED]"


class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        obj = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            obj["exception"] = self.formatException(record.exc_info)
        return orjson.dumps(obj).decode()


class RedactingFilter(logging.Filter):
    """Replace known passwords in the rendered message with ``[REDACTED]``.

    The message is rendered once here and the args are dropped, so a secret
    passed as a ``%s`` argument is caught as well as one baked into the
    format string.
    """

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        # single characters would shred every message
        self._secrets = sorted({s for s in secrets if len(s) > 1}, key=len, reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # args do not fit the format string
            message = str(record.msg)
        for secret in self._secrets:
            message = message.replace(secret, REDACTED)
        record.msg = message
        record.args = None
        return True


def setup_logging(
    level: str,
    secrets: Iterable[str] = (),
    log_file: Optional[LogFileConfig] = None,
) -> None:
    """Configure the root logger: JSON on stderr, optional file, redaction."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file and log_file.enabled:
        Path(log_file.path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=log_file.path,
                maxBytes=log_file.max_size_bytes,
                backupCount=log_file.backup_count,
            )
        )

    redactor = RedactingFilter(secrets)
    for handler in handlers:
        handler.setFormatter(JsonFormatter())
        handler.addFilter(redactor)
        root.addHandler(handler)

    # requests' connection pool is chatty at debug
    logging.getLogger("urllib3").setLevel(logging.WARNING)
