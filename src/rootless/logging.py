"""
Logging configuration for the rootless package.

Adds two levels to the standard set, `VERBOSE` (between `DEBUG` and `INFO`)
for progress chatter from long running searches, and `FAIL` (between
`WARNING` and `ERROR`) for operations that were rejected rather than broken.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Any, Optional, cast

VERBOSE_LEVEL = 15
FAIL_LEVEL = 35

logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")
logging.addLevelName(FAIL_LEVEL, "FAIL")


class RootlessLogger(logging.Logger):
    """Logger with the extra `verbose` and `fail` levels."""

    def verbose(
        self,
        msg: object,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        """Log a message with VERBOSE level severity (15)."""
        if self.isEnabledFor(VERBOSE_LEVEL):
            self._log(VERBOSE_LEVEL, msg, args, **kwargs)

    def fail(
        self,
        msg: object,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        """Log a message with FAIL level severity (35)."""
        if self.isEnabledFor(FAIL_LEVEL):
            self._log(FAIL_LEVEL, msg, args, **kwargs)


logging.setLoggerClass(RootlessLogger)


def get_logger(name: str) -> RootlessLogger:
    """Get a logger with the custom level methods available."""
    return cast(RootlessLogger, logging.getLogger(name))


class UTCFormatter(logging.Formatter):
    """Log formatter that stamps records in UTC with millisecond precision."""

    converter = time.gmtime

    def formatTime(  # noqa: N802
        self, record: logging.LogRecord, datefmt: Optional[str] = None
    ) -> str:
        """Format the record's creation time as an ISO-8601 UTC string."""
        stamp = time.strftime(
            "%Y-%m-%dT%H:%M:%S", self.converter(record.created)
        )
        return f"{stamp}.{int(record.msecs):03d}Z"


def configure_logging(
    log_level: int | str = "INFO",
    log_file: Optional[Path] = None,
) -> None:
    """
    Configure the `rootless` logger hierarchy.

    Records go to stderr, and additionally to `log_file` when given.
    Calling this again replaces the previously installed handlers.
    """
    if isinstance(log_level, str):
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Invalid log level: {log_level}")
        log_level = level

    formatter = UTCFormatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    root = logging.getLogger("rootless")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(log_level)
