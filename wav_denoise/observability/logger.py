"""Log formatting for the command-line tool.

Plain text output prints only the message, so per-file lines read as
``Skipping invalid WAV file: <path>``. Structured JSON output carries
severity, timestamp, message and any per-file context passed via ``extra``.
"""

import json
import logging
import sys
from datetime import UTC, datetime

PACKAGE_LOGGER = "wav_denoise"
LOG_FORMATS = ("text", "json")

# Context fields copied from the `extra` kwarg into JSON log entries
EXTRA_FIELDS = (
    "path",
    "destination",
    "reason",
    "error",
    "operation",
    "duration_seconds",
)


class StructuredJsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    SEVERITY_MAP: dict[int, str] = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARNING",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            JSON string with severity, timestamp, message, and extra fields.
        """
        log_entry: dict[str, object] = {
            "timestamp": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "severity": self.SEVERITY_MAP.get(record.levelno, "DEFAULT"),
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])

        return json.dumps(log_entry)


def configure_logging(log_format: str = "text", verbose: bool = False) -> None:
    """Attach a stderr handler to the package logger.

    Calling this again replaces the previous handler instead of stacking
    a second one.

    Args:
        log_format: "text" for bare messages, "json" for structured lines.
        verbose: Emit DEBUG records (per-request timings) as well.

    Raises:
        ValueError: If log_format is not one of LOG_FORMATS.
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format: '{log_format}'")

    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
