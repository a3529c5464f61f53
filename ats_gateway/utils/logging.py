"""Logging configuration for the ATS gateway."""

import logging
import re
import sys

# Logger name for the application
LOGGER_NAME = "ats_gateway"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at INFO; only shown when debugging
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_KEY_PARAM = re.compile(r"([?&]key=)[^&\s\"']+")

_configured = False


class CredentialRedactingFilter(logging.Filter):
    """Masks provider keys passed as ``?key=`` in logged request URLs."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _KEY_PARAM.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


_redacting_filter = CredentialRedactingFilter()


def _configure_third_party(log_level: int) -> None:
    quiet_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    # httpx puts the full request URL, credential included, in its log line
    httpx_logger = logging.getLogger("httpx")
    if _redacting_filter not in httpx_logger.filters:
        httpx_logger.addFilter(_redacting_filter)


def configure_logging(
    level: str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure and return the main application logger.

    Also lowers the chatter of the HTTP client and server libraries and
    strips provider keys from their request logs.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO if not specified.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The configured root application logger.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)

    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(log_level)
    _configure_third_party(log_level)

    if not _configured:
        logger.handlers.clear()

        formatter = logging.Formatter(format_string, datefmt=date_format)
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(_redacting_filter)
        logger.addHandler(console_handler)

        # uvicorn configures the root logger on its own
        logger.propagate = False

        _configured = True
    else:
        for handler in logger.handlers:
            handler.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger for a specific module.

    Args:
        name: The module name (will be prefixed with 'ats_gateway.').

    Returns:
        A child logger for the module.
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Reset logging configuration (useful for testing)."""
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    logging.getLogger("httpx").removeFilter(_redacting_filter)

    _configured = False
