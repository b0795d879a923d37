"""
Structured logging helpers for starkrail.

All modules obtain their logger through :func:`get_logger` so that the
library stays silent by default (a ``NullHandler`` is attached to the
package root) and applications opt in with :func:`configure_logging`.

Example:
    >>> from starkrail.utils.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> _logger = get_logger(__name__)
    >>> _logger.info("Nonce fetched", extra={"account": "0x123", "nonce": 4})
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "starkrail"

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s%(context)s"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "context"}

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class ContextFormatter(logging.Formatter):
    """Formatter that renders ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        record.context = (
            " " + " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
            if fields
            else ""
        )
        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the ``starkrail`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger whose records propagate to the package root logger
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """
    Attach a formatted handler to the package root logger.

    Calling this more than once replaces the handler installed by the
    previous call instead of stacking duplicates.

    Args:
        level: Log level name or number
        fmt: Format string; ``%(context)s`` expands to the ``extra`` fields
        handler: Handler to install (defaults to ``StreamHandler``)

    Returns:
        The configured root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(root.handlers):
        if getattr(existing, "_starkrail_handler", False):
            root.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(ContextFormatter(fmt))
    setattr(handler, "_starkrail_handler", True)
    root.addHandler(handler)
    root.setLevel(level)
    return root


def set_level(level: Union[int, str]) -> None:
    """Set the level of the package root logger."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def disable_logging() -> None:
    """Silence every starkrail logger that inherits the package level."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.CRITICAL + 1)


def enable_debug() -> None:
    """Shortcut for ``configure_logging(level=logging.DEBUG)``."""
    configure_logging(level=logging.DEBUG)


class LogContext(logging.LoggerAdapter):
    """
    Logger adapter that merges a fixed context into every record.

    Example:
        >>> log = LogContext(get_logger(__name__), account="0xabc")
        >>> log.info("Signed invoke", extra={"nonce": 3})
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Any:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs
