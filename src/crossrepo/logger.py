"""Logging helpers shared by repositories, emitters and the whitelist guard."""

import logging
from typing import Any, Optional

from crossrepo.settings import settings as api_settings

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_configured = False


def setup_global_logging(level: str = "INFO") -> None:
    """Configure the root logger once in a standardized format.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO")
    """
    global _configured
    if _configured:
        return
    logging.basicConfig(
        level=_LEVELS.get(level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _configured = True


def get_logger(name: Optional[str] = None) -> "Logger":
    """Return a module/class logger. Ensures global logging is configured."""
    return Logger(name or __name__)


def _format_fields(fields: dict) -> str:
    return " ".join(f"{key}={value!r}" for key, value in fields.items())


class Logger:
    """Thin wrapper over standard logging.

    - Honors global configuration via `setup_global_logging` driven by `LOG_LEVEL`.
    - `.message(text)` logs at the configured level (INFO when unset).
    - `.event(name, **fields)` logs one repository operation as `name key=value ...`
      through `.message`.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        if not _configured:
            setup_global_logging(api_settings.LOG_LEVEL)
        self._logger = logging.getLogger(name or __name__)

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs) -> None:
        self._logger.critical(msg, *args, **kwargs)

    def message(self, msg: str, *args, **kwargs) -> None:
        level = (api_settings.LOG_LEVEL or "").upper()
        if level in ("", "INFO"):
            self.info(msg, *args, **kwargs)
        else:
            self._logger.log(_LEVELS.get(level, logging.INFO), msg, *args, **kwargs)

    def event(self, name: str, **fields: Any) -> None:
        if fields:
            self.message("%s %s", name, _format_fields(fields))
        else:
            self.message("%s", name)
