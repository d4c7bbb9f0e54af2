"""Structured logging configuration for the room planner."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from roomplan.exceptions import ConfigurationError

if TYPE_CHECKING:
    from roomplan.settings import LoggingSettings

LOG_LEVEL_ENV = "ROOMPLAN_LOG_LEVEL"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class JSONFormatter:
    """One JSON object per record.

    Keyword arguments passed to ``logger.info(...)`` (``line_id``,
    ``template_id``, ``key`` ...) land in ``record["extra"]`` and are emitted
    under ``context`` so they never shadow the fixed fields.
    """

    def __call__(self, record: dict[str, Any]) -> str:
        log_data: dict[str, Any] = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "logger": record.get("name", ""),
            "message": record["message"],
            "function": record.get("function", ""),
            "line": record.get("line", 0),
        }

        exception = record.get("exception")
        if exception:
            log_data["exception"] = {
                "type": exception.type.__name__ if exception.type else None,
                "value": str(exception.value) if exception.value else None,
            }

        if record.get("extra"):
            log_data["context"] = dict(record["extra"])

        # loguru treats the returned string as a format template
        return json.dumps(log_data, ensure_ascii=False, default=str).replace("{", "{{").replace("}", "}}") + "\n"


def resolve_level(level: str) -> str:
    """Effective level name: ``ROOMPLAN_LOG_LEVEL`` wins over the configured one.

    Raises:
        ConfigurationError: If the name is not a loguru level.
    """
    name = (os.getenv(LOG_LEVEL_ENV) or level).upper()
    try:
        logger.level(name)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown log level: {name}", {"level": name}) from exc
    return name


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Whether to use JSON formatting (useful for production).
        log_file: Optional path to log file. If None, logs only to stderr.
    """
    name = resolve_level(level)
    logger.remove()

    formatter: Any = JSONFormatter() if json_format else CONSOLE_FORMAT

    logger.add(
        sys.stderr,
        format=formatter,
        level=name,
        colorize=not json_format,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=formatter,
            level=name,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
        )


def configure_logging(settings: "LoggingSettings") -> None:
    """Apply the ``logging`` section of :class:`roomplan.settings.Settings`."""
    setup_logging(level=settings.level, json_format=settings.json_format, log_file=settings.file)


__all__ = ["CONSOLE_FORMAT", "JSONFormatter", "LOG_LEVEL_ENV", "configure_logging", "resolve_level", "setup_logging"]
