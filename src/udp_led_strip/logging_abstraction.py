"""Logging layer for the LED strip client.

Wraps the standard library logger with two output formats (JSON lines for
machines, a compact text line for humans), structured ``extra`` context, and
the operation id from :mod:`udp_led_strip.correlation`.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import cast

from typing_extensions import override

from udp_led_strip.correlation import current_operation_id

__all__ = [
    "HumanReadableFormatter",
    "JSONFormatter",
    "StripLogger",
    "get_logger",
]

LOG_FORMATS = ("json", "human", "both")


def _context_of(record: logging.LogRecord) -> Mapping[str, object] | None:
    extra_data = getattr(record, "extra_data", None)
    if isinstance(extra_data, Mapping) and extra_data:
        return cast("Mapping[str, object]", extra_data)
    return None


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, object] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
            "operation_id": current_operation_id(),
        }
        context = _context_of(record)
        if context is not None:
            log_data["context"] = dict(context)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``timestamp level [module:line] [op-id] > message | k=v``"""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(module)s:%(lineno)d] %(operation_id)s > %(message)s",
            datefmt="%m/%d/%y %H:%M:%S",
        )

    @override
    def format(self, record: logging.LogRecord) -> str:
        operation_id = current_operation_id()
        record.operation_id = f"[{operation_id}]" if operation_id else "[------------]"
        formatted = super().format(record)

        context = _context_of(record)
        if context is not None:
            context_str = " | ".join(f"{k}={v}" for k, v in context.items())
            formatted = f"{formatted} | {context_str}"
        return formatted


class StripLogger:
    """Logger facade with structured context.

    ``extra`` mappings are carried on the record as ``extra_data`` so both
    formatters can render them without colliding with LogRecord attributes.
    """

    def __init__(
        self,
        name: str,
        log_format: str = "human",
        json_file: str | Path | None = None,
        human_output: str | None = "stderr",
        level: int | None = None,
    ) -> None:
        if log_format not in LOG_FORMATS:
            msg = f"log_format must be one of {LOG_FORMATS}, got {log_format!r}"
            raise ValueError(msg)
        self.name: str = name
        self.log_format: str = log_format
        self.logger: logging.Logger = logging.getLogger(name)

        if level is None:
            from udp_led_strip.const import LED_STRIP_DEBUG

            level = logging.DEBUG if LED_STRIP_DEBUG else logging.INFO
        self.logger.setLevel(level)

        # Loggers are process-wide; only the first wrapper installs handlers.
        if not self.logger.handlers:
            self._configure_handlers(json_file, human_output)

    def _configure_handlers(self, json_file: str | Path | None, human_output: str | None) -> None:
        if self.log_format in ("json", "both") and json_file:
            json_path = Path(json_file)
            try:
                json_path.parent.mkdir(parents=True, exist_ok=True)
                json_handler = logging.FileHandler(json_path, mode="a")
            except OSError as e:
                print(f"Warning: Failed to open JSON log file {json_file}: {e}", file=sys.stderr)
            else:
                json_handler.setFormatter(JSONFormatter())
                self.logger.addHandler(json_handler)

        if self.log_format in ("human", "both"):
            target = human_output or "stderr"
            if target == "stdout":
                human_handler: logging.Handler = logging.StreamHandler(sys.stdout)
            elif target == "stderr":
                human_handler = logging.StreamHandler(sys.stderr)
            else:
                try:
                    human_path = Path(target)
                    human_path.parent.mkdir(parents=True, exist_ok=True)
                    human_handler = logging.FileHandler(human_path, mode="a")
                except OSError as e:
                    print(f"Warning: Failed to open log file {target}: {e}", file=sys.stderr)
                    human_handler = logging.StreamHandler(sys.stderr)
            human_handler.setFormatter(HumanReadableFormatter())
            self.logger.addHandler(human_handler)

    def _log(self, level: int, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        payload = {"extra_data": dict(extra)} if extra else None
        # stacklevel=3 so module/lineno point at the caller, not this wrapper
        self.logger.log(level, msg, *args, extra=payload, stacklevel=3)

    def debug(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.DEBUG, msg, *args, extra=extra)

    def info(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.INFO, msg, *args, extra=extra)

    def warning(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.WARNING, msg, *args, extra=extra)

    def error(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        self._log(logging.ERROR, msg, *args, extra=extra)

    def exception(self, msg: str, *args: object, extra: Mapping[str, object] | None = None) -> None:
        """Log at error level with the active exception's traceback."""
        payload = {"extra_data": dict(extra)} if extra else None
        self.logger.exception(msg, *args, extra=payload, stacklevel=2)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    @property
    def handlers(self) -> list[logging.Handler]:
        return self.logger.handlers


def get_logger(
    name: str,
    log_format: str | None = None,
    json_file: str | Path | None = None,
    human_output: str | None = None,
) -> StripLogger:
    """Get a StripLogger configured from the ``LED_STRIP_LOG_*`` environment.

    Args:
        name: Logger name, normally ``__name__``
        log_format: Override for ``LED_STRIP_LOG_FORMAT`` ("json", "human" or "both")
        json_file: Override for ``LED_STRIP_LOG_JSON_FILE``
        human_output: Override for ``LED_STRIP_LOG_HUMAN_OUTPUT`` ("stdout", "stderr" or a path)

    Returns:
        StripLogger instance

    """
    from udp_led_strip.const import (
        LED_STRIP_LOG_FORMAT,
        LED_STRIP_LOG_HUMAN_OUTPUT,
        LED_STRIP_LOG_JSON_FILE,
    )

    return StripLogger(
        name=name,
        log_format=log_format or LED_STRIP_LOG_FORMAT,
        json_file=json_file or LED_STRIP_LOG_JSON_FILE,
        human_output=human_output or LED_STRIP_LOG_HUMAN_OUTPUT,
    )
