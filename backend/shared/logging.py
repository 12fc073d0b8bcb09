"""Structured logging for the game client and the room relay.

Both processes log through structlog into stdlib handlers: stdout always, plus
a datetime-stamped file when a log directory is configured. Every line carries
the service name, and the client binds room and participant ids per session.

Environment variables:
- LOG_FORMAT: "json" for log aggregation, "console" or unset for
  human-readable output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import field_validator
from pydantic_settings import BaseSettings

if TYPE_CHECKING:
    from collections.abc import Iterable, MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

# Socket.IO and engine.io log every packet at INFO; uvicorn.access every request.
NOISY_LOGGERS = ("socketio", "engineio", "socketio.client", "engineio.client", "uvicorn.access")

_VALID_LOG_FORMATS = {"json", "console", ""}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingSettings(BaseSettings):
    model_config = {"env_prefix": "LOG_"}

    format: str = ""
    level: str = "INFO"

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        value = v.lower()
        if value not in _VALID_LOG_FORMATS:
            raise ValueError(f"Invalid LOG_FORMAT={value!r}. Must be 'json', 'console', or unset.")
        return value

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        value = v.upper()
        if value not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL={value!r}. Must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}.")
        return value

    @property
    def json_mode(self) -> bool:
        return self.format == "json"

    @property
    def level_number(self) -> int:
        return logging.getLevelNamesMapping()[self.level]


def _plain(value: Any) -> Any:  # noqa: ANN401
    return value.value if isinstance(value, Enum) else value


def _serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace Enum instances (top level, in dicts and in tuples) with their .value."""
    for key, value in event_dict.items():
        if isinstance(value, dict):
            event_dict[key] = {k: _plain(v) for k, v in value.items()}
        elif isinstance(value, tuple):
            event_dict[key] = tuple(_plain(v) for v in value)
        else:
            event_dict[key] = _plain(value)
    return event_dict


def _tag_service(service: str | None) -> structlog.types.Processor:
    def add_service(
        _logger: object,
        _method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        if service is not None:
            event_dict.setdefault("service", service)
        return event_dict

    return add_service


def _is_test() -> bool:
    return "pytest" in sys.modules


def _build_stdlib_formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def bind_session(room_id: str, participant_id: str | None = None) -> None:
    """Attach room (and participant) ids to every log line from this context."""
    values: dict[str, str] = {"room_id": room_id}
    if participant_id is not None:
        values["participant_id"] = participant_id
    structlog.contextvars.bind_contextvars(**values)


def _open_log_file(log_dir: Path | str, *, json_mode: bool) -> tuple[logging.Handler, Path]:
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    file_path = dir_path / f"{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"
    handler = logging.FileHandler(file_path)
    handler.setFormatter(_build_stdlib_formatter(json_mode=json_mode))
    return handler, file_path


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
    *,
    service: str | None = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> Path | None:
    """Configure structlog with stdout and optional file output.

    Level and format come from LoggingSettings unless level is passed.
    Loggers named in quiet are raised to WARNING. Returns the log file path
    when one was opened (never under pytest).
    """
    settings = LoggingSettings()

    # format_exc_info runs in ProcessorFormatter, not here, so tracebacks are
    # rendered once per handler.
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _tag_service(service),
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_enums,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level if level is not None else settings.level_number)
    root_logger.handlers.clear()
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_build_stdlib_formatter(json_mode=settings.json_mode, colors=sys.stdout.isatty()))
    root_logger.addHandler(stdout_handler)

    if log_dir is None or _is_test():
        return None
    file_handler, file_path = _open_log_file(log_dir, json_mode=settings.json_mode)
    root_logger.addHandler(file_handler)
    return file_path
