from __future__ import annotations

import logging
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Protocol, TypeAlias, cast

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.processors import CallsiteParameter

if TYPE_CHECKING:
    from structlog.types import Processor

BoundLogger: TypeAlias = structlog.stdlib.BoundLogger
LogLevel: TypeAlias = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]


class LoggingConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOG_",
        extra="forbid",
        frozen=True,
    )

    level: LogLevel = Field(default="INFO")
    json_output: bool = Field(default=False)
    service_name: str = Field(default="retry-async")
    file_path: str | None = Field(default=None)
    max_bytes: int = Field(default=10_000_000, ge=1024)
    backup_count: int = Field(default=5, ge=0)
    library_log_levels: dict[str, LogLevel] = Field(default_factory=dict)


class FormatterStrategy(Protocol):
    def build_processors(self) -> list[Processor]: ...


class OutputStrategy(Protocol):
    def create_handler(self, config: LoggingConfig) -> logging.Handler: ...


def _shared_processors(timestamp_fmt: str, utc: bool) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                CallsiteParameter.MODULE,
                CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.TimeStamper(fmt=timestamp_fmt, utc=utc),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


class JsonFormatterStrategy:
    def build_processors(self) -> list[Processor]:
        return [
            *_shared_processors("iso", utc=True),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]


class ConsoleFormatterStrategy:
    def build_processors(self) -> list[Processor]:
        return [
            *_shared_processors("%Y-%m-%d %H:%M:%S", utc=False),
            structlog.dev.ConsoleRenderer(),
        ]


class RotatingFileOutputStrategy:
    def create_handler(self, config: LoggingConfig) -> logging.Handler:
        if not config.file_path:
            raise ValueError("file_path required for RotatingFileOutputStrategy")

        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        return RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )


class StdoutOutputStrategy:
    def create_handler(self, config: LoggingConfig) -> logging.Handler:
        return logging.StreamHandler(sys.stdout)


def _select_strategies(config: LoggingConfig) -> tuple[FormatterStrategy, OutputStrategy]:
    formatter: FormatterStrategy = JsonFormatterStrategy() if config.json_output else ConsoleFormatterStrategy()
    output: OutputStrategy = RotatingFileOutputStrategy() if config.file_path else StdoutOutputStrategy()
    return formatter, output


def configure_logging(config: LoggingConfig | None = None) -> BoundLogger:
    """Route structlog through the stdlib root logger.

    Retry lifecycle events are emitted under the ``retry_async`` logger
    namespace; silence them with ``library_log_levels={"retry_async": "ERROR"}``.
    """
    actual_config = config if config is not None else _get_default_config()
    formatter, output = _select_strategies(actual_config)

    structlog.configure(
        processors=formatter.build_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = output.create_handler(actual_config)
    handler.setLevel(actual_config.level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(actual_config.level)

    for lib_name, lib_level in actual_config.library_log_levels.items():
        logging.getLogger(lib_name).setLevel(lib_level)

    structlog.contextvars.bind_contextvars(service=actual_config.service_name)

    return get_logger()


@lru_cache(maxsize=1)
def _get_default_config() -> LoggingConfig:
    return LoggingConfig()


def get_logger(name: str | None = None) -> BoundLogger:
    return cast(BoundLogger, structlog.get_logger(name))


def bind_context(**kwargs: str | float | bool | None) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
