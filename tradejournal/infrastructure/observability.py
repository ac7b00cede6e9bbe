'''
Structured logging configuration for the trade journal.

Configures structlog with orjson serialization, asyncio-safe context
variable binding, and ISO 8601 UTC timestamps. Call configure_logging()
once at process startup before opening services.
'''

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import orjson
import structlog

__all__ = ['bind_context', 'clear_context', 'configure_logging', 'get_logger']


def _orjson_dumps_str(*args: Any, **kwargs: Any) -> str:

    '''
    Serialize to JSON string via orjson for stdlib ProcessorFormatter.

    Returns:
        str: JSON-encoded string
    '''

    return orjson.dumps(*args, **kwargs).decode()


def configure_logging(log_level: str = 'INFO', stream: IO[str] | None = None) -> None:

    '''
    Configure structlog and stdlib logging to emit one JSON object per line.

    Service modules log through stdlib logging; those lines carry the
    module name under "logger". Transactions log through structlog.

    Args:
        log_level (str): Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream (IO[str] | None): Text stream for stdlib log lines, defaults to stdout

    Returns:
        None
    '''

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.JSONRenderer(serializer=orjson.dumps),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.BytesLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(serializer=_orjson_dumps_str),
        ],
        foreign_pre_chain=[*shared_processors, structlog.stdlib.add_logger_name],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)


def get_logger(name: str | None = None) -> Any:

    '''
    Return a structlog logger, optionally tagged with a logger name.

    Args:
        name (str | None): Logger name, usually the calling module

    Returns:
        Any: Bound structlog logger
    '''

    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)


def bind_context(**values: Any) -> None:

    '''
    Bind key-value pairs to every log line emitted in the current context.

    Args:
        **values (Any): Context fields, e.g. position_id
    '''

    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:

    '''Remove all context fields bound in the current context.'''

    structlog.contextvars.clear_contextvars()
