'''Verify structlog + orjson logging configuration for the trade journal.'''

from __future__ import annotations

import io
import logging

from typing import Any

import orjson
import pytest
import structlog

from tradejournal.infrastructure.observability import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def _reset_context():

    clear_context()
    yield
    clear_context()


def _structlog_line(func: Any, level: int = logging.DEBUG) -> dict[str, Any] | None:

    '''
    Capture a single structlog log line as a parsed dict.

    Args:
        func (Any): Callable that emits at most one structlog log line
        level (int): Minimum level of the filtering logger

    Returns:
        dict[str, Any] | None: Parsed JSON log output, None when nothing was emitted
    '''

    buf = io.BytesIO()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt='iso', utc=True),
            structlog.processors.JSONRenderer(serializer=orjson.dumps),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.BytesLoggerFactory(file=buf),
        cache_logger_on_first_use=False,
    )
    func()
    raw = buf.getvalue().strip()
    return orjson.loads(raw) if raw else None


def _stdlib_lines(func: Any, log_level: str = 'DEBUG') -> list[dict[str, Any]]:

    '''
    Capture stdlib log lines routed through the structlog formatter.

    Args:
        func (Any): Callable that emits stdlib log lines
        log_level (str): Level passed to configure_logging

    Returns:
        list[dict[str, Any]]: One parsed JSON object per emitted line
    '''

    buf = io.StringIO()
    configure_logging(log_level, stream=buf)
    func()
    return [orjson.loads(line) for line in buf.getvalue().splitlines() if line]


@pytest.mark.parametrize('level', ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL', 'debug'])
def test_configure_logging_accepts_levels(level: str) -> None:
    configure_logging(level, stream=io.StringIO())
    assert logging.getLogger().level == getattr(logging, level.upper())


def test_unknown_level_falls_back_to_info() -> None:
    configure_logging('CHATTY', stream=io.StringIO())
    assert logging.getLogger().level == logging.INFO


def test_configure_logging_replaces_root_handlers() -> None:
    configure_logging('INFO', stream=io.StringIO())
    configure_logging('INFO', stream=io.StringIO())
    assert len(logging.getLogger().handlers) == 1


def test_structlog_line_has_event_level_and_utc_timestamp() -> None:
    result = _structlog_line(lambda: get_logger().info('position journal rollback'))
    assert result is not None
    assert result['event'] == 'position journal rollback'
    assert result['level'] == 'info'
    assert result['timestamp'].endswith('Z')
    assert 'T' in result['timestamp']


def test_structlog_keyword_fields() -> None:
    result = _structlog_line(
        lambda: get_logger('tradejournal.services.transactions').warning(
            'trade journal rollback', position_id='pos-1', trade_id='trade-1'
        )
    )
    assert result['position_id'] == 'pos-1'
    assert result['trade_id'] == 'trade-1'


def test_bound_context_appears_and_clears() -> None:
    bind_context(position_id='pos-1', symbol='AAPL')
    bound = _structlog_line(lambda: get_logger().info('position created'))
    assert bound['position_id'] == 'pos-1'
    assert bound['symbol'] == 'AAPL'

    clear_context()
    cleared = _structlog_line(lambda: get_logger().info('position created'))
    assert 'position_id' not in cleared


def test_structlog_level_filtering() -> None:
    assert _structlog_line(lambda: get_logger().debug('hidden'), level=logging.INFO) is None


def test_service_lines_are_json_with_logger_name() -> None:
    lines = _stdlib_lines(
        lambda: logging.getLogger('tradejournal.services.position_service').debug(
            'position deleted: position_id=%s', 'pos-1'
        )
    )
    assert len(lines) == 1
    assert lines[0]['event'] == 'position deleted: position_id=pos-1'
    assert lines[0]['level'] == 'debug'
    assert lines[0]['logger'] == 'tradejournal.services.position_service'
    assert 'timestamp' in lines[0]


def test_stdlib_level_filtering() -> None:
    lines = _stdlib_lines(
        lambda: (
            logging.getLogger('aiosqlite').debug('executing'),
            logging.getLogger('aiosqlite').warning('database is locked'),
        ),
        log_level='WARNING',
    )
    assert [line['event'] for line in lines] == ['database is locked']


def test_stdlib_lines_include_bound_context() -> None:
    bind_context(position_id='pos-7')
    lines = _stdlib_lines(
        lambda: logging.getLogger('tradejournal.infrastructure.store').info('migrated')
    )
    assert lines[0]['position_id'] == 'pos-7'
