'''
Runtime settings read from the environment.

Usage:
    # .env file in the working directory (gitignored)
    echo "TRADEJOURNAL_DB_PATH='journal.db'" >> .env

    # or shell exports
    export TRADEJOURNAL_LOG_LEVEL='DEBUG'
'''

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

__all__ = ['Settings']

_LOG_LEVELS = frozenset({'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'})


@dataclass(frozen=True)
class Settings:

    '''
    Process-wide configuration.

    Args:
        db_path (str): SQLite database path, ":memory:" for a throwaway database.
        log_level (str): Minimum log level.
        price_change_threshold_percent (Decimal): Price move that requires confirmation.
    '''

    db_path: str = 'tradejournal.db'
    log_level: str = 'INFO'
    price_change_threshold_percent: Decimal = Decimal('20')

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        if not self.db_path:
            msg = 'Settings: db_path must be a non-empty string'
            raise ValueError(msg)

        if self.log_level.upper() not in _LOG_LEVELS:
            msg = f'Settings: log_level must be one of {sorted(_LOG_LEVELS)}, got {self.log_level!r}'
            raise ValueError(msg)

        if self.price_change_threshold_percent <= 0:
            msg = (
                'Settings: price_change_threshold_percent must be positive, '
                f'got {self.price_change_threshold_percent}'
            )
            raise ValueError(msg)

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Settings:

        '''
        Build settings from a .env file and the process environment.

        Variables already set in the environment take precedence over
        the .env file.

        Args:
            dotenv_path (str | None): Explicit .env path, searched for when None

        Returns:
            Settings: Settings with defaults for unset variables
        '''

        load_dotenv(dotenv_path)

        raw_threshold = os.environ.get('TRADEJOURNAL_PRICE_CHANGE_THRESHOLD', '20')
        try:
            threshold = Decimal(raw_threshold)
        except InvalidOperation as exc:
            msg = f'TRADEJOURNAL_PRICE_CHANGE_THRESHOLD must be a number, got {raw_threshold!r}'
            raise ValueError(msg) from exc

        return cls(
            db_path=os.environ.get('TRADEJOURNAL_DB_PATH', cls.db_path),
            log_level=os.environ.get('TRADEJOURNAL_LOG_LEVEL', cls.log_level),
            price_change_threshold_percent=threshold,
        )
