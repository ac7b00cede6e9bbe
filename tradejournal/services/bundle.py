'''
Wire every service to one store and hand the bundle to callers.

Services are constructed explicitly and passed down; there is no
module-level singleton. open_services() owns the connection for the
lifetime of the context.
'''

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date

import aiosqlite

from tradejournal.config import Settings
from tradejournal.infrastructure.observability import configure_logging
from tradejournal.infrastructure.store import Store
from tradejournal.services.journal_service import JournalService
from tradejournal.services.position_service import PositionService
from tradejournal.services.price_service import PriceService
from tradejournal.services.trade_service import TradeService
from tradejournal.services.transactions import (
    PositionJournalTransaction,
    TradeJournalTransaction,
)

__all__ = ['Services', 'open_services']

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:

    '''
    All services sharing one store.

    Args:
        store (Store): Shared record store.
        positions (PositionService): Position persistence.
        trades (TradeService): Trade recording.
        journals (JournalService): Journal persistence.
        prices (PriceService): Daily price history.
        position_journal (PositionJournalTransaction): Position plus plan entry creation.
        trade_journal (TradeJournalTransaction): Trade plus execution entry recording.
    '''

    store: Store
    positions: PositionService
    trades: TradeService
    journals: JournalService
    prices: PriceService
    position_journal: PositionJournalTransaction
    trade_journal: TradeJournalTransaction

    @classmethod
    def build(
        cls,
        store: Store,
        settings: Settings | None = None,
        today: date | None = None,
    ) -> Services:

        '''
        Construct every service on top of an initialized store.

        Args:
            store (Store): Store whose schema is already ensured
            settings (Settings | None): Runtime settings, defaults when None
            today (date | None): Fixed reference date for expiration checks

        Returns:
            Services: Wired service bundle
        '''

        settings = settings or Settings()
        positions = PositionService(store, today=today)
        trades = TradeService(positions)
        journals = JournalService(store)
        return cls(
            store=store,
            positions=positions,
            trades=trades,
            journals=journals,
            prices=PriceService(store, settings.price_change_threshold_percent),
            position_journal=PositionJournalTransaction(positions, journals),
            trade_journal=TradeJournalTransaction(positions, trades, journals),
        )


@asynccontextmanager
async def open_services(settings: Settings) -> AsyncIterator[Services]:

    '''
    Configure logging, open the database, ensure its schema and yield
    the service bundle.

    Args:
        settings (Settings): Runtime settings

    Yields:
        Services: Service bundle valid until the context exits
    '''

    configure_logging(settings.log_level)

    async with aiosqlite.connect(settings.db_path) as conn:
        store = Store(conn)
        await store.ensure_schema()
        _log.info(
            'services opened: db_path=%s schema_version=%d',
            settings.db_path,
            await store.schema_version(),
        )
        yield Services.build(store, settings)
