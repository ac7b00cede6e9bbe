'''
Async services over the record store.

Re-exports the CRUD services, the journal transactions and the
Services bundle.
'''

from __future__ import annotations

from tradejournal.services.bundle import Services, open_services
from tradejournal.services.journal_service import JournalService
from tradejournal.services.position_service import PositionService
from tradejournal.services.price_service import PriceChange, PriceService
from tradejournal.services.trade_service import TradeInput, TradeService
from tradejournal.services.transactions import (
    CreatePositionData,
    PositionJournalTransaction,
    PositionWithJournal,
    TradeJournalTransaction,
    TradeWithJournal,
)

__all__ = [
    'CreatePositionData',
    'JournalService',
    'PositionJournalTransaction',
    'PositionService',
    'PositionWithJournal',
    'PriceChange',
    'PriceService',
    'Services',
    'TradeInput',
    'TradeJournalTransaction',
    'TradeService',
    'TradeWithJournal',
    'open_services',
]
