'''
Domain dataclasses for the trade journal.

Re-exports all domain types: enums, the error hierarchy, and the
Position, Trade, JournalEntry and PriceRecord dataclasses.
'''

from __future__ import annotations

from tradejournal.core.domain.enums import (
    JournalEntryType,
    OptionAction,
    OptionType,
    PositionStatus,
    PriceBasis,
    StrategyType,
    TradeEntryState,
    TradeKind,
    TradeType,
)
from tradejournal.core.domain.errors import (
    ConstraintError,
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
    TradeJournalError,
    ValidationError,
)
from tradejournal.core.domain.journal import (
    JOURNAL_PROMPTS,
    JournalEntry,
    JournalField,
    JournalPrompt,
)
from tradejournal.core.domain.position import OptionLeg, Position
from tradejournal.core.domain.price_record import PriceRecord, price_record_id
from tradejournal.core.domain.trade import OptionExecution, Trade

__all__ = [
    'JOURNAL_PROMPTS',
    'ConstraintError',
    'DuplicateRecordError',
    'JournalEntry',
    'JournalEntryType',
    'JournalField',
    'JournalPrompt',
    'OptionAction',
    'OptionExecution',
    'OptionLeg',
    'OptionType',
    'Position',
    'PositionStatus',
    'PriceBasis',
    'PriceRecord',
    'RecordNotFoundError',
    'StorageError',
    'StrategyType',
    'Trade',
    'TradeEntryState',
    'TradeJournalError',
    'TradeKind',
    'TradeType',
    'ValidationError',
    'price_record_id',
]
