'''
Shared fixtures and builders for trade journal tests.

Every store is a fresh in-memory SQLite database, so tests never share
state.
'''

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import aiosqlite
import pytest_asyncio

from tradejournal.core.domain import (
    JournalField,
    OptionLeg,
    OptionType,
    Position,
    PriceBasis,
    StrategyType,
    TradeKind,
)
from tradejournal.infrastructure.store import Store
from tradejournal.services import Services

TODAY = date(2026, 3, 2)
TS = datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc)
EXPIRY = date(2026, 4, 17)

THESIS = 'Strong earnings momentum and a clean breakout above resistance'


def make_position(
    position_id: str = 'pos-1',
    symbol: str = 'AAPL',
    **overrides: object,
) -> Position:

    '''Build a valid planned Long Stock position.'''

    fields: dict[str, object] = {
        'id': position_id,
        'symbol': symbol,
        'strategy_type': StrategyType.LONG_STOCK,
        'trade_kind': TradeKind.STOCK,
        'target_entry_price': Decimal('150.00'),
        'target_quantity': Decimal('100'),
        'profit_target': Decimal('165.00'),
        'stop_loss': Decimal('135.00'),
        'position_thesis': THESIS,
        'created_date': TS,
        'profit_target_basis': PriceBasis.STOCK_PRICE,
        'stop_loss_basis': PriceBasis.STOCK_PRICE,
    }
    fields.update(overrides)
    return Position(**fields)  # type: ignore[arg-type]


def make_short_put(position_id: str = 'pos-sp', **overrides: object) -> Position:

    '''Build a valid planned Short Put position on SPY.'''

    fields: dict[str, object] = {
        'symbol': 'SPY',
        'strategy_type': StrategyType.SHORT_PUT,
        'trade_kind': TradeKind.OPTION,
        'target_entry_price': Decimal('2.25'),
        'target_quantity': Decimal('10'),
        'profit_target': Decimal('1.00'),
        'stop_loss': Decimal('4.50'),
        'option': OptionLeg(
            option_type=OptionType.PUT,
            strike_price=Decimal('520'),
            expiration_date=EXPIRY,
            premium_per_contract=Decimal('2.25'),
        ),
        'profit_target_basis': PriceBasis.OPTION_PRICE,
        'stop_loss_basis': PriceBasis.STOCK_PRICE,
    }
    fields.update(overrides)
    return make_position(position_id, **fields)


def plan_fields(thesis: str = THESIS) -> list[JournalField]:

    '''Return position plan journal fields with a thesis answer.'''

    return [
        JournalField('thesis', 'Why are you planning this position?', thesis),
        JournalField('emotional_state', 'How are you feeling about this trade?', 'Calm'),
    ]


def execution_fields() -> list[JournalField]:

    '''Return trade execution journal fields.'''

    return [
        JournalField('execution_notes', 'Describe the execution', 'Filled at the limit'),
    ]


@pytest_asyncio.fixture
async def store():

    async with aiosqlite.connect(':memory:') as conn:
        s = Store(conn)
        await s.ensure_schema()
        yield s


@pytest_asyncio.fixture
async def services(store):

    yield Services.build(store, today=TODAY)
