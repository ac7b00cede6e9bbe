'''
PriceRecord dataclass representing one day of prices for an underlying.

Only the close is used for P&L. Open, high and low are auto-filled
from the close when a simple price is entered.
'''

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from tradejournal.core.domain._require_str import _require_aware, _require_str


__all__ = ['PriceRecord', 'price_record_id']


def price_record_id(underlying: str, on: date) -> str:

    '''
    Compute the deterministic identifier for an underlying and date.

    Args:
        underlying (str): Instrument symbol.
        on (date): Price date.

    Returns:
        str: Identifier unique per underlying per date
    '''

    return f'price_{underlying}_{on.isoformat()}'


@dataclass(frozen=True)
class PriceRecord:

    '''
    Daily OHLC price for an underlying.

    Args:
        id (str): Identifier derived from underlying and date.
        underlying (str): Instrument symbol.
        date (date): Trading date.
        open (Decimal): Opening price.
        high (Decimal): Highest price.
        low (Decimal): Lowest price.
        close (Decimal): Closing price used for valuation.
        updated_at (datetime): Last update time, must be timezone-aware.
    '''

    id: str
    underlying: str
    date: date
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    updated_at: datetime

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        _require_str('PriceRecord', 'underlying', self.underlying)
        _require_aware('PriceRecord', 'updated_at', self.updated_at)
