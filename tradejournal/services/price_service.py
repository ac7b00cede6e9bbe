'''
Daily close prices per underlying, used to value open positions.

One record exists per underlying per date. Writing a second price for
the same day replaces the first. Large moves against the latest close
are flagged for confirmation by validate_price_change().
'''

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from tradejournal.core.domain.price_record import PriceRecord, price_record_id
from tradejournal.core.validators import requires_confirmation, validate_price_record
from tradejournal.infrastructure.records import hydrate, to_record
from tradejournal.infrastructure.store import Store

__all__ = ['DEFAULT_CHANGE_THRESHOLD', 'PriceChange', 'PriceService']

_log = logging.getLogger(__name__)

_COLLECTION = 'price_history'

DEFAULT_CHANGE_THRESHOLD = Decimal('20')


def _price(record: dict[str, Any]) -> PriceRecord:
    return hydrate(PriceRecord, record)


@dataclass(frozen=True)
class PriceChange:

    '''
    Comparison of a proposed close against the latest stored close.

    Args:
        requires_confirmation (bool): Whether the move exceeds the threshold.
        percent_change (Decimal): Signed change rounded to 2 decimals, 0 without history.
        old_price (Decimal | None): Latest stored close, None without history.
        new_price (Decimal): Proposed close.
    '''

    requires_confirmation: bool
    percent_change: Decimal
    old_price: Decimal | None
    new_price: Decimal


class PriceService:

    '''
    Persist and query daily prices through the Store.

    Args:
        store (Store): Record store with the price_history collection
        threshold_percent (Decimal): Move that requires confirmation
    '''

    def __init__(
        self,
        store: Store,
        threshold_percent: Decimal = DEFAULT_CHANGE_THRESHOLD,
    ) -> None:

        self._store = store
        self._threshold = threshold_percent

    async def create_or_update(
        self,
        underlying: str,
        on: date,
        *,
        close: Decimal,
        open: Decimal,
        high: Decimal,
        low: Decimal,
    ) -> PriceRecord:

        '''
        Write the OHLC price of an underlying for one date.

        Args:
            underlying (str): Instrument symbol
            on (date): Trading date
            close (Decimal): Closing price
            open (Decimal): Opening price
            high (Decimal): Highest price
            low (Decimal): Lowest price

        Returns:
            PriceRecord: The stored record

        Raises:
            ValidationError: If the prices are inconsistent, before writing
        '''

        record = PriceRecord(
            id=price_record_id(underlying, on),
            underlying=underlying,
            date=on,
            open=open,
            high=high,
            low=low,
            close=close,
            updated_at=datetime.now(UTC),
        )
        validate_price_record(record)
        await self._store.upsert(_COLLECTION, to_record(record))
        _log.debug(
            'price stored: underlying=%s date=%s close=%s',
            underlying,
            on.isoformat(),
            close,
        )
        return record

    async def create_or_update_simple(
        self,
        underlying: str,
        on: date,
        close: Decimal,
    ) -> PriceRecord:

        '''Write a close price, filling open, high and low with the close.'''

        return await self.create_or_update(
            underlying, on, close=close, open=close, high=close, low=close
        )

    async def _history(self, underlying: str) -> list[PriceRecord]:

        records = await self._store.find(_COLLECTION, underlying=underlying)
        return sorted((_price(r) for r in records), key=lambda p: p.date, reverse=True)

    async def get_latest_price(self, underlying: str) -> PriceRecord | None:

        '''
        Return the most recent price record of an underlying.

        Args:
            underlying (str): Instrument symbol

        Returns:
            PriceRecord | None: Record with the latest date, or None without history
        '''

        history = await self._history(underlying)
        return history[0] if history else None

    async def get_latest_prices(self, underlyings: list[str]) -> dict[str, Decimal]:

        '''
        Return the latest close of each underlying that has one.

        Args:
            underlyings (list[str]): Instrument symbols

        Returns:
            dict[str, Decimal]: Close by underlying, ready for P&L calculation
        '''

        closes: dict[str, Decimal] = {}
        for underlying in dict.fromkeys(underlyings):
            latest = await self.get_latest_price(underlying)
            if latest is not None:
                closes[underlying] = latest.close
        return closes

    async def get_price_by_date(self, underlying: str, on: date) -> PriceRecord | None:

        record = await self._store.get(_COLLECTION, price_record_id(underlying, on))
        return _price(record) if record else None

    async def get_price_history(
        self,
        underlying: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[PriceRecord]:

        '''
        Return price records of an underlying, newest first.

        Args:
            underlying (str): Instrument symbol
            limit (int | None): Maximum number of records, all when None
            offset (int): Number of newest records to skip

        Returns:
            list[PriceRecord]: One page of price history
        '''

        history = await self._history(underlying)
        end = None if limit is None else offset + limit
        return history[offset:end]

    async def validate_price_change(self, underlying: str, new_price: Decimal) -> PriceChange:

        '''
        Compare a proposed close against the latest stored close.

        Args:
            underlying (str): Instrument symbol
            new_price (Decimal): Proposed close

        Returns:
            PriceChange: Confirmation requirement and percent change
        '''

        latest = await self.get_latest_price(underlying)
        old_price = latest.close if latest else None

        percent = Decimal('0')
        if old_price:
            percent = ((new_price - old_price) / old_price * 100).quantize(
                Decimal('0.01'), rounding=ROUND_HALF_UP
            )

        return PriceChange(
            requires_confirmation=requires_confirmation(old_price, new_price, self._threshold),
            percent_change=percent,
            old_price=old_price,
            new_price=new_price,
        )

    async def clear_all(self) -> None:

        await self._store.clear(_COLLECTION)
