'''
CRUD service for positions.

Every write revalidates the whole position. Every read hydrates the
stored record after upgrading legacy shapes, so callers always see
datetime values, a journal_entry_ids list and a status derived from
the embedded trades.
'''

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from tradejournal.core.calculators import (
    PositionMetrics,
    RiskMetrics,
    calculate_position_metrics,
    calculate_position_risk,
)
from tradejournal.core.domain.enums import PositionStatus
from tradejournal.core.domain.position import Position
from tradejournal.core.validators import validate_position
from tradejournal.infrastructure.records import hydrate, to_record
from tradejournal.infrastructure.store import Store

__all__ = ['PositionService']

_log = logging.getLogger(__name__)

_COLLECTION = 'positions'


def _position(record: dict[str, Any]) -> Position:
    return hydrate(Position, record)


class PositionService:

    '''
    Persist and load positions through the Store.

    Args:
        store (Store): Record store with the positions collection
        today (date | None): Fixed reference date for expiration checks, defaults to the clock
    '''

    def __init__(self, store: Store, today: date | None = None) -> None:

        self._store = store
        self._today = today

    def validate(self, position: Position) -> None:

        '''
        Validate a new position against this service's reference date.

        Raises:
            ValidationError: On the first violated invariant
        '''

        validate_position(position, self._today)

    async def create(self, position: Position) -> Position:

        '''
        Validate and insert a new position.

        Args:
            position (Position): Fully assembled position

        Returns:
            Position: The persisted position

        Raises:
            ValidationError: If any invariant is violated, before writing
            DuplicateRecordError: If the id already exists
        '''

        self.validate(position)
        await self._store.add(_COLLECTION, to_record(position))
        _log.debug(
            'position created: position_id=%s symbol=%s strategy=%s',
            position.id,
            position.symbol,
            position.strategy_type.value,
        )
        return position

    async def get_by_id(self, position_id: str) -> Position | None:

        '''
        Return the position with this id.

        Args:
            position_id (str): Position identifier

        Returns:
            Position | None: Normalized position, or None if absent
        '''

        record = await self._store.get(_COLLECTION, position_id)
        return _position(record) if record else None

    async def get_all(self) -> list[Position]:

        '''Return every position in creation order.'''

        return [_position(record) for record in await self._store.get_all(_COLLECTION)]

    async def find_by_symbol(self, symbol: str) -> list[Position]:

        '''Return positions for a ticker symbol.'''

        records = await self._store.find(_COLLECTION, symbol=symbol.strip().upper())
        return [_position(record) for record in records]

    async def find_by_status(self, status: PositionStatus) -> list[Position]:

        '''Return positions in a lifecycle state.'''

        records = await self._store.find(_COLLECTION, status=status.value)
        return [_position(record) for record in records]

    async def update(self, position: Position) -> None:

        '''
        Validate and replace an existing position.

        Args:
            position (Position): Position with its updated fields

        Raises:
            ValidationError: If any invariant is violated, before writing
            RecordNotFoundError: If the position does not exist
        '''

        validate_position(position, self._today, check_expiration=False)
        await self._store.put(_COLLECTION, to_record(position))
        _log.debug(
            'position updated: position_id=%s trades=%d journal_entries=%d',
            position.id,
            len(position.trades),
            len(position.journal_entry_ids),
        )

    async def delete(self, position_id: str) -> None:

        '''
        Delete a position and its embedded trades.

        Args:
            position_id (str): Position identifier

        Raises:
            RecordNotFoundError: If the position does not exist
        '''

        await self._store.delete(_COLLECTION, position_id)
        _log.debug('position deleted: position_id=%s', position_id)

    async def clear_all(self) -> None:

        '''Delete every position. Intended for tests and resets.'''

        await self._store.clear(_COLLECTION)

    def calculate_position_metrics(
        self,
        position: Position,
        price_by_underlying: Mapping[str, Decimal],
    ) -> PositionMetrics:

        '''
        Compute display metrics for a loaded position.

        Args:
            position (Position): Position returned by this service
            price_by_underlying (Mapping[str, Decimal]): Latest close per underlying

        Returns:
            PositionMetrics: Cost basis, open quantity and P&L figures
        '''

        return calculate_position_metrics(position, price_by_underlying)

    def calculate_risk(self, position: Position) -> RiskMetrics:

        '''Compute the planned risk metrics of a loaded position.'''

        return calculate_position_risk(position)
