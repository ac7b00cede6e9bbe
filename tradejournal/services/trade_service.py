'''
Record trades against positions under the single-trade rule.

Trades are embedded in their owning position, so appending a trade is
one position write. The trade rule is checked before the trade is
built or validated, and long before anything is written.
'''

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from tradejournal.core.calculators import calculate_simple_cost_basis, compute_status
from tradejournal.core.domain.enums import TradeType
from tradejournal.core.domain.errors import RecordNotFoundError, ValidationError
from tradejournal.core.domain.position import Position
from tradejournal.core.domain.trade import OptionExecution, Trade
from tradejournal.core.ids import generate_trade_id
from tradejournal.core.trade_constraint import ConstraintCheck, TradeConstraint
from tradejournal.core.validators import validate_trade
from tradejournal.services.position_service import PositionService

__all__ = ['TradeInput', 'TradeService']

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeInput:

    '''
    Caller-supplied fields of a trade before an id is assigned.

    Args:
        trade_type (TradeType): Buy or sell.
        quantity (Decimal): Filled quantity.
        price (Decimal): Fill price.
        timestamp (datetime): Execution time, must be timezone-aware.
        underlying (str | None): Price lookup instrument, defaults to the position symbol.
        notes (str | None): Free-form note.
        option (OptionExecution | None): Option execution details for option strategies.
    '''

    trade_type: TradeType
    quantity: Decimal
    price: Decimal
    timestamp: datetime
    underlying: str | None = None
    notes: str | None = None
    option: OptionExecution | None = None

    def validate(self) -> None:

        '''
        Check the fields a Trade cannot be built without.

        Raises:
            ValidationError: If the timestamp is missing or naive
        '''

        timestamp = self.timestamp
        if not isinstance(timestamp, datetime) or timestamp.utcoffset() is None:
            msg = 'timestamp must be a timezone-aware datetime'
            raise ValidationError(msg)


class TradeService:

    '''
    Append trades to positions and expose trade-derived values.

    Args:
        positions (PositionService): Service owning position persistence
        constraint (TradeConstraint | None): Trade count rule, defaults to one trade per position
    '''

    def __init__(
        self,
        positions: PositionService,
        constraint: TradeConstraint | None = None,
    ) -> None:

        self._positions = positions
        self._constraint = constraint or TradeConstraint()

    async def _require_position(self, position_id: str) -> Position:

        position = await self._positions.get_by_id(position_id)
        if position is None:
            raise RecordNotFoundError('positions', position_id)
        return position

    async def get_entry_state(self, position_id: str) -> ConstraintCheck:

        '''
        Return whether a trade may be added to the position.

        Presentation code calls this to decide between a trade form and
        the rule's error message.

        Args:
            position_id (str): Position identifier

        Returns:
            ConstraintCheck: Trade slot state and rejection message, if any

        Raises:
            RecordNotFoundError: If the position does not exist
        '''

        return self._constraint.check(await self._require_position(position_id))

    async def add_trade(self, position_id: str, trade_input: TradeInput) -> Trade:

        '''
        Append a trade to a position and persist the position.

        Args:
            position_id (str): Position identifier
            trade_input (TradeInput): Trade fields

        Returns:
            Trade: The recorded trade with its generated id

        Raises:
            RecordNotFoundError: If the position does not exist
            ConstraintError: If the position already holds a trade
            ValidationError: If the trade or the updated position is invalid
        '''

        position = await self._require_position(position_id)
        self._constraint.enforce(position)
        trade_input.validate()

        trade = Trade(
            id=generate_trade_id(),
            position_id=position.id,
            trade_type=trade_input.trade_type,
            quantity=trade_input.quantity,
            price=trade_input.price,
            timestamp=trade_input.timestamp,
            underlying=trade_input.underlying or position.symbol,
            notes=trade_input.notes,
            option=trade_input.option,
        )
        validate_trade(trade, position)

        trades = [*position.trades, trade]
        await self._positions.update(
            replace(position, trades=trades, status=compute_status(trades))
        )
        _log.info(
            'trade added: position_id=%s trade_id=%s type=%s qty=%s price=%s',
            position.id,
            trade.id,
            trade.trade_type.value,
            trade.quantity,
            trade.price,
        )
        return trade

    async def get_trades(self, position_id: str) -> list[Trade]:

        '''
        Return the trades recorded for a position.

        Raises:
            RecordNotFoundError: If the position does not exist
        '''

        return (await self._require_position(position_id)).trades

    async def get_cost_basis(self, position_id: str) -> Decimal:

        '''
        Return the simple cost basis (first buy price) of a position.

        Raises:
            RecordNotFoundError: If the position does not exist
        '''

        return calculate_simple_cost_basis(await self.get_trades(position_id))
