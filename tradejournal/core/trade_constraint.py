'''
Single-trade lifecycle rule for positions.

A position is in NO_TRADE while its trades list is empty and HAS_TRADE
once a trade is recorded. Adding a second trade is rejected before any
write is attempted. check() exposes the outcome as state so callers can
skip rendering a trade form; enforce() raises for write paths.
'''

from __future__ import annotations

from dataclasses import dataclass

from tradejournal.core.domain.enums import TradeEntryState
from tradejournal.core.domain.errors import ConstraintError
from tradejournal.core.domain.position import Position

__all__ = ['SINGLE_TRADE_MESSAGE', 'ConstraintCheck', 'TradeConstraint']

SINGLE_TRADE_MESSAGE = 'Phase 1A allows only one trade per position'


@dataclass(frozen=True)
class ConstraintCheck:

    '''
    Result of evaluating the trade rule against a position.

    Args:
        state (TradeEntryState): Current trade slot state.
        error (str | None): User-facing reason a trade cannot be added.
    '''

    state: TradeEntryState
    error: str | None = None

    @property
    def can_add_trade(self) -> bool:

        '''Return True if a trade may be appended.'''

        return self.error is None


class TradeConstraint:

    '''
    Enforce the maximum number of trades a position may hold.

    Args:
        max_trades (int): Trades allowed per position.
        message (str): Error message raised when the limit is reached.
    '''

    def __init__(self, max_trades: int = 1, message: str = SINGLE_TRADE_MESSAGE) -> None:

        if max_trades < 1:
            msg = 'TradeConstraint.max_trades must be positive'
            raise ValueError(msg)
        self.max_trades = max_trades
        self.message = message

    def check(self, position: Position) -> ConstraintCheck:

        '''
        Evaluate whether a trade may be added to the position.

        Args:
            position (Position): Position in its current persisted state.

        Returns:
            ConstraintCheck: Slot state and the rejection message, if any
        '''

        count = len(position.trades)
        state = TradeEntryState.HAS_TRADE if count else TradeEntryState.NO_TRADE
        if count >= self.max_trades:
            return ConstraintCheck(state=state, error=self.message)
        return ConstraintCheck(state=state)

    def enforce(self, position: Position) -> None:

        '''
        Raise if a trade may not be added to the position.

        Args:
            position (Position): Position in its current persisted state.

        Raises:
            ConstraintError: When the position already holds max_trades trades
        '''

        result = self.check(position)
        if not result.can_add_trade:
            raise ConstraintError(result.error or self.message, position.id)
