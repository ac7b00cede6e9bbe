'''
Position dataclass representing a planned or executed trade idea.

Positions are mutable: status, trades and journal_entry_ids change as
trades and journal entries are recorded. Mutation logic belongs in the
services, not here. Option-only fields live in a single OptionLeg
payload that is present if and only if the strategy trades options.
'''

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from tradejournal.core.domain._require_str import _require_aware
from tradejournal.core.domain.enums import (
    OptionType,
    PositionStatus,
    PriceBasis,
    StrategyType,
    TradeKind,
)
from tradejournal.core.domain.trade import Trade


__all__ = ['OptionLeg', 'Position']


@dataclass(frozen=True)
class OptionLeg:

    '''
    Option contract parameters planned for an option strategy.

    Args:
        option_type (OptionType): Contract type, PUT for Short Put.
        strike_price (Decimal): Contract strike, must be positive.
        expiration_date (date): Contract expiration, must not be in the past.
        premium_per_contract (Decimal): Premium per share of the contract, non-negative.
    '''

    option_type: OptionType
    strike_price: Decimal
    expiration_date: date
    premium_per_contract: Decimal


@dataclass
class Position:

    '''
    A tracked trade plan and the trades that realize it.

    Args:
        id (str): Unique position identifier, immutable.
        symbol (str): Ticker symbol.
        strategy_type (StrategyType): Strategy discriminator.
        trade_kind (TradeKind): Instrument class, must match strategy_type.
        target_entry_price (Decimal): Planned entry price, must be positive.
        target_quantity (Decimal): Planned quantity (shares or contracts), must be positive.
        profit_target (Decimal): Planned profit exit.
        stop_loss (Decimal): Planned stop exit.
        position_thesis (str): Rationale, at least 10 characters.
        created_date (datetime): Creation time, must be timezone-aware.
        status (PositionStatus): PLANNED until a trade is recorded.
        profit_target_basis (PriceBasis | None): Basis of profit_target.
        stop_loss_basis (PriceBasis | None): Basis of stop_loss.
        option (OptionLeg | None): Option payload, present only for option strategies.
        journal_entry_ids (list[str]): Linked journal entries in creation order.
        trades (list[Trade]): Recorded trades, at most one.
    '''

    id: str
    symbol: str
    strategy_type: StrategyType
    trade_kind: TradeKind
    target_entry_price: Decimal
    target_quantity: Decimal
    profit_target: Decimal
    stop_loss: Decimal
    position_thesis: str
    created_date: datetime
    status: PositionStatus = PositionStatus.PLANNED
    profit_target_basis: PriceBasis | None = None
    stop_loss_basis: PriceBasis | None = None
    option: OptionLeg | None = None
    journal_entry_ids: list[str] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)

    def __post_init__(self) -> None:

        '''Validate structural invariants at construction time.'''

        _require_aware('Position', 'created_date', self.created_date)

        if not isinstance(self.journal_entry_ids, list):
            msg = 'journal_entry_ids must be an array'
            raise ValueError(msg)

        if not isinstance(self.trades, list):
            msg = 'trades must be an array'
            raise ValueError(msg)

    @property
    def is_option(self) -> bool:

        '''Return True if the position trades option contracts.'''

        return self.strategy_type.is_option

    @property
    def has_trades(self) -> bool:

        '''Return True if at least one trade has been recorded.'''

        return len(self.trades) > 0
