'''
Enumerated types for the trade journal domain.

Defines strategy, trade kind, price basis, option and journal
discriminators used across Position, Trade and JournalEntry dataclasses.
Values match the persisted string representation.
'''

from __future__ import annotations

from enum import Enum


__all__ = [
    'JournalEntryType',
    'OptionAction',
    'OptionType',
    'PositionStatus',
    'PriceBasis',
    'StrategyType',
    'TradeEntryState',
    'TradeKind',
    'TradeType',
]


class StrategyType(Enum):

    '''
    Supported position strategies.

    SHORT_PUT is the only option strategy; every other strategy
    trades the underlying stock directly.
    '''

    LONG_STOCK = 'Long Stock'
    SHORT_PUT = 'Short Put'

    @property
    def is_option(self) -> bool:

        '''Return True if the strategy trades option contracts.'''

        return self is StrategyType.SHORT_PUT

    @property
    def trade_kind(self) -> TradeKind:

        '''Return the trade kind this strategy requires.'''

        return TradeKind.OPTION if self.is_option else TradeKind.STOCK


class TradeKind(Enum):

    '''Instrument class traded by a position.'''

    STOCK = 'stock'
    OPTION = 'option'


class TradeType(Enum):

    '''Buy or sell direction of a trade.'''

    BUY = 'buy'
    SELL = 'sell'


class PositionStatus(Enum):

    '''
    Position lifecycle states.

    PLANNED: no trades recorded. OPEN: one trade recorded.
    '''

    PLANNED = 'planned'
    OPEN = 'open'


class PriceBasis(Enum):

    '''Whether an exit target is expressed in stock or option price terms.'''

    STOCK_PRICE = 'stock_price'
    OPTION_PRICE = 'option_price'


class OptionType(Enum):

    '''Option contract type.'''

    CALL = 'call'
    PUT = 'put'


class OptionAction(Enum):

    '''Option execution action: sell to open or buy to close.'''

    STO = 'STO'
    BTC = 'BTC'


class JournalEntryType(Enum):

    '''Journal entry discriminator.'''

    POSITION_PLAN = 'position_plan'
    TRADE_EXECUTION = 'trade_execution'


class TradeEntryState(Enum):

    '''
    Trade slot state of a position under the single-trade rule.

    NO_TRADE: trades list empty. HAS_TRADE: one trade recorded.
    '''

    NO_TRADE = 'NO_TRADE'
    HAS_TRADE = 'HAS_TRADE'
