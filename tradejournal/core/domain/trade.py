'''
Trade dataclass representing a single fill applied to a Position.

Trades are immutable facts: once recorded through the Trade service no
field changes. Trades are stored embedded in their owning Position.
'''

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from tradejournal.core.domain._require_str import _require_aware
from tradejournal.core.domain.enums import OptionAction, OptionType, TradeType


__all__ = ['OptionExecution', 'Trade']


@dataclass(frozen=True)
class OptionExecution:

    '''
    Option-specific execution metadata attached to a Trade.

    Args:
        action (OptionAction): Sell to open or buy to close.
        option_type (OptionType): Contract type.
        strike_price (Decimal): Contract strike.
        expiration_date (date): Contract expiration.
        contract_quantity (Decimal): Number of contracts, 1 contract = 100 shares.
        occ_symbol (str | None): OCC contract symbol, e.g. "AAPL  250117P00145000".
        underlying_price_at_trade (Decimal | None): Underlying price when filled.
        created_stock_position_id (str | None): Stock position created by assignment.
        cost_basis_adjustment (Decimal | None): Premium adjustment applied on assignment.
    '''

    action: OptionAction
    option_type: OptionType
    strike_price: Decimal
    expiration_date: date
    contract_quantity: Decimal
    occ_symbol: str | None = None
    underlying_price_at_trade: Decimal | None = None
    created_stock_position_id: str | None = None
    cost_basis_adjustment: Decimal | None = None


@dataclass(frozen=True)
class Trade:

    '''
    A single executed fill against a Position.

    Args:
        id (str): Unique trade identifier.
        position_id (str): Owning position identifier.
        trade_type (TradeType): Buy or sell.
        quantity (Decimal): Filled quantity, shares or contracts.
        price (Decimal): Fill price per share or contract.
        timestamp (datetime): Execution time, must be timezone-aware.
        underlying (str): Instrument used for price lookups.
        notes (str | None): Free-form note.
        option (OptionExecution | None): Present only for option-strategy trades.
    '''

    id: str
    position_id: str
    trade_type: TradeType
    quantity: Decimal
    price: Decimal
    timestamp: datetime
    underlying: str
    notes: str | None = None
    option: OptionExecution | None = None

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        _require_aware('Trade', 'timestamp', self.timestamp)

    @property
    def is_buy(self) -> bool:

        '''Return True if this trade adds to the position.'''

        return self.trade_type is TradeType.BUY
