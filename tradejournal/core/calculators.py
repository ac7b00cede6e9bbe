'''
Pure calculators deriving cost basis, P&L, status and risk metrics.

Calculators never touch persistence; they operate on positions and
trades already loaded by a service. P&L is None, never zero, when it
cannot be computed, so callers can render "no data" distinctly.
'''

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from tradejournal.core.domain.enums import PositionStatus, PriceBasis, StrategyType
from tradejournal.core.domain.position import Position
from tradejournal.core.domain.trade import Trade

__all__ = [
    'CONTRACT_MULTIPLIER',
    'PositionMetrics',
    'RiskMetrics',
    'TargetType',
    'calculate_average_cost',
    'calculate_open_quantity',
    'calculate_option_basis_value',
    'calculate_pnl_percentage',
    'calculate_position_metrics',
    'calculate_position_pnl',
    'calculate_position_risk',
    'calculate_risk_metrics',
    'calculate_simple_cost_basis',
    'calculate_total_cost_basis',
    'calculate_trade_pnl',
    'compute_status',
]

CONTRACT_MULTIPLIER = Decimal(100)

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)
_CENT = Decimal('0.01')


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _buys(trades: Sequence[Trade]) -> list[Trade]:
    return [trade for trade in trades if trade.is_buy]


def calculate_simple_cost_basis(trades: Sequence[Trade]) -> Decimal:

    '''
    Return the price of the first buy trade.

    With at most one trade per position this equals the trade price.
    Sell trades are skipped.

    Args:
        trades (Sequence[Trade]): Trades in recorded order.

    Returns:
        Decimal: First buy price, or zero when there is no buy trade
    '''

    for trade in trades:
        if trade.is_buy:
            return trade.price
    return _ZERO


def calculate_total_cost_basis(trades: Sequence[Trade]) -> Decimal:

    '''
    Return the sum of quantity times price over buy trades.

    Args:
        trades (Sequence[Trade]): Trades in recorded order.

    Returns:
        Decimal: Total cost basis, zero when there are no buys
    '''

    return sum((trade.quantity * trade.price for trade in _buys(trades)), _ZERO)


def calculate_average_cost(trades: Sequence[Trade], fallback_price: Decimal) -> Decimal:

    '''
    Return the quantity-weighted average buy price.

    Args:
        trades (Sequence[Trade]): Trades in recorded order.
        fallback_price (Decimal): Estimate returned when there are no buys,
            normally the position's target_entry_price.

    Returns:
        Decimal: Weighted average buy price, or fallback_price
    '''

    buys = _buys(trades)
    quantity = sum((trade.quantity for trade in buys), _ZERO)
    if quantity == _ZERO:
        return fallback_price
    return calculate_total_cost_basis(buys) / quantity


def calculate_open_quantity(trades: Sequence[Trade]) -> Decimal:

    '''
    Return the net quantity held: buys minus sells.

    Args:
        trades (Sequence[Trade]): Trades in recorded order.

    Returns:
        Decimal: Net open quantity, negative for short positions
    '''

    return sum(
        (trade.quantity if trade.is_buy else -trade.quantity for trade in trades),
        _ZERO,
    )


def compute_status(trades: Sequence[Trade]) -> PositionStatus:

    '''Return PLANNED for an empty trade list, otherwise OPEN.'''

    return PositionStatus.OPEN if trades else PositionStatus.PLANNED


def calculate_trade_pnl(trade: Trade, current_price: Decimal) -> Decimal:

    '''
    Return unrealized P&L of a single trade.

    A sell is realized when executed, so it contributes zero.

    Args:
        trade (Trade): Recorded trade.
        current_price (Decimal): Latest close of the trade's underlying.

    Returns:
        Decimal: (current_price - price) * quantity for a buy, zero for a sell
    '''

    if not trade.is_buy:
        return _ZERO
    return (current_price - trade.price) * trade.quantity


def calculate_position_pnl(
    position: Position,
    price_by_underlying: Mapping[str, Decimal],
) -> Decimal | None:

    '''
    Return unrealized P&L of a position at current prices.

    Each trade is valued against the close of its own underlying and
    trades without a close are skipped.

    Args:
        position (Position): Position with its trades loaded.
        price_by_underlying (Mapping[str, Decimal]): Latest close per underlying.

    Returns:
        Decimal | None: Summed P&L, or None when the position has no trades
            or no trade has a current price
    '''

    total: Decimal | None = None
    for trade in position.trades:
        current = price_by_underlying.get(trade.underlying)
        if current is None:
            continue
        pnl = calculate_trade_pnl(trade, current)
        total = pnl if total is None else total + pnl
    return total


def calculate_pnl_percentage(pnl: Decimal, cost_basis: Decimal) -> Decimal | None:

    '''
    Return P&L as a percentage of cost basis, rounded to two places.

    Args:
        pnl (Decimal): P&L amount.
        cost_basis (Decimal): Total cost basis.

    Returns:
        Decimal | None: Percentage, or None unless cost_basis is positive
    '''

    if cost_basis <= _ZERO:
        return None
    return _round2(pnl / cost_basis * _HUNDRED)


@dataclass(frozen=True)
class PositionMetrics:

    '''
    Display metrics derived from a position and current prices.

    Args:
        avg_cost (Decimal): Weighted average buy price or target entry fallback.
        cost_basis (Decimal): Total buy cost.
        open_quantity (Decimal): Net quantity held.
        pnl (Decimal | None): Unrealized P&L, None when unavailable.
        pnl_percentage (Decimal | None): P&L relative to cost basis.
    '''

    avg_cost: Decimal
    cost_basis: Decimal
    open_quantity: Decimal
    pnl: Decimal | None
    pnl_percentage: Decimal | None


def calculate_position_metrics(
    position: Position,
    price_by_underlying: Mapping[str, Decimal],
) -> PositionMetrics:

    '''
    Compute every display metric of a position in one pass.

    Args:
        position (Position): Position with its trades loaded.
        price_by_underlying (Mapping[str, Decimal]): Latest close per underlying.

    Returns:
        PositionMetrics: Derived metrics
    '''

    cost_basis = calculate_total_cost_basis(position.trades)
    pnl = calculate_position_pnl(position, price_by_underlying)
    return PositionMetrics(
        avg_cost=calculate_average_cost(position.trades, position.target_entry_price),
        cost_basis=cost_basis,
        open_quantity=calculate_open_quantity(position.trades),
        pnl=pnl,
        pnl_percentage=None if pnl is None else calculate_pnl_percentage(pnl, cost_basis),
    )


@dataclass(frozen=True)
class RiskMetrics:

    '''
    Planned risk figures for a position at creation time.

    Args:
        total_investment (Decimal): Capital committed (or secured for short puts).
        max_profit (Decimal): Profit at the profit target or full premium.
        max_loss (Decimal): Loss at the stop or at assignment to zero.
        risk_reward_ratio (str): "1:N" reward per unit of risk, "0:0" when undefined.
        break_even (Decimal | None): Underlying price at which P&L is zero, option strategies only.
    '''

    total_investment: Decimal
    max_profit: Decimal
    max_loss: Decimal
    risk_reward_ratio: str
    break_even: Decimal | None = None


def _format_risk_reward(max_profit: Decimal, max_loss: Decimal) -> str:

    if max_loss <= _ZERO or max_profit <= _ZERO:
        return '0:0'

    ratio = _round2(max_profit / max_loss)
    if ratio == ratio.to_integral_value():
        return f'1:{int(ratio)}'
    return f'1:{ratio}'


def calculate_risk_metrics(
    strategy_type: StrategyType,
    *,
    target_quantity: Decimal,
    target_entry_price: Decimal | None = None,
    profit_target: Decimal | None = None,
    stop_loss: Decimal | None = None,
    strike_price: Decimal | None = None,
    premium_per_contract: Decimal | None = None,
) -> RiskMetrics:

    '''
    Compute planned risk metrics for a strategy.

    Long Stock uses entry, target and stop prices per share. Short Put
    uses strike and premium per contract with a 100-share multiplier.
    Missing inputs count as zero so a partially filled plan still
    yields figures.

    Args:
        strategy_type (StrategyType): Strategy being planned.
        target_quantity (Decimal): Shares or contracts.
        target_entry_price (Decimal | None): Planned entry, Long Stock.
        profit_target (Decimal | None): Planned profit exit, Long Stock.
        stop_loss (Decimal | None): Planned stop, Long Stock.
        strike_price (Decimal | None): Contract strike, Short Put.
        premium_per_contract (Decimal | None): Premium per share, Short Put.

    Returns:
        RiskMetrics: Planned risk figures
    '''

    quantity = target_quantity or _ZERO

    if strategy_type is StrategyType.SHORT_PUT:
        strike = strike_price or _ZERO
        premium = premium_per_contract or _ZERO
        shares = quantity * CONTRACT_MULTIPLIER
        max_profit = premium * shares
        max_loss = (strike - premium) * shares
        return RiskMetrics(
            total_investment=strike * shares,
            max_profit=max_profit,
            max_loss=max_loss,
            risk_reward_ratio=_format_risk_reward(max_profit, max_loss),
            break_even=strike - premium,
        )

    entry = target_entry_price or _ZERO
    max_profit = ((profit_target or _ZERO) - entry) * quantity
    max_loss = (entry - (stop_loss or _ZERO)) * quantity
    return RiskMetrics(
        total_investment=entry * quantity,
        max_profit=max_profit,
        max_loss=max_loss,
        risk_reward_ratio=_format_risk_reward(max_profit, max_loss),
    )


def calculate_position_risk(position: Position) -> RiskMetrics:

    '''Compute planned risk metrics from a stored position.'''

    option = position.option
    return calculate_risk_metrics(
        position.strategy_type,
        target_quantity=position.target_quantity,
        target_entry_price=position.target_entry_price,
        profit_target=position.profit_target,
        stop_loss=position.stop_loss,
        strike_price=option.strike_price if option else None,
        premium_per_contract=option.premium_per_contract if option else None,
    )


class TargetType(Enum):

    '''Unit of an exit target value.'''

    DOLLAR = 'dollar'
    PERCENTAGE = 'percentage'
    PERCENTAGE_DECIMAL = 'percentage_decimal'


def calculate_option_basis_value(
    strike_price: Decimal,
    premium: Decimal,
    basis: PriceBasis,
    target_value: Decimal,
    target_type: TargetType,
) -> Decimal:

    '''
    Convert an exit target to a dollar value according to its price basis.

    Stock-price targets are already dollars. Option-price targets are a
    percentage of (strike - premium): 20 (percentage) or 0.20
    (percentage_decimal) on a 100 strike with 3 premium gives 19.40.

    Args:
        strike_price (Decimal): Contract strike.
        premium (Decimal): Premium per share of the contract.
        basis (PriceBasis): Basis the target is expressed in.
        target_value (Decimal): Raw target value.
        target_type (TargetType): Unit of target_value.

    Returns:
        Decimal: Effective dollar value
    '''

    if basis is PriceBasis.STOCK_PRICE or target_type is TargetType.DOLLAR:
        return target_value

    option_value = strike_price - premium
    if target_type is TargetType.PERCENTAGE:
        return option_value * target_value / _HUNDRED
    return option_value * target_value
