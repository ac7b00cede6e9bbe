'''
Upgrade persisted records from older shapes to the current schema.

Each upgrade is idempotent and operates on the raw JSON record, so the
same function serves the eager migration run by Store.ensure_schema()
and the lazy normalization applied on every read.

Schema history:
    1: positions without journal_entry_ids
    2: positions without embedded trades
    3: positions without strategy_type / trade_kind
    4: option fields stored flat on positions and trades, no basis fields
    5: option payload nested under "option", basis fields defaulted
'''

from __future__ import annotations

from collections.abc import Callable
from typing import Any

__all__ = [
    'RECORD_UPGRADES',
    'SCHEMA_VERSION',
    'upgrade_journal_record',
    'upgrade_position_record',
    'upgrade_trade_record',
]

SCHEMA_VERSION = 5

_DEFAULT_STRATEGY = 'Long Stock'
_OPTION_STRATEGIES = frozenset({'Short Put'})
_DEFAULT_BASIS = 'stock_price'

_POSITION_OPTION_FIELDS = (
    'option_type',
    'strike_price',
    'expiration_date',
    'premium_per_contract',
)

_TRADE_OPTION_FIELDS = (
    'action',
    'option_type',
    'strike_price',
    'expiration_date',
    'contract_quantity',
    'occ_symbol',
    'underlying_price_at_trade',
    'created_stock_position_id',
    'cost_basis_adjustment',
)


def _fold(record: dict[str, Any], names: tuple[str, ...]) -> dict[str, Any] | None:

    '''Pop flat option fields off a record into a nested payload.'''

    flat = {name: record.pop(name, None) for name in names}
    if all(value is None for value in flat.values()):
        return None
    return flat


def upgrade_trade_record(raw: dict[str, Any], symbol: str | None = None) -> dict[str, Any]:

    '''
    Upgrade a trade record embedded in a position.

    Args:
        raw (dict[str, Any]): Stored trade record
        symbol (str | None): Owning position symbol, used when underlying is missing

    Returns:
        dict[str, Any]: Trade record in the current shape
    '''

    record = dict(raw)

    if not record.get('underlying') and symbol:
        record['underlying'] = symbol

    flat = _fold(record, _TRADE_OPTION_FIELDS)
    if record.get('option') is None:
        record['option'] = flat

    return record


def upgrade_position_record(raw: dict[str, Any]) -> dict[str, Any]:

    '''
    Upgrade a position record to the current shape.

    Missing journal_entry_ids and trades become empty lists, a missing
    strategy defaults to Long Stock with a matching trade_kind, missing
    basis fields default to stock_price, and flat option fields fold
    into the nested option payload. Status is derived from trades.

    Args:
        raw (dict[str, Any]): Stored position record

    Returns:
        dict[str, Any]: Position record in the current shape
    '''

    record = dict(raw)

    if not isinstance(record.get('journal_entry_ids'), list):
        record['journal_entry_ids'] = []

    if not isinstance(record.get('trades'), list):
        record['trades'] = []

    if not record.get('strategy_type'):
        record['strategy_type'] = _DEFAULT_STRATEGY

    if not record.get('trade_kind'):
        is_option = record['strategy_type'] in _OPTION_STRATEGIES
        record['trade_kind'] = 'option' if is_option else 'stock'

    for name in ('profit_target_basis', 'stop_loss_basis'):
        if not record.get(name):
            record[name] = _DEFAULT_BASIS

    flat = _fold(record, _POSITION_OPTION_FIELDS)
    if record.get('option') is None:
        record['option'] = flat

    symbol = record.get('symbol')
    record['trades'] = [upgrade_trade_record(trade, symbol) for trade in record['trades']]
    record['status'] = 'open' if record['trades'] else 'planned'

    return record


def upgrade_journal_record(raw: dict[str, Any]) -> dict[str, Any]:

    '''
    Upgrade a journal entry record to the current shape.

    Args:
        raw (dict[str, Any]): Stored journal entry record

    Returns:
        dict[str, Any]: Journal record with a fields list
    '''

    record = dict(raw)

    if not isinstance(record.get('fields'), list):
        record['fields'] = []

    return record


RECORD_UPGRADES: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    'positions': upgrade_position_record,
    'journal_entries': upgrade_journal_record,
}
