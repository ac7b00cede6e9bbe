'''
Tests for tradejournal.core.validators.
'''

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from conftest import EXPIRY, TODAY, TS, make_position, make_short_put
from tradejournal.core.domain import (
    JournalEntry,
    JournalEntryType,
    JournalField,
    OptionAction,
    OptionExecution,
    OptionType,
    PositionStatus,
    PriceBasis,
    PriceRecord,
    StrategyType,
    Trade,
    TradeKind,
    TradeType,
    ValidationError,
)
from tradejournal.core.validators import (
    requires_confirmation,
    validate_expiration_date,
    validate_journal_entry,
    validate_option_position,
    validate_position,
    validate_premium,
    validate_price_record,
    validate_quantity,
    validate_strike_price,
    validate_symbol,
    validate_trade,
)


def _stock_trade(**overrides: object) -> Trade:
    fields: dict[str, object] = {
        'id': 'trade-1',
        'position_id': 'pos-1',
        'trade_type': TradeType.BUY,
        'quantity': Decimal('100'),
        'price': Decimal('149.50'),
        'timestamp': TS,
        'underlying': 'AAPL',
    }
    fields.update(overrides)
    return Trade(**fields)  # type: ignore[arg-type]


def _sto(**overrides: object) -> OptionExecution:
    fields: dict[str, object] = {
        'action': OptionAction.STO,
        'option_type': OptionType.PUT,
        'strike_price': Decimal('520'),
        'expiration_date': EXPIRY,
        'contract_quantity': Decimal('10'),
    }
    fields.update(overrides)
    return OptionExecution(**fields)  # type: ignore[arg-type]


def _entry(fields: list[JournalField], **overrides: object) -> JournalEntry:
    values: dict[str, object] = {
        'id': 'journal-1',
        'position_id': 'pos-1',
        'entry_type': JournalEntryType.POSITION_PLAN,
        'fields': fields,
        'created_at': TS,
    }
    values.update(overrides)
    return JournalEntry(**values)  # type: ignore[arg-type]


def _price(**overrides: object) -> PriceRecord:
    values: dict[str, object] = {
        'id': 'price_AAPL_2026-03-02',
        'underlying': 'AAPL',
        'date': date(2026, 3, 2),
        'open': Decimal('150'),
        'high': Decimal('155'),
        'low': Decimal('148'),
        'close': Decimal('152'),
        'updated_at': TS,
    }
    values.update(overrides)
    return PriceRecord(**values)  # type: ignore[arg-type]


@pytest.mark.parametrize('value', ['AAPL', 'f', 'brkb', ' spy '])
def test_validate_symbol_accepts(value: str) -> None:
    assert validate_symbol(value).is_valid


@pytest.mark.parametrize(
    ('value', 'error'),
    [
        ('', 'Symbol is required'),
        (None, 'Symbol is required'),
        ('BRK.B', 'Symbol must contain only letters A-Z'),
        ('ABCDEF', 'Symbol must be 1-5 characters'),
    ],
)
def test_validate_symbol_rejects(value: str | None, error: str) -> None:
    result = validate_symbol(value)
    assert result.is_valid is False
    assert result.error == error


@pytest.mark.parametrize(
    ('value', 'error'),
    [
        (None, 'Strike price is required'),
        (Decimal('0'), 'Strike price must be positive'),
        (Decimal('-5'), 'Strike price must be positive'),
        (Decimal('1000001'), 'Strike price seems unreasonably high'),
        (Decimal('100.125'), 'Strike price cannot have more than 2 decimal places'),
    ],
)
def test_validate_strike_price_rejects(value: Decimal | None, error: str) -> None:
    assert validate_strike_price(value).error == error


def test_validate_strike_price_accepts_cents() -> None:
    assert validate_strike_price(Decimal('152.50')).is_valid


def test_validate_expiration_date() -> None:
    assert validate_expiration_date(date(2026, 3, 3), TODAY).is_valid
    expiring_today = validate_expiration_date(TODAY, TODAY)
    assert expiring_today.error == 'expiration_date cannot be in the past'
    past = validate_expiration_date(date(2026, 3, 1), TODAY)
    assert past.error == 'expiration_date cannot be in the past'
    assert validate_expiration_date(None, TODAY).error == 'Expiration date is required'


def test_validate_quantity() -> None:
    assert validate_quantity(Decimal('100')).is_valid
    assert validate_quantity(Decimal('1.5')).error == 'Quantity must be a whole number'
    assert validate_quantity(Decimal('0')).error == 'Quantity must be positive'
    assert validate_quantity(Decimal('10001')).error == 'Quantity seems unreasonably high'


def test_validate_premium() -> None:
    assert validate_premium(Decimal('0')).is_valid
    assert validate_premium(Decimal('-0.01')).error == 'Premium per contract cannot be negative'


def test_validate_position_accepts_long_stock() -> None:
    validate_position(make_position(), TODAY)


def test_validate_position_accepts_short_put() -> None:
    validate_position(make_short_put(), TODAY)


def test_validate_position_rejects_short_put_expiring_today() -> None:
    position = make_short_put()
    expiring_today = replace(position, option=replace(position.option, expiration_date=TODAY))
    with pytest.raises(ValidationError, match='expiration_date cannot be in the past'):
        validate_position(expiring_today, TODAY)


@pytest.mark.parametrize(
    ('overrides', 'error'),
    [
        ({'target_entry_price': Decimal('0')}, 'target_entry_price must be positive'),
        ({'target_quantity': Decimal('-1')}, 'target_quantity must be positive'),
        ({'stop_loss': Decimal('0')}, 'stop_loss must be positive'),
        ({'symbol': '  '}, 'symbol cannot be empty'),
        ({'position_thesis': 'too short'}, 'position_thesis must be at least 10 characters'),
        ({'target_quantity': Decimal('10.5')}, 'target_quantity must be a whole number'),
        ({'status': PositionStatus.OPEN}, 'status must be planned'),
        ({'profit_target_basis': PriceBasis.OPTION_PRICE}, 'profit_target_basis must be stock_price'),
    ],
)
def test_validate_position_rejects(overrides: dict[str, object], error: str) -> None:
    with pytest.raises(ValidationError, match=error):
        validate_position(make_position(**overrides), TODAY)


def test_validate_position_rejects_short_put_with_stock_trade_kind() -> None:
    with pytest.raises(ValidationError, match='trade_kind must be option for Short Put strategy'):
        validate_position(make_short_put(trade_kind=TradeKind.STOCK), TODAY)


def test_validate_position_rejects_short_put_without_basis() -> None:
    with pytest.raises(ValidationError, match='stop_loss_basis is required'):
        validate_position(make_short_put(stop_loss_basis=None), TODAY)


def test_validate_position_rejects_expired_short_put_on_create_only() -> None:
    position = make_short_put()
    later = date(2026, 5, 1)
    with pytest.raises(ValidationError, match='expiration_date cannot be in the past'):
        validate_position(position, later)
    validate_position(position, later, check_expiration=False)


def test_validate_option_position_rejects_option_on_long_stock() -> None:
    position = make_position(option=make_short_put().option)
    result = validate_option_position(position, TODAY)
    assert result.error == 'Option fields are not allowed for Long Stock strategy'


def test_validate_option_position_requires_payload_for_short_put() -> None:
    result = validate_option_position(make_short_put(option=None), TODAY)
    assert result.error == 'Option fields are required for Short Put positions'


def test_validate_option_position_requires_put() -> None:
    short_put = make_short_put()
    call = replace(short_put.option, option_type=OptionType.CALL)
    result = validate_option_position(make_short_put(option=call), TODAY)
    assert result.error == 'Option type put is required for Short Put positions'


def test_validate_option_position_rejects_negative_premium() -> None:
    leg = replace(make_short_put().option, premium_per_contract=Decimal('-1'))
    result = validate_option_position(make_short_put(option=leg), TODAY)
    assert result.error == 'Premium per contract cannot be negative'


def test_validate_position_rejects_second_trade() -> None:
    trades = [_stock_trade(id='trade-1'), _stock_trade(id='trade-2')]
    position = make_position(trades=trades, status=PositionStatus.OPEN)
    with pytest.raises(ValidationError, match='at most one trade'):
        validate_position(position, TODAY)


def test_validate_trade_accepts_stock_buy() -> None:
    validate_trade(_stock_trade(), make_position())


@pytest.mark.parametrize(
    ('overrides', 'error'),
    [
        ({'quantity': Decimal('0')}, 'Quantity must be positive'),
        ({'price': Decimal('-1')}, 'Price must be positive'),
        ({'quantity': Decimal('2.5')}, 'Quantity must be a whole number'),
        ({'underlying': ' '}, 'underlying cannot be empty'),
        ({'position_id': 'pos-2'}, 'position_id does not match position'),
        ({'trade_type': TradeType.SELL}, 'Cannot exit from planned position'),
    ],
)
def test_validate_trade_rejects(overrides: dict[str, object], error: str) -> None:
    with pytest.raises(ValidationError, match=f'Trade validation failed: {error}'):
        validate_trade(_stock_trade(**overrides), make_position())


def test_validate_trade_rejects_option_details_on_stock() -> None:
    with pytest.raises(ValidationError, match='only allowed for option strategies'):
        validate_trade(_stock_trade(option=_sto()), make_position())


def test_validate_trade_accepts_sell_to_open() -> None:
    position = make_short_put()
    trade = _stock_trade(
        position_id=position.id,
        trade_type=TradeType.SELL,
        quantity=Decimal('10'),
        price=Decimal('2.25'),
        underlying='SPY',
        option=_sto(),
    )
    validate_trade(trade, position)


def test_validate_trade_requires_option_details_for_short_put() -> None:
    position = make_short_put()
    trade = _stock_trade(position_id=position.id, trade_type=TradeType.SELL, underlying='SPY')
    with pytest.raises(ValidationError, match='Option details are required'):
        validate_trade(trade, position)


def test_validate_trade_rejects_sto_as_buy() -> None:
    position = make_short_put()
    trade = _stock_trade(position_id=position.id, underlying='SPY', option=_sto())
    with pytest.raises(ValidationError, match='STO must be a sell trade'):
        validate_trade(trade, position)


def test_validate_trade_rejects_btc_on_planned_position() -> None:
    position = make_short_put()
    trade = _stock_trade(
        position_id=position.id,
        underlying='SPY',
        option=_sto(action=OptionAction.BTC),
    )
    with pytest.raises(ValidationError, match='Cannot buy to close a planned position'):
        validate_trade(trade, position)


def test_validate_journal_entry_accepts_plan() -> None:
    validate_journal_entry(_entry([JournalField('thesis', 'Why?', 'Breakout above resistance')]))


def test_validate_journal_entry_rejects_empty_trade_id() -> None:
    entry = _entry([JournalField('thesis', 'Why?', 'Breakout above resistance')], trade_id='')
    with pytest.raises(ValidationError, match='trade_id cannot be empty string'):
        validate_journal_entry(entry)


def test_validate_journal_entry_requires_fields() -> None:
    with pytest.raises(ValidationError, match='At least one journal field is required'):
        validate_journal_entry(_entry([]))


def test_validate_journal_entry_requires_thesis_response() -> None:
    entry = _entry([JournalField('emotional_state', 'How?', 'Calm')])
    with pytest.raises(ValidationError, match='thesis response is required'):
        validate_journal_entry(entry)


def test_validate_journal_entry_thesis_length() -> None:
    short = _entry([JournalField('thesis', 'Why?', 'Too short')])
    with pytest.raises(ValidationError, match='at least 10 characters'):
        validate_journal_entry(short)

    long = _entry([JournalField('thesis', 'Why?', 'x' * 2001)])
    with pytest.raises(ValidationError, match='cannot exceed 2000 characters'):
        validate_journal_entry(long)


def test_validate_journal_entry_rejects_unknown_field() -> None:
    entry = _entry(
        [JournalField('execution_notes', 'Describe', 'Filled')],
        entry_type=JournalEntryType.POSITION_PLAN,
    )
    with pytest.raises(ValidationError, match='Unknown journal field'):
        validate_journal_entry(entry)


def test_validate_journal_entry_execution_without_thesis() -> None:
    entry = _entry(
        [JournalField('execution_notes', 'Describe', 'Filled at the limit')],
        entry_type=JournalEntryType.TRADE_EXECUTION,
        trade_id='trade-1',
    )
    validate_journal_entry(entry)


def test_validate_price_record() -> None:
    validate_price_record(_price())

    with pytest.raises(ValidationError, match='Close price must be greater than zero'):
        validate_price_record(_price(close=Decimal('0')))

    with pytest.raises(ValidationError, match='High price cannot be less than low price'):
        validate_price_record(_price(high=Decimal('147')))

    with pytest.raises(ValidationError, match='Close price must be between low and high'):
        validate_price_record(_price(close=Decimal('160')))


def test_requires_confirmation() -> None:
    threshold = Decimal('20')
    assert requires_confirmation(None, Decimal('100'), threshold) is False
    assert requires_confirmation(Decimal('100'), Decimal('120'), threshold) is False
    assert requires_confirmation(Decimal('100'), Decimal('121'), threshold) is True
    assert requires_confirmation(Decimal('100'), Decimal('79'), threshold) is True


def test_strategy_and_kind_consistency_for_long_stock() -> None:
    position = make_position(strategy_type=StrategyType.LONG_STOCK, trade_kind=TradeKind.OPTION)
    with pytest.raises(ValidationError, match='trade_kind must be stock for Long Stock strategy'):
        validate_position(position, TODAY)
