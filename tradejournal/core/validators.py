'''
Pure validators for positions, trades, journal entries and prices.

Field validators return a ValidationResult so callers can surface several
errors at once. Record validators fail fast by raising ValidationError on
the first violated invariant, in a fixed order: required-field presence,
value positivity and shape, strategy-conditional rules, free-text length.
'''

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from tradejournal.core.calculators import compute_status
from tradejournal.core.domain.enums import (
    JournalEntryType,
    OptionAction,
    OptionType,
    PriceBasis,
    TradeType,
)
from tradejournal.core.domain.errors import ValidationError
from tradejournal.core.domain.journal import JOURNAL_PROMPTS, JournalEntry
from tradejournal.core.domain.position import Position
from tradejournal.core.domain.price_record import PriceRecord
from tradejournal.core.domain.trade import Trade

__all__ = [
    'ValidationResult',
    'requires_confirmation',
    'validate_expiration_date',
    'validate_journal_entry',
    'validate_option_position',
    'validate_position',
    'validate_premium',
    'validate_price_record',
    'validate_quantity',
    'validate_strike_price',
    'validate_symbol',
    'validate_trade',
]

_ZERO = Decimal(0)
_CENT = Decimal('0.01')
_MAX_STRIKE = Decimal(1_000_000)
_MAX_QUANTITY = Decimal(10_000)
_MIN_SYMBOL_LEN = 1
_MAX_SYMBOL_LEN = 5
_MIN_THESIS_LEN = 10
_MAX_THESIS_LEN = 2000

_POSITION_REQUIRED = (
    'id',
    'symbol',
    'strategy_type',
    'trade_kind',
    'target_entry_price',
    'target_quantity',
    'profit_target',
    'stop_loss',
    'position_thesis',
    'created_date',
    'status',
)

_POSITION_POSITIVE = (
    'target_entry_price',
    'target_quantity',
    'profit_target',
    'stop_loss',
)

_TRADE_PREFIX = 'Trade validation failed: '


@dataclass(frozen=True)
class ValidationResult:

    '''
    Outcome of a field-level validation.

    Args:
        is_valid (bool): True when the value passed every rule.
        error (str | None): First failed rule message, None when valid.
    '''

    is_valid: bool
    error: str | None = None

    @classmethod
    def fail(cls, error: str) -> ValidationResult:

        '''Return an invalid result carrying the error message.'''

        return cls(is_valid=False, error=error)


_VALID = ValidationResult(is_valid=True)


def _is_whole(value: Decimal) -> bool:
    return value == value.to_integral_value()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_symbol(value: str | None) -> ValidationResult:

    '''
    Validate a ticker symbol entered by the user.

    Args:
        value (str | None): Raw symbol input, case-insensitive.

    Returns:
        ValidationResult: Invalid when empty, non-alphabetic or longer than 5 letters
    '''

    if _is_blank(value):
        return ValidationResult.fail('Symbol is required')

    symbol = value.strip().upper()  # type: ignore[union-attr]

    if not symbol.isascii() or not symbol.isalpha():
        return ValidationResult.fail('Symbol must contain only letters A-Z')

    if not _MIN_SYMBOL_LEN <= len(symbol) <= _MAX_SYMBOL_LEN:
        return ValidationResult.fail('Symbol must be 1-5 characters')

    return _VALID


def validate_strike_price(value: Decimal | None) -> ValidationResult:

    '''
    Validate an option strike price.

    Args:
        value (Decimal | None): Strike price.

    Returns:
        ValidationResult: Invalid when missing, non-positive, implausibly high
            or finer than one cent
    '''

    if value is None:
        return ValidationResult.fail('Strike price is required')

    if not isinstance(value, Decimal | int) or isinstance(value, bool):
        return ValidationResult.fail('Strike price must be a number')

    strike = Decimal(value)
    if not strike.is_finite():
        return ValidationResult.fail('Strike price must be a number')

    if strike <= _ZERO:
        return ValidationResult.fail('Strike price must be positive')

    if strike > _MAX_STRIKE:
        return ValidationResult.fail('Strike price seems unreasonably high')

    if strike != strike.quantize(_CENT):
        return ValidationResult.fail('Strike price cannot have more than 2 decimal places')

    return _VALID


def validate_expiration_date(value: date | None, today: date | None = None) -> ValidationResult:

    '''
    Validate an option expiration date against the current date.

    The expiration must fall strictly after the reference date, so a
    contract expiring today is rejected.

    Args:
        value (date | None): Expiration date.
        today (date | None): Reference date, defaults to the local current date.

    Returns:
        ValidationResult: Invalid when missing, not a date, or not after the reference date
    '''

    if value is None:
        return ValidationResult.fail('Expiration date is required')

    if not isinstance(value, date):
        return ValidationResult.fail('Invalid date format')

    reference = today or date.today()
    # datetime is a date subclass; compare calendar days only
    expiration = value.date() if isinstance(value, datetime) else value

    if expiration <= reference:
        return ValidationResult.fail('expiration_date cannot be in the past')

    return _VALID


def validate_quantity(value: Decimal | None) -> ValidationResult:

    '''
    Validate a share or contract quantity entered by the user.

    Args:
        value (Decimal | None): Quantity.

    Returns:
        ValidationResult: Invalid when not a positive whole number up to 10,000
    '''

    if value is None or isinstance(value, bool) or not isinstance(value, Decimal | int):
        return ValidationResult.fail('Quantity must be a number')

    quantity = Decimal(value)
    if not quantity.is_finite():
        return ValidationResult.fail('Quantity must be a number')

    if not _is_whole(quantity):
        return ValidationResult.fail('Quantity must be a whole number')

    if quantity <= _ZERO:
        return ValidationResult.fail('Quantity must be positive')

    if quantity > _MAX_QUANTITY:
        return ValidationResult.fail('Quantity seems unreasonably high')

    return _VALID


def validate_premium(value: Decimal | None) -> ValidationResult:

    '''
    Validate a premium per contract.

    Args:
        value (Decimal | None): Premium per share of the contract.

    Returns:
        ValidationResult: Invalid when missing, not a number or negative
    '''

    if value is None:
        return ValidationResult.fail('Premium per contract is required for Short Put positions')

    if isinstance(value, bool) or not isinstance(value, Decimal | int):
        return ValidationResult.fail('Premium per contract must be a number')

    premium = Decimal(value)
    if not premium.is_finite():
        return ValidationResult.fail('Premium per contract must be a number')

    if premium < _ZERO:
        return ValidationResult.fail('Premium per contract cannot be negative')

    return _VALID


def validate_option_position(
    position: Position,
    today: date | None = None,
    *,
    check_expiration: bool = True,
) -> ValidationResult:

    '''
    Validate the option payload of a position.

    Positions whose strategy does not trade options are valid when they
    carry no option payload at all.

    Args:
        position (Position): Candidate position.
        today (date | None): Reference date for the expiration check.
        check_expiration (bool): Reject expirations before today when True.

    Returns:
        ValidationResult: First failed option rule, or valid
    '''

    option = position.option

    if not position.strategy_type.is_option:
        if option is not None:
            return ValidationResult.fail(
                f'Option fields are not allowed for {position.strategy_type.value} strategy'
            )
        return _VALID

    if option is None:
        return ValidationResult.fail('Option fields are required for Short Put positions')

    if option.option_type is not OptionType.PUT:
        return ValidationResult.fail('Option type put is required for Short Put positions')

    if option.strike_price is None:
        return ValidationResult.fail('Strike price is required for Short Put positions')

    strike = validate_strike_price(option.strike_price)
    if not strike.is_valid:
        return strike

    if option.expiration_date is None:
        return ValidationResult.fail('Expiration date is required for Short Put positions')

    if check_expiration:
        expiration = validate_expiration_date(option.expiration_date, today)
        if not expiration.is_valid:
            return expiration

    return validate_premium(option.premium_per_contract)


def validate_position(
    position: Position,
    today: date | None = None,
    *,
    check_expiration: bool = True,
) -> None:

    '''
    Validate a fully assembled candidate position before a write.

    The expiration rule applies when a position is created; updates of an
    existing position pass check_expiration=False so an expired contract
    does not block linking journal entries or recording its trade.

    Args:
        position (Position): Candidate position.
        today (date | None): Reference date for the expiration check.
        check_expiration (bool): Reject expirations before today when True.

    Raises:
        ValidationError: On the first violated invariant
    '''

    for name in _POSITION_REQUIRED:
        value = getattr(position, name)
        if value is None:
            msg = f'{name} is required'
            raise ValidationError(msg)
        if isinstance(value, str) and not value.strip():
            msg = f'{name} cannot be empty'
            raise ValidationError(msg)

    for name in _POSITION_POSITIVE:
        if getattr(position, name) <= _ZERO:
            msg = f'{name} must be positive'
            raise ValidationError(msg)

    if not isinstance(position.journal_entry_ids, list) or not all(
        isinstance(entry_id, str) and entry_id for entry_id in position.journal_entry_ids
    ):
        msg = 'journal_entry_ids must be an array of ids'
        raise ValidationError(msg)

    if not isinstance(position.trades, list):
        msg = 'trades must be an array'
        raise ValidationError(msg)

    if len(position.trades) > 1:
        msg = 'A position may hold at most one trade'
        raise ValidationError(msg)

    expected_status = compute_status(position.trades)
    if position.status is not expected_status:
        msg = f'status must be {expected_status.value} for a position with {len(position.trades)} trades'
        raise ValidationError(msg)

    strategy = position.strategy_type
    if position.trade_kind is not strategy.trade_kind:
        msg = f'trade_kind must be {strategy.trade_kind.value} for {strategy.value} strategy'
        raise ValidationError(msg)

    option_result = validate_option_position(
        position, today, check_expiration=check_expiration
    )
    if not option_result.is_valid:
        raise ValidationError(option_result.error or 'Invalid option fields')

    for name in ('profit_target_basis', 'stop_loss_basis'):
        basis = getattr(position, name)
        if strategy.is_option and basis is None:
            msg = f'{name} is required for {strategy.value} strategy'
            raise ValidationError(msg)
        if not strategy.is_option and basis not in (None, PriceBasis.STOCK_PRICE):
            msg = f'{name} must be stock_price for {strategy.value} strategy'
            raise ValidationError(msg)

    if not strategy.is_option and not _is_whole(Decimal(position.target_quantity)):
        msg = 'target_quantity must be a whole number for stock strategies'
        raise ValidationError(msg)

    if len(position.position_thesis.strip()) < _MIN_THESIS_LEN:
        msg = f'position_thesis must be at least {_MIN_THESIS_LEN} characters'
        raise ValidationError(msg)


def validate_trade(trade: Trade, position: Position) -> None:

    '''
    Validate a candidate trade against the position it will be appended to.

    Args:
        trade (Trade): Candidate trade with id and underlying assigned.
        position (Position): Owning position in its pre-trade state.

    Raises:
        ValidationError: On the first violated invariant
    '''

    for name in ('id', 'position_id', 'trade_type', 'quantity', 'price', 'timestamp'):
        if _is_blank(getattr(trade, name)):
            raise ValidationError(f'{_TRADE_PREFIX}Missing required fields')

    if _is_blank(trade.underlying):
        raise ValidationError(f'{_TRADE_PREFIX}underlying cannot be empty')

    if not isinstance(trade.trade_type, TradeType):
        raise ValidationError(f'{_TRADE_PREFIX}Invalid trade type')

    if trade.position_id != position.id:
        raise ValidationError(f'{_TRADE_PREFIX}position_id does not match position')

    if trade.quantity <= _ZERO:
        raise ValidationError(f'{_TRADE_PREFIX}Quantity must be positive')

    if trade.price <= _ZERO:
        raise ValidationError(f'{_TRADE_PREFIX}Price must be positive')

    if not position.is_option:
        if trade.option is not None:
            raise ValidationError(
                f'{_TRADE_PREFIX}Option details are only allowed for option strategies'
            )
        if not _is_whole(Decimal(trade.quantity)):
            raise ValidationError(f'{_TRADE_PREFIX}Quantity must be a whole number')
        if not position.has_trades and trade.trade_type is TradeType.SELL:
            raise ValidationError(f'{_TRADE_PREFIX}Cannot exit from planned position')
        return

    option = trade.option
    if option is None:
        raise ValidationError(
            f'{_TRADE_PREFIX}Option details are required for option strategies'
        )

    expected_type = TradeType.SELL if option.action is OptionAction.STO else TradeType.BUY
    if trade.trade_type is not expected_type:
        raise ValidationError(
            f'{_TRADE_PREFIX}{option.action.value} must be a {expected_type.value} trade'
        )

    if not position.has_trades and option.action is not OptionAction.STO:
        raise ValidationError(f'{_TRADE_PREFIX}Cannot buy to close a planned position')

    if option.contract_quantity is None or option.contract_quantity <= _ZERO:
        raise ValidationError(f'{_TRADE_PREFIX}Contract quantity must be positive')

    strike = validate_strike_price(option.strike_price)
    if not strike.is_valid:
        raise ValidationError(f'{_TRADE_PREFIX}{strike.error}')


def _validate_thesis(content: str) -> None:

    stripped = content.strip()
    if stripped and len(stripped) < _MIN_THESIS_LEN:
        msg = f'Thesis response must be at least {_MIN_THESIS_LEN} characters'
        raise ValidationError(msg)
    if len(content) > _MAX_THESIS_LEN:
        msg = f'Thesis response cannot exceed {_MAX_THESIS_LEN} characters'
        raise ValidationError(msg)


def validate_journal_entry(entry: JournalEntry) -> None:

    '''
    Validate a journal entry before it is written.

    Args:
        entry (JournalEntry): Candidate journal entry.

    Raises:
        ValidationError: On the first violated invariant
    '''

    if entry.trade_id is not None and not entry.trade_id.strip():
        msg = 'trade_id cannot be empty string'
        raise ValidationError(msg)

    if _is_blank(entry.id):
        msg = 'Journal entry id is required'
        raise ValidationError(msg)

    if _is_blank(entry.position_id):
        msg = 'Journal entry must reference a position_id'
        raise ValidationError(msg)

    if not isinstance(entry.entry_type, JournalEntryType):
        msg = 'Invalid journal entry type'
        raise ValidationError(msg)

    if not entry.fields:
        msg = 'At least one journal field is required'
        raise ValidationError(msg)

    prompts = {prompt.name: prompt for prompt in JOURNAL_PROMPTS[entry.entry_type]}
    for journal_field in entry.fields:
        if journal_field.name not in prompts:
            msg = f'Unknown journal field for {entry.entry_type.value}: {journal_field.name}'
            raise ValidationError(msg)

    for prompt in prompts.values():
        if prompt.required and _is_blank(entry.field_response(prompt.name)):
            msg = f'{prompt.name} response is required'
            raise ValidationError(msg)

    thesis = entry.field_response('thesis')
    if thesis is not None:
        _validate_thesis(thesis)


def validate_price_record(record: PriceRecord) -> None:

    '''
    Validate a daily OHLC price record.

    Args:
        record (PriceRecord): Candidate price record.

    Raises:
        ValidationError: On the first violated rule
    '''

    for label, value in (
        ('Open price', record.open),
        ('High price', record.high),
        ('Low price', record.low),
        ('Close price', record.close),
    ):
        if value < _ZERO:
            msg = f'{label} cannot be negative'
            raise ValidationError(msg)
        if value == _ZERO:
            msg = f'{label} must be greater than zero'
            raise ValidationError(msg)

    if _is_blank(record.underlying):
        msg = 'Underlying cannot be empty'
        raise ValidationError(msg)

    if record.high < record.low:
        msg = 'High price cannot be less than low price'
        raise ValidationError(msg)

    if not record.low <= record.open <= record.high:
        msg = 'Open price must be between low and high'
        raise ValidationError(msg)

    if not record.low <= record.close <= record.high:
        msg = 'Close price must be between low and high'
        raise ValidationError(msg)


def requires_confirmation(
    old_price: Decimal | None,
    new_price: Decimal,
    threshold_percent: Decimal,
) -> bool:

    '''
    Return True if a price change is large enough to need user confirmation.

    Args:
        old_price (Decimal | None): Previous close, None when no history exists.
        new_price (Decimal): Proposed close.
        threshold_percent (Decimal): Change above which confirmation is needed.

    Returns:
        bool: True when the absolute percentage change exceeds the threshold
    '''

    if old_price is None or old_price == _ZERO:
        return False

    change = abs((new_price - old_price) / old_price * 100)
    return change > threshold_percent
