'''
Multi-record operations that pair a write with its journal entry.

The store commits each write on its own, so these operations are not
atomic. Everything that can be validated is validated before the first
write. When a later write fails, the records already written are
removed or restored on a best-effort basis and the original error is
re-raised. A failed cleanup is logged and never replaces that error.
'''

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal

from tradejournal.core.domain.enums import JournalEntryType, PriceBasis, StrategyType
from tradejournal.core.domain.errors import RecordNotFoundError
from tradejournal.core.domain.journal import JournalEntry, JournalField
from tradejournal.core.domain.position import OptionLeg, Position
from tradejournal.core.domain.trade import Trade
from tradejournal.core.ids import generate_journal_id, generate_position_id
from tradejournal.core.validators import validate_journal_entry
from tradejournal.infrastructure.observability import get_logger
from tradejournal.services.journal_service import JournalService
from tradejournal.services.position_service import PositionService
from tradejournal.services.trade_service import TradeInput, TradeService

__all__ = [
    'CreatePositionData',
    'PositionJournalTransaction',
    'PositionWithJournal',
    'TradeJournalTransaction',
    'TradeWithJournal',
]

_log = get_logger(__name__)


@dataclass(frozen=True)
class CreatePositionData:

    '''
    Caller input for a new position and its plan journal entry.

    Args:
        symbol (str): Ticker symbol, trimmed and upper-cased on creation.
        strategy_type (StrategyType): Strategy discriminator.
        target_entry_price (Decimal): Planned entry price.
        target_quantity (Decimal): Planned quantity.
        profit_target (Decimal): Planned profit exit.
        stop_loss (Decimal): Planned stop exit.
        position_thesis (str): Rationale.
        journal_fields (list[JournalField]): Answers to the position plan prompts.
        option (OptionLeg | None): Option payload, ignored for stock strategies.
        profit_target_basis (PriceBasis | None): Basis of profit_target.
        stop_loss_basis (PriceBasis | None): Basis of stop_loss.
    '''

    symbol: str
    strategy_type: StrategyType
    target_entry_price: Decimal
    target_quantity: Decimal
    profit_target: Decimal
    stop_loss: Decimal
    position_thesis: str
    journal_fields: list[JournalField] = field(default_factory=list)
    option: OptionLeg | None = None
    profit_target_basis: PriceBasis | None = None
    stop_loss_basis: PriceBasis | None = None


@dataclass(frozen=True)
class PositionWithJournal:

    '''
    Result of create_position_with_journal.

    Args:
        position (Position): Persisted position, linked to the entry.
        journal_entry (JournalEntry): Persisted position plan entry.
    '''

    position: Position
    journal_entry: JournalEntry


@dataclass(frozen=True)
class TradeWithJournal:

    '''
    Result of execute_trade_with_journal.

    Args:
        position (Position): Updated position holding the trade and the entry link.
        trade (Trade): Recorded trade with its generated id.
        journal_entry (JournalEntry): Persisted trade execution entry.
    '''

    position: Position
    trade: Trade
    journal_entry: JournalEntry


async def _best_effort(step: Awaitable[None], record_id: str) -> None:

    try:
        await step
    except Exception as exc:
        _log.error('rollback step failed', record_id=record_id, error=str(exc))


def _build_position(data: CreatePositionData, now: datetime) -> Position:

    strategy = data.strategy_type
    if strategy.is_option:
        option = data.option
        profit_basis = data.profit_target_basis
        stop_basis = data.stop_loss_basis
    else:
        option = None
        profit_basis = data.profit_target_basis or PriceBasis.STOCK_PRICE
        stop_basis = data.stop_loss_basis or PriceBasis.STOCK_PRICE

    return Position(
        id=generate_position_id(),
        symbol=data.symbol.strip().upper(),
        strategy_type=strategy,
        trade_kind=strategy.trade_kind,
        target_entry_price=data.target_entry_price,
        target_quantity=data.target_quantity,
        profit_target=data.profit_target,
        stop_loss=data.stop_loss,
        position_thesis=data.position_thesis,
        created_date=now,
        profit_target_basis=profit_basis,
        stop_loss_basis=stop_basis,
        option=option,
    )


class PositionJournalTransaction:

    '''
    Create a position together with its position plan journal entry.

    Args:
        positions (PositionService): Position persistence
        journals (JournalService): Journal persistence
    '''

    def __init__(self, positions: PositionService, journals: JournalService) -> None:

        self._positions = positions
        self._journals = journals

    async def create_position_with_journal(self, data: CreatePositionData) -> PositionWithJournal:

        '''
        Create a position, its plan journal entry and the link between them.

        Args:
            data (CreatePositionData): Position fields and plan journal answers

        Returns:
            PositionWithJournal: Persisted position, already linked to the entry

        Raises:
            ValidationError: If the position or journal entry is invalid, before any write
            StorageError: If a write fails, after the partial writes are rolled back
        '''

        now = datetime.now(UTC)
        position = _build_position(data, now)
        entry = JournalEntry(
            id=generate_journal_id(),
            position_id=position.id,
            entry_type=JournalEntryType.POSITION_PLAN,
            fields=list(data.journal_fields),
            created_at=now,
        )
        self._positions.validate(position)
        validate_journal_entry(entry)

        await self._positions.create(position)

        journal_written = False
        try:
            await self._journals.create(entry)
            journal_written = True
            linked = replace(position, journal_entry_ids=[*position.journal_entry_ids, entry.id])
            await self._positions.update(linked)
        except Exception as exc:
            _log.warning(
                'position journal rollback',
                position_id=position.id,
                journal_id=entry.id,
                error=str(exc),
            )
            if journal_written:
                await _best_effort(self._journals.delete(entry.id), entry.id)
            await _best_effort(self._positions.delete(position.id), position.id)
            raise

        _log.info(
            'position created with journal',
            position_id=position.id,
            journal_id=entry.id,
            symbol=position.symbol,
        )
        return PositionWithJournal(position=linked, journal_entry=entry)


class TradeJournalTransaction:

    '''
    Record a trade together with its trade execution journal entry.

    Args:
        positions (PositionService): Position persistence
        trades (TradeService): Trade recording under the single-trade rule
        journals (JournalService): Journal persistence
    '''

    def __init__(
        self,
        positions: PositionService,
        trades: TradeService,
        journals: JournalService,
    ) -> None:

        self._positions = positions
        self._trades = trades
        self._journals = journals

    async def execute_trade_with_journal(
        self,
        position_id: str,
        trade_input: TradeInput,
        journal_fields: list[JournalField],
    ) -> TradeWithJournal:

        '''
        Record a trade, its execution journal entry and the link between them.

        Args:
            position_id (str): Position identifier
            trade_input (TradeInput): Trade fields
            journal_fields (list[JournalField]): Answers to the trade execution prompts

        Returns:
            TradeWithJournal: Updated position, recorded trade and journal entry

        Raises:
            RecordNotFoundError: If the position does not exist
            ConstraintError: If the position already holds a trade
            ValidationError: If the trade or journal entry is invalid, before any write
            StorageError: If a write fails, after the position is restored
        '''

        snapshot = await self._positions.get_by_id(position_id)
        if snapshot is None:
            raise RecordNotFoundError('positions', position_id)

        trade_input.validate()
        draft = JournalEntry(
            id=generate_journal_id(),
            position_id=position_id,
            entry_type=JournalEntryType.TRADE_EXECUTION,
            fields=list(journal_fields),
            created_at=datetime.now(UTC),
            executed_at=trade_input.timestamp,
        )
        validate_journal_entry(draft)

        trade = await self._trades.add_trade(position_id, trade_input)
        entry = replace(draft, trade_id=trade.id)

        journal_written = False
        try:
            await self._journals.create(entry)
            journal_written = True
            traded = await self._positions.get_by_id(position_id)
            if traded is None:
                raise RecordNotFoundError('positions', position_id)
            linked = replace(traded, journal_entry_ids=[*traded.journal_entry_ids, entry.id])
            await self._positions.update(linked)
        except Exception as exc:
            _log.warning(
                'trade journal rollback',
                position_id=position_id,
                trade_id=trade.id,
                journal_id=entry.id,
                error=str(exc),
            )
            if journal_written:
                await _best_effort(self._journals.delete(entry.id), entry.id)
            await _best_effort(self._positions.update(snapshot), position_id)
            raise

        _log.info(
            'trade executed with journal',
            position_id=position_id,
            trade_id=trade.id,
            journal_id=entry.id,
        )
        return TradeWithJournal(position=linked, trade=trade, journal_entry=entry)
