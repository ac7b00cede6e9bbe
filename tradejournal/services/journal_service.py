'''CRUD service for journal entries.'''

from __future__ import annotations

import logging
from typing import Any

from tradejournal.core.domain.journal import JournalEntry
from tradejournal.core.validators import validate_journal_entry
from tradejournal.infrastructure.records import hydrate, to_record
from tradejournal.infrastructure.store import Store

__all__ = ['JournalService']

_log = logging.getLogger(__name__)

_COLLECTION = 'journal_entries'


def _entry(record: dict[str, Any]) -> JournalEntry:
    return hydrate(JournalEntry, record)


class JournalService:

    '''
    Persist and load journal entries through the Store.

    Args:
        store (Store): Record store with the journal_entries collection
    '''

    def __init__(self, store: Store) -> None:

        self._store = store

    async def create(self, entry: JournalEntry) -> JournalEntry:

        '''
        Validate and insert a journal entry.

        Args:
            entry (JournalEntry): Entry with its generated id

        Returns:
            JournalEntry: The persisted entry

        Raises:
            ValidationError: If the entry is invalid, before writing
            DuplicateRecordError: If the id already exists
        '''

        validate_journal_entry(entry)
        await self._store.add(_COLLECTION, to_record(entry))
        _log.debug(
            'journal entry created: journal_id=%s position_id=%s trade_id=%s type=%s',
            entry.id,
            entry.position_id,
            entry.trade_id,
            entry.entry_type.value,
        )
        return entry

    async def get_by_id(self, entry_id: str) -> JournalEntry | None:

        record = await self._store.get(_COLLECTION, entry_id)
        return _entry(record) if record else None

    async def get_all(self) -> list[JournalEntry]:

        return [_entry(record) for record in await self._store.get_all(_COLLECTION)]

    async def find_by_position_id(self, position_id: str) -> list[JournalEntry]:

        '''Return every entry written for a position, oldest first.'''

        records = await self._store.find(_COLLECTION, position_id=position_id)
        return [_entry(record) for record in records]

    async def find_by_trade_id(self, trade_id: str) -> list[JournalEntry]:

        '''Return entries reflecting on one trade.'''

        records = await self._store.find(_COLLECTION, trade_id=trade_id)
        return [_entry(record) for record in records]

    async def update(self, entry: JournalEntry) -> None:

        '''
        Validate and replace an existing journal entry.

        Raises:
            ValidationError: If the entry is invalid, before writing
            RecordNotFoundError: If the entry does not exist
        '''

        validate_journal_entry(entry)
        await self._store.put(_COLLECTION, to_record(entry))
        _log.debug('journal entry updated: journal_id=%s', entry.id)

    async def delete(self, entry_id: str) -> None:

        '''
        Delete a journal entry.

        Raises:
            RecordNotFoundError: If the entry does not exist
        '''

        await self._store.delete(_COLLECTION, entry_id)
        _log.debug('journal entry deleted: journal_id=%s', entry_id)

    async def clear_all(self) -> None:

        await self._store.clear(_COLLECTION)
