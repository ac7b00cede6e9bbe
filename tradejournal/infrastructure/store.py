'''
Versioned key-value record store backed by SQLite.

Each collection is one table keyed by record id, with one column per
secondary index and the full record as an orjson payload. Every write
commits on its own; there is no multi-record transaction. Caller owns
the aiosqlite connection.
'''

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import aiosqlite

from tradejournal.core.domain.errors import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageError,
)
from tradejournal.infrastructure.migrations import RECORD_UPGRADES, SCHEMA_VERSION
from tradejournal.infrastructure.records import dumps, loads

__all__ = ['COLLECTIONS', 'Collection', 'Store']

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Collection:

    '''
    Schema of one record collection.

    Args:
        name (str): Table name.
        indexes (tuple[str, ...]): Record keys mirrored into indexed columns.
        unique (tuple[tuple[str, ...], ...]): Index column groups that must be unique.
    '''

    name: str
    indexes: tuple[str, ...]
    unique: tuple[tuple[str, ...], ...] = ()


COLLECTIONS: dict[str, Collection] = {
    c.name: c
    for c in (
        Collection(
            'positions',
            ('symbol', 'status', 'created_date', 'strategy_type', 'trade_kind'),
        ),
        Collection(
            'journal_entries',
            ('position_id', 'trade_id', 'entry_type', 'created_at'),
        ),
        Collection(
            'price_history',
            ('underlying', 'date', 'updated_at'),
            unique=(('underlying', 'date'),),
        ),
    )
}

_CREATE_META = '''
CREATE TABLE IF NOT EXISTS schema_meta (
    key TEXT PRIMARY KEY,
    value INTEGER NOT NULL
)'''

_GET_VERSION = "SELECT value FROM schema_meta WHERE key = 'schema_version'"

_SET_VERSION = (
    "INSERT INTO schema_meta (key, value) VALUES ('schema_version', ?) "
    'ON CONFLICT(key) DO UPDATE SET value = excluded.value'
)


def _index_value(value: Any) -> str | None:

    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class Store:

    '''
    Provide CRUD access to named record collections in one SQLite database.

    Args:
        conn (aiosqlite.Connection): Caller-owned database connection
        collections (Iterable[Collection] | None): Collection schemas, defaults to COLLECTIONS
    '''

    def __init__(
        self,
        conn: aiosqlite.Connection,
        collections: Iterable[Collection] | None = None,
    ) -> None:

        '''
        Store the caller-owned connection and collection schemas.

        Args:
            conn (aiosqlite.Connection): Caller-owned database connection
            collections (Iterable[Collection] | None): Collection schemas
        '''

        self._conn = conn
        self._collections = {
            c.name: c for c in (collections if collections is not None else COLLECTIONS.values())
        }

    def _collection(self, name: str) -> Collection:

        collection = self._collections.get(name)
        if collection is None:
            msg = f'Unknown collection: {name!r}'
            raise StorageError(msg)
        return collection

    async def ensure_schema(self) -> None:

        '''
        Create tables and indexes, then migrate records written by older versions.

        Returns:
            None
        '''

        async with self._conn.execute(_CREATE_META):
            pass

        for collection in self._collections.values():
            await self._create_collection(collection)

        version = await self.schema_version()
        if version < SCHEMA_VERSION:
            await self._migrate(version)

        await self._conn.commit()

    async def _create_collection(self, collection: Collection) -> None:

        columns = ''.join(f',\n    {col} TEXT' for col in collection.indexes)
        ddl = (
            f'CREATE TABLE IF NOT EXISTS {collection.name} (\n'
            f'    id TEXT PRIMARY KEY{columns},\n'
            '    payload BLOB NOT NULL\n)'
        )
        async with self._conn.execute(ddl):
            pass

        async with self._conn.execute(f'PRAGMA table_info({collection.name})') as cursor:
            existing = {row[1] for row in await cursor.fetchall()}
        for col in collection.indexes:
            if col not in existing:
                async with self._conn.execute(
                    f'ALTER TABLE {collection.name} ADD COLUMN {col} TEXT'
                ):
                    pass

        for col in collection.indexes:
            async with self._conn.execute(
                f'CREATE INDEX IF NOT EXISTS ix_{collection.name}_{col} '
                f'ON {collection.name} ({col})'
            ):
                pass

        for group in collection.unique:
            async with self._conn.execute(
                f'CREATE UNIQUE INDEX IF NOT EXISTS ux_{collection.name}_{"_".join(group)} '
                f'ON {collection.name} ({", ".join(group)})'
            ):
                pass

    async def _migrate(self, from_version: int) -> None:

        '''Rewrite every record through its upgrade and record the new version.'''

        for name, upgrade in RECORD_UPGRADES.items():
            if name not in self._collections:
                continue
            collection = self._collections[name]
            async with self._conn.execute(f'SELECT payload FROM {name}') as cursor:
                rows = await cursor.fetchall()
            for row in rows:
                await self._write(collection, upgrade(loads(row[0])), mode='replace')
            _log.info(
                'migrated collection=%s records=%d from_version=%d to_version=%d',
                name,
                len(rows),
                from_version,
                SCHEMA_VERSION,
            )

        async with self._conn.execute(_SET_VERSION, (SCHEMA_VERSION,)):
            pass

    async def schema_version(self) -> int:

        '''
        Return the schema version recorded in the database.

        Returns:
            int: Recorded version, 0 for a database never initialized
        '''

        async with self._conn.execute(_GET_VERSION) as cursor:
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def _write(self, collection: Collection, record: dict[str, Any], mode: str) -> int:

        record_id = record.get('id')
        if not record_id:
            msg = f'{collection.name} record is missing an id'
            raise StorageError(msg)

        payload = dumps(record)
        values = [_index_value(record.get(col)) for col in collection.indexes]
        columns = ', '.join(('id', *collection.indexes, 'payload'))
        marks = ', '.join('?' for _ in range(len(collection.indexes) + 2))

        if mode == 'update':
            assignments = ', '.join(f'{col} = ?' for col in (*collection.indexes, 'payload'))
            sql = f'UPDATE {collection.name} SET {assignments} WHERE id = ?'
            params: tuple[Any, ...] = (*values, payload, record_id)
        elif mode == 'replace':
            sql = f'INSERT OR REPLACE INTO {collection.name} ({columns}) VALUES ({marks})'
            params = (record_id, *values, payload)
        else:
            sql = f'INSERT INTO {collection.name} ({columns}) VALUES ({marks})'
            params = (record_id, *values, payload)

        try:
            async with self._conn.execute(sql, params) as cursor:
                return cursor.rowcount
        except sqlite3.IntegrityError as exc:
            raise DuplicateRecordError(collection.name, str(record_id)) from exc

    async def add(self, collection: str, record: dict[str, Any]) -> None:

        '''
        Insert a new record.

        Args:
            collection (str): Collection name
            record (dict[str, Any]): JSON record with an "id" key

        Raises:
            DuplicateRecordError: If the id or a unique index already exists
        '''

        await self._write(self._collection(collection), record, mode='insert')
        await self._conn.commit()

    async def put(self, collection: str, record: dict[str, Any]) -> None:

        '''
        Replace an existing record.

        Args:
            collection (str): Collection name
            record (dict[str, Any]): JSON record with an "id" key

        Raises:
            RecordNotFoundError: If no record has this id
        '''

        target = self._collection(collection)
        if await self._write(target, record, mode='update') == 0:
            raise RecordNotFoundError(collection, str(record['id']))
        await self._conn.commit()

    async def upsert(self, collection: str, record: dict[str, Any]) -> None:

        '''
        Insert a record or replace the one with the same id.

        Args:
            collection (str): Collection name
            record (dict[str, Any]): JSON record with an "id" key
        '''

        await self._write(self._collection(collection), record, mode='replace')
        await self._conn.commit()

    def _upgrade(self, collection: str, payload: bytes) -> dict[str, Any]:

        record: dict[str, Any] = loads(payload)
        upgrade = RECORD_UPGRADES.get(collection)
        return upgrade(record) if upgrade else record

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:

        '''
        Return the record with this id, upgraded to the current shape.

        Args:
            collection (str): Collection name
            record_id (str): Record identifier

        Returns:
            dict[str, Any] | None: Record, or None if absent
        '''

        target = self._collection(collection)
        async with self._conn.execute(
            f'SELECT payload FROM {target.name} WHERE id = ?', (record_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return self._upgrade(collection, row[0]) if row else None

    async def get_all(self, collection: str) -> list[dict[str, Any]]:

        '''
        Return every record in insertion order.

        Args:
            collection (str): Collection name

        Returns:
            list[dict[str, Any]]: Records upgraded to the current shape
        '''

        target = self._collection(collection)
        async with self._conn.execute(
            f'SELECT payload FROM {target.name} ORDER BY rowid ASC'
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._upgrade(collection, row[0]) for row in rows]

    async def find(self, collection: str, **criteria: Any) -> list[dict[str, Any]]:

        '''
        Return records whose indexed columns equal the given values.

        Args:
            collection (str): Collection name
            **criteria (Any): Index column to value, combined with AND

        Returns:
            list[dict[str, Any]]: Matching records in insertion order
        '''

        target = self._collection(collection)
        unknown = set(criteria) - set(target.indexes)
        if unknown or not criteria:
            msg = f'{collection} has no index on {sorted(unknown) or "nothing"}'
            raise StorageError(msg)

        where = ' AND '.join(f'{col} = ?' for col in criteria)
        params = tuple(_index_value(value) for value in criteria.values())
        async with self._conn.execute(
            f'SELECT payload FROM {target.name} WHERE {where} ORDER BY rowid ASC', params
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._upgrade(collection, row[0]) for row in rows]

    async def delete(self, collection: str, record_id: str) -> None:

        '''
        Delete the record with this id.

        Args:
            collection (str): Collection name
            record_id (str): Record identifier

        Raises:
            RecordNotFoundError: If no record has this id
        '''

        target = self._collection(collection)
        async with self._conn.execute(
            f'DELETE FROM {target.name} WHERE id = ?', (record_id,)
        ) as cursor:
            deleted = cursor.rowcount
        if deleted == 0:
            raise RecordNotFoundError(collection, record_id)
        await self._conn.commit()

    async def clear(self, collection: str) -> None:

        '''
        Delete every record in a collection.

        Args:
            collection (str): Collection name
        '''

        target = self._collection(collection)
        async with self._conn.execute(f'DELETE FROM {target.name}'):
            pass
        await self._conn.commit()
