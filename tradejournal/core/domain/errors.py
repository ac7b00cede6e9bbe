'''
Exception hierarchy for the trade journal core.

Validation and constraint errors are raised before any write is
attempted. Storage errors originate in the Store and propagate
unchanged to service callers.
'''

from __future__ import annotations


__all__ = [
    'ConstraintError',
    'DuplicateRecordError',
    'RecordNotFoundError',
    'StorageError',
    'TradeJournalError',
    'ValidationError',
]


class TradeJournalError(Exception):

    '''
    Base exception for all trade journal failures.

    Args:
        message (str): Human-readable error description
    '''

    def __init__(self, message: str) -> None:

        '''
        Store the error message.

        Args:
            message (str): Human-readable error description
        '''

        self.message = message
        super().__init__(message)


class ValidationError(TradeJournalError):

    '''Raised when a candidate record violates a domain invariant.'''


class ConstraintError(ValidationError):

    '''
    Raised when a lifecycle rule forbids the requested change.

    Args:
        message (str): Human-readable error description
        position_id (str): Position the rule was evaluated against
    '''

    def __init__(self, message: str, position_id: str) -> None:

        '''
        Store the offending position identifier.

        Args:
            message (str): Human-readable error description
            position_id (str): Position the rule was evaluated against
        '''

        self.position_id = position_id
        super().__init__(message)


class StorageError(TradeJournalError):

    '''Raised when the persistence layer rejects an operation.'''


class DuplicateRecordError(StorageError):

    '''
    Raised when a create collides with an existing key.

    Args:
        collection (str): Collection the write targeted
        record_id (str): Colliding record identifier
    '''

    def __init__(self, collection: str, record_id: str) -> None:

        self.collection = collection
        self.record_id = record_id
        super().__init__(f'{collection} record already exists: {record_id}')


class RecordNotFoundError(StorageError):

    '''
    Raised when an update, delete or lookup targets a missing record.

    Args:
        collection (str): Collection the operation targeted
        record_id (str): Missing record identifier
    '''

    def __init__(self, collection: str, record_id: str) -> None:

        self.collection = collection
        self.record_id = record_id
        super().__init__(f'{collection} record not found: {record_id}')
