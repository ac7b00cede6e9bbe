'''
Generate prefixed UUID identifiers for positions, trades and journal entries.
'''

from __future__ import annotations

import uuid

__all__ = [
    'generate_journal_id',
    'generate_position_id',
    'generate_trade_id',
]


def generate_position_id() -> str:

    '''Return a new position id of the form pos-<uuid4>.'''

    return f'pos-{uuid.uuid4()}'


def generate_journal_id() -> str:

    '''Return a new journal entry id of the form journal-<uuid4>.'''

    return f'journal-{uuid.uuid4()}'


def generate_trade_id() -> str:

    '''Return a new trade id of the form trade-<uuid4>.'''

    return f'trade-{uuid.uuid4()}'
