'''
Journal dataclasses for free-form reflections on positions and trades.

A JournalEntry always references exactly one Position and optionally
the specific Trade it reflects on. Field names follow the fixed prompt
set of the entry type.
'''

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tradejournal.core.domain._require_str import _require_aware, _require_str
from tradejournal.core.domain.enums import JournalEntryType


__all__ = ['JOURNAL_PROMPTS', 'JournalEntry', 'JournalField', 'JournalPrompt']


@dataclass(frozen=True)
class JournalPrompt:

    '''
    A prompt shown for one journal field.

    Args:
        name (str): Field name.
        prompt (str): Question presented to the user.
        required (bool): Whether a response is mandatory.
    '''

    name: str
    prompt: str
    required: bool = False


_SHARED_PROMPTS = (
    JournalPrompt(
        'market_conditions',
        'Describe current market environment and how it affects this trade',
    ),
    JournalPrompt('execution_strategy', 'How will you enter and exit this position?'),
)

JOURNAL_PROMPTS: dict[JournalEntryType, tuple[JournalPrompt, ...]] = {
    JournalEntryType.POSITION_PLAN: (
        JournalPrompt(
            'thesis',
            "Why are you planning this position? What's your market outlook and strategy?",
            required=True,
        ),
        JournalPrompt('emotional_state', 'How are you feeling about this trade?'),
        *_SHARED_PROMPTS,
    ),
    JournalEntryType.TRADE_EXECUTION: (
        JournalPrompt('execution_notes', 'Describe the execution'),
        JournalPrompt('emotional_state', 'How do you feel about this execution?'),
        *_SHARED_PROMPTS,
    ),
}


@dataclass(frozen=True)
class JournalField:

    '''
    One answered prompt in a journal entry.

    Args:
        name (str): Field name from the prompt set.
        prompt (str): Prompt text at the time of writing.
        response (str): User response, may be empty for optional fields.
    '''

    name: str
    prompt: str
    response: str

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        _require_str('JournalField', 'name', self.name)


@dataclass(frozen=True)
class JournalEntry:

    '''
    A structured reflection tied to a Position or one of its Trades.

    Args:
        id (str): Unique journal entry identifier.
        position_id (str): Owning position identifier.
        entry_type (JournalEntryType): Plan or execution reflection.
        fields (list[JournalField]): Answered prompts in display order.
        created_at (datetime): Creation time, must be timezone-aware.
        trade_id (str | None): Trade this entry reflects on, if any.
        executed_at (datetime | None): Execution time for trade reflections.
    '''

    id: str
    position_id: str
    entry_type: JournalEntryType
    fields: list[JournalField]
    created_at: datetime
    trade_id: str | None = None
    executed_at: datetime | None = None

    def __post_init__(self) -> None:

        '''Validate invariants at construction time.'''

        _require_aware('JournalEntry', 'created_at', self.created_at)
        _require_aware('JournalEntry', 'executed_at', self.executed_at, optional=True)

    def field_response(self, name: str) -> str | None:

        '''
        Return the response recorded for a field name.

        Args:
            name (str): Field name to look up.

        Returns:
            str | None: Response text, or None if the field is absent.
        '''

        for journal_field in self.fields:
            if journal_field.name == name:
                return journal_field.response
        return None
