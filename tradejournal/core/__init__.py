'''
Pure domain logic for the trade journal.

Re-exports the trade count rule from the core package. Validators and
calculators are imported from their own modules.
'''

from __future__ import annotations

from tradejournal.core.trade_constraint import ConstraintCheck, TradeConstraint

__all__ = ['ConstraintCheck', 'TradeConstraint']
