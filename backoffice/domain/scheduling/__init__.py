"""
Scheduling Domain

Recurrence rules for recurring appointments and availability:
- recurrence.py  Selection types, rule building, parsing and expansion
- schemas.py     Recurrence selection request models
- router.py      Rule preview endpoint
"""

from .recurrence import (
    NEVER,
    EndAfter,
    EndOnDate,
    MonthlyPattern,
    Never,
    Period,
    RecurrenceRuleInfo,
    RecurrenceSelection,
    build_rule,
    expand_occurrences,
    parse_rule,
)
from .router import router

__all__ = [
    "NEVER",
    "EndAfter",
    "EndOnDate",
    "MonthlyPattern",
    "Never",
    "Period",
    "RecurrenceRuleInfo",
    "RecurrenceSelection",
    "build_rule",
    "expand_occurrences",
    "parse_rule",
    "router",
]
