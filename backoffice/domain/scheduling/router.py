"""Scheduling router - FastAPI endpoints for recurrence rules"""

import logging

from fastapi import APIRouter

from .recurrence import build_rule, expand_occurrences
from .schemas import RecurringRulePreviewRequest, RecurringRulePreviewResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


@router.post("/recurring-rule", response_model=RecurringRulePreviewResponse)
async def preview_recurring_rule(data: RecurringRulePreviewRequest):
    """Build the rule for a recurrence selection and list the occurrences it produces"""
    rule = build_rule(data.to_selection(data.startDate))
    return RecurringRulePreviewResponse(
        recurring_rule=rule,
        occurrences=expand_occurrences(rule, data.startDate),
    )


__all__ = ["router", "preview_recurring_rule"]
