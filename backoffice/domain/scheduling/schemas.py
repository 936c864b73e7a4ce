"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import parse_calendar_date, validate_weekday_codes
from .recurrence import (
    NEVER,
    EndAfter,
    EndCondition,
    EndOnDate,
    MonthlyPattern,
    Period,
    RecurrenceSelection,
)

END_AFTER = "After"
END_ON_DATE = "On Date"


class RecurringInfo(BaseModel):
    """Recurrence selection as sent by the calendar dialog"""

    period: Period
    frequency: Optional[str] = None  # repeat every N periods, "1" means every period
    selectedDays: list[str] = []
    monthlyPattern: Optional[MonthlyPattern] = None
    endType: Optional[str] = None  # "After" | "On Date" | "Never"
    endValue: Optional[Union[int, str]] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def validate_frequency(cls, v):
        if v is None or v == "":
            return None
        text = str(v).strip()
        if isinstance(v, bool) or not text.isdigit() or int(text) < 1:
            raise ValueError("frequency must be a positive whole number")
        return text

    @field_validator("selectedDays")
    @classmethod
    def validate_selected_days(cls, v: list[str]) -> list[str]:
        return validate_weekday_codes(v)

    @field_validator("endType")
    @classmethod
    def validate_end_type(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        allowed = {END_AFTER, END_ON_DATE, "Never"}
        if v not in allowed:
            raise ValueError("endType must be 'After', 'On Date' or 'Never' when provided")
        return v

    @model_validator(mode="after")
    def validate_end_value(self):
        if self.endType == END_AFTER:
            text = str(self.endValue).strip() if self.endValue is not None else ""
            if not text.isdigit() or int(text) < 1:
                raise ValueError("endValue must be a positive occurrence count when endType is 'After'")
        elif self.endType == END_ON_DATE:
            if self.endValue is None or isinstance(self.endValue, int):
                raise ValueError("endValue must be an ISO date when endType is 'On Date'")
            parse_calendar_date(self.endValue)
        return self

    def end_condition(self) -> EndCondition:
        if self.endType == END_AFTER:
            return EndAfter(count=int(str(self.endValue).strip()))
        if self.endType == END_ON_DATE:
            return EndOnDate(date=parse_calendar_date(self.endValue))
        return NEVER

    def to_selection(self, start_date: datetime) -> RecurrenceSelection:
        """Bind the selection to the first occurrence's date"""
        return RecurrenceSelection(
            period=self.period,
            anchor_date=start_date.date(),
            interval=int(self.frequency) if self.frequency else 1,
            weekdays=tuple(self.selectedDays),
            monthly_pattern=self.monthlyPattern,
            end=self.end_condition(),
        )


class RecurringRulePreviewRequest(RecurringInfo):
    """Schema for previewing a rule and its occurrences without saving"""

    startDate: datetime


class RecurringRulePreviewResponse(BaseModel):
    """Schema for rule preview response"""

    recurring_rule: str
    occurrences: list[datetime]
