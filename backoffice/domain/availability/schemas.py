"""Availability domain schemas - Pydantic models for validation"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ..scheduling.schemas import RecurringInfo


class AvailabilityCreate(BaseModel):
    """Schema for opening an availability slot"""

    clinician_id: str
    start_date: datetime
    end_date: datetime
    recurringInfo: Optional[RecurringInfo] = None

    @field_validator("clinician_id")
    @classmethod
    def validate_clinician_id(cls, v: str) -> str:
        try:
            return str(uuid.UUID(v))
        except ValueError:
            raise ValueError("Invalid UUID format for clinician_id")

    @model_validator(mode="after")
    def validate_times(self):
        if self.end_date <= self.start_date:
            raise ValueError("End time must be after start time")
        return self


class AvailabilityUpdate(BaseModel):
    """Schema for moving a slot or changing its recurrence; omitted fields are kept"""

    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    isRecurring: Optional[bool] = None  # False drops the stored rule
    recurringInfo: Optional[RecurringInfo] = None

    @model_validator(mode="after")
    def validate_recurrence(self):
        if self.isRecurring is False and self.recurringInfo is not None:
            raise ValueError("recurringInfo cannot be sent with isRecurring false")
        return self


class AvailabilityResponse(BaseModel):
    """Schema for availability response"""

    id: str
    clinician_id: str
    start_time: datetime
    end_time: datetime
    is_recurring: bool
    recurring_rule: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AvailabilitySlot(BaseModel):
    """One concrete occurrence of an availability slot"""

    start_time: datetime
    end_time: datetime
