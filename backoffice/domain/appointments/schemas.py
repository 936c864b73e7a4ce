"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import parse_amount
from ..scheduling.schemas import RecurringInfo


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment, optionally as a recurring series"""

    title: str
    startDate: datetime
    endDate: datetime
    serviceId: Optional[str] = None
    appointmentFee: Optional[Decimal] = None
    recurringInfo: Optional[RecurringInfo] = None

    @field_validator("appointmentFee", mode="before")
    @classmethod
    def validate_fee(cls, v):
        if v is None:
            return v
        return parse_amount(v, "appointmentFee")

    @model_validator(mode="after")
    def validate_dates(self):
        if self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        return self


class AppointmentBillingUpdate(BaseModel):
    """Schema for editing an appointment's fee, write-off and service"""

    fee: Decimal
    writeOff: Decimal
    serviceId: Optional[str] = None
    version: Optional[int] = None  # optimistic concurrency check when provided

    @field_validator("fee", "writeOff", mode="before")
    @classmethod
    def validate_amount(cls, v, info):
        return parse_amount(v, info.field_name)


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: str
    title: str
    start_date: datetime
    end_date: datetime
    status: str
    service_id: Optional[str] = None
    appointment_fee: Optional[Decimal] = None
    write_off: Optional[Decimal] = None
    adjustable_amount: Optional[Decimal] = None
    is_recurring: bool
    recurring_rule: Optional[str] = None
    recurring_appointment_id: Optional[str] = None
    version: int

    class Config:
        from_attributes = True
