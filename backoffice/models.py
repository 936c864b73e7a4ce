import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a unique string ID for a new record"""
    return str(uuid.uuid4())


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(50), default="SCHEDULED", nullable=False)
    service_id = Column(String(36), nullable=True)  # billed service/code

    # Billing
    appointment_fee = Column(Numeric(10, 2), nullable=True)
    write_off = Column(Numeric(10, 2), default=0, nullable=True)  # portion not collected
    adjustable_amount = Column(Numeric(10, 2), nullable=True)  # running adjustment across fee edits

    # Recurrence
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_rule = Column(Text, nullable=True)  # e.g. FREQ=WEEKLY;BYDAY=MO,WE;COUNT=6
    recurring_appointment_id = Column(
        String(36), ForeignKey("appointments.id"), nullable=True, index=True
    )  # master appointment of the series

    # Optimistic concurrency counter, bumped on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}


class Availability(Base):
    __tablename__ = "availabilities"

    id = Column(String(36), primary_key=True, default=generate_id)
    clinician_id = Column(String(36), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Recurrence
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_rule = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
