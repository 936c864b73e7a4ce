"""Availability repository - Database operations for clinician availability"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Availability


class AvailabilityRepository:
    """Repository for availability database operations"""

    @staticmethod
    def get_availability_by_id(db: Session, availability_id: str) -> Optional[Availability]:
        """Get an availability slot by ID"""
        return db.query(Availability).filter(Availability.id == availability_id).first()

    @staticmethod
    def list_availabilities(
        db: Session,
        clinician_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Availability]:
        """List availability slots, optionally for one clinician and inside a window"""
        query = db.query(Availability)
        if clinician_id:
            query = query.filter(Availability.clinician_id == clinician_id)
        if start is not None:
            query = query.filter(Availability.start_time >= start)
        if end is not None:
            query = query.filter(Availability.end_time <= end)
        return query.order_by(Availability.start_time.asc()).all()

    @staticmethod
    def find_overlapping(
        db: Session,
        clinician_id: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[str] = None,
    ) -> Optional[Availability]:
        """Find a slot of the clinician that shares any time with [start, end)"""
        query = db.query(Availability).filter(
            Availability.clinician_id == clinician_id,
            Availability.start_time < end,
            Availability.end_time > start,
        )
        if exclude_id:
            query = query.filter(Availability.id != exclude_id)
        return query.first()

    @staticmethod
    def create_availability(db: Session, **fields) -> Availability:
        """Insert an availability slot"""
        availability = Availability(**fields)
        db.add(availability)
        db.commit()
        db.refresh(availability)
        return availability

    @staticmethod
    def update_availability(db: Session, availability: Availability, **updates) -> Availability:
        """Update an availability slot with provided fields"""
        for key, value in updates.items():
            if hasattr(availability, key):
                setattr(availability, key, value)

        db.commit()
        db.refresh(availability)
        return availability

    @staticmethod
    def delete_availability(db: Session, availability: Availability) -> None:
        """Delete an availability slot"""
        db.delete(availability)
        db.commit()
