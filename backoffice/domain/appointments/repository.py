"""Appointment repository - Database operations for appointments"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointment_by_id(
        db: Session, appointment_id: str, for_update: bool = False
    ) -> Optional[Appointment]:
        """Get an appointment by ID, optionally locking the row for a read-modify-write"""
        query = db.query(Appointment).filter(Appointment.id == appointment_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_series(db: Session, master_id: str) -> list[Appointment]:
        """Get the master appointment and every occurrence linked to it, in date order"""
        return (
            db.query(Appointment)
            .filter(
                (Appointment.id == master_id)
                | (Appointment.recurring_appointment_id == master_id)
            )
            .order_by(Appointment.start_date.asc())
            .all()
        )

    @staticmethod
    def add_appointments(db: Session, appointments: list[Appointment]) -> list[Appointment]:
        """Insert appointments in one transaction"""
        db.add_all(appointments)
        db.commit()
        for appointment in appointments:
            db.refresh(appointment)
        return appointments

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Update an appointment with provided fields"""
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment
