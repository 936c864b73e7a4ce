"""Appointment service - Business logic for booking and billing edits"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...config import MAX_RECURRING_OCCURRENCES, MAX_SERIES_OCCURRENCES
from ...exceptions import ConflictError, NotFoundError, ValidationError
from ...models import Appointment, generate_id
from ..scheduling.recurrence import build_rule, expand_occurrences
from .billing import BillingEdit, BillingState, BillingUpdate, apply_billing_edit
from .repository import AppointmentRepository
from .schemas import AppointmentBillingUpdate, AppointmentCreate

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        db: Session,
        max_occurrences: int = MAX_RECURRING_OCCURRENCES,
        max_series: int = MAX_SERIES_OCCURRENCES,
    ):
        self.db = db
        self.repo = AppointmentRepository()
        self.max_occurrences = max_occurrences
        self.max_series = max_series

    def get_appointment(self, appointment_id: str) -> Appointment:
        """Get a specific appointment"""
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def get_series(self, appointment_id: str) -> list[Appointment]:
        """Get every appointment in the series the given appointment belongs to"""
        appointment = self.get_appointment(appointment_id)
        if not appointment.is_recurring:
            return [appointment]
        master_id = appointment.recurring_appointment_id or appointment.id
        return self.repo.get_series(self.db, master_id)

    def create_appointment(self, data: AppointmentCreate) -> list[Appointment]:
        """
        Book an appointment.

        With a recurrence selection the rule is built from the start date and
        the series is expanded up front: the first occurrence becomes the
        master appointment and each later one is linked to it. Returns every
        appointment created, master first.
        """
        base = {
            "title": data.title,
            "service_id": data.serviceId,
            "appointment_fee": data.appointmentFee,
            "write_off": 0,
        }

        if not data.recurringInfo:
            appointment = Appointment(
                **base,
                start_date=data.startDate,
                end_date=data.endDate,
                is_recurring=False,
                recurring_rule=None,
            )
            logger.info(f"Booking appointment '{data.title}' at {data.startDate.isoformat()}")
            return self.repo.add_appointments(self.db, [appointment])

        rule = build_rule(data.recurringInfo.to_selection(data.startDate))
        starts = expand_occurrences(
            rule, data.startDate, limit=self.max_occurrences, max_occurrences=self.max_series
        )

        duration = data.endDate - data.startDate
        master = Appointment(
            **base,
            id=generate_id(),
            start_date=starts[0],
            end_date=starts[0] + duration,
            is_recurring=True,
            recurring_rule=rule,
        )
        series = [master]
        for start in starts[1:]:
            series.append(
                Appointment(
                    **base,
                    start_date=start,
                    end_date=start + duration,
                    is_recurring=True,
                    recurring_rule=rule,
                    recurring_appointment_id=master.id,
                )
            )

        logger.info(f"Booking recurring series '{data.title}' ({rule}): {len(series)} appointment(s)")
        return self.repo.add_appointments(self.db, series)

    def update_billing(self, appointment_id: str, data: AppointmentBillingUpdate) -> Appointment:
        """
        Apply a fee/write-off/service edit to an appointment.

        The read, the computation and the write happen in one transaction on a
        locked row; the row's version counter rejects a write that raced with
        another edit instead of silently losing it.
        """
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id, for_update=True)
        if not appointment:
            self.db.rollback()
            raise NotFoundError("Appointment not found")

        if data.version is not None and data.version != appointment.version:
            self.db.rollback()
            logger.warning(
                f"Billing edit for appointment {appointment_id} expected version {data.version}, "
                f"found {appointment.version}"
            )
            raise ConflictError("Appointment was modified by another request; reload and retry")

        try:
            update = self.compute_billing_update(appointment, data)
        except ValidationError:
            self.db.rollback()
            raise
        if not update.changes:
            self.db.rollback()
            return appointment

        try:
            appointment = self.repo.update_appointment(self.db, appointment, **update.changes)
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"Concurrent billing edit detected for appointment {appointment_id}: {e}")
            raise ConflictError("Appointment was modified by another request; reload and retry") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save billing edit for appointment {appointment_id}: {e}")
            raise

        if update.adjusted:
            logger.info(
                f"Appointment {appointment_id} billing adjusted: fee={update.state.fee}, "
                f"write_off={update.state.write_off}, adjustable_amount={update.state.adjustment_amount}"
            )
        else:
            logger.info(f"Appointment {appointment_id} service changed to {update.state.service_id}")
        return appointment

    @staticmethod
    def compute_billing_update(
        appointment: Appointment, data: AppointmentBillingUpdate
    ) -> BillingUpdate:
        """Billing outcome of an edit against the appointment's stored state"""
        return apply_billing_edit(
            BillingState.from_appointment(appointment),
            BillingEdit(fee=data.fee, write_off=data.writeOff, service_id=data.serviceId),
        )
