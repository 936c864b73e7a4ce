"""Availability service - Business logic for clinician availability slots"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import MAX_RECURRING_OCCURRENCES, MAX_SERIES_OCCURRENCES
from ...exceptions import NotFoundError, ValidationError
from ...models import Availability
from ..scheduling.recurrence import build_rule, expand_occurrences
from ..scheduling.schemas import RecurringInfo
from .repository import AvailabilityRepository
from .schemas import AvailabilityCreate, AvailabilitySlot, AvailabilityUpdate

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Service layer for availability business logic"""

    def __init__(
        self,
        db: Session,
        max_occurrences: int = MAX_RECURRING_OCCURRENCES,
        max_series: int = MAX_SERIES_OCCURRENCES,
    ):
        self.db = db
        self.repo = AvailabilityRepository()
        self.max_occurrences = max_occurrences
        self.max_series = max_series

    def list_availabilities(
        self,
        clinician_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Availability]:
        """List slots in start order; the window applies only when both ends are given"""
        if start is None or end is None:
            start = end = None
        return self.repo.list_availabilities(self.db, clinician_id, start, end)

    def get_availability(self, availability_id: str) -> Availability:
        """Get a specific availability slot"""
        availability = self.repo.get_availability_by_id(self.db, availability_id)
        if not availability:
            raise NotFoundError("Availability not found")
        return availability

    def create_availability(self, data: AvailabilityCreate) -> Availability:
        """Open a slot, optionally repeating by the given recurrence selection"""
        self._check_free(data.clinician_id, data.start_date, data.end_date)
        rule = self._rule_for(data.recurringInfo, data.start_date)

        try:
            availability = self.repo.create_availability(
                self.db,
                clinician_id=data.clinician_id,
                start_time=data.start_date,
                end_time=data.end_date,
                is_recurring=rule is not None,
                recurring_rule=rule,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create availability for clinician {data.clinician_id}: {e}")
            raise

        logger.info(f"Created availability {availability.id} for clinician {data.clinician_id}")
        return availability

    def update_availability(self, availability_id: str, data: AvailabilityUpdate) -> Availability:
        """
        Move a slot or change its recurrence.

        Times that are not sent keep their stored values. A new recurrence
        selection is anchored on the slot's (possibly moved) start.
        """
        availability = self.get_availability(availability_id)

        start = data.startTime or availability.start_time
        end = data.endTime or availability.end_time
        updates = {}
        if data.startTime or data.endTime:
            if end <= start:
                raise ValidationError("End time must be after start time")
            self._check_free(availability.clinician_id, start, end, exclude_id=availability.id)
            updates.update(start_time=start, end_time=end)

        if data.recurringInfo is not None:
            updates.update(is_recurring=True, recurring_rule=self._rule_for(data.recurringInfo, start))
        elif data.isRecurring is False:
            updates.update(is_recurring=False, recurring_rule=None)

        if not updates:
            return availability

        try:
            availability = self.repo.update_availability(self.db, availability, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update availability {availability_id}: {e}")
            raise

        logger.info(f"Updated availability {availability_id}: {sorted(updates)}")
        return availability

    def delete_availability(self, availability_id: str) -> None:
        """Delete an availability slot"""
        availability = self.get_availability(availability_id)
        try:
            self.repo.delete_availability(self.db, availability)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete availability {availability_id}: {e}")
            raise
        logger.info(f"Deleted availability {availability_id}")

    def get_occurrences(self, availability_id: str) -> list[AvailabilitySlot]:
        """Concrete slots of an availability; a one-off slot yields itself"""
        availability = self.get_availability(availability_id)
        duration = availability.end_time - availability.start_time
        if not availability.recurring_rule:
            starts = [availability.start_time]
        else:
            starts = expand_occurrences(
                availability.recurring_rule,
                availability.start_time,
                limit=self.max_occurrences,
                max_occurrences=self.max_series,
            )
        return [AvailabilitySlot(start_time=s, end_time=s + duration) for s in starts]

    def _rule_for(self, recurring_info: Optional[RecurringInfo], start: datetime) -> Optional[str]:
        if recurring_info is None:
            return None
        rule = build_rule(recurring_info.to_selection(start))
        # Reject empty or oversized series before anything is stored
        expand_occurrences(rule, start, limit=self.max_occurrences, max_occurrences=self.max_series)
        return rule

    def _check_free(
        self, clinician_id: str, start: datetime, end: datetime, exclude_id: Optional[str] = None
    ) -> None:
        clash = self.repo.find_overlapping(self.db, clinician_id, start, end, exclude_id)
        if clash:
            logger.warning(
                f"Availability {start.isoformat()}-{end.isoformat()} for clinician {clinician_id} "
                f"overlaps {clash.id}"
            )
            raise ValidationError("Time slot overlaps with existing availability")
