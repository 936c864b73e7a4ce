from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import text

from backoffice.domain.appointments.schemas import AppointmentBillingUpdate, AppointmentCreate
from backoffice.domain.appointments.service import AppointmentService
from backoffice.exceptions import ConflictError, NotFoundError, ValidationError
from backoffice.models import Appointment


def _book(db, fee="100", write_off="0", adjustable=None, service_id="service-1"):
    appointment = Appointment(
        title="Intake session",
        start_date=datetime(2025, 1, 6, 10, 0),
        end_date=datetime(2025, 1, 6, 11, 0),
        service_id=service_id,
        appointment_fee=Decimal(fee),
        write_off=Decimal(write_off),
        adjustable_amount=None if adjustable is None else Decimal(adjustable),
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def _edit(fee, write_off, service_id="service-1", version=None):
    return AppointmentBillingUpdate(fee=fee, writeOff=write_off, serviceId=service_id, version=version)


def test_update_billing_persists_adjustment(db):
    appointment = _book(db)
    service = AppointmentService(db)

    updated = service.update_billing(appointment.id, _edit(150, 10))

    assert updated.appointment_fee == Decimal("150")
    assert updated.write_off == Decimal("10")
    assert updated.adjustable_amount == Decimal("40")
    assert updated.version == 2


def test_update_billing_sequential_edits_accumulate(db):
    appointment = _book(db, adjustable="0")
    service = AppointmentService(db)

    service.update_billing(appointment.id, _edit(150, 10))
    updated = service.update_billing(appointment.id, _edit(120, 5))

    assert updated.adjustable_amount == Decimal("15")


def test_update_billing_service_only(db):
    appointment = _book(db, fee="100", write_off="10", service_id="old-service")
    service = AppointmentService(db)

    updated = service.update_billing(appointment.id, _edit("100.00", "10", service_id="new-service"))

    assert updated.service_id == "new-service"
    assert updated.appointment_fee == Decimal("100")
    assert updated.adjustable_amount is None


def test_update_billing_without_changes_does_not_write(db):
    appointment = _book(db)
    service = AppointmentService(db)

    updated = service.update_billing(appointment.id, _edit(100, 0))

    assert updated.version == 1


def test_update_billing_missing_appointment(db):
    appointment = _book(db)
    service = AppointmentService(db)

    with pytest.raises(NotFoundError):
        service.update_billing("does-not-exist", _edit(150, 10))

    unchanged = service.get_appointment(appointment.id)
    assert unchanged.appointment_fee == Decimal("100")
    assert unchanged.adjustable_amount is None


def test_update_billing_rejects_outdated_version(db):
    appointment = _book(db)
    service = AppointmentService(db)
    service.update_billing(appointment.id, _edit(150, 10))

    with pytest.raises(ConflictError):
        service.update_billing(appointment.id, _edit(200, 10, version=1))

    assert service.get_appointment(appointment.id).appointment_fee == Decimal("150")


def test_update_billing_detects_concurrent_write(db):
    appointment = _book(db)
    service = AppointmentService(db)

    # Another writer bumps the row behind the session's back
    db.execute(
        text("UPDATE appointments SET version = version + 1, appointment_fee = 130 WHERE id = :id"),
        {"id": appointment.id},
    )

    with pytest.raises(ConflictError):
        service.update_billing(appointment.id, _edit(150, 10))


def test_create_single_appointment(db):
    service = AppointmentService(db)
    created = service.create_appointment(
        AppointmentCreate(
            title="Follow-up",
            startDate=datetime(2025, 2, 3, 14, 0),
            endDate=datetime(2025, 2, 3, 14, 50),
            serviceId="service-9",
            appointmentFee="120",
        )
    )

    assert len(created) == 1
    assert created[0].is_recurring is False
    assert created[0].recurring_rule is None
    assert created[0].appointment_fee == Decimal("120")


def test_create_recurring_series(db):
    service = AppointmentService(db)
    created = service.create_appointment(
        AppointmentCreate(
            title="Weekly therapy",
            startDate=datetime(2025, 1, 6, 10, 0),
            endDate=datetime(2025, 1, 6, 11, 0),
            appointmentFee=90,
            recurringInfo={
                "period": "WEEKLY",
                "frequency": "1",
                "selectedDays": ["MO", "WE"],
                "endType": "After",
                "endValue": 4,
            },
        )
    )

    master, *children = created
    assert master.recurring_rule == "FREQ=WEEKLY;BYDAY=MO,WE;COUNT=4"
    assert master.recurring_appointment_id is None
    assert [a.start_date for a in created] == [
        datetime(2025, 1, 6, 10, 0),
        datetime(2025, 1, 8, 10, 0),
        datetime(2025, 1, 13, 10, 0),
        datetime(2025, 1, 15, 10, 0),
    ]
    assert all(a.end_date - a.start_date == master.end_date - master.start_date for a in created)
    assert all(c.recurring_appointment_id == master.id for c in children)

    assert len(service.get_series(children[-1].id)) == 4


def test_create_recurring_series_moves_to_first_matching_day(db):
    service = AppointmentService(db)
    created = service.create_appointment(
        AppointmentCreate(
            title="Group session",
            startDate=datetime(2025, 1, 5, 9, 0),  # Sunday
            endDate=datetime(2025, 1, 5, 10, 0),
            recurringInfo={"period": "WEEKLY", "selectedDays": ["MO"], "endType": "After", "endValue": "2"},
        )
    )

    assert [a.start_date for a in created] == [
        datetime(2025, 1, 6, 9, 0),
        datetime(2025, 1, 13, 9, 0),
    ]


def test_create_open_ended_series_is_capped(db):
    service = AppointmentService(db, max_occurrences=5)
    created = service.create_appointment(
        AppointmentCreate(
            title="Monthly check-in",
            startDate=datetime(2025, 1, 28, 9, 0),
            endDate=datetime(2025, 1, 28, 9, 30),
            recurringInfo={"period": "MONTHLY", "monthlyPattern": "onLastWeekDayOfMonth"},
        )
    )

    assert len(created) == 5
    assert created[0].recurring_rule == "FREQ=MONTHLY;BYDAY=-1TU"
    assert created[1].start_date == datetime(2025, 2, 25, 9, 0)


def _recurring(recurring_info, start=datetime(2025, 1, 6, 10, 0)):
    return AppointmentCreate(
        title="Weekly therapy",
        startDate=start,
        endDate=start.replace(hour=start.hour + 1),
        appointmentFee=90,
        recurringInfo=recurring_info,
    )


def test_create_rejects_series_ending_before_start(db):
    service = AppointmentService(db)

    with pytest.raises(ValidationError, match="no occurrences"):
        service.create_appointment(
            _recurring({"period": "WEEKLY", "endType": "On Date", "endValue": "2024-12-31"})
        )

    assert db.query(Appointment).count() == 0


def test_create_rejects_oversized_series(db):
    service = AppointmentService(db)

    with pytest.raises(ValidationError, match="more than"):
        service.create_appointment(_recurring({"period": "DAILY", "endType": "After", "endValue": 2000}))

    assert db.query(Appointment).count() == 0


def test_create_series_cap_is_configurable(db):
    service = AppointmentService(db, max_series=3)

    with pytest.raises(ValidationError):
        service.create_appointment(_recurring({"period": "WEEKLY", "endType": "After", "endValue": 4}))

    created = service.create_appointment(_recurring({"period": "WEEKLY", "endType": "After", "endValue": 3}))
    assert len(created) == 3


def test_update_billing_rejects_sub_cent_fee(db):
    appointment = _book(db)
    service = AppointmentService(db)

    with pytest.raises(ValidationError):
        service.update_billing(
            appointment.id,
            AppointmentBillingUpdate.model_construct(fee="100.005", writeOff=0, serviceId="service-1", version=None),
        )

    db.refresh(appointment)
    assert appointment.version == 1
    assert appointment.adjustable_amount is None
