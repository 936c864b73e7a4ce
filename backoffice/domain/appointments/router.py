"""Appointment router - FastAPI endpoints for booking and billing edits"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import AppointmentBillingUpdate, AppointmentCreate, AppointmentResponse
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointment", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.post("", response_model=list[AppointmentResponse], status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment; a recurring booking returns the whole series"""
    appointments = service.create_appointment(data)
    return [AppointmentResponse.model_validate(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get a specific appointment"""
    return AppointmentResponse.model_validate(service.get_appointment(appointment_id))


@router.get("/{appointment_id}/series", response_model=list[AppointmentResponse])
async def get_appointment_series(
    appointment_id: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get every appointment in the recurring series of the given appointment"""
    return [AppointmentResponse.model_validate(a) for a in service.get_series(appointment_id)]


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment_billing(
    appointment_id: str,
    data: AppointmentBillingUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update fee, write-off and service of an appointment"""
    appointment = service.update_billing(appointment_id, data)
    return AppointmentResponse.model_validate(appointment)


__all__ = [
    "router",
    "create_appointment",
    "get_appointment",
    "get_appointment_series",
    "update_appointment_billing",
]
