"""Availability router - FastAPI endpoints for clinician availability"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import AvailabilityCreate, AvailabilityResponse, AvailabilitySlot, AvailabilityUpdate
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("", response_model=list[AvailabilityResponse])
async def list_availabilities(
    clinician_id: Optional[str] = Query(None, alias="clinicianId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """List availability slots, filtered by clinician and by a startDate/endDate window"""
    availabilities = service.list_availabilities(clinician_id, start_date, end_date)
    return [AvailabilityResponse.model_validate(a) for a in availabilities]


@router.post("", response_model=AvailabilityResponse, status_code=status.HTTP_201_CREATED)
async def create_availability(
    data: AvailabilityCreate,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Open an availability slot"""
    return AvailabilityResponse.model_validate(service.create_availability(data))


@router.get("/{availability_id}", response_model=AvailabilityResponse)
async def get_availability(
    availability_id: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get a specific availability slot"""
    return AvailabilityResponse.model_validate(service.get_availability(availability_id))


@router.get("/{availability_id}/occurrences", response_model=list[AvailabilitySlot])
async def get_availability_occurrences(
    availability_id: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Expand a slot's recurrence into concrete start/end times"""
    return service.get_occurrences(availability_id)


@router.put("/{availability_id}", response_model=AvailabilityResponse)
async def update_availability(
    availability_id: str,
    data: AvailabilityUpdate,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Move an availability slot or change its recurrence"""
    return AvailabilityResponse.model_validate(service.update_availability(availability_id, data))


@router.delete("/{availability_id}")
async def delete_availability(
    availability_id: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Delete an availability slot"""
    service.delete_availability(availability_id)
    return {"success": True}


__all__ = [
    "router",
    "list_availabilities",
    "create_availability",
    "get_availability",
    "get_availability_occurrences",
    "update_availability",
    "delete_availability",
]
