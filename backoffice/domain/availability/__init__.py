"""
Availability Domain

Clinician availability slots, optionally recurring:
- repository.py  Availability database queries, overlap lookup
- service.py     Slot creation, moves, deletion and occurrence expansion
- schemas.py     Request and response models
- router.py      /availability endpoints
"""

from .router import router
from .service import AvailabilityService

__all__ = ["AvailabilityService", "router"]
