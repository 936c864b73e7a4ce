"""
Appointments Domain

Booking (single and recurring) and billing edits:
- billing.py     Fee / write-off / adjustment arithmetic
- repository.py  Appointment database queries
- service.py     Booking and billing workflows
- schemas.py     Request and response models
- router.py      /appointment endpoints
"""

from .billing import BillingEdit, BillingState, BillingUpdate, apply_billing_edit
from .router import router
from .service import AppointmentService

__all__ = [
    "AppointmentService",
    "BillingEdit",
    "BillingState",
    "BillingUpdate",
    "apply_billing_edit",
    "router",
]
