"""
Appointment billing adjustments.

Editing an appointment's fee or write-off does not overwrite its history: the
difference between the old and new figures is folded into a running
``adjustable_amount`` so outstanding-balance reports stay reconcilable.

    fee_delta       = new_fee - old_fee
    write_off_delta = new_write_off - old_write_off
    adjustable      = (old_adjustable or 0) + fee_delta - write_off_delta

Because the result is a delta on top of the stored state, an edit must always
be computed against freshly read state; replaying it blindly double-counts.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

from ...exceptions import ValidationError
from ...shared.validators import MAX_AMOUNT, parse_amount

Amount = Union[Decimal, int, float, str]

ZERO = Decimal("0")


@dataclass(frozen=True)
class BillingState:
    fee: Decimal
    write_off: Decimal
    adjustment_amount: Optional[Decimal] = None
    service_id: Optional[str] = None

    @classmethod
    def from_appointment(cls, appointment) -> "BillingState":
        return cls(
            fee=parse_amount(appointment.appointment_fee if appointment.appointment_fee is not None else 0, "fee"),
            write_off=parse_amount(appointment.write_off if appointment.write_off is not None else 0, "writeOff"),
            adjustment_amount=(
                parse_amount(appointment.adjustable_amount, "adjustable_amount")
                if appointment.adjustable_amount is not None
                else None
            ),
            service_id=appointment.service_id,
        )


@dataclass(frozen=True)
class BillingEdit:
    fee: Amount
    write_off: Amount
    service_id: Optional[str] = None


@dataclass
class BillingUpdate:
    """Outcome of a billing edit: the new state and the columns to persist"""

    state: BillingState
    changes: dict = field(default_factory=dict)
    adjusted: bool = False


def apply_billing_edit(current: BillingState, proposed: BillingEdit) -> BillingUpdate:
    """
    Compute the billing state after an edit.

    Amounts are parsed to cents before anything is computed, so a malformed,
    sub-cent or oversized fee or write-off raises ValidationError with no partial result. When fee and
    write-off compare numerically equal to the stored ones only the service
    changes. A service id in the edit is persisted on either path.
    """
    new_fee = parse_amount(proposed.fee, "fee")
    new_write_off = parse_amount(proposed.write_off, "writeOff")

    changes = {}
    service_id = current.service_id
    if proposed.service_id is not None and proposed.service_id != current.service_id:
        service_id = proposed.service_id
        changes["service_id"] = service_id

    if new_fee == current.fee and new_write_off == current.write_off:
        state = BillingState(
            fee=current.fee,
            write_off=current.write_off,
            adjustment_amount=current.adjustment_amount,
            service_id=service_id,
        )
        return BillingUpdate(state=state, changes=changes, adjusted=False)

    fee_delta = new_fee - current.fee
    write_off_delta = new_write_off - current.write_off
    adjustment_amount = (current.adjustment_amount or ZERO) + fee_delta - write_off_delta
    if abs(adjustment_amount) > MAX_AMOUNT:
        raise ValidationError(f"Adjustment amount would exceed {MAX_AMOUNT}")

    changes.update(
        appointment_fee=new_fee,
        write_off=new_write_off,
        adjustable_amount=adjustment_amount,
    )
    state = BillingState(
        fee=new_fee,
        write_off=new_write_off,
        adjustment_amount=adjustment_amount,
        service_id=service_id,
    )
    return BillingUpdate(state=state, changes=changes, adjusted=True)
