from decimal import Decimal

import pytest

from backoffice.domain.appointments.billing import (
    BillingEdit,
    BillingState,
    apply_billing_edit,
)
from backoffice.exceptions import ValidationError
from backoffice.shared.validators import parse_amount


def _state(fee, write_off, adjustment=None, service_id="service-1"):
    return BillingState(
        fee=Decimal(str(fee)),
        write_off=Decimal(str(write_off)),
        adjustment_amount=None if adjustment is None else Decimal(str(adjustment)),
        service_id=service_id,
    )


def test_fee_and_write_off_change_accumulates_delta():
    update = apply_billing_edit(_state(100, 0, 0), BillingEdit(fee=150, write_off=10))

    assert update.adjusted
    assert update.changes == {
        "appointment_fee": Decimal("150"),
        "write_off": Decimal("10"),
        "adjustable_amount": Decimal("40"),
    }
    assert update.state.adjustment_amount == Decimal("40")


def test_existing_adjustment_is_carried_forward():
    update = apply_billing_edit(_state(100, 10, 20), BillingEdit(fee=150, write_off=20))
    # 20 + (150 - 100) - (20 - 10)
    assert update.changes["adjustable_amount"] == Decimal("60")


def test_missing_adjustment_counts_as_zero():
    update = apply_billing_edit(_state(100, 0, None), BillingEdit(fee=150, write_off=10))
    assert update.changes["adjustable_amount"] == Decimal("40")


def test_decimal_precision():
    update = apply_billing_edit(
        _state("99.99", "9.99", 0), BillingEdit(fee=149.99, write_off=19.99)
    )
    assert update.changes["adjustable_amount"] == Decimal("40")
    assert update.changes["appointment_fee"] == Decimal("149.99")


def test_write_off_only_change_reduces_adjustment():
    update = apply_billing_edit(_state(100, 0, 0), BillingEdit(fee=100, write_off=25))
    assert update.adjusted
    assert update.changes["adjustable_amount"] == Decimal("-25")


def test_unchanged_amounts_only_change_service():
    update = apply_billing_edit(
        _state(100, 10, 5, service_id="old-service"),
        BillingEdit(fee=100, write_off=10, service_id="new-service"),
    )

    assert not update.adjusted
    assert update.changes == {"service_id": "new-service"}
    assert update.state.fee == Decimal("100")
    assert update.state.adjustment_amount == Decimal("5")


def test_numeric_equality_not_string_equality():
    update = apply_billing_edit(
        _state("100.00", "0.00", 0), BillingEdit(fee="100", write_off=0)
    )
    assert not update.adjusted
    assert update.changes == {}


def test_repeated_identical_edit_is_a_no_op():
    current = _state(80, 5, 12, service_id="svc")
    edit = BillingEdit(fee="80", write_off=5.0, service_id="svc")

    first = apply_billing_edit(current, edit)
    second = apply_billing_edit(first.state, edit)

    for update in (first, second):
        assert update.changes == {}
        assert update.state == current


def test_sequential_edits_are_additive():
    initial = _state(100, 0, 0)

    first = apply_billing_edit(initial, BillingEdit(fee=150, write_off=10))
    second = apply_billing_edit(first.state, BillingEdit(fee=120, write_off=5))
    combined = apply_billing_edit(initial, BillingEdit(fee=120, write_off=5))

    assert second.state.adjustment_amount == combined.state.adjustment_amount == Decimal("15")


def test_service_change_kept_when_amounts_change():
    update = apply_billing_edit(
        _state(100, 0, 0, service_id="old-service"),
        BillingEdit(fee=200, write_off=0, service_id="new-service"),
    )
    assert update.adjusted
    assert update.changes["service_id"] == "new-service"
    assert update.changes["adjustable_amount"] == Decimal("100")


def test_string_and_number_inputs_match():
    current = _state(100, 0, 0)
    from_string = apply_billing_edit(current, BillingEdit(fee="123.45", write_off="0"))
    from_number = apply_billing_edit(current, BillingEdit(fee=123.45, write_off=0))
    assert from_string.changes == from_number.changes


@pytest.mark.parametrize("bad", ["abc", "", "12,50", "NaN", "Infinity", None, True, [1]])
def test_invalid_amount_fails_before_computing(bad):
    with pytest.raises(ValidationError):
        apply_billing_edit(_state(100, 0, 0), BillingEdit(fee=bad, write_off=0))


def test_parse_amount_accepts_common_forms():
    assert parse_amount(" 42.10 ") == Decimal("42.10")
    assert parse_amount(7) == Decimal("7")
    assert parse_amount(0.1) == Decimal("0.1")
    assert parse_amount("-3") == Decimal("-3")
    assert parse_amount(Decimal("9.99")) == Decimal("9.99")


@pytest.mark.parametrize("bad", ["100.005", "0.001", Decimal("1.999"), 0.125])
def test_sub_cent_amount_is_rejected(bad):
    with pytest.raises(ValidationError, match="2 decimal places"):
        parse_amount(bad, "fee")


def test_trailing_zeros_are_normalized_to_cents():
    assert parse_amount("100.000") == Decimal("100.00")
    assert parse_amount("100.000").as_tuple().exponent == -2
    assert parse_amount(5).as_tuple().exponent == -2


@pytest.mark.parametrize("bad", ["123456789.00", "100000000", -100000000, Decimal("1E+9")])
def test_amount_wider_than_column_is_rejected(bad):
    with pytest.raises(ValidationError, match="must not exceed"):
        parse_amount(bad, "fee")


def test_largest_amount_fits():
    assert parse_amount("99999999.99") == Decimal("99999999.99")
    assert parse_amount("-99999999.99") == Decimal("-99999999.99")


def test_sub_cent_fee_never_reaches_the_adjustment():
    with pytest.raises(ValidationError):
        apply_billing_edit(_state(100, 0, 0), BillingEdit(fee="100.005", write_off=0))


def test_adjustment_overflow_is_rejected():
    current = _state(0, 0, "99999999.99")
    with pytest.raises(ValidationError, match="Adjustment amount"):
        apply_billing_edit(current, BillingEdit(fee=1, write_off=0))
