"""
Unit tests for the Booking aggregate and schedule entities.
"""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from medbook.core.domain import Money, ValidationException
from medbook.domains.scheduling.domain.entities import Booking, ScheduleOverride, generate_booking_reference
from medbook.domains.scheduling.domain.services import PassThroughFeePolicy
from medbook.domains.scheduling.domain.value_objects import (
    ActorRole,
    BookingStatus,
    ConsultationType,
    OverrideType,
    PaymentStatus,
    RefundQuote,
)

IST = ZoneInfo("Asia/Kolkata")
NOW = datetime(2025, 3, 9, 10, 0, tzinfo=IST)


@pytest.fixture
def booking() -> Booking:
    return Booking(
        id=uuid4(),
        patient_id=uuid4(),
        doctor_id=uuid4(),
        appointment_date=date(2025, 3, 10),
        start_time=time(9, 0),
        end_time=time(9, 30),
    )


@pytest.mark.unit
def test_new_booking_defaults(booking):
    """Test a new booking awaits payment and gets a reference."""
    assert booking.status == BookingStatus.PENDING_PAYMENT
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.booking_reference.startswith("MB")
    assert booking.duration_minutes == 30
    assert booking.slot_key == (booking.doctor_id, date(2025, 3, 10), time(9, 0))


@pytest.mark.unit
def test_booking_references_are_unique():
    references = {generate_booking_reference() for _ in range(200)}

    assert len(references) == 200


@pytest.mark.unit
def test_apply_fees_marks_free_booking_not_required(booking):
    booking.apply_fees(PassThroughFeePolicy().calculate(Money.zero()))

    assert booking.total_amount == Decimal("0")
    assert booking.payment_status == PaymentStatus.NOT_REQUIRED


@pytest.mark.unit
def test_apply_status_stamps_timestamp_and_version(booking):
    """Test each transition records its timestamp and bumps the version."""
    # Act
    booking.apply_status(BookingStatus.CONFIRMED, ActorRole.SYSTEM, NOW)
    booking.apply_status(BookingStatus.CHECKED_IN, ActorRole.HOSPITAL, NOW)

    # Assert
    assert booking.confirmed_at == NOW
    assert booking.checked_in_at == NOW
    assert booking.version == 2


@pytest.mark.unit
def test_cancellation_records_actor_and_reason(booking):
    booking.apply_status(BookingStatus.CANCELLED, ActorRole.PATIENT, NOW, reason="travel")

    assert booking.cancelled_by == ActorRole.PATIENT
    assert booking.cancellation_reason == "travel"
    assert booking.counts_toward_capacity is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "status,counts",
    [
        (BookingStatus.PENDING_PAYMENT, True),
        (BookingStatus.CONFIRMED, True),
        (BookingStatus.CHECKED_IN, True),
        (BookingStatus.IN_PROGRESS, True),
        (BookingStatus.COMPLETED, True),
        (BookingStatus.RESCHEDULED, True),
        (BookingStatus.CANCELLED, False),
        (BookingStatus.NO_SHOW, False),
    ],
)
def test_capacity_counting_statuses(status, counts):
    assert status.counts_toward_capacity() is counts


@pytest.mark.unit
def test_refund_moves_paid_booking_to_refund_pending(booking):
    booking.record_payment("pay_1")

    booking.record_refund(RefundQuote(amount=Money(amount=Decimal("375")), percentage=75, hours_until=5.0))

    assert booking.refund_amount == Decimal("375")
    assert booking.payment_status == PaymentStatus.REFUND_PENDING


@pytest.mark.unit
def test_zero_refund_keeps_payment_status(booking):
    booking.record_payment("pay_1")

    booking.record_refund(RefundQuote(amount=Money.zero(), percentage=0, hours_until=0.2))

    assert booking.refund_amount == Decimal("0")
    assert booking.payment_status == PaymentStatus.COMPLETED


@pytest.mark.unit
def test_move_to_keeps_history(booking):
    """Test moving a booking remembers the previous slot."""
    booking.move_to(date(2025, 3, 11), time(10, 0), time(10, 30), ActorRole.PATIENT, NOW, reason="clash")

    assert booking.status == BookingStatus.RESCHEDULED
    assert booking.rescheduled_from == "2025-03-10 09:00"
    assert booking.reschedule_reason == "clash"
    assert booking.rescheduled_at == NOW
    assert booking.starts_at(IST) == datetime(2025, 3, 11, 10, 0, tzinfo=IST)


@pytest.mark.unit
def test_doctor_fee_falls_back_to_in_person(doctor_factory):
    doctor = doctor_factory(fee_video=None)

    assert doctor.fee_for(ConsultationType.VIDEO).amount == Decimal("500")
    assert doctor.fee_for(ConsultationType.CHAT).amount == Decimal("500")


# ============================================================================
# Schedule entities
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"start_time": time(12, 0), "end_time": time(9, 0)}, "start_time"),
        ({"slot_duration_minutes": 0}, "slot_duration_minutes"),
        ({"max_patients_per_slot": 0}, "max_patients_per_slot"),
        ({"break_start": time(10, 0)}, "break_start"),
        ({"break_start": time(10, 30), "break_end": time(10, 0)}, "break_start"),
        ({"break_start": time(8, 0), "break_end": time(9, 30)}, "break_start"),
    ],
)
def test_template_validation(template_factory, overrides, field):
    """Test inconsistent templates are rejected with the offending field."""
    template = template_factory(uuid4(), **overrides)

    with pytest.raises(ValidationException) as exc_info:
        template.validate()

    assert exc_info.value.field == field


@pytest.mark.unit
def test_special_hours_override_requires_hours():
    override = ScheduleOverride(
        id=uuid4(),
        doctor_id=uuid4(),
        override_date=date(2025, 3, 10),
        override_type=OverrideType.SPECIAL_HOURS,
    )

    with pytest.raises(ValidationException):
        override.validate()


@pytest.mark.unit
def test_holiday_override_needs_no_hours():
    override = ScheduleOverride(
        id=uuid4(),
        doctor_id=uuid4(),
        override_date=date(2025, 3, 10),
        override_type=OverrideType.HOLIDAY,
    )

    override.validate()
