"""
Tests for CancelBookingUseCase.
"""

from datetime import date, time
from decimal import Decimal
from uuid import uuid4

import pytest

from medbook.core.domain import AuthorizationException, EntityNotFoundException, InvalidTransitionException
from medbook.domains.scheduling.application.dto import CancelBookingRequest
from medbook.domains.scheduling.application.ports.collaborators import BookingEvent
from medbook.domains.scheduling.domain.value_objects import ActorRole, BookingStatus, PaymentStatus


@pytest.fixture
def use_case(container):
    return container.create_cancel_booking_use_case(None)


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_two_days_ahead_refunds_in_full(use_case, patient, booking_factory, store):
    """Test cancelling 47 hours before start refunds everything."""
    # Arrange: clock is Sunday 10:00, appointment Tuesday 09:00
    booking = booking_factory(patient_id=patient.user_id, appointment_date=date(2025, 3, 11))

    # Act
    result = await use_case.execute(patient, CancelBookingRequest(booking_id=booking.id, reason="feeling better"))

    # Assert
    assert result.refund.percentage == 100
    assert result.refund.amount.amount == Decimal("500")
    assert result.booking.status == BookingStatus.CANCELLED
    assert result.booking.cancelled_by == ActorRole.PATIENT
    assert result.booking.cancellation_reason == "feeling better"
    stored = store.bookings[booking.id]
    assert stored.status == BookingStatus.CANCELLED
    assert stored.refund_amount == Decimal("500")
    assert stored.payment_status == PaymentStatus.REFUND_PENDING


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_next_morning_refunds_three_quarters(use_case, patient, booking_factory):
    """Test 23 hours before start falls in the 75% tier."""
    booking = booking_factory(patient_id=patient.user_id)

    result = await use_case.execute(patient, CancelBookingRequest(booking_id=booking.id))

    assert result.refund.percentage == 75
    assert result.refund.amount.amount == Decimal("375")
    assert result.refund.hours_until == pytest.approx(23.0)


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_two_hours_before_refunds_half(use_case, patient, booking_factory, clock):
    booking = booking_factory(patient_id=patient.user_id)
    clock.advance(hours=21)

    result = await use_case.execute(patient, CancelBookingRequest(booking_id=booking.id))

    assert result.refund.percentage == 50
    assert result.refund.amount.amount == Decimal("250")


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unpaid_booking_gets_zero_refund(use_case, patient, booking_factory, store):
    """Test nothing is refunded when payment never completed."""
    booking = booking_factory(
        patient_id=patient.user_id,
        status=BookingStatus.PENDING_PAYMENT,
        payment_status=PaymentStatus.PENDING,
        payment_ref=None,
    )

    result = await use_case.execute(patient, CancelBookingRequest(booking_id=booking.id))

    assert result.refund.amount.is_zero()
    assert result.refund.percentage == 75
    assert store.bookings[booking.id].payment_status == PaymentStatus.PENDING


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_notifies_patient_doctor_and_hospital(
    use_case, hospital_actor, booking_factory, notification_sender
):
    booking = booking_factory()

    await use_case.execute(hospital_actor, CancelBookingRequest(booking_id=booking.id))

    assert notification_sender.sent == [
        (BookingEvent.CANCELLED, booking.id, ActorRole.PATIENT),
        (BookingEvent.CANCELLED, booking.id, ActorRole.DOCTOR),
        (BookingEvent.CANCELLED, booking.id, ActorRole.HOSPITAL),
    ]


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_other_patient_cannot_cancel(use_case, other_patient, booking_factory, store):
    booking = booking_factory()

    with pytest.raises(AuthorizationException):
        await use_case.execute(other_patient, CancelBookingRequest(booking_id=booking.id))

    assert store.bookings[booking.id].status == BookingStatus.CONFIRMED


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_doctor_cannot_cancel_unpaid_booking(use_case, doctor_actor, booking_factory):
    """Test pending payment bookings are cancelled only by the patient, an admin or the system."""
    booking = booking_factory(status=BookingStatus.PENDING_PAYMENT, payment_status=PaymentStatus.PENDING)

    with pytest.raises(AuthorizationException):
        await use_case.execute(doctor_actor, CancelBookingRequest(booking_id=booking.id))


@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.IN_PROGRESS])
async def test_cannot_cancel_from_status(use_case, admin, booking_factory, status):
    booking = booking_factory(status=status)

    with pytest.raises(InvalidTransitionException):
        await use_case.execute(admin, CancelBookingRequest(booking_id=booking.id))


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancel_unknown_booking(use_case, admin):
    with pytest.raises(EntityNotFoundException):
        await use_case.execute(admin, CancelBookingRequest(booking_id=uuid4()))


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancelled_seat_is_released(container, use_case, patient, booking_factory, monday_template, monday):
    """Test a cancelled booking stops counting toward its slot."""
    booking = booking_factory(patient_id=patient.user_id)
    availability = container.create_get_availability_use_case(None)

    await use_case.execute(patient, CancelBookingRequest(booking_id=booking.id))
    result = await availability.execute(booking.doctor_id, start_date=monday, days=1)

    nine = next(slot for slot in result.days[0].slots if slot.start_time == time(9, 0))
    assert nine.booked_count == 0
