"""
Tests for CreateBookingUseCase over the in-memory store.
"""

from datetime import datetime, time
from decimal import Decimal
from uuid import uuid4

import pytest

from medbook.config.settings import Settings
from medbook.core.container import InMemorySchedulingContainer
from medbook.core.domain import (
    AuthorizationException,
    BusinessRuleViolationException,
    EntityNotFoundException,
    IntegrationException,
    SlotUnavailableError,
)
from medbook.domains.scheduling.application.dto import CreateBookingRequest
from medbook.domains.scheduling.application.ports.collaborators import BookingEvent
from medbook.domains.scheduling.domain.value_objects import (
    ActorRole,
    BookingStatus,
    ConsultationType,
    PaymentStatus,
    VerificationStatus,
)


@pytest.fixture
def use_case(container):
    return container.create_create_booking_use_case(None)


@pytest.fixture
def make_request(doctor, monday):
    def _build(patient_id, **overrides) -> CreateBookingRequest:
        fields = {
            "patient_id": patient_id,
            "doctor_id": doctor.id,
            "appointment_date": monday,
            "start_time": time(9, 0),
        }
        fields.update(overrides)
        return CreateBookingRequest(**fields)

    return _build


# ============================================================================
# Happy paths
# ============================================================================


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_paid_booking_awaits_payment(
    use_case, patient, doctor, monday_template, make_request, store, payment_gateway, notification_sender
):
    """Test a priced consultation is stored pending payment and opens a payment order."""
    # Act
    response = await use_case.execute(patient, make_request(patient.user_id, symptoms="fever"))

    # Assert
    booking = response.booking
    assert response.replayed is False
    assert booking.status == BookingStatus.PENDING_PAYMENT
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.total_amount == Decimal("500")
    assert booking.end_time == time(9, 30)
    assert booking.hospital_id == doctor.hospital_id
    assert booking.symptoms == "fever"
    assert store.bookings[booking.id].status == BookingStatus.PENDING_PAYMENT
    assert response.payment_order.order_id == "order_1"
    assert payment_gateway.orders[0].amount == Decimal("500")
    assert notification_sender.sent == [
        (BookingEvent.CREATED, booking.id, ActorRole.PATIENT),
        (BookingEvent.CREATED, booking.id, ActorRole.DOCTOR),
    ]


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_video_consultation_uses_video_fee(use_case, patient, monday_template, make_request):
    response = await use_case.execute(
        patient, make_request(patient.user_id, consultation_type=ConsultationType.VIDEO)
    )

    assert response.booking.consultation_fee == Decimal("400")
    assert response.booking.consultation_type == ConsultationType.VIDEO


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_free_consultation_is_confirmed_immediately(
    use_case, patient, store, doctor_factory, template_factory, monday, payment_gateway, notification_sender
):
    """Test a zero total skips payment and confirms at once."""
    # Arrange
    free_doctor = store.add_doctor(doctor_factory(fee_in_person=Decimal("0")))
    store.templates.append(template_factory(free_doctor.id))
    request = CreateBookingRequest(
        patient_id=patient.user_id,
        doctor_id=free_doctor.id,
        appointment_date=monday,
        start_time=time(10, 0),
    )

    # Act
    response = await use_case.execute(patient, request)

    # Assert
    assert response.booking.status == BookingStatus.CONFIRMED
    assert response.booking.payment_status == PaymentStatus.NOT_REQUIRED
    assert response.booking.confirmed_at is not None
    assert response.payment_order is None
    assert payment_gateway.orders == []
    assert notification_sender.events() == [BookingEvent.CONFIRMED, BookingEvent.CONFIRMED]


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_platform_fee_is_added(store, clock, doctor, monday_template, patient, make_request):
    settings = Settings(_env_file=None, ENVIRONMENT="test", PLATFORM_FEE_PERCENTAGE=Decimal("10"))
    use_case = InMemorySchedulingContainer(settings, store=store, clock=clock).create_create_booking_use_case(None)

    response = await use_case.execute(patient, make_request(patient.user_id))

    assert response.booking.platform_fee == Decimal("50")
    assert response.booking.total_amount == Decimal("550")


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_hospital_staff_book_for_a_patient(use_case, hospital_actor, monday_template, make_request):
    patient_id = uuid4()

    response = await use_case.execute(hospital_actor, make_request(patient_id))

    assert response.booking.patient_id == patient_id


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_booking_for_own_family_member(use_case, patient, monday_template, make_request, family_member_factory):
    member = family_member_factory(patient.user_id)

    response = await use_case.execute(patient, make_request(patient.user_id, family_member_id=member.id))

    assert response.booking.family_member_id == member.id


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_payment_gateway_failure_does_not_fail_booking(
    use_case, patient, monday_template, make_request, store, payment_gateway
):
    """Test a committed booking survives a failing payment collaborator."""
    payment_gateway.error = IntegrationException("payments", "payment service down")

    response = await use_case.execute(patient, make_request(patient.user_id))

    assert response.payment_order is None
    assert response.booking.id in store.bookings


# ============================================================================
# Idempotency and duplicates
# ============================================================================


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_idempotency_key_replays_original_booking(
    use_case, patient, monday_template, make_request, store, payment_gateway
):
    """Test resubmitting the same key returns the stored booking without a second write."""
    # Arrange
    request = make_request(patient.user_id, idempotency_key="key-1")
    first = await use_case.execute(patient, request)

    # Act
    second = await use_case.execute(patient, request)

    # Assert
    assert second.replayed is True
    assert second.booking.id == first.booking.id
    assert second.payment_order is None
    assert len(store.bookings) == 1
    assert len(payment_gateway.orders) == 1


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_replay_of_someone_elses_key_is_refused(use_case, patient, other_patient, monday_template, make_request):
    await use_case.execute(patient, make_request(patient.user_id, idempotency_key="key-1"))

    with pytest.raises(AuthorizationException):
        await use_case.execute(other_patient, make_request(patient.user_id, idempotency_key="key-1"))


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_second_booking_same_doctor_same_day_is_duplicate(use_case, patient, monday_template, make_request):
    """Test one active booking per patient, doctor and date."""
    first = await use_case.execute(patient, make_request(patient.user_id))

    with pytest.raises(BusinessRuleViolationException) as exc_info:
        await use_case.execute(patient, make_request(patient.user_id, start_time=time(11, 0)))

    assert exc_info.value.rule == "duplicate_booking"
    assert exc_info.value.details["booking_id"] == str(first.booking.id)


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_cancelled_booking_does_not_block_rebooking(
    use_case, patient, monday_template, make_request, booking_factory
):
    booking_factory(patient_id=patient.user_id, status=BookingStatus.CANCELLED)

    response = await use_case.execute(patient, make_request(patient.user_id))

    assert response.booking.start_time == time(9, 0)


# ============================================================================
# Rejections
# ============================================================================


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unknown_doctor(use_case, patient, make_request):
    with pytest.raises(EntityNotFoundException):
        await use_case.execute(patient, make_request(patient.user_id, doctor_id=uuid4()))


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_patient_cannot_book_for_someone_else(use_case, patient, monday_template, make_request):
    with pytest.raises(AuthorizationException):
        await use_case.execute(patient, make_request(uuid4()))


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_unverified_doctor_is_not_bookable(use_case, patient, store, doctor_factory, template_factory, monday):
    doctor = store.add_doctor(doctor_factory(verification_status=VerificationStatus.PENDING))
    store.templates.append(template_factory(doctor.id))
    request = CreateBookingRequest(
        patient_id=patient.user_id,
        doctor_id=doctor.id,
        appointment_date=monday,
        start_time=time(9, 0),
    )

    with pytest.raises(BusinessRuleViolationException) as exc_info:
        await use_case.execute(patient, request)

    assert exc_info.value.rule == "doctor_not_bookable"


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_consultation_type_not_offered(use_case, patient, monday_template, make_request):
    with pytest.raises(BusinessRuleViolationException) as exc_info:
        await use_case.execute(patient, make_request(patient.user_id, consultation_type=ConsultationType.CHAT))

    assert exc_info.value.rule == "consultation_type_not_supported"


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_family_member_of_another_patient(
    use_case, patient, other_patient, monday_template, make_request, family_member_factory
):
    member = family_member_factory(other_patient.user_id)

    with pytest.raises(EntityNotFoundException):
        await use_case.execute(patient, make_request(patient.user_id, family_member_id=member.id))


@pytest.mark.use_case
@pytest.mark.asyncio
@pytest.mark.parametrize("start", [time(9, 15), time(12, 0), time(8, 30)])
async def test_start_time_off_the_grid(use_case, patient, monday_template, make_request, start):
    """Test only generated slot starts can be booked."""
    with pytest.raises(SlotUnavailableError):
        await use_case.execute(patient, make_request(patient.user_id, start_time=start))


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_full_slot(use_case, patient, monday_template, make_request, booking_factory):
    booking_factory()

    with pytest.raises(SlotUnavailableError) as exc_info:
        await use_case.execute(patient, make_request(patient.user_id))

    assert exc_info.value.details["time_slot"] == "2025-03-10 09:00"


@pytest.mark.use_case
@pytest.mark.asyncio
async def test_slot_in_the_past(use_case, patient, monday_template, make_request, clock, monday):
    clock.set(datetime.combine(monday, time(10, 0), tzinfo=clock.timezone))

    with pytest.raises(SlotUnavailableError):
        await use_case.execute(patient, make_request(patient.user_id, start_time=time(9, 30)))
