"""
Shared pytest fixtures for all tests.

Provides a controllable clock, an in-memory scheduling store seeded with a
verified doctor and a Monday schedule, actors for every role and a FastAPI
test client wired to the in-memory container.
"""

import copy
import os
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import Decimal
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from medbook.config.settings import Settings
from medbook.core.container import InMemorySchedulingContainer
from medbook.domains.scheduling.application.ports.collaborators import BookingEvent, PaymentOrder
from medbook.domains.scheduling.domain.entities import Booking, Doctor, FamilyMember, WeeklyTemplate
from medbook.domains.scheduling.domain.value_objects import (
    ActorContext,
    ActorRole,
    BookingStatus,
    ConsultationType,
    DayOfWeek,
    PaymentStatus,
    VerificationStatus,
)
from medbook.domains.scheduling.infrastructure.repositories import InMemorySchedulingStore

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"

IST = ZoneInfo("Asia/Kolkata")

# Sunday 2025-03-09 10:00 IST; the next day is a Monday
SUNDAY_MORNING = datetime(2025, 3, 9, 10, 0, tzinfo=IST)
MONDAY = date(2025, 3, 10)


class FixedClock:
    """Clock frozen at a settable instant."""

    def __init__(self, now: datetime):
        self._now = now

    @property
    def timezone(self) -> tzinfo:
        return self._now.tzinfo

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class RecordingPaymentGateway:
    """Payment collaborator double that records orders and can be told to fail."""

    def __init__(self):
        self.orders: list[PaymentOrder] = []
        self.error: Exception | None = None

    async def create_payment_order(self, booking: Booking) -> PaymentOrder:
        if self.error is not None:
            raise self.error
        order = PaymentOrder(
            order_id=f"order_{len(self.orders) + 1}",
            amount=booking.total_amount,
            currency=booking.currency,
        )
        self.orders.append(order)
        return order


class RecordingNotificationSender:
    def __init__(self):
        self.sent: list[tuple[BookingEvent, UUID, ActorRole]] = []
        self.error: Exception | None = None

    async def notify(self, event: BookingEvent, booking: Booking, recipient: ActorRole) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((event, booking.id, recipient))

    def events(self) -> list[BookingEvent]:
        return [event for event, _, _ in self.sent]


# ============================================================================
# CLOCK AND SETTINGS
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(SUNDAY_MORNING)


@pytest.fixture
def monday() -> date:
    return MONDAY


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, ENVIRONMENT="test", LOG_FORMAT="plain")


# ============================================================================
# DOMAIN BUILDERS
# ============================================================================


@pytest.fixture
def doctor_factory():
    """Build verified, bookable doctors; keyword arguments override fields."""

    def _build(**overrides) -> Doctor:
        fields = {
            "id": uuid4(),
            "user_id": uuid4(),
            "hospital_id": uuid4(),
            "is_active": True,
            "verification_status": VerificationStatus.VERIFIED,
            "consultation_types": [ConsultationType.IN_PERSON, ConsultationType.VIDEO],
            "fee_in_person": Decimal("500"),
            "fee_video": Decimal("400"),
            "slot_duration_minutes": 30,
            "max_patients_per_slot": 1,
        }
        fields.update(overrides)
        return Doctor(**fields)

    return _build


@pytest.fixture
def template_factory():
    """Build active weekly templates; defaults to Monday 09:00-12:00 in 30-minute slots."""

    def _build(doctor_id: UUID, **overrides) -> WeeklyTemplate:
        fields = {
            "id": uuid4(),
            "doctor_id": doctor_id,
            "day_of_week": DayOfWeek.MONDAY,
            "start_time": time(9, 0),
            "end_time": time(12, 0),
            "slot_duration_minutes": 30,
            "max_patients_per_slot": 1,
        }
        fields.update(overrides)
        return WeeklyTemplate(**fields)

    return _build


@pytest.fixture
def booking_factory(store, doctor):
    """Store a booking directly; defaults to a paid, confirmed Monday 09:00 booking."""

    def _build(**overrides) -> Booking:
        fields = {
            "id": uuid4(),
            "patient_id": uuid4(),
            "doctor_id": doctor.id,
            "hospital_id": doctor.hospital_id,
            "appointment_date": MONDAY,
            "start_time": time(9, 0),
            "end_time": time(9, 30),
            "status": BookingStatus.CONFIRMED,
            "consultation_fee": Decimal("500"),
            "total_amount": Decimal("500"),
            "payment_status": PaymentStatus.COMPLETED,
            "payment_ref": "pay_seed",
        }
        fields.update(overrides)
        booking = Booking(**fields)
        store.bookings[booking.id] = copy.deepcopy(booking)
        return booking

    return _build


# ============================================================================
# IN-MEMORY STORE
# ============================================================================


@pytest.fixture
def store() -> InMemorySchedulingStore:
    return InMemorySchedulingStore()


@pytest.fixture
def doctor(store, doctor_factory) -> Doctor:
    """Verified doctor registered in the store, fee INR 500."""
    return store.add_doctor(doctor_factory())


@pytest.fixture
def monday_template(store, doctor, template_factory) -> WeeklyTemplate:
    """Monday 09:00-12:00, 30-minute slots, capacity 1."""
    template = template_factory(doctor.id)
    store.templates.append(template)
    return template


@pytest.fixture
def family_member_factory(store):
    def _build(patient_id: UUID) -> FamilyMember:
        return store.add_family_member(FamilyMember(id=uuid4(), patient_id=patient_id, full_name="Asha Rao"))

    return _build


# ============================================================================
# ACTORS
# ============================================================================


@pytest.fixture
def patient() -> ActorContext:
    return ActorContext(user_id=uuid4(), role=ActorRole.PATIENT)


@pytest.fixture
def other_patient() -> ActorContext:
    return ActorContext(user_id=uuid4(), role=ActorRole.PATIENT)


@pytest.fixture
def doctor_actor(doctor) -> ActorContext:
    return ActorContext(user_id=doctor.user_id, role=ActorRole.DOCTOR, doctor_id=doctor.id)


@pytest.fixture
def hospital_actor(doctor) -> ActorContext:
    return ActorContext(user_id=uuid4(), role=ActorRole.HOSPITAL, hospital_id=doctor.hospital_id)


@pytest.fixture
def admin() -> ActorContext:
    return ActorContext(user_id=uuid4(), role=ActorRole.ADMIN)


@pytest.fixture
def system() -> ActorContext:
    return ActorContext.system()


# ============================================================================
# CONTAINER AND API
# ============================================================================


@pytest.fixture
def payment_gateway() -> RecordingPaymentGateway:
    return RecordingPaymentGateway()


@pytest.fixture
def notification_sender() -> RecordingNotificationSender:
    return RecordingNotificationSender()


@pytest.fixture
def container(test_settings, store, clock, payment_gateway, notification_sender) -> InMemorySchedulingContainer:
    return InMemorySchedulingContainer(
        test_settings,
        store=store,
        clock=clock,
        payment_gateway=payment_gateway,
        notification_sender=notification_sender,
    )


@pytest.fixture
def api_client(test_settings, container):
    """FastAPI test client over the in-memory container."""
    from medbook.core.app_factory import create_app

    app = create_app(test_settings, container)
    with TestClient(app) as client:
        yield client


def actor_headers(actor: ActorContext) -> dict[str, str]:
    headers = {"X-User-Id": str(actor.user_id), "X-User-Role": actor.role.value}
    if actor.hospital_id:
        headers["X-Hospital-Id"] = str(actor.hospital_id)
    if actor.doctor_id:
        headers["X-Doctor-Id"] = str(actor.doctor_id)
    return headers


@pytest.fixture
def headers_for():
    """Identity headers for an actor."""
    return actor_headers
