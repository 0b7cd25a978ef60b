"""
Booking Entity for Scheduling Domain

A patient's reservation of one seat in a doctor's slot, tracked through its
lifecycle from payment to completion.
"""

import secrets
import string
import time as time_module
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, tzinfo
from decimal import Decimal
from uuid import UUID

from medbook.core.domain import AggregateRoot

from ..value_objects.actor import ActorRole
from ..value_objects.booking_status import BookingStatus, PaymentStatus
from ..value_objects.pricing import FeeBreakdown, RefundQuote
from ..value_objects.schedule import ConsultationType
from ..value_objects.slot import SlotKey

_REFERENCE_ALPHABET = string.digits + string.ascii_uppercase

_STATUS_TIMESTAMPS: dict[BookingStatus, str] = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.CHECKED_IN: "checked_in_at",
    BookingStatus.IN_PROGRESS: "started_at",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
    BookingStatus.NO_SHOW: "no_show_at",
    BookingStatus.RESCHEDULED: "rescheduled_at",
}


def _base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_REFERENCE_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def generate_booking_reference() -> str:
    """Short human-facing code, e.g. ``MBLQ3K9Z1A7F``."""
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(4))
    return f"MB{_base36(time_module.time_ns() // 1_000_000)}{suffix}"


@dataclass
class Booking(AggregateRoot[UUID]):
    """
    Booking aggregate root.

    Status changes are validated by BookingStateMachine before the aggregate
    is mutated; the methods here only record their effects.

    Example:
        ```python
        booking = Booking(
            patient_id=patient_id,
            doctor_id=doctor.id,
            hospital_id=doctor.hospital_id,
            appointment_date=date(2025, 3, 10),
            start_time=time(9, 0),
            end_time=time(9, 30),
        )
        booking.apply_fees(fees)
        booking.apply_status(BookingStatus.CONFIRMED, ActorRole.SYSTEM, now)
        ```
    """

    booking_reference: str = ""

    # References
    patient_id: UUID | None = None
    doctor_id: UUID | None = None
    hospital_id: UUID | None = None
    family_member_id: UUID | None = None

    # Slot
    appointment_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    consultation_type: ConsultationType = ConsultationType.IN_PERSON

    status: BookingStatus = BookingStatus.PENDING_PAYMENT

    # Pricing and payment
    consultation_fee: Decimal = Decimal("0")
    platform_fee: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    currency: str = "INR"
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_ref: str | None = None
    refund_amount: Decimal | None = None

    # Patient input
    symptoms: str | None = None
    patient_notes: str | None = None

    # Lifecycle timestamps
    confirmed_at: datetime | None = None
    checked_in_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    no_show_at: datetime | None = None
    rescheduled_at: datetime | None = None

    # Cancellation
    cancelled_by: ActorRole | None = None
    cancellation_reason: str | None = None

    # Rescheduling
    rescheduled_from: str | None = None  # "YYYY-MM-DD HH:MM" of the previous slot
    reschedule_reason: str | None = None

    idempotency_key: str | None = None

    def __post_init__(self):
        if not self.booking_reference:
            self.booking_reference = generate_booking_reference()

    @property
    def slot_key(self) -> SlotKey:
        return (self.doctor_id, self.appointment_date, self.start_time)

    @property
    def counts_toward_capacity(self) -> bool:
        return self.status.counts_toward_capacity()

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start

    def starts_at(self, tz: tzinfo) -> datetime:
        return datetime.combine(self.appointment_date, self.start_time, tzinfo=tz)

    def apply_fees(self, fees: FeeBreakdown) -> None:
        self.consultation_fee = fees.consultation_fee.amount
        self.platform_fee = fees.platform_fee.amount
        self.total_amount = fees.total_amount.amount
        self.currency = fees.total_amount.currency
        self.payment_status = PaymentStatus.PENDING if fees.requires_payment else PaymentStatus.NOT_REQUIRED

    def apply_status(
        self,
        new_status: BookingStatus,
        actor_role: ActorRole,
        at: datetime | None = None,
        reason: str | None = None,
    ) -> None:
        """Record a validated transition and stamp its timestamp."""
        at = at or datetime.now(UTC)
        self.status = new_status
        timestamp_field = _STATUS_TIMESTAMPS.get(new_status)
        if timestamp_field:
            setattr(self, timestamp_field, at)
        if new_status == BookingStatus.CANCELLED:
            self.cancelled_by = actor_role
            self.cancellation_reason = reason
        self.touch()
        self.increment_version()

    def record_payment(self, payment_ref: str) -> None:
        self.payment_ref = payment_ref
        self.payment_status = PaymentStatus.COMPLETED

    def record_refund(self, quote: RefundQuote) -> None:
        self.refund_amount = quote.amount.amount
        if self.payment_status == PaymentStatus.COMPLETED and not quote.amount.is_zero():
            self.payment_status = PaymentStatus.REFUND_PENDING

    def move_to(
        self,
        new_date: date,
        new_start: time,
        new_end: time,
        actor_role: ActorRole,
        at: datetime | None = None,
        reason: str | None = None,
    ) -> None:
        """Move the booking to another slot of the same doctor, keeping the row."""
        self.rescheduled_from = f"{self.appointment_date.isoformat()} {self.start_time.strftime('%H:%M')}"
        self.reschedule_reason = reason
        self.appointment_date = new_date
        self.start_time = new_start
        self.end_time = new_end
        self.apply_status(BookingStatus.RESCHEDULED, actor_role, at)
