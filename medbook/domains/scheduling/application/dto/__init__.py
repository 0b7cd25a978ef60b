"""
Scheduling Application DTOs

Data Transfer Objects for the scheduling use cases.
"""

from dataclasses import dataclass, field
from datetime import date, time
from uuid import UUID

from medbook.domains.scheduling.application.ports.collaborators import PaymentOrder
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import (
    BookingStatus,
    ConsultationType,
    DayOfWeek,
    OverrideType,
    RefundQuote,
    Slot,
)

# ==================== Availability DTOs ====================


@dataclass
class DayAvailability:
    """Slots of one date, with the override that shaped them, if any"""

    date: date
    is_available: bool
    slots: list[Slot] = field(default_factory=list)
    override_type: OverrideType | None = None
    override_reason: str | None = None


@dataclass
class AvailabilityResult:
    doctor_id: UUID
    days: list[DayAvailability] = field(default_factory=list)


# ==================== Booking DTOs ====================


@dataclass
class CreateBookingRequest:
    """Request for booking a slot"""

    patient_id: UUID
    doctor_id: UUID
    appointment_date: date
    start_time: time
    consultation_type: ConsultationType = ConsultationType.IN_PERSON
    family_member_id: UUID | None = None
    symptoms: str | None = None
    patient_notes: str | None = None
    idempotency_key: str | None = None


@dataclass
class CreateBookingResponse:
    booking: Booking
    replayed: bool = False
    payment_order: PaymentOrder | None = None


@dataclass
class UpdateBookingStatusRequest:
    booking_id: UUID
    new_status: BookingStatus
    reason: str | None = None


@dataclass
class CancelBookingRequest:
    booking_id: UUID
    reason: str | None = None


@dataclass
class CancellationResult:
    """Cancelled booking and the refund owed for it"""

    booking: Booking
    refund: RefundQuote


@dataclass
class ConfirmPaymentRequest:
    booking_id: UUID
    payment_ref: str


@dataclass
class RescheduleBookingRequest:
    booking_id: UUID
    new_date: date
    new_start_time: time
    reason: str | None = None


# ==================== Schedule DTOs ====================


@dataclass
class UpsertTemplateRequest:
    """Working hours for one day of the week; duration and capacity default to the doctor's"""

    doctor_id: UUID
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    break_start: time | None = None
    break_end: time | None = None
    slot_duration_minutes: int | None = None
    max_patients_per_slot: int | None = None


@dataclass
class UpsertOverrideRequest:
    doctor_id: UUID
    override_date: date
    override_type: OverrideType
    start_time: time | None = None
    end_time: time | None = None
    reason: str | None = None


__all__ = [
    "DayAvailability",
    "AvailabilityResult",
    "CreateBookingRequest",
    "CreateBookingResponse",
    "UpdateBookingStatusRequest",
    "CancelBookingRequest",
    "CancellationResult",
    "ConfirmPaymentRequest",
    "RescheduleBookingRequest",
    "UpsertTemplateRequest",
    "UpsertOverrideRequest",
]
