"""
Scheduling API Schemas

Pydantic schemas for API request/response validation.
"""

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from medbook.domains.scheduling.domain.value_objects import (
    ActorRole,
    BookingStatus,
    ConsultationType,
    DayOfWeek,
    OverrideType,
    PaymentStatus,
)

# ==================== Availability ====================


class SlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: time
    end_time: time
    consultation_types: list[ConsultationType]
    max_capacity: int
    booked_count: int
    remaining_capacity: int
    is_available: bool


class DayAvailabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: date
    is_available: bool
    slots: list[SlotResponse]
    override_type: OverrideType | None = None
    override_reason: str | None = None


class AvailabilityResponse(BaseModel):
    """Bookable slots per date for one doctor."""

    model_config = ConfigDict(from_attributes=True)

    doctor_id: UUID
    days: list[DayAvailabilityResponse]


# ==================== Appointments ====================


class AppointmentRequest(BaseModel):
    """
    Booking request.

    ``patient_id`` may be omitted when the caller is the patient.
    """

    doctor_id: UUID
    appointment_date: date
    start_time: time
    consultation_type: ConsultationType = ConsultationType.IN_PERSON
    patient_id: UUID | None = None
    family_member_id: UUID | None = None
    symptoms: str | None = Field(default=None, max_length=2000)
    patient_notes: str | None = Field(default=None, max_length=2000)


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_reference: str
    patient_id: UUID
    doctor_id: UUID
    hospital_id: UUID | None = None
    family_member_id: UUID | None = None
    appointment_date: date
    start_time: time
    end_time: time
    consultation_type: ConsultationType
    status: BookingStatus

    consultation_fee: Decimal
    platform_fee: Decimal
    total_amount: Decimal
    currency: str
    payment_status: PaymentStatus
    payment_ref: str | None = None
    refund_amount: Decimal | None = None

    symptoms: str | None = None
    patient_notes: str | None = None

    confirmed_at: datetime | None = None
    checked_in_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    no_show_at: datetime | None = None
    rescheduled_at: datetime | None = None

    cancelled_by: ActorRole | None = None
    cancellation_reason: str | None = None
    rescheduled_from: str | None = None
    reschedule_reason: str | None = None

    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaymentOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: str
    amount: Decimal
    currency: str
    checkout_url: str | None = None


class CreateAppointmentResponse(BaseModel):
    appointment: AppointmentResponse
    replayed: bool = False
    payment_order: PaymentOrderResponse | None = None


class StatusUpdateRequest(BaseModel):
    status: BookingStatus
    reason: str | None = Field(default=None, max_length=500)


class RescheduleRequest(BaseModel):
    new_date: date
    new_start_time: time
    reason: str | None = Field(default=None, max_length=500)


class CancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class RefundResponse(BaseModel):
    amount: Decimal
    currency: str
    percentage: int
    hours_until: float


class CancellationResponse(BaseModel):
    appointment: AppointmentResponse
    refund: RefundResponse


class PaymentConfirmationRequest(BaseModel):
    payment_ref: str = Field(min_length=1, max_length=200)


# ==================== Schedules ====================


class WeeklyTemplateRequest(BaseModel):
    """Working hours for one weekday; duration and capacity default to the doctor's."""

    start_time: time
    end_time: time
    break_start: time | None = None
    break_end: time | None = None
    slot_duration_minutes: int | None = Field(default=None, gt=0, le=480)
    max_patients_per_slot: int | None = Field(default=None, ge=1, le=100)


class WeeklyTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    doctor_id: UUID
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    break_start: time | None = None
    break_end: time | None = None
    slot_duration_minutes: int | None = None
    max_patients_per_slot: int | None = None
    is_active: bool


class ScheduleOverrideRequest(BaseModel):
    override_type: OverrideType
    start_time: time | None = None
    end_time: time | None = None
    reason: str | None = Field(default=None, max_length=500)


class ScheduleOverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    doctor_id: UUID
    override_date: date
    override_type: OverrideType
    start_time: time | None = None
    end_time: time | None = None
    reason: str | None = None
