"""
Scheduling API Routes

FastAPI router for availability, appointment and schedule endpoints.
"""

from datetime import date, timedelta
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response, status

from medbook.core.domain import ValidationException
from medbook.domains.scheduling.api.dependencies import (
    ActorDep,
    ContainerDep,
    get_availability_use_case,
    get_booking_use_case,
    get_cancel_booking_use_case,
    get_confirm_payment_use_case,
    get_create_booking_use_case,
    get_manage_schedule_use_case,
    get_reschedule_booking_use_case,
    get_update_booking_status_use_case,
)
from medbook.domains.scheduling.api.schemas import (
    AppointmentRequest,
    AppointmentResponse,
    AvailabilityResponse,
    CancellationResponse,
    CancelRequest,
    CreateAppointmentResponse,
    PaymentConfirmationRequest,
    PaymentOrderResponse,
    RefundResponse,
    RescheduleRequest,
    ScheduleOverrideRequest,
    ScheduleOverrideResponse,
    StatusUpdateRequest,
    WeeklyTemplateRequest,
    WeeklyTemplateResponse,
)
from medbook.domains.scheduling.application.dto import (
    CancelBookingRequest,
    ConfirmPaymentRequest,
    CreateBookingRequest,
    RescheduleBookingRequest,
    UpdateBookingStatusRequest,
    UpsertOverrideRequest,
    UpsertTemplateRequest,
)
from medbook.domains.scheduling.application.use_cases import (
    CancelBookingUseCase,
    ConfirmPaymentUseCase,
    CreateBookingUseCase,
    GetAvailabilityUseCase,
    GetBookingUseCase,
    ManageScheduleUseCase,
    RescheduleBookingUseCase,
    UpdateBookingStatusUseCase,
)
from medbook.domains.scheduling.domain.value_objects import ActorRole, ConsultationType, DayOfWeek

router = APIRouter(tags=["Scheduling"])

# Type aliases for use case dependencies
GetAvailabilityUseCaseDep = Annotated[GetAvailabilityUseCase, Depends(get_availability_use_case)]
CreateBookingUseCaseDep = Annotated[CreateBookingUseCase, Depends(get_create_booking_use_case)]
GetBookingUseCaseDep = Annotated[GetBookingUseCase, Depends(get_booking_use_case)]
UpdateBookingStatusUseCaseDep = Annotated[UpdateBookingStatusUseCase, Depends(get_update_booking_status_use_case)]
CancelBookingUseCaseDep = Annotated[CancelBookingUseCase, Depends(get_cancel_booking_use_case)]
RescheduleBookingUseCaseDep = Annotated[RescheduleBookingUseCase, Depends(get_reschedule_booking_use_case)]
ConfirmPaymentUseCaseDep = Annotated[ConfirmPaymentUseCase, Depends(get_confirm_payment_use_case)]
ManageScheduleUseCaseDep = Annotated[ManageScheduleUseCase, Depends(get_manage_schedule_use_case)]


# ==================== Availability ====================


@router.get("/doctors/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: UUID,
    actor: ActorDep,
    use_case: GetAvailabilityUseCaseDep,
    days: Annotated[int | None, Query(description="Number of days to return")] = None,
    start_date: Annotated[date | None, Query(description="First date, defaults to today")] = None,
    consultation_type: ConsultationType | None = None,
):
    """Bookable slots per date for a doctor."""
    result = await use_case.execute(
        doctor_id=doctor_id,
        start_date=start_date,
        days=days,
        consultation_type=consultation_type,
    )
    return AvailabilityResponse.model_validate(result)


# ==================== Appointments ====================


@router.post("/appointments", response_model=CreateAppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    request: AppointmentRequest,
    response: Response,
    actor: ActorDep,
    use_case: CreateBookingUseCaseDep,
    idempotency_key: Annotated[str | None, Header(alias="Idempotency-Key", max_length=200)] = None,
):
    """
    Book a slot.

    Replays with the same ``Idempotency-Key`` return the original booking
    with status 200.
    """
    patient_id = request.patient_id
    if patient_id is None:
        if actor.role != ActorRole.PATIENT:
            raise ValidationException("patient_id is required", field="patient_id")
        patient_id = actor.user_id

    result = await use_case.execute(
        actor,
        CreateBookingRequest(
            patient_id=patient_id,
            doctor_id=request.doctor_id,
            appointment_date=request.appointment_date,
            start_time=request.start_time,
            consultation_type=request.consultation_type,
            family_member_id=request.family_member_id,
            symptoms=request.symptoms,
            patient_notes=request.patient_notes,
            idempotency_key=idempotency_key,
        ),
    )

    if result.replayed:
        response.status_code = status.HTTP_200_OK

    return CreateAppointmentResponse(
        appointment=AppointmentResponse.model_validate(result.booking),
        replayed=result.replayed,
        payment_order=PaymentOrderResponse.model_validate(result.payment_order) if result.payment_order else None,
    )


@router.get("/appointments/{booking_id}", response_model=AppointmentResponse)
async def get_appointment(booking_id: UUID, actor: ActorDep, use_case: GetBookingUseCaseDep):
    booking = await use_case.execute(actor, booking_id)
    return AppointmentResponse.model_validate(booking)


@router.patch("/appointments/{booking_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    booking_id: UUID,
    request: StatusUpdateRequest,
    actor: ActorDep,
    use_case: UpdateBookingStatusUseCaseDep,
):
    """Move a booking along its lifecycle (check-in, start, complete, no-show, cancel)."""
    booking = await use_case.execute(
        actor,
        UpdateBookingStatusRequest(booking_id=booking_id, new_status=request.status, reason=request.reason),
    )
    return AppointmentResponse.model_validate(booking)


@router.post("/appointments/{booking_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    booking_id: UUID,
    request: RescheduleRequest,
    actor: ActorDep,
    use_case: RescheduleBookingUseCaseDep,
):
    booking = await use_case.execute(
        actor,
        RescheduleBookingRequest(
            booking_id=booking_id,
            new_date=request.new_date,
            new_start_time=request.new_start_time,
            reason=request.reason,
        ),
    )
    return AppointmentResponse.model_validate(booking)


@router.post("/appointments/{booking_id}/cancel", response_model=CancellationResponse)
async def cancel_appointment(
    booking_id: UUID,
    actor: ActorDep,
    use_case: CancelBookingUseCaseDep,
    request: CancelRequest | None = None,
):
    """Cancel a booking and quote the refund owed."""
    result = await use_case.execute(
        actor,
        CancelBookingRequest(booking_id=booking_id, reason=request.reason if request else None),
    )
    return CancellationResponse(
        appointment=AppointmentResponse.model_validate(result.booking),
        refund=RefundResponse(
            amount=result.refund.amount.amount,
            currency=result.refund.amount.currency,
            percentage=result.refund.percentage,
            hours_until=result.refund.hours_until,
        ),
    )


@router.post("/appointments/{booking_id}/payment-confirmation", response_model=AppointmentResponse)
async def confirm_appointment_payment(
    booking_id: UUID,
    request: PaymentConfirmationRequest,
    actor: ActorDep,
    use_case: ConfirmPaymentUseCaseDep,
):
    """Payment service callback; system actors only."""
    booking = await use_case.execute(
        actor,
        ConfirmPaymentRequest(booking_id=booking_id, payment_ref=request.payment_ref),
    )
    return AppointmentResponse.model_validate(booking)


# ==================== Schedules ====================


@router.get("/doctors/{doctor_id}/schedules", response_model=list[WeeklyTemplateResponse])
async def list_weekly_templates(
    doctor_id: UUID,
    actor: ActorDep,
    use_case: ManageScheduleUseCaseDep,
    include_inactive: bool = False,
):
    templates = await use_case.list_templates(doctor_id, include_inactive=include_inactive)
    return [WeeklyTemplateResponse.model_validate(t) for t in templates]


@router.get("/doctors/{doctor_id}/schedules/{day_of_week}", response_model=WeeklyTemplateResponse)
async def get_weekly_template(
    doctor_id: UUID,
    day_of_week: DayOfWeek,
    actor: ActorDep,
    use_case: ManageScheduleUseCaseDep,
):
    template = await use_case.get_template(doctor_id, day_of_week)
    return WeeklyTemplateResponse.model_validate(template)


@router.put("/doctors/{doctor_id}/schedules/{day_of_week}", response_model=WeeklyTemplateResponse)
async def upsert_weekly_template(
    doctor_id: UUID,
    day_of_week: DayOfWeek,
    request: WeeklyTemplateRequest,
    actor: ActorDep,
    use_case: ManageScheduleUseCaseDep,
):
    """Replace the active working hours of a weekday."""
    template = await use_case.upsert_template(
        actor,
        UpsertTemplateRequest(
            doctor_id=doctor_id,
            day_of_week=day_of_week,
            start_time=request.start_time,
            end_time=request.end_time,
            break_start=request.break_start,
            break_end=request.break_end,
            slot_duration_minutes=request.slot_duration_minutes,
            max_patients_per_slot=request.max_patients_per_slot,
        ),
    )
    return WeeklyTemplateResponse.model_validate(template)


@router.delete("/doctors/{doctor_id}/schedules/{day_of_week}", response_model=WeeklyTemplateResponse)
async def deactivate_weekly_template(
    doctor_id: UUID,
    day_of_week: DayOfWeek,
    actor: ActorDep,
    use_case: ManageScheduleUseCaseDep,
):
    template = await use_case.deactivate_template(actor, doctor_id, day_of_week)
    return WeeklyTemplateResponse.model_validate(template)


@router.get("/doctors/{doctor_id}/overrides", response_model=list[ScheduleOverrideResponse])
async def list_schedule_overrides(
    doctor_id: UUID,
    actor: ActorDep,
    container: ContainerDep,
    use_case: ManageScheduleUseCaseDep,
    start_date: date | None = None,
    end_date: date | None = None,
):
    """Overrides in a date range; defaults to the bookable horizon from today."""
    start = start_date or container.clock.now().date()
    end = end_date or start + timedelta(days=container.settings.AVAILABILITY_MAX_DAYS - 1)
    overrides = await use_case.list_overrides(doctor_id, start, end)
    return [ScheduleOverrideResponse.model_validate(o) for o in overrides]


@router.put("/doctors/{doctor_id}/overrides/{override_date}", response_model=ScheduleOverrideResponse)
async def upsert_schedule_override(
    doctor_id: UUID,
    override_date: date,
    request: ScheduleOverrideRequest,
    actor: ActorDep,
    use_case: ManageScheduleUseCaseDep,
):
    override = await use_case.upsert_override(
        actor,
        UpsertOverrideRequest(
            doctor_id=doctor_id,
            override_date=override_date,
            override_type=request.override_type,
            start_time=request.start_time,
            end_time=request.end_time,
            reason=request.reason,
        ),
    )
    return ScheduleOverrideResponse.model_validate(override)


@router.delete("/doctors/{doctor_id}/overrides/{override_date}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_schedule_override(
    doctor_id: UUID,
    override_date: date,
    actor: ActorDep,
    use_case: ManageScheduleUseCaseDep,
) -> None:
    await use_case.remove_override(actor, doctor_id, override_date)
