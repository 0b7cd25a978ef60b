"""
Scheduling API Dependencies

FastAPI dependencies for the scheduling domain: the per-request unit of
work, the calling actor and use case factories.
"""

from collections.abc import AsyncIterator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from medbook.core.container import SchedulingContainer, get_container
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
from medbook.domains.scheduling.domain.value_objects import ActorContext, ActorRole

ContainerDep = Annotated[SchedulingContainer, Depends(get_container)]


async def get_db_session(container: ContainerDep) -> AsyncIterator[AsyncSession | None]:
    """Open the container's unit of work for the duration of the request."""
    async with container.session_scope() as session:
        yield session


# Type alias for database session dependency
DbSession = Annotated[AsyncSession | None, Depends(get_db_session)]


def _parse_uuid(value: str | None, header: str) -> UUID | None:
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {header} header") from e


def get_actor(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
    x_user_role: Annotated[str | None, Header(alias="X-User-Role")] = None,
    x_hospital_id: Annotated[str | None, Header(alias="X-Hospital-Id")] = None,
    x_doctor_id: Annotated[str | None, Header(alias="X-Doctor-Id")] = None,
) -> ActorContext:
    """
    Build the calling actor from identity headers.

    The headers are set by the authenticating gateway in front of this
    service and are trusted as-is.
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing identity headers")

    user_id = _parse_uuid(x_user_id, "X-User-Id")
    try:
        role = ActorRole.from_string(x_user_role)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role: {x_user_role} (expected one of {', '.join(ActorRole.values())})",
        ) from e

    try:
        return ActorContext(
            user_id=user_id,
            role=role,
            hospital_id=_parse_uuid(x_hospital_id, "X-Hospital-Id"),
            doctor_id=_parse_uuid(x_doctor_id, "X-Doctor-Id"),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


ActorDep = Annotated[ActorContext, Depends(get_actor)]


def get_availability_use_case(container: ContainerDep, db: DbSession) -> GetAvailabilityUseCase:
    """Get GetAvailabilityUseCase instance with database session."""
    return container.create_get_availability_use_case(db)


def get_create_booking_use_case(container: ContainerDep, db: DbSession) -> CreateBookingUseCase:
    """Get CreateBookingUseCase instance with database session."""
    return container.create_create_booking_use_case(db)


def get_booking_use_case(container: ContainerDep, db: DbSession) -> GetBookingUseCase:
    return container.create_get_booking_use_case(db)


def get_update_booking_status_use_case(container: ContainerDep, db: DbSession) -> UpdateBookingStatusUseCase:
    return container.create_update_booking_status_use_case(db)


def get_cancel_booking_use_case(container: ContainerDep, db: DbSession) -> CancelBookingUseCase:
    return container.create_cancel_booking_use_case(db)


def get_reschedule_booking_use_case(container: ContainerDep, db: DbSession) -> RescheduleBookingUseCase:
    return container.create_reschedule_booking_use_case(db)


def get_confirm_payment_use_case(container: ContainerDep, db: DbSession) -> ConfirmPaymentUseCase:
    return container.create_confirm_payment_use_case(db)


def get_manage_schedule_use_case(container: ContainerDep, db: DbSession) -> ManageScheduleUseCase:
    """Get ManageScheduleUseCase instance with database session."""
    return container.create_manage_schedule_use_case(db)


__all__ = [
    "ActorDep",
    "ContainerDep",
    "DbSession",
    "get_actor",
    "get_availability_use_case",
    "get_create_booking_use_case",
    "get_booking_use_case",
    "get_update_booking_status_use_case",
    "get_cancel_booking_use_case",
    "get_reschedule_booking_use_case",
    "get_confirm_payment_use_case",
    "get_manage_schedule_use_case",
]
