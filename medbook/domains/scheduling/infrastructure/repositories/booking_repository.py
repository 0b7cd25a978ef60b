"""
Booking Repository Implementation

SQLAlchemy implementation of IBookingRepository for PostgreSQL.
"""

import logging
from datetime import date, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medbook.domains.scheduling.application.ports import IBookingRepository
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import (
    CAPACITY_COUNTING_STATUSES,
    ActorRole,
    BookingStatus,
    ConsultationType,
    PaymentStatus,
)
from medbook.domains.scheduling.infrastructure.persistence.sqlalchemy.models import BookingModel

logger = logging.getLogger(__name__)

_COUNTING_VALUES = [status.value for status in CAPACITY_COUNTING_STATUSES]

# Columns rewritten by status changes and reschedules
_MUTABLE_FIELDS = (
    "appointment_date",
    "start_time",
    "end_time",
    "payment_status",
    "payment_ref",
    "refund_amount",
    "confirmed_at",
    "checked_in_at",
    "started_at",
    "completed_at",
    "cancelled_at",
    "no_show_at",
    "rescheduled_at",
    "cancellation_reason",
    "rescheduled_from",
    "reschedule_reason",
    "version",
    "updated_at",
)


def slot_lock_key(doctor_id: UUID, appointment_date: date, start_time: time) -> str:
    return f"slot:{doctor_id}:{appointment_date.isoformat()}:{start_time.strftime('%H:%M')}"


class SQLAlchemyBookingRepository(IBookingRepository):
    """
    SQLAlchemy implementation of booking repository.

    Capacity-checked writes take a transaction-scoped advisory lock on the
    slot key, count the slot's capacity-counting rows, write, then commit
    (which releases the lock). The partial unique index on
    (patient_id, doctor_id, appointment_date) and the unique
    (patient_id, idempotency_key) catch what the slot lock cannot, such as
    one patient booking two slots of the same doctor and date concurrently;
    those surface as a lost race.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, booking_id: UUID) -> Booking | None:
        result = await self.session.execute(select(BookingModel).where(BookingModel.id == booking_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_idempotency_key(self, patient_id: UUID, idempotency_key: str) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel).where(
                BookingModel.patient_id == patient_id,
                BookingModel.idempotency_key == idempotency_key,
            )
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_active_for_patient(
        self,
        patient_id: UUID,
        doctor_id: UUID,
        appointment_date: date,
    ) -> list[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(
                BookingModel.patient_id == patient_id,
                BookingModel.doctor_id == doctor_id,
                BookingModel.appointment_date == appointment_date,
                BookingModel.status.in_(_COUNTING_VALUES),
            )
            .order_by(BookingModel.start_time)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def count_active_by_slot(
        self,
        doctor_id: UUID,
        start_date: date,
        end_date: date,
        exclude_booking_id: UUID | None = None,
    ) -> dict[tuple[date, time], int]:
        query = (
            select(BookingModel.appointment_date, BookingModel.start_time, func.count())
            .where(
                BookingModel.doctor_id == doctor_id,
                BookingModel.appointment_date.between(start_date, end_date),
                BookingModel.status.in_(_COUNTING_VALUES),
            )
            .group_by(BookingModel.appointment_date, BookingModel.start_time)
        )
        if exclude_booking_id:
            query = query.where(BookingModel.id != exclude_booking_id)

        result = await self.session.execute(query)
        return {(row[0], row[1]): row[2] for row in result.all()}

    async def insert_if_capacity_available(self, booking: Booking, max_capacity: int) -> Booking | None:
        try:
            await self._lock_slot(booking.doctor_id, booking.appointment_date, booking.start_time)
            booked = await self._count_slot(booking.doctor_id, booking.appointment_date, booking.start_time)
            if booked >= max_capacity:
                await self.session.rollback()
                logger.info(
                    f"Slot {slot_lock_key(*booking.slot_key)} full ({booked}/{max_capacity}), insert refused"
                )
                return None

            model = self._to_model(booking)
            self.session.add(model)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Booking insert for {slot_lock_key(*booking.slot_key)} hit a constraint: {e.orig}")
            return None

        await self.session.refresh(model)
        return self._to_entity(model)

    async def update_status(self, booking: Booking, expected_status: BookingStatus) -> bool:
        result = await self.session.execute(
            update(BookingModel)
            .where(BookingModel.id == booking.id, BookingModel.status == expected_status.value)
            .values(**self._status_values(booking))
        )
        if result.rowcount != 1:
            await self.session.rollback()
            return False
        await self.session.commit()
        return True

    async def reschedule_if_capacity_available(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        max_capacity: int,
    ) -> bool:
        try:
            await self._lock_slot(booking.doctor_id, booking.appointment_date, booking.start_time)
            booked = await self._count_slot(
                booking.doctor_id, booking.appointment_date, booking.start_time, exclude_booking_id=booking.id
            )
            if booked >= max_capacity:
                await self.session.rollback()
                return False

            result = await self.session.execute(
                update(BookingModel)
                .where(BookingModel.id == booking.id, BookingModel.status == expected_status.value)
                .values(**self._status_values(booking))
            )
            if result.rowcount != 1:
                await self.session.rollback()
                return False
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Reschedule of booking {booking.id} hit a constraint: {e.orig}")
            return False
        return True

    async def _lock_slot(self, doctor_id: UUID, appointment_date: date, start_time: time) -> None:
        key = slot_lock_key(doctor_id, appointment_date, start_time)
        await self.session.execute(select(func.pg_advisory_xact_lock(func.hashtext(key))))

    async def _count_slot(
        self,
        doctor_id: UUID,
        appointment_date: date,
        start_time: time,
        exclude_booking_id: UUID | None = None,
    ) -> int:
        query = select(func.count()).where(
            BookingModel.doctor_id == doctor_id,
            BookingModel.appointment_date == appointment_date,
            BookingModel.start_time == start_time,
            BookingModel.status.in_(_COUNTING_VALUES),
        )
        if exclude_booking_id:
            query = query.where(BookingModel.id != exclude_booking_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    def _status_values(self, booking: Booking) -> dict[str, Any]:
        values: dict[str, Any] = {name: getattr(booking, name) for name in _MUTABLE_FIELDS}
        values["status"] = booking.status.value
        values["payment_status"] = booking.payment_status.value
        values["cancelled_by"] = booking.cancelled_by.value if booking.cancelled_by else None
        return values

    def _to_entity(self, model: BookingModel) -> Booking:
        """Convert model to entity."""
        return Booking(
            id=model.id,
            booking_reference=model.booking_reference,
            patient_id=model.patient_id,
            doctor_id=model.doctor_id,
            hospital_id=model.hospital_id,
            family_member_id=model.family_member_id,
            appointment_date=model.appointment_date,
            start_time=model.start_time,
            end_time=model.end_time,
            consultation_type=ConsultationType(model.consultation_type),
            status=BookingStatus(model.status),
            consultation_fee=Decimal(model.consultation_fee),
            platform_fee=Decimal(model.platform_fee),
            total_amount=Decimal(model.total_amount),
            currency=model.currency,
            payment_status=PaymentStatus(model.payment_status),
            payment_ref=model.payment_ref,
            refund_amount=Decimal(model.refund_amount) if model.refund_amount is not None else None,
            symptoms=model.symptoms,
            patient_notes=model.patient_notes,
            confirmed_at=model.confirmed_at,
            checked_in_at=model.checked_in_at,
            started_at=model.started_at,
            completed_at=model.completed_at,
            cancelled_at=model.cancelled_at,
            no_show_at=model.no_show_at,
            rescheduled_at=model.rescheduled_at,
            cancelled_by=ActorRole(model.cancelled_by) if model.cancelled_by else None,
            cancellation_reason=model.cancellation_reason,
            rescheduled_from=model.rescheduled_from,
            reschedule_reason=model.reschedule_reason,
            idempotency_key=model.idempotency_key,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, booking: Booking) -> BookingModel:
        """Convert entity to model."""
        return BookingModel(
            id=booking.id,
            booking_reference=booking.booking_reference,
            patient_id=booking.patient_id,
            doctor_id=booking.doctor_id,
            hospital_id=booking.hospital_id,
            family_member_id=booking.family_member_id,
            appointment_date=booking.appointment_date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            consultation_type=booking.consultation_type.value,
            status=booking.status.value,
            consultation_fee=booking.consultation_fee,
            platform_fee=booking.platform_fee,
            total_amount=booking.total_amount,
            currency=booking.currency,
            payment_status=booking.payment_status.value,
            payment_ref=booking.payment_ref,
            refund_amount=booking.refund_amount,
            symptoms=booking.symptoms,
            patient_notes=booking.patient_notes,
            confirmed_at=booking.confirmed_at,
            cancelled_by=booking.cancelled_by.value if booking.cancelled_by else None,
            cancellation_reason=booking.cancellation_reason,
            idempotency_key=booking.idempotency_key,
            version=booking.version,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )
