"""
Booking Repository Port

Persistence contract for bookings, including the atomic capacity-checked
writes that keep a slot from being overbooked.
"""

from datetime import date, time
from typing import Protocol, runtime_checkable
from uuid import UUID

from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import BookingStatus


@runtime_checkable
class IBookingRepository(Protocol):
    """
    Booking repository interface.

    Implementations must serialize the capacity-checked writes per slot
    ``(doctor_id, appointment_date, start_time)`` so that the number of
    capacity-counting bookings in a slot never exceeds its capacity.
    """

    async def find_by_id(self, booking_id: UUID) -> Booking | None:
        ...

    async def find_by_idempotency_key(self, patient_id: UUID, idempotency_key: str) -> Booking | None:
        ...

    async def find_active_for_patient(
        self,
        patient_id: UUID,
        doctor_id: UUID,
        appointment_date: date,
    ) -> list[Booking]:
        """Capacity-counting bookings a patient holds with a doctor on a date."""
        ...

    async def count_active_by_slot(
        self,
        doctor_id: UUID,
        start_date: date,
        end_date: date,
        exclude_booking_id: UUID | None = None,
    ) -> dict[tuple[date, time], int]:
        """
        Count capacity-counting bookings per slot in a date range (inclusive).

        Args:
            exclude_booking_id: Booking left out of the count (used when rescheduling)

        Returns:
            Mapping of (appointment_date, start_time) to booked count
        """
        ...

    async def insert_if_capacity_available(self, booking: Booking, max_capacity: int) -> Booking | None:
        """
        Atomically insert ``booking`` when its slot holds fewer than ``max_capacity``
        capacity-counting bookings.

        Returns:
            The stored booking, or None when the slot filled up (lost race)
        """
        ...

    async def update_status(self, booking: Booking, expected_status: BookingStatus) -> bool:
        """
        Persist ``booking`` only if the stored status still equals ``expected_status``.

        Returns:
            False when another writer changed the status first
        """
        ...

    async def reschedule_if_capacity_available(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        max_capacity: int,
    ) -> bool:
        """
        Persist a booking already moved to its new slot, atomically checking
        that the stored status is unchanged and the new slot has room
        (the booking itself excluded).
        """
        ...
