"""
In-Memory Scheduling Store

Process-local implementation of the scheduling ports, used for local
development and tests. Per-slot ``asyncio.Lock`` objects provide the same
capacity guarantee the PostgreSQL adapter gets from advisory locks.
Entities are copied on the way in and out so callers never share state
with the store.
"""

import asyncio
import copy
import logging
from collections import defaultdict
from datetime import UTC, date, datetime, time
from uuid import UUID

from medbook.domains.scheduling.domain.entities import (
    Booking,
    Doctor,
    FamilyMember,
    ScheduleOverride,
    WeeklyTemplate,
)
from medbook.domains.scheduling.domain.value_objects import BookingStatus, DayOfWeek, SlotKey

logger = logging.getLogger(__name__)


class InMemorySchedulingStore:
    """Shared state behind the in-memory repositories."""

    def __init__(self) -> None:
        self.doctors: dict[UUID, Doctor] = {}
        self.family_members: dict[UUID, FamilyMember] = {}
        self.templates: list[WeeklyTemplate] = []
        self.overrides: dict[tuple[UUID, date], ScheduleOverride] = {}
        self.bookings: dict[UUID, Booking] = {}
        self._slot_locks: defaultdict[SlotKey, asyncio.Lock] = defaultdict(asyncio.Lock)

    def slot_lock(self, key: SlotKey) -> asyncio.Lock:
        return self._slot_locks[key]

    def add_doctor(self, doctor: Doctor) -> Doctor:
        self.doctors[doctor.id] = copy.deepcopy(doctor)
        return doctor

    def add_family_member(self, member: FamilyMember) -> FamilyMember:
        self.family_members[member.id] = copy.deepcopy(member)
        return member


class InMemoryDoctorDirectory:
    def __init__(self, store: InMemorySchedulingStore):
        self.store = store

    async def get_doctor(self, doctor_id: UUID) -> Doctor | None:
        doctor = self.store.doctors.get(doctor_id)
        return copy.deepcopy(doctor) if doctor else None

    async def get_family_member(self, family_member_id: UUID) -> FamilyMember | None:
        member = self.store.family_members.get(family_member_id)
        return copy.deepcopy(member) if member else None


class InMemoryScheduleRepository:
    def __init__(self, store: InMemorySchedulingStore):
        self.store = store

    async def list_templates(self, doctor_id: UUID, include_inactive: bool = False) -> list[WeeklyTemplate]:
        templates = [
            copy.deepcopy(t)
            for t in self.store.templates
            if t.doctor_id == doctor_id and (include_inactive or t.is_active)
        ]
        return sorted(templates, key=lambda t: t.day_of_week.index)

    async def get_active_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate | None:
        for template in self.store.templates:
            if template.doctor_id == doctor_id and template.day_of_week == day_of_week and template.is_active:
                return copy.deepcopy(template)
        return None

    async def save_template(self, template: WeeklyTemplate) -> WeeklyTemplate:
        for existing in self.store.templates:
            if (
                existing.doctor_id == template.doctor_id
                and existing.day_of_week == template.day_of_week
                and existing.is_active
            ):
                existing.deactivate()
        stored = copy.deepcopy(template)
        stored.is_active = True
        stored.deleted_at = None
        self.store.templates.append(stored)
        return copy.deepcopy(stored)

    async def deactivate_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate | None:
        for template in self.store.templates:
            if template.doctor_id == doctor_id and template.day_of_week == day_of_week and template.is_active:
                template.deactivate()
                return copy.deepcopy(template)
        return None

    async def list_overrides(self, doctor_id: UUID, start_date: date, end_date: date) -> list[ScheduleOverride]:
        overrides = [
            copy.deepcopy(o)
            for (owner, day), o in self.store.overrides.items()
            if owner == doctor_id and start_date <= day <= end_date
        ]
        return sorted(overrides, key=lambda o: o.override_date)

    async def get_override(self, doctor_id: UUID, override_date: date) -> ScheduleOverride | None:
        override = self.store.overrides.get((doctor_id, override_date))
        return copy.deepcopy(override) if override else None

    async def save_override(self, override: ScheduleOverride) -> ScheduleOverride:
        key = (override.doctor_id, override.override_date)
        existing = self.store.overrides.get(key)
        stored = copy.deepcopy(override)
        if existing is not None:
            # Upsert keeps the identity of the existing row
            stored.id = existing.id
            stored.created_at = existing.created_at
            stored.touch()
        self.store.overrides[key] = stored
        return copy.deepcopy(stored)

    async def delete_override(self, doctor_id: UUID, override_date: date) -> bool:
        return self.store.overrides.pop((doctor_id, override_date), None) is not None


class InMemoryBookingRepository:
    def __init__(self, store: InMemorySchedulingStore):
        self.store = store

    async def find_by_id(self, booking_id: UUID) -> Booking | None:
        booking = self.store.bookings.get(booking_id)
        return copy.deepcopy(booking) if booking else None

    async def find_by_idempotency_key(self, patient_id: UUID, idempotency_key: str) -> Booking | None:
        for booking in self.store.bookings.values():
            if booking.patient_id == patient_id and booking.idempotency_key == idempotency_key:
                return copy.deepcopy(booking)
        return None

    async def find_active_for_patient(
        self,
        patient_id: UUID,
        doctor_id: UUID,
        appointment_date: date,
    ) -> list[Booking]:
        found = [
            copy.deepcopy(b)
            for b in self.store.bookings.values()
            if b.patient_id == patient_id
            and b.doctor_id == doctor_id
            and b.appointment_date == appointment_date
            and b.counts_toward_capacity
        ]
        return sorted(found, key=lambda b: b.start_time)

    async def count_active_by_slot(
        self,
        doctor_id: UUID,
        start_date: date,
        end_date: date,
        exclude_booking_id: UUID | None = None,
    ) -> dict[tuple[date, time], int]:
        counts: dict[tuple[date, time], int] = defaultdict(int)
        for booking in self.store.bookings.values():
            if (
                booking.doctor_id == doctor_id
                and start_date <= booking.appointment_date <= end_date
                and booking.counts_toward_capacity
                and booking.id != exclude_booking_id
            ):
                counts[(booking.appointment_date, booking.start_time)] += 1
        return dict(counts)

    async def insert_if_capacity_available(self, booking: Booking, max_capacity: int) -> Booking | None:
        async with self.store.slot_lock(booking.slot_key):
            booked = self._count_slot(booking.slot_key)
            # Let other tasks run inside the critical section
            await asyncio.sleep(0)
            if booked >= max_capacity:
                return None
            if self._conflicts_with_unique_keys(booking):
                logger.warning(f"Booking {booking.id} violates a uniqueness rule, insert refused")
                return None
            self.store.bookings[booking.id] = copy.deepcopy(booking)
        return copy.deepcopy(booking)

    async def update_status(self, booking: Booking, expected_status: BookingStatus) -> bool:
        stored = self.store.bookings.get(booking.id)
        if stored is None or stored.status != expected_status:
            return False
        booking.updated_at = datetime.now(UTC)
        self.store.bookings[booking.id] = copy.deepcopy(booking)
        return True

    async def reschedule_if_capacity_available(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        max_capacity: int,
    ) -> bool:
        async with self.store.slot_lock(booking.slot_key):
            booked = self._count_slot(booking.slot_key, exclude_booking_id=booking.id)
            await asyncio.sleep(0)
            if booked >= max_capacity:
                return False
            if self._holds_other_active_booking(booking):
                logger.warning(f"Booking {booking.id} would duplicate an active booking on {booking.appointment_date}")
                return False
            return await self.update_status(booking, expected_status)

    def _count_slot(self, key: SlotKey, exclude_booking_id: UUID | None = None) -> int:
        return sum(
            1
            for b in self.store.bookings.values()
            if b.slot_key == key and b.counts_toward_capacity and b.id != exclude_booking_id
        )

    def _conflicts_with_unique_keys(self, booking: Booking) -> bool:
        for other in self.store.bookings.values():
            if booking.idempotency_key and (other.patient_id, other.idempotency_key) == (
                booking.patient_id,
                booking.idempotency_key,
            ):
                return True
        return self._holds_other_active_booking(booking)

    def _holds_other_active_booking(self, booking: Booking) -> bool:
        # One active booking per patient, doctor and date
        return any(
            other.id != booking.id
            and other.counts_toward_capacity
            and (other.patient_id, other.doctor_id, other.appointment_date)
            == (booking.patient_id, booking.doctor_id, booking.appointment_date)
            for other in self.store.bookings.values()
        )
