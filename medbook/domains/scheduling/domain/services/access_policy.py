"""
Access Policy

Ownership rules deciding whether an actor may see or act on a resource.
"""

from uuid import UUID

from medbook.core.domain import AuthorizationException

from ..entities.booking import Booking
from ..entities.doctor import Doctor
from ..value_objects.actor import ActorContext, ActorRole


class AccessPolicy:
    """
    Resource ownership checks.

    Admins and the system see everything. Patients own their bookings,
    doctors the bookings made with them and hospital staff the bookings
    and schedules of their hospital.
    """

    def can_access_booking(self, actor: ActorContext, booking: Booking) -> bool:
        if actor.is_privileged:
            return True
        if actor.role == ActorRole.PATIENT:
            return booking.patient_id == actor.user_id
        if actor.role == ActorRole.DOCTOR:
            return actor.doctor_id is not None and booking.doctor_id == actor.doctor_id
        if actor.role == ActorRole.HOSPITAL:
            return actor.hospital_id is not None and booking.hospital_id == actor.hospital_id
        return False

    def ensure_can_access_booking(self, actor: ActorContext, booking: Booking, operation: str) -> None:
        if not self.can_access_booking(actor, booking):
            raise AuthorizationException(operation=operation, resource=f"booking:{booking.id}")

    def ensure_can_book(self, actor: ActorContext, patient_id: UUID, doctor: Doctor) -> None:
        """Patients book for themselves, hospital staff for their own doctors, admins for anyone."""
        if actor.role == ActorRole.ADMIN:
            return
        if actor.role == ActorRole.PATIENT and actor.user_id == patient_id:
            return
        if self._is_hospital_staff_of(actor, doctor):
            return
        raise AuthorizationException(operation="create_booking", resource=f"doctor:{doctor.id}")

    def ensure_can_manage_schedule(self, actor: ActorContext, doctor: Doctor) -> None:
        """Only staff of the doctor's hospital, or admins, may change schedules."""
        if actor.role == ActorRole.ADMIN:
            return
        if self._is_hospital_staff_of(actor, doctor):
            return
        raise AuthorizationException(operation="manage_schedule", resource=f"doctor:{doctor.id}")

    @staticmethod
    def _is_hospital_staff_of(actor: ActorContext, doctor: Doctor) -> bool:
        return (
            actor.role == ActorRole.HOSPITAL
            and doctor.hospital_id is not None
            and actor.hospital_id == doctor.hospital_id
        )
