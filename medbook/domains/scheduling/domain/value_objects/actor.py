"""
Actor Value Objects

Who is performing an operation, as asserted by the identity collaborator.
"""

from dataclasses import dataclass
from uuid import UUID

from medbook.core.domain import StatusEnum, ValueObject


class ActorRole(StatusEnum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    HOSPITAL = "hospital"
    ADMIN = "admin"
    SYSTEM = "system"


@dataclass(frozen=True)
class ActorContext(ValueObject):
    """
    Authenticated caller.

    Hospital staff carry the hospital they belong to, doctors carry their
    doctor profile id.
    """

    user_id: UUID
    role: ActorRole
    hospital_id: UUID | None = None
    doctor_id: UUID | None = None

    def _validate(self) -> None:
        if self.role == ActorRole.HOSPITAL and self.hospital_id is None:
            raise ValueError("Hospital actors must carry a hospital_id")
        if self.role == ActorRole.DOCTOR and self.doctor_id is None:
            raise ValueError("Doctor actors must carry a doctor_id")

    @property
    def is_privileged(self) -> bool:
        return self.role in (ActorRole.ADMIN, ActorRole.SYSTEM)

    @classmethod
    def system(cls) -> "ActorContext":
        return cls(user_id=UUID(int=0), role=ActorRole.SYSTEM)
