"""
Doctor Directory Port

Read access to doctor profiles and patients' family members, both owned by
the profile subsystem.
"""

from typing import Protocol, runtime_checkable
from uuid import UUID

from medbook.domains.scheduling.domain.entities import Doctor, FamilyMember


@runtime_checkable
class IDoctorDirectory(Protocol):
    async def get_doctor(self, doctor_id: UUID) -> Doctor | None:
        """
        Find a doctor by ID.

        Returns:
            Doctor if found, None otherwise
        """
        ...

    async def get_family_member(self, family_member_id: UUID) -> FamilyMember | None:
        ...
