"""
Doctor Directory Implementation

Reads doctor profiles and family members from the shared database.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medbook.domains.scheduling.application.ports import IDoctorDirectory
from medbook.domains.scheduling.domain.entities import Doctor, FamilyMember
from medbook.domains.scheduling.domain.value_objects import ConsultationType, VerificationStatus
from medbook.domains.scheduling.infrastructure.persistence.sqlalchemy.models import DoctorModel, FamilyMemberModel


class SQLAlchemyDoctorDirectory(IDoctorDirectory):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_doctor(self, doctor_id: UUID) -> Doctor | None:
        result = await self.session.execute(select(DoctorModel).where(DoctorModel.id == doctor_id))
        model = result.scalar_one_or_none()
        return self._doctor_to_entity(model) if model else None

    async def get_family_member(self, family_member_id: UUID) -> FamilyMember | None:
        result = await self.session.execute(select(FamilyMemberModel).where(FamilyMemberModel.id == family_member_id))
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return FamilyMember(
            id=model.id,
            patient_id=model.patient_id,
            full_name=model.full_name,
            relationship=model.relationship,
        )

    def _doctor_to_entity(self, model: DoctorModel) -> Doctor:
        return Doctor(
            id=model.id,
            user_id=model.user_id,
            hospital_id=model.hospital_id,
            is_active=model.is_active,
            verification_status=VerificationStatus(model.verification_status),
            consultation_types=[ConsultationType(t) for t in model.consultation_types or []],
            fee_in_person=Decimal(model.fee_in_person),
            fee_video=Decimal(model.fee_video) if model.fee_video is not None else None,
            fee_chat=Decimal(model.fee_chat) if model.fee_chat is not None else None,
            currency=model.currency,
            slot_duration_minutes=model.slot_duration_minutes,
            max_patients_per_slot=model.max_patients_per_slot,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
