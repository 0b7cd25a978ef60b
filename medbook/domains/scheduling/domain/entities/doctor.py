"""
Doctor Entity (read model)

Doctor profiles are owned by the profile subsystem; scheduling only reads the
fields it needs to decide bookability and pricing.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from medbook.core.domain import Entity, Money

from ..value_objects.schedule import ConsultationType, VerificationStatus


@dataclass
class Doctor(Entity[UUID]):
    """
    Doctor as seen by the booking engine.

    Example:
        ```python
        doctor = Doctor(
            id=uuid4(),
            hospital_id=hospital_id,
            verification_status=VerificationStatus.VERIFIED,
            consultation_types=[ConsultationType.IN_PERSON, ConsultationType.VIDEO],
            fee_in_person=Decimal("500"),
        )
        doctor.fee_for(ConsultationType.VIDEO)  # falls back to INR 500
        ```
    """

    user_id: UUID | None = None
    hospital_id: UUID | None = None
    is_active: bool = True
    verification_status: VerificationStatus = VerificationStatus.PENDING

    consultation_types: list[ConsultationType] = field(default_factory=lambda: [ConsultationType.IN_PERSON])
    fee_in_person: Decimal = Decimal("0")
    fee_video: Decimal | None = None
    fee_chat: Decimal | None = None
    currency: str = "INR"

    # Defaults used when a template does not specify them
    slot_duration_minutes: int = 15
    max_patients_per_slot: int = 1

    @property
    def is_bookable(self) -> bool:
        """Only active, verified doctors accept bookings."""
        return self.is_active and self.verification_status == VerificationStatus.VERIFIED

    def supports(self, consultation_type: ConsultationType) -> bool:
        return consultation_type in self.consultation_types

    def fee_for(self, consultation_type: ConsultationType) -> Money:
        """Consultation fee for a type; video and chat fall back to the in-person fee."""
        fee = self.fee_in_person
        if consultation_type == ConsultationType.VIDEO and self.fee_video is not None:
            fee = self.fee_video
        elif consultation_type == ConsultationType.CHAT and self.fee_chat is not None:
            fee = self.fee_chat
        return Money(amount=fee, currency=self.currency)
