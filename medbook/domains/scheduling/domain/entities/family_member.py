from dataclasses import dataclass
from uuid import UUID

from medbook.core.domain import Entity


@dataclass
class FamilyMember(Entity[UUID]):
    """Dependant a patient may book on behalf of (read model)."""

    patient_id: UUID | None = None
    full_name: str = ""
    relationship: str | None = None

    def belongs_to(self, patient_id: UUID) -> bool:
        return self.patient_id == patient_id
