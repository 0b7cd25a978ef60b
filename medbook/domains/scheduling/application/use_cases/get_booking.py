"""
Get Booking Use Case
"""

from uuid import UUID

from medbook.domains.scheduling.application.ports import IBookingRepository
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.services import AccessPolicy
from medbook.domains.scheduling.domain.value_objects import ActorContext

from ._loading import load_booking


class GetBookingUseCase:
    """Fetch one booking the actor is allowed to see."""

    def __init__(self, booking_repository: IBookingRepository, access_policy: AccessPolicy):
        self.booking_repo = booking_repository
        self.access_policy = access_policy

    async def execute(self, actor: ActorContext, booking_id: UUID) -> Booking:
        booking = await load_booking(self.booking_repo, booking_id)
        self.access_policy.ensure_can_access_booking(actor, booking, operation="read")
        return booking
