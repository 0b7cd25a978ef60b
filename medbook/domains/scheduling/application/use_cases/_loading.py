from uuid import UUID

from medbook.core.domain import EntityNotFoundException
from medbook.domains.scheduling.application.ports import IBookingRepository
from medbook.domains.scheduling.domain.entities import Booking


async def load_booking(booking_repository: IBookingRepository, booking_id: UUID) -> Booking:
    booking = await booking_repository.find_by_id(booking_id)
    if booking is None:
        raise EntityNotFoundException(entity_type="Booking", entity_id=booking_id)
    return booking
