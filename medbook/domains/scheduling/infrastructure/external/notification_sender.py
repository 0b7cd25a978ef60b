"""
HTTP Notification Sender

Posts booking events to the notification service, which resolves the
recipient's channels (push, SMS, e-mail).
"""

from medbook.domains.scheduling.application.ports import BookingEvent, INotificationSender
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import ActorRole

from .http_base import HttpCollaboratorClient


class HttpNotificationSender(HttpCollaboratorClient, INotificationSender):
    service_name = "notification_service"

    async def notify(self, event: BookingEvent, booking: Booking, recipient: ActorRole) -> None:
        await self._post(
            "/notifications",
            {
                "event": event.value,
                "recipient_role": recipient.value,
                "booking_id": str(booking.id),
                "booking_reference": booking.booking_reference,
                "patient_id": str(booking.patient_id),
                "doctor_id": str(booking.doctor_id),
                "hospital_id": str(booking.hospital_id) if booking.hospital_id else None,
                "appointment_date": booking.appointment_date.isoformat(),
                "start_time": booking.start_time.strftime("%H:%M"),
                "status": booking.status.value,
            },
        )
