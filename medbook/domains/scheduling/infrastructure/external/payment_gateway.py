"""
HTTP Payment Gateway

Opens payment orders on the payment service.
"""

import logging
from decimal import Decimal

from medbook.core.domain import IntegrationException
from medbook.domains.scheduling.application.ports import IPaymentGateway, PaymentOrder
from medbook.domains.scheduling.domain.entities import Booking

from .http_base import HttpCollaboratorClient

logger = logging.getLogger(__name__)


class HttpPaymentGateway(HttpCollaboratorClient, IPaymentGateway):
    service_name = "payment_service"

    async def create_payment_order(self, booking: Booking) -> PaymentOrder:
        payload = {
            "booking_id": str(booking.id),
            "booking_reference": booking.booking_reference,
            "patient_id": str(booking.patient_id),
            "amount": str(booking.total_amount),
            "currency": booking.currency,
        }
        data = await self._post("/orders", payload)

        order_id = data.get("order_id") or data.get("id")
        if not order_id:
            raise IntegrationException(self.service_name, "Payment service response carried no order id")

        logger.debug(f"Payment order {order_id} opened for booking {booking.id}")
        return PaymentOrder(
            order_id=str(order_id),
            amount=Decimal(str(data.get("amount", booking.total_amount))),
            currency=data.get("currency", booking.currency),
            checkout_url=data.get("checkout_url"),
        )
