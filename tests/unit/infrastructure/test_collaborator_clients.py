"""
Unit tests for the httpx payment and notification clients.
"""

import json
from datetime import date, time
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest

from medbook.core.domain import IntegrationException
from medbook.domains.scheduling.application.ports import BookingEvent
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import ActorRole
from medbook.domains.scheduling.infrastructure.external import HttpNotificationSender, HttpPaymentGateway


@pytest.fixture
def booking() -> Booking:
    return Booking(
        id=uuid4(),
        patient_id=uuid4(),
        doctor_id=uuid4(),
        hospital_id=uuid4(),
        appointment_date=date(2025, 3, 10),
        start_time=time(9, 0),
        end_time=time(9, 30),
        total_amount=Decimal("550"),
    )


class RecordingHandler:
    """httpx.MockTransport handler answering with a fixed response."""

    def __init__(self, status_code: int = 200, body: dict | None = None):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    def payload(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


# ============================================================================
# Payment gateway
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_payment_order_created(booking):
    """Test the order request carries the booking total and the response is mapped."""
    # Arrange
    handler = RecordingHandler(body={"order_id": "ord_42", "checkout_url": "https://pay.example/ord_42"})
    gateway = HttpPaymentGateway("https://payments.example/", transport=httpx.MockTransport(handler))

    # Act
    order = await gateway.create_payment_order(booking)
    await gateway.close()

    # Assert
    assert order.order_id == "ord_42"
    assert order.amount == Decimal("550")
    assert order.currency == "INR"
    assert order.checkout_url == "https://pay.example/ord_42"
    assert handler.requests[0].url == "https://payments.example/orders"
    assert handler.payload() == {
        "booking_id": str(booking.id),
        "booking_reference": booking.booking_reference,
        "patient_id": str(booking.patient_id),
        "amount": "550",
        "currency": "INR",
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_payment_order_accepts_plain_id(booking):
    handler = RecordingHandler(body={"id": 7})
    gateway = HttpPaymentGateway("https://payments.example", transport=httpx.MockTransport(handler))

    order = await gateway.create_payment_order(booking)

    assert order.order_id == "7"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_payment_order_without_id_fails(booking):
    handler = RecordingHandler(body={"status": "queued"})
    gateway = HttpPaymentGateway("https://payments.example", transport=httpx.MockTransport(handler))

    with pytest.raises(IntegrationException) as exc_info:
        await gateway.create_payment_order(booking)

    assert exc_info.value.details["service"] == "payment_service"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_payment_service_error_status(booking):
    """Test HTTP errors become IntegrationException."""
    handler = RecordingHandler(status_code=503, body={"detail": "maintenance"})
    gateway = HttpPaymentGateway("https://payments.example", transport=httpx.MockTransport(handler))

    with pytest.raises(IntegrationException) as exc_info:
        await gateway.create_payment_order(booking)

    assert "503" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.asyncio
async def test_payment_service_unreachable(booking):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = HttpPaymentGateway("https://payments.example", transport=httpx.MockTransport(refuse))

    with pytest.raises(IntegrationException):
        await gateway.create_payment_order(booking)


# ============================================================================
# Notification sender
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
async def test_notification_payload(booking):
    handler = RecordingHandler(status_code=204)
    sender = HttpNotificationSender("https://notify.example", transport=httpx.MockTransport(handler))

    await sender.notify(BookingEvent.CANCELLED, booking, ActorRole.HOSPITAL)

    payload = handler.payload()
    assert handler.requests[0].url.path == "/notifications"
    assert payload["event"] == "booking_cancelled"
    assert payload["recipient_role"] == "hospital"
    assert payload["appointment_date"] == "2025-03-10"
    assert payload["start_time"] == "09:00"
    assert payload["status"] == "pending_payment"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_close_allows_reuse(booking):
    handler = RecordingHandler(status_code=202)
    sender = HttpNotificationSender("https://notify.example", transport=httpx.MockTransport(handler))

    await sender.notify(BookingEvent.CREATED, booking, ActorRole.PATIENT)
    await sender.close()
    await sender.notify(BookingEvent.CREATED, booking, ActorRole.DOCTOR)

    assert len(handler.requests) == 2
