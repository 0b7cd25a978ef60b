"""
External collaborator clients (httpx)
"""

from .notification_sender import HttpNotificationSender
from .payment_gateway import HttpPaymentGateway

__all__ = ["HttpNotificationSender", "HttpPaymentGateway"]
