"""
Scheduling Application Services
"""

from .booking_events import BookingEventDispatcher

__all__ = ["BookingEventDispatcher"]
