"""
Booking Value Objects

Lifecycle and payment status enums for bookings.
"""

from medbook.core.domain import StatusEnum


class BookingStatus(StatusEnum):
    """
    Booking lifecycle states.

    Allowed transitions and the roles that may perform them live in
    BookingStateMachine; this enum only knows terminality and capacity.
    """

    PENDING_PAYMENT = "pending_payment"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"

    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    def counts_toward_capacity(self) -> bool:
        """Every status except cancelled and no_show occupies a seat in its slot."""
        return self not in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW)


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW})

CAPACITY_COUNTING_STATUSES = frozenset(s for s in BookingStatus if s.counts_toward_capacity())


class PaymentStatus(StatusEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    NOT_REQUIRED = "not_required"
    REFUND_PENDING = "refund_pending"
