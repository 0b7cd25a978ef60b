"""
Booking State Machine

Single source of truth for which status changes exist and who may perform them.
"""

import logging

from medbook.core.domain import AuthorizationException, InvalidTransitionException

from ..entities.booking import Booking
from ..value_objects.actor import ActorContext, ActorRole
from ..value_objects.booking_status import BookingStatus
from .access_policy import AccessPolicy

logger = logging.getLogger(__name__)

_S = BookingStatus
_R = ActorRole

_CARE_TEAM = frozenset({_R.PATIENT, _R.DOCTOR, _R.HOSPITAL, _R.ADMIN})

TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[ActorRole]] = {
    (_S.PENDING_PAYMENT, _S.CONFIRMED): frozenset({_R.SYSTEM}),
    (_S.PENDING_PAYMENT, _S.CANCELLED): frozenset({_R.SYSTEM, _R.PATIENT, _R.ADMIN}),
    (_S.CONFIRMED, _S.CHECKED_IN): _CARE_TEAM,
    (_S.CHECKED_IN, _S.IN_PROGRESS): frozenset({_R.DOCTOR, _R.ADMIN}),
    (_S.IN_PROGRESS, _S.COMPLETED): frozenset({_R.DOCTOR, _R.ADMIN}),
    (_S.CONFIRMED, _S.CANCELLED): _CARE_TEAM,
    (_S.CHECKED_IN, _S.CANCELLED): _CARE_TEAM,
    (_S.CONFIRMED, _S.NO_SHOW): frozenset({_R.DOCTOR, _R.HOSPITAL, _R.ADMIN}),
    (_S.CONFIRMED, _S.RESCHEDULED): frozenset({_R.PATIENT, _R.DOCTOR, _R.HOSPITAL}),
    (_S.RESCHEDULED, _S.RESCHEDULED): frozenset({_R.PATIENT, _R.DOCTOR, _R.HOSPITAL}),
    (_S.RESCHEDULED, _S.CONFIRMED): frozenset({_R.PATIENT}),
    (_S.RESCHEDULED, _S.CANCELLED): _CARE_TEAM,
}


class BookingStateMachine:
    """
    Validates booking status transitions.

    Checks run in a fixed order so callers get a stable error:

    1. the (from, to) edge must exist, whatever the role (InvalidTransitionException)
    2. the actor's role must be allowed on that edge (AuthorizationException)
    3. the actor must own the booking (AuthorizationException)

    Example:
        ```python
        machine = BookingStateMachine(AccessPolicy())
        machine.authorize(booking, BookingStatus.CHECKED_IN, actor)
        booking.apply_status(BookingStatus.CHECKED_IN, actor.role, now)
        ```
    """

    def __init__(
        self,
        access_policy: AccessPolicy,
        transitions: dict[tuple[BookingStatus, BookingStatus], frozenset[ActorRole]] | None = None,
    ):
        self.access_policy = access_policy
        self.transitions = transitions if transitions is not None else TRANSITIONS

    def has_edge(self, current: BookingStatus, target: BookingStatus) -> bool:
        return (current, target) in self.transitions

    def allowed_roles(self, current: BookingStatus, target: BookingStatus) -> frozenset[ActorRole]:
        return self.transitions.get((current, target), frozenset())

    def next_statuses(self, current: BookingStatus) -> list[BookingStatus]:
        return [to for (frm, to) in self.transitions if frm == current]

    def authorize(self, booking: Booking, target: BookingStatus, actor: ActorContext) -> None:
        """
        Raise unless ``actor`` may move ``booking`` to ``target``.

        Raises:
            InvalidTransitionException: No such edge
            AuthorizationException: Role not allowed, or actor does not own the booking
        """
        current = booking.status
        if not self.has_edge(current, target):
            raise InvalidTransitionException(current.value, target.value)

        roles = self.allowed_roles(current, target)
        if actor.role not in roles:
            logger.info(
                f"Role {actor.role.value} denied {current.value} -> {target.value} on booking {booking.id}"
            )
            raise AuthorizationException(
                operation=f"transition:{current.value}->{target.value}",
                resource=f"booking:{booking.id}",
                message=f"Role '{actor.role.value}' cannot move a booking from '{current.value}' to '{target.value}'",
            )

        self.access_policy.ensure_can_access_booking(actor, booking, operation=f"transition:{target.value}")
