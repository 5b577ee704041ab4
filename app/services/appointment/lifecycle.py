# ============================================================================
# app/services/appointment/lifecycle.py
# Appointment status state machine
# ============================================================================
from datetime import datetime
import enum
import logging
from typing import Callable, Dict, FrozenSet, NamedTuple, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyCancelled, InvalidTransition
from app.models.appointment import Appointment, AppointmentStatus, CancelledBy

logger = logging.getLogger(__name__)


class Actor(str, enum.Enum):
    CUSTOMER = "CUSTOMER"  # holder of the cancellation token
    BUSINESS = "BUSINESS"
    HOLIDAY = "HOLIDAY"    # holiday cascade
    SWEEP = "SWEEP"


class TransitionRule(NamedTuple):
    actors: FrozenSet[Actor]
    guard: Callable[[Appointment, datetime], bool]
    guard_message: str


def _not_in_past(appointment: Appointment, now: datetime) -> bool:
    return appointment.appointment_datetime >= now


def _always(appointment: Appointment, now: datetime) -> bool:
    return True


def _has_ended(appointment: Appointment, now: datetime) -> bool:
    return appointment.end_datetime < now


_CANCEL = TransitionRule(
    frozenset({Actor.CUSTOMER, Actor.BUSINESS, Actor.HOLIDAY}), _always, ""
)
_COMPLETE = TransitionRule(
    frozenset({Actor.SWEEP}), _has_ended, "Appointment has not ended yet"
)

S = AppointmentStatus
TRANSITIONS: Dict[Tuple[AppointmentStatus, AppointmentStatus], TransitionRule] = {
    (S.PENDING, S.CONFIRMED): TransitionRule(
        frozenset({Actor.BUSINESS}), _not_in_past, "Cannot confirm an appointment in the past"
    ),
    (S.PENDING, S.CANCELLED): _CANCEL,
    (S.CONFIRMED, S.CANCELLED): _CANCEL,
    (S.PENDING, S.COMPLETED): _COMPLETE,
    (S.CONFIRMED, S.COMPLETED): _COMPLETE,
    (S.CONFIRMED, S.NO_SHOW): TransitionRule(
        frozenset({Actor.BUSINESS}), _has_ended, "Appointment has not ended yet"
    ),
}

TERMINAL_STATUSES = frozenset({S.CANCELLED, S.COMPLETED, S.NO_SHOW})

_CANCELLED_BY = {
    Actor.CUSTOMER: CancelledBy.CUSTOMER,
    Actor.BUSINESS: CancelledBy.BUSINESS,
    Actor.HOLIDAY: CancelledBy.SYSTEM,
}


class AppointmentLifecycle:
    """The only mutation path for an appointment's status"""

    @staticmethod
    def can_transition(
            appointment: Appointment,
            target: AppointmentStatus,
            actor: Actor,
            now: datetime
    ) -> bool:
        rule = TRANSITIONS.get((appointment.status, target))
        return rule is not None and actor in rule.actors and rule.guard(appointment, now)

    @staticmethod
    def _check(appointment: Appointment, target: AppointmentStatus, actor: Actor, now: datetime):
        current = appointment.status
        if current == S.CANCELLED and target == S.CANCELLED:
            raise AlreadyCancelled("Appointment is already cancelled")

        rule = TRANSITIONS.get((current, target))
        if rule is None:
            raise InvalidTransition(f"Cannot change status from {current.value} to {target.value}")
        if actor not in rule.actors:
            raise InvalidTransition(f"{actor.value} cannot change status to {target.value}")
        if not rule.guard(appointment, now):
            raise InvalidTransition(rule.guard_message)

    @staticmethod
    def transition(
            db: Session,
            appointment: Appointment,
            target: AppointmentStatus,
            actor: Actor,
            now: datetime,
            reason: Optional[str] = None
    ) -> Appointment:
        """
        Move an appointment to `target` inside the caller's transaction.

        The write is a compare-and-set on the status the guard was evaluated
        against, so a concurrent change makes this call fail with
        InvalidTransition instead of overwriting it. The caller commits.
        """
        AppointmentLifecycle._check(appointment, target, actor, now)
        current = appointment.status

        values = {Appointment.status: target}
        if target == S.CONFIRMED:
            values[Appointment.confirmed_at] = now
        elif target == S.CANCELLED:
            values[Appointment.cancelled_at] = now
            values[Appointment.cancellation_reason] = reason
            values[Appointment.cancelled_by] = _CANCELLED_BY[actor]
            # cancelling revokes the public token
            values[Appointment.cancellation_token_expires_at] = min(
                appointment.cancellation_token_expires_at, now
            )
        elif target == S.COMPLETED:
            values[Appointment.completed_at] = now

        updated = db.query(Appointment).filter(
            Appointment.id == appointment.id,
            Appointment.status == current
        ).update(values, synchronize_session=False)

        if updated != 1:
            db.refresh(appointment)
            raise InvalidTransition(
                f"Appointment changed concurrently (now {appointment.status.value})"
            )

        db.refresh(appointment)
        logger.info(
            f"Appointment {appointment.id}: {current.value} -> {target.value} by {actor.value}"
        )
        return appointment
