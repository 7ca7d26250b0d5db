# bshop/lifecycle.py
"""Appointment state machine and cancellation penalties.

PENDING -> CONFIRMED (approve), PENDING|CONFIRMED -> CANCELLED (cancel),
CONFIRMED -> COMPLETED (end instant reached). CANCELLED and COMPLETED are
terminal. Every function returns a new Appointment; callers swap it in.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .errors import InvalidStateError
from .models import Appointment, AppointmentStatus, Role

CENT = Decimal("0.01")

TRANSITIONS = {
    AppointmentStatus.pending: {AppointmentStatus.confirmed, AppointmentStatus.cancelled},
    AppointmentStatus.confirmed: {AppointmentStatus.cancelled, AppointmentStatus.completed},
    AppointmentStatus.cancelled: set(),
    AppointmentStatus.completed: set(),
}


@dataclass(frozen=True)
class PenaltyPolicy:
    pending_rate: Decimal = Decimal("0.50")
    confirmed_rate: Decimal = Decimal("0.60")

    def rate_for(self, status: AppointmentStatus) -> Decimal:
        if status == AppointmentStatus.confirmed:
            return self.confirmed_rate
        return self.pending_rate


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_penalty(appt: Appointment, policy: PenaltyPolicy) -> Decimal:
    if appt.price is None:
        return Decimal("0.00")
    return to_money(appt.price * policy.rate_for(appt.status))


def _require(appt: Appointment, target: AppointmentStatus) -> None:
    if target not in TRANSITIONS[appt.status]:
        raise InvalidStateError(
            f"Cannot move appointment from {appt.status.value} to {target.value}",
            context={"appointment_id": appt.id, "status": appt.status.value},
        )


def approve(appt: Appointment) -> Appointment:
    _require(appt, AppointmentStatus.confirmed)
    return appt.model_copy(update={"status": AppointmentStatus.confirmed})


def cancel(
    appt: Appointment,
    now: datetime,
    policy: PenaltyPolicy,
    reason: Optional[str] = None,
    cancelled_by: Optional[Role] = None,
) -> tuple[Appointment, Decimal]:
    _require(appt, AppointmentStatus.cancelled)
    penalty = compute_penalty(appt, policy)
    updated = appt.model_copy(update={
        "status": AppointmentStatus.cancelled,
        "cancellation_penalty": penalty,
        "cancel_reason": reason,
        "cancelled_by": cancelled_by,
        "cancelled_at": now,
    })
    return updated, penalty


def complete_if_due(appt: Appointment, now: datetime, fallback_minutes: int) -> Optional[Appointment]:
    """COMPLETED copy when a confirmed appointment has ended, else None."""
    if appt.status != AppointmentStatus.confirmed:
        return None
    if appt.ends_at(fallback_minutes) > now:
        return None
    return appt.model_copy(update={"status": AppointmentStatus.completed, "completed_at": now})


def complete(appt: Appointment, now: datetime) -> Appointment:
    _require(appt, AppointmentStatus.completed)
    return appt.model_copy(update={"status": AppointmentStatus.completed, "completed_at": now})
