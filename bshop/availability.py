# bshop/availability.py

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .core import format_time, overlaps
from .models import Appointment, AppointmentStatus, Service


@dataclass(frozen=True)
class ShopHours:
    open_hour: int = 9
    close_hour: int = 18
    slot_interval_minutes: int = 30

    def window(self, on_date: date) -> tuple[datetime, datetime]:
        day_start = datetime.combine(on_date, datetime.min.time())
        return (
            day_start + timedelta(hours=self.open_hour),
            day_start + timedelta(hours=self.close_hour),
        )


@dataclass(frozen=True)
class Slot:
    time: str
    end: str
    available: bool


def confirmed_conflict(
    appointments: Iterable[Appointment],
    barber_id: str,
    start: datetime,
    end: datetime,
    fallback_minutes: int,
    exclude_id: Optional[str] = None,
) -> Optional[Appointment]:
    """First CONFIRMED appointment of the barber that overlaps [start, end)."""
    for a in appointments:
        if a.status != AppointmentStatus.confirmed:
            continue
        if a.barber_id != barber_id or a.date != start.date():
            continue
        if exclude_id is not None and a.id == exclude_id:
            continue
        if overlaps(start, end, a.starts_at(), a.ends_at(fallback_minutes)):
            return a
    return None


def compute_slots(
    barber_id: str,
    on_date: date,
    service: Optional[Service],
    appointments: Iterable[Appointment],
    now: datetime,
    hours: ShopHours = ShopHours(),
    client_id: Optional[str] = None,
) -> list[Slot]:
    """Bookable start times for one barber and day, in ascending order.

    A slot is only emitted when the whole service fits before closing. It is
    unavailable once it has started (``start <= now``) or when it overlaps a
    confirmed appointment of the barber, which includes the requesting
    client's own confirmed bookings with that barber.
    """
    step = hours.slot_interval_minutes
    if step <= 0:
        return []
    duration = service.duration_minutes if service is not None else step
    duration_delta = timedelta(minutes=duration)

    work_start, work_end = hours.window(on_date)

    # only this barber's confirmed bookings for the day can block
    taken = [
        a for a in appointments
        if a.barber_id == barber_id
        and a.date == on_date
        and a.status == AppointmentStatus.confirmed
    ]
    own = [a for a in taken if client_id is not None and a.client_id == client_id]

    slots = []
    current = work_start
    while current + duration_delta <= work_end:
        slot_start = current
        slot_end = current + duration_delta

        available = slot_start > now
        if available and confirmed_conflict(taken, barber_id, slot_start, slot_end, step):
            available = False
        if available and confirmed_conflict(own, barber_id, slot_start, slot_end, step):
            available = False

        slots.append(Slot(time=format_time(slot_start), end=format_time(slot_end), available=available))
        current += timedelta(minutes=step)

    return slots


def slot_fits(on_date: date, start: datetime, duration_minutes: int, hours: ShopHours) -> bool:
    work_start, work_end = hours.window(on_date)
    return work_start <= start and start + timedelta(minutes=duration_minutes) <= work_end


def booking_dates(today: date, horizon_days: int) -> list[date]:
    return [today + timedelta(days=i) for i in range(max(horizon_days, 0))]
