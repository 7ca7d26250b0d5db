# bshop/store.py

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from . import lifecycle
from .availability import ShopHours, Slot, booking_dates, compute_slots, confirmed_conflict, slot_fits
from .config import Settings, settings as default_settings
from .core import add_minutes, format_time, local_now, parse_date, parse_time, to_instant
from .data import seed_document
from .db import SnapshotRepository
from .errors import ConflictError, NotFoundError, ValidationError
from .lifecycle import PenaltyPolicy
from .models import Appointment, AppointmentStatus, Role, Service, User

logger = logging.getLogger(__name__)

_email = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class CancelResult:
    appointment: Appointment
    penalty_applied: Decimal


class BookingStore:
    """Single owner of users, services and appointments.

    Every command runs its check-and-set under one re-entrant lock and writes
    the snapshot before releasing it, so a status change and the matching debt
    increment are never observed apart.
    """

    def __init__(
        self,
        hours: ShopHours = ShopHours(),
        policy: PenaltyPolicy = PenaltyPolicy(),
        clock: Optional[Callable[[], datetime]] = None,
        repository: Optional[SnapshotRepository] = None,
        snapshot_key: str = "bshop-storage",
        document: Optional[dict[str, Any]] = None,
    ) -> None:
        self.hours = hours
        self.policy = policy
        self.clock = clock or (lambda: local_now(default_settings.utc_offset_hours))
        self.repository = repository
        self.snapshot_key = snapshot_key
        self._lock = threading.RLock()

        if document is None and repository is not None:
            document = repository.load(snapshot_key)
            if document is not None:
                logger.info("Loaded snapshot", extra={"key": snapshot_key})
        if document is None:
            document = seed_document(self.clock().date())
            self._load(document)
            self._commit()
        else:
            self._load(document)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repository: Optional[SnapshotRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "BookingStore":
        return cls(
            hours=ShopHours(
                open_hour=settings.open_hour,
                close_hour=settings.close_hour,
                slot_interval_minutes=settings.slot_interval_minutes,
            ),
            policy=PenaltyPolicy(
                pending_rate=settings.pending_penalty_rate,
                confirmed_rate=settings.confirmed_penalty_rate,
            ),
            clock=clock or (lambda: local_now(settings.utc_offset_hours)),
            repository=repository,
            snapshot_key=settings.snapshot_key,
        )

    # persistence

    def _load(self, document: dict[str, Any]) -> None:
        self._users = {u["id"]: User.model_validate(u) for u in document.get("users", [])}
        self._services = {s["id"]: Service.model_validate(s) for s in document.get("services", [])}
        self._appointments = {
            a["id"]: Appointment.model_validate(a) for a in document.get("appointments", [])
        }
        current = document.get("currentUser")
        self._current_user_id = current["id"] if current else None

    def to_document(self) -> dict[str, Any]:
        with self._lock:
            current = self._users.get(self._current_user_id) if self._current_user_id else None
            return {
                "users": [u.model_dump(mode="json", by_alias=True) for u in self._users.values()],
                "appointments": [
                    a.model_dump(mode="json", by_alias=True) for a in self._appointments.values()
                ],
                "services": [s.model_dump(mode="json", by_alias=True) for s in self._services.values()],
                "currentUser": current.model_dump(mode="json", by_alias=True) if current else None,
                "isAuthenticated": current is not None,
                "barbers": [u.model_dump(mode="json", by_alias=True) for u in self._barbers()],
            }

    def _commit(self) -> None:
        if self.repository is not None:
            self.repository.save(self.snapshot_key, self.to_document())

    @contextmanager
    def _transaction(self):
        """Hold the lock, commit on exit, restore in-memory state if anything fails."""
        with self._lock:
            users = dict(self._users)
            appointments = dict(self._appointments)
            current_user_id = self._current_user_id
            try:
                yield
                self._commit()
            except BaseException:
                self._users = users
                self._appointments = appointments
                self._current_user_id = current_user_id
                raise

    # queries

    def now(self) -> datetime:
        return self.clock()

    def _barbers(self) -> list[User]:
        return [u for u in self._users.values() if u.role == Role.barber]

    def list_services(self) -> list[Service]:
        with self._lock:
            return list(self._services.values())

    def list_providers(self) -> list[User]:
        with self._lock:
            return self._barbers()

    def get_user(self, user_id: str) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError("User not found", context={"user_id": user_id})
            return user

    def get_service(self, service_id: str) -> Service:
        with self._lock:
            service = self._services.get(service_id)
            if service is None:
                raise NotFoundError("Service not found", context={"service_id": service_id})
            return service

    def get_provider(self, barber_id: str) -> User:
        with self._lock:
            user = self._users.get(barber_id)
            if user is None or user.role != Role.barber:
                raise NotFoundError("Barber not found", context={"barber_id": barber_id})
            return user

    def get_appointment(self, appointment_id: str) -> Appointment:
        with self._lock:
            appt = self._appointments.get(appointment_id)
            if appt is None:
                raise NotFoundError("Appointment not found", context={"appointment_id": appointment_id})
            return appt

    def list_appointments(
        self,
        client_id: Optional[str] = None,
        barber_id: Optional[str] = None,
    ) -> list[Appointment]:
        with self._lock:
            result = list(self._appointments.values())
        if client_id:
            result = [a for a in result if a.client_id == client_id]
        if barber_id:
            result = [a for a in result if a.barber_id == barber_id]
        return sorted(result, key=lambda a: a.starts_at())

    def compute_slots(
        self,
        barber_id: str,
        on_date: str,
        service_id: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> list[Slot]:
        day = parse_date(on_date)
        with self._lock:
            self.get_provider(barber_id)
            # unknown service falls back to the slot interval
            service = self._services.get(service_id) if service_id else None
            appointments = list(self._appointments.values())
        return compute_slots(
            barber_id, day, service, appointments, self.now(), self.hours, client_id=client_id
        )

    def booking_dates(self, horizon_days: int) -> list[date]:
        return booking_dates(self.now().date(), horizon_days)

    # users

    @property
    def current_user(self) -> Optional[User]:
        with self._lock:
            return self._users.get(self._current_user_id) if self._current_user_id else None

    def _find_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user
        return None

    def register(self, name: str, email: str, role: Role = Role.client) -> User:
        try:
            email = _email.validate_python(email.strip())
        except PydanticValidationError:
            raise ValidationError("Invalid email address", context={"email": email})
        name = name.strip()
        if not name:
            raise ValidationError("Name is required", context={"email": email})

        with self._transaction():
            if self._find_by_email(email) is not None:
                raise ConflictError("Email already registered", context={"email": email})
            avatar = "girl" if name.lower().endswith("a") else "boy"
            user = User(
                id=f"u_{uuid.uuid4().hex[:12]}",
                name=name,
                email=email,
                role=role,
                avatar_url=f"https://avatar.iran.liara.run/public/{avatar}?username={name}",
            )
            self._users[user.id] = user
            # registering signs the new user in
            self._current_user_id = user.id
        logger.info("User registered", extra={"client_id": user.id})
        return user

    def login(self, email: str) -> User:
        with self._transaction():
            user = self._find_by_email(email)
            if user is None:
                raise NotFoundError("User not found, register first", context={"email": email})
            self._current_user_id = user.id
            return user

    def logout(self) -> None:
        with self._transaction():
            self._current_user_id = None

    # commands

    def book(
        self,
        client_id: str,
        barber_id: str,
        service_id: str,
        on_date: str,
        at_time: str,
    ) -> Appointment:
        day = parse_date(on_date)
        start = to_instant(day, parse_time(at_time))

        with self._transaction():
            client = self.get_user(client_id)
            self.get_provider(barber_id)
            service = self.get_service(service_id)

            duration = service.duration_minutes
            end = add_minutes(start, duration)
            interval = {"date": on_date, "start": format_time(start), "end": format_time(end)}

            if not slot_fits(day, start, duration, self.hours):
                raise ValidationError("Appointment must be within business hours", context=interval)

            conflict = confirmed_conflict(
                self._appointments.values(), barber_id, start, end, self.hours.slot_interval_minutes
            )
            if conflict is not None:
                logger.warning(
                    "Booking rejected, slot overlaps a confirmed appointment",
                    extra={"appointment_id": conflict.id, "provider_id": barber_id},
                )
                raise ConflictError(
                    "Slot unavailable, overlaps a confirmed appointment",
                    context={**interval, "appointment_id": conflict.id},
                )

            appt = Appointment(
                id=f"appt_{uuid.uuid4().hex[:12]}",
                client_id=client.id,
                barber_id=barber_id,
                service_id=service.id,
                date=day,
                time=format_time(start),
                status=AppointmentStatus.pending,
                client_name=client.name,
                service_name=service.name,
                price=service.price,
                duration_minutes=duration,
                end_time=format_time(end),
                created_at=self.now(),
            )
            self._appointments[appt.id] = appt

        logger.info(
            "Appointment requested",
            extra={"appointment_id": appt.id, "client_id": client_id, "provider_id": barber_id},
        )
        return appt

    def approve(self, appointment_id: str) -> Appointment:
        with self._transaction():
            appt = self.get_appointment(appointment_id)
            updated = lifecycle.approve(appt)

            conflict = confirmed_conflict(
                self._appointments.values(),
                appt.barber_id,
                appt.starts_at(),
                appt.ends_at(self.hours.slot_interval_minutes),
                self.hours.slot_interval_minutes,
                exclude_id=appt.id,
            )
            if conflict is not None:
                raise ConflictError(
                    "Another appointment was already confirmed for this slot",
                    context={"appointment_id": appt.id, "conflicting_id": conflict.id},
                )

            self._appointments[appt.id] = updated

        logger.info("Appointment confirmed", extra={"appointment_id": appt.id, "status": "CONFIRMED"})
        return updated

    def cancel(
        self,
        appointment_id: str,
        reason: Optional[str] = None,
        cancelled_by: Optional[Role] = None,
    ) -> CancelResult:
        with self._transaction():
            appt = self.get_appointment(appointment_id)
            updated, penalty = lifecycle.cancel(
                appt, self.now(), self.policy, reason=reason, cancelled_by=cancelled_by
            )

            client = self._users.get(appt.client_id)
            if client is not None and penalty > 0:
                self._users[client.id] = client.model_copy(update={"debt": client.debt + penalty})
            self._appointments[appt.id] = updated

        logger.info(
            "Appointment cancelled",
            extra={"appointment_id": appt.id, "client_id": appt.client_id, "penalty": penalty},
        )
        return CancelResult(appointment=updated, penalty_applied=penalty)

    def complete(self, appointment_id: str) -> Appointment:
        with self._transaction():
            appt = self.get_appointment(appointment_id)
            updated = lifecycle.complete(appt, self.now())
            self._appointments[appt.id] = updated
        logger.info("Appointment completed", extra={"appointment_id": appt.id, "status": "COMPLETED"})
        return updated

    def sweep_completions(self, now: Optional[datetime] = None) -> int:
        """Complete every confirmed appointment whose end instant has passed."""
        now = now or self.now()
        with self._lock:
            done = []
            for appt in self._appointments.values():
                updated = lifecycle.complete_if_due(appt, now, self.hours.slot_interval_minutes)
                if updated is not None:
                    done.append(updated)
            if done:
                with self._transaction():
                    for updated in done:
                        self._appointments[updated.id] = updated

        for updated in done:
            logger.info("Appointment completed", extra={"appointment_id": updated.id, "status": "COMPLETED"})
        return len(done)
