# bshop/models.py

from datetime import date as Date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.types import JSON
from sqlmodel import Column, Field, SQLModel

from .core import parse_time, to_instant

# plain JSON numbers on the wire, Decimal in memory
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Role(str, Enum):
    client = "CLIENT"
    barber = "BARBER"
    admin = "ADMIN"


class AppointmentStatus(str, Enum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    cancelled = "CANCELLED"
    completed = "COMPLETED"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Service(CamelModel):
    id: str
    name: str
    duration_minutes: int
    price: Money
    description: str = ""
    image_url: Optional[str] = None


class User(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    avatar_url: Optional[str] = None
    debt: Money = Decimal("0")


class Appointment(CamelModel):
    id: str
    client_id: str
    barber_id: str
    service_id: str
    date: Date
    time: str  # HH:MM
    status: AppointmentStatus = AppointmentStatus.pending

    # catalog snapshot taken at booking time
    client_name: Optional[str] = None
    service_name: Optional[str] = None
    price: Optional[Money] = None
    duration_minutes: Optional[int] = None
    end_time: Optional[str] = None

    cancellation_penalty: Optional[Money] = None
    cancel_reason: Optional[str] = None
    cancelled_by: Optional[Role] = None

    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        parse_time(value)
        return value

    @property
    def is_terminal(self) -> bool:
        return self.status in (AppointmentStatus.cancelled, AppointmentStatus.completed)

    def starts_at(self) -> datetime:
        return to_instant(self.date, parse_time(self.time))

    def ends_at(self, fallback_minutes: int) -> datetime:
        minutes = self.duration_minutes or fallback_minutes
        return self.starts_at() + timedelta(minutes=minutes)


class Snapshot(SQLModel, table=True):
    key: str = Field(primary_key=True)
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
