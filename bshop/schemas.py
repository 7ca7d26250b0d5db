# bshop/schemas.py

from datetime import date as Date
from typing import List, Optional

from pydantic import Field

from .models import Appointment, CamelModel, Money, Role, User


class AppointmentCreate(CamelModel):
    client_id: str
    barber_id: str
    service_id: str
    date: str = Field(examples=["2024-01-10"])
    time: str = Field(examples=["10:30"])


class CancelRequest(CamelModel):
    reason: Optional[str] = None
    cancelled_by: Optional[Role] = None


class ChargePublic(CamelModel):
    success: bool
    id: Optional[str] = None
    message: Optional[str] = None


class CancelResponse(CamelModel):
    success: bool = True
    appointment: Appointment
    penalty: Money
    charged: bool
    charge: Optional[ChargePublic] = None


class SlotPublic(CamelModel):
    time: str
    end: str
    available: bool


class AvailabilityResponse(CamelModel):
    barber_id: str
    date: Date
    service_id: Optional[str] = None
    slots: List[SlotPublic]


class DatesResponse(CamelModel):
    dates: List[Date]


class SweepResponse(CamelModel):
    completed: int


class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str
    role: Role = Role.client


class LoginRequest(CamelModel):
    email: str


class SessionPublic(CamelModel):
    current_user: Optional[User] = None
    is_authenticated: bool = False
