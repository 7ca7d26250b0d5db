# bshop/data.py

from datetime import date, timedelta
from decimal import Decimal

from .models import Appointment, AppointmentStatus, Role, Service, User

SERVICES = [
    Service(id="1", name="Corte Clásico & Estilo", duration_minutes=45, price=Decimal("35"),
            description="Corte personalizado, lavado y peinado profesional."),
    Service(id="2", name="Perfilado de Barba Spa", duration_minutes=30, price=Decimal("25"),
            description="Toalla caliente, navaja y tratamiento de aceites esenciales."),
    Service(id="3", name="Coloración & Mechas", duration_minutes=120, price=Decimal("85"),
            description="Tinte completo o mechas balayage con hidratación."),
    Service(id="4", name="Manicura Premium", duration_minutes=40, price=Decimal("30"),
            description="Limpieza, cutículas, exfoliación y esmaltado gel."),
]

USERS = [
    User(id="b1", name="Marco Rossi", email="marco@bshop.com", role=Role.barber,
         avatar_url="https://avatar.iran.liara.run/public/boy?username=Marco"),
    User(id="c1", name="Alex Cliente", email="alex@cliente.com", role=Role.client,
         avatar_url="https://avatar.iran.liara.run/public/boy?username=Alex"),
]


def demo_appointments(today: date) -> list[Appointment]:
    return [
        Appointment(
            id="appt_1", client_id="c1", barber_id="b1", service_id="1",
            date=today + timedelta(days=1), time="10:00",
            status=AppointmentStatus.confirmed,
            client_name="Alex Cliente", service_name="Corte Clásico & Estilo",
            price=Decimal("35"), duration_minutes=45, end_time="10:45",
        ),
        Appointment(
            id="appt_2", client_id="c1", barber_id="b1", service_id="2",
            date=today + timedelta(days=2), time="15:30",
            status=AppointmentStatus.pending,
            client_name="Alex Cliente", service_name="Perfilado de Barba Spa",
            price=Decimal("25"), duration_minutes=30, end_time="16:00",
        ),
    ]


def seed_document(today: date) -> dict:
    """Initial persisted document, same shape the store writes back."""
    return {
        "users": [u.model_dump(mode="json", by_alias=True) for u in USERS],
        "appointments": [a.model_dump(mode="json", by_alias=True) for a in demo_appointments(today)],
        "services": [s.model_dump(mode="json", by_alias=True) for s in SERVICES],
        "currentUser": None,
        "isAuthenticated": False,
        "barbers": [u.model_dump(mode="json", by_alias=True) for u in USERS if u.role == Role.barber],
    }
