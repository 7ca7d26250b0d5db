from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from bshop.availability import ShopHours
from bshop.config import Settings
from bshop.lifecycle import PenaltyPolicy
from bshop.main import create_app
from bshop.models import Role, Service, User
from bshop.store import BookingStore


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


SERVICES = [
    Service(id="cut", name="Haircut", duration_minutes=45, price=Decimal("1000")),
    Service(id="beard", name="Beard trim", duration_minutes=30, price=Decimal("1000")),
    Service(id="color", name="Color", duration_minutes=120, price=Decimal("85")),
]

USERS = [
    User(id="b1", name="Marco Rossi", email="marco@bshop.com", role=Role.barber),
    User(id="b2", name="Lucia Gomez", email="lucia@bshop.com", role=Role.barber),
    User(id="c1", name="Alex Cliente", email="alex@cliente.com", role=Role.client),
    User(id="c2", name="Sam Otro", email="sam@cliente.com", role=Role.client),
]


def make_document(appointments=()):
    return {
        "users": [u.model_dump(mode="json", by_alias=True) for u in USERS],
        "appointments": [a.model_dump(mode="json", by_alias=True) for a in appointments],
        "services": [s.model_dump(mode="json", by_alias=True) for s in SERVICES],
        "currentUser": None,
        "isAuthenticated": False,
        "barbers": [u.model_dump(mode="json", by_alias=True) for u in USERS if u.role == Role.barber],
    }


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 9, 12, 0))


@pytest.fixture
def store(clock):
    return BookingStore(
        hours=ShopHours(open_hour=9, close_hour=18, slot_interval_minutes=30),
        policy=PenaltyPolicy(),
        clock=clock,
        document=make_document(),
    )


@pytest.fixture
def test_settings():
    return Settings(sweep_interval_seconds=0, payment_latency_seconds=0, database_url="sqlite://")


@pytest.fixture
def client(store, test_settings):
    app = create_app(settings=test_settings, store=store)
    return TestClient(app)
