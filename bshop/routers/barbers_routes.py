# bshop/routers/barbers_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from bshop.config import Settings
from bshop.deps import get_settings, get_store
from bshop.models import Service, User
from bshop.schemas import AvailabilityResponse, DatesResponse, SlotPublic
from bshop.store import BookingStore

router = APIRouter(
    prefix="/api",
    tags=["catalog"],
)


@router.get("/services", response_model=List[Service])
def list_services(store: BookingStore = Depends(get_store)):
    return store.list_services()


@router.get("/barbers", response_model=List[User])
def list_barbers(store: BookingStore = Depends(get_store)):
    return store.list_providers()


@router.get("/dates", response_model=DatesResponse)
def bookable_dates(
    store: BookingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    return {"dates": store.booking_dates(settings.booking_horizon_days)}


@router.get("/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: str = Query(alias="barberId"),
    date: str = Query(),
    service_id: Optional[str] = Query(default=None, alias="serviceId"),
    client_id: Optional[str] = Query(default=None, alias="clientId"),
    store: BookingStore = Depends(get_store),
):
    slots = store.compute_slots(barber_id, date, service_id, client_id=client_id)
    return {
        "barber_id": barber_id,
        "date": date,
        "service_id": service_id,
        "slots": [SlotPublic(time=s.time, end=s.end, available=s.available) for s in slots],
    }
