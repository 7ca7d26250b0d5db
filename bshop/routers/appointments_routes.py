# bshop/routers/appointments_routes.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from bshop import payments
from bshop.config import Settings
from bshop.deps import get_settings, get_store
from bshop.models import Appointment
from bshop.schemas import AppointmentCreate, CancelRequest, CancelResponse, ChargePublic, SweepResponse
from bshop.store import BookingStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/appointments",
    tags=["appointments"],
)


@router.get("", response_model=List[Appointment])
def list_appointments(
    barber_id: Optional[str] = Query(default=None, alias="barberId"),
    client_id: Optional[str] = Query(default=None, alias="clientId"),
    store: BookingStore = Depends(get_store),
):
    return store.list_appointments(client_id=client_id, barber_id=barber_id)


@router.post("", response_model=Appointment, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    store: BookingStore = Depends(get_store),
):
    return store.book(appt.client_id, appt.barber_id, appt.service_id, appt.date, appt.time)


@router.get("/{appt_id}", response_model=Appointment)
def get_appointment(appt_id: str, store: BookingStore = Depends(get_store)):
    return store.get_appointment(appt_id)


@router.post("/{appt_id}/approve", response_model=Appointment)
def approve_appointment(appt_id: str, store: BookingStore = Depends(get_store)):
    return store.approve(appt_id)


@router.post("/{appt_id}/cancel", response_model=CancelResponse)
async def cancel_appointment(
    appt_id: str,
    body: Optional[CancelRequest] = None,
    store: BookingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    body = body or CancelRequest()

    # status and debt are committed off the event loop, before the simulated charge suspends
    result = await run_in_threadpool(
        store.cancel, appt_id, reason=body.reason, cancelled_by=body.cancelled_by
    )

    charge = None
    if result.penalty_applied > 0:
        outcome = await payments.charge(
            result.penalty_applied,
            description=f"Cancellation penalty {appt_id}",
            threshold=settings.payment_threshold,
            latency_seconds=settings.payment_latency_seconds,
        )
        if not outcome.success:
            logger.warning("Penalty charge failed, debt stays recorded", extra={"appointment_id": appt_id})
        charge = ChargePublic(success=outcome.success, id=outcome.id, message=outcome.message)

    return {
        "appointment": result.appointment,
        "penalty": result.penalty_applied,
        "charged": bool(charge and charge.success),
        "charge": charge,
    }


@router.post("/sweep", response_model=SweepResponse)
def sweep_completions(store: BookingStore = Depends(get_store)):
    return {"completed": store.sweep_completions()}
