# bshop/deps.py

from fastapi import Request

from .config import Settings
from .store import BookingStore


def get_store(request: Request) -> BookingStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
