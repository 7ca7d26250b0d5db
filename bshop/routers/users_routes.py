# bshop/routers/users_routes.py

from fastapi import APIRouter, Depends

from bshop.deps import get_store
from bshop.models import User
from bshop.schemas import LoginRequest, SessionPublic, UserCreate
from bshop.store import BookingStore

router = APIRouter(
    prefix="/api",
    tags=["users"],
)


@router.post("/users", status_code=201, response_model=User)
def create_user(user: UserCreate, store: BookingStore = Depends(get_store)):
    return store.register(user.name, user.email, user.role)


@router.get("/users/{user_id}", response_model=User)
def get_user(user_id: str, store: BookingStore = Depends(get_store)):
    # includes the accumulated cancellation debt
    return store.get_user(user_id)


@router.get("/session", response_model=SessionPublic)
def current_session(store: BookingStore = Depends(get_store)):
    user = store.current_user
    return {"current_user": user, "is_authenticated": user is not None}


@router.post("/session", response_model=SessionPublic)
def login(body: LoginRequest, store: BookingStore = Depends(get_store)):
    user = store.login(body.email)
    return {"current_user": user, "is_authenticated": True}


@router.delete("/session", response_model=SessionPublic)
def logout(store: BookingStore = Depends(get_store)):
    store.logout()
    return {"current_user": None, "is_authenticated": False}
