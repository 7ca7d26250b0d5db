# bshop/db.py

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlmodel import Session, SQLModel, create_engine

from .models import Snapshot

logger = logging.getLogger(__name__)


def make_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # required for SQLite + FastAPI
    return create_engine(database_url, echo=False, connect_args=connect_args)


class SnapshotRepository:
    """Durable key-value storage for the whole store document."""

    def __init__(self, engine) -> None:
        self.engine = engine
        SQLModel.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SnapshotRepository":
        return cls(make_engine(database_url))

    def load(self, key: str) -> Optional[dict[str, Any]]:
        with Session(self.engine) as session:
            row = session.get(Snapshot, key)
            if row is None:
                return None
            return dict(row.payload)

    def save(self, key: str, payload: dict[str, Any]) -> None:
        with Session(self.engine) as session:
            row = session.get(Snapshot, key)
            if row is None:
                row = Snapshot(key=key, payload=payload)
            else:
                row.payload = payload
                row.updated_at = datetime.now(timezone.utc)
            session.add(row)
            session.commit()
        logger.debug("Snapshot saved", extra={"key": key})
