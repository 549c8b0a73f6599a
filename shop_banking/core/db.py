from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from sqlmodel import Session, SQLModel, create_engine, select

from ..models import db as _db_models  # noqa: F401 - ensure models register with metadata
from ..models import UserRole
from .config import get_settings


logger = logging.getLogger(__name__)


def create_engine_for_url(database_url: str):
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, echo=False, connect_args=connect_args)


settings = get_settings()
engine = create_engine_for_url(settings.database_url)


def seed_admin(email: str, name: str) -> None:
    """Create the bootstrap administrator unless that email is already registered."""
    email = email.strip().lower()
    with Session(engine) as session:
        existing = session.exec(
            select(_db_models.User).where(_db_models.User.email == email)
        ).first()
        if existing is not None:
            return
        admin = _db_models.User(name=name, email=email, role=UserRole.ADMIN)
        session.add(admin)
        session.commit()
        logger.info("user.bootstrap_admin.created", extra={"user_id": str(admin.id)})


def init_db() -> None:
    SQLModel.metadata.create_all(engine)
    current = get_settings()
    if current.bootstrap_admin_email:
        seed_admin(current.bootstrap_admin_email, current.bootstrap_admin_name)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def set_engine(new_engine) -> None:
    global engine
    engine = new_engine
