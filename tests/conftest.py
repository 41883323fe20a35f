"""Shared test fixtures."""
from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from barberbook import models  # noqa: F401
from barberbook.db import get_session
from barberbook.main import app
from barberbook.models import Chair, Shop, User

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 13)

WEEKDAY_HOURS = {
    "monday": {"open": "09:00", "close": "17:00", "isOpen": True},
    "tuesday": {"open": "09:00", "close": "17:00", "isOpen": True},
    "wednesday": {"open": "09:00", "close": "17:00", "isOpen": True},
    "thursday": {"open": "09:00", "close": "17:00", "isOpen": True},
    "friday": {"open": "09:00", "close": "17:00", "isOpen": True},
    "saturday": {"open": "10:00", "close": "16:00", "isOpen": True},
    "sunday": {"open": "10:00", "close": "16:00", "isOpen": False},
}


def at(day: date, hhmm: str) -> datetime:
    hour, minute = map(int, hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def shop(session):
    """A shop with weekday hours, 60 minute slots and two active chairs."""
    owner = User(email="owner@example.com", password_hash="x", role="owner")
    session.add(owner)
    session.commit()
    session.refresh(owner)

    shop = Shop(owner_id=owner.id, name="Fade Factory", business_hours=WEEKDAY_HOURS, slot_minutes=60)
    session.add(shop)
    session.commit()
    session.refresh(shop)

    for name in ("Chair 1", "Chair 2"):
        session.add(Chair(shop_id=shop.id, name=name))
    session.commit()
    return shop


@pytest.fixture
def chairs(session, shop):
    return session.exec(
        select(Chair).where(Chair.shop_id == shop.id).order_by(Chair.id)
    ).all()


@pytest.fixture
def client(engine):
    """FastAPI test client bound to the in-memory database."""
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
