# barberbook/ledger.py
"""Reads and locks against the appointment ledger.

The ledger (the ``appointment`` table) is the only authority on what is
booked. Everything the booking flow needs to know about existing
appointments goes through the queries here.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from barberbook.core import BookedInterval, parse_business_hours
from barberbook.errors import ShopNotFound
from barberbook.models import Appointment, Chair, Shop
from barberbook.schemas import AppointmentStatus


@dataclass
class ShopSchedule:
    shop_id: int
    business_hours: dict
    slot_minutes: int
    chairs: List[Chair] = field(default_factory=list)
    booked_intervals: List[BookedInterval] = field(default_factory=list)


def _booked_overlapping(start: datetime, end: datetime):
    return (
        select(Appointment)
        .where(Appointment.status == AppointmentStatus.booked.value)
        .where(Appointment.starts_at < end)
        .where(Appointment.ends_at > start)
    )


def booked_intervals(
    session: Session,
    chair_id: int,
    range_start: datetime,
    range_end: datetime,
) -> List[BookedInterval]:
    rows = session.exec(
        _booked_overlapping(range_start, range_end)
        .where(Appointment.chair_id == chair_id)
        .order_by(Appointment.starts_at)
    ).all()
    return [BookedInterval(start=a.starts_at, end=a.ends_at, chair_id=a.chair_id) for a in rows]


def get_shop_schedule(
    session: Session,
    shop_id: int,
    range_start: datetime,
    range_end: datetime,
) -> ShopSchedule:
    """Business hours, active chairs and booked intervals of a shop for a window."""
    shop = session.get(Shop, shop_id)
    if shop is None:
        raise ShopNotFound()

    chairs = session.exec(
        select(Chair)
        .where(Chair.shop_id == shop_id)
        .where(Chair.is_active == True)  # noqa: E712
        .order_by(Chair.created_at, Chair.id)
    ).all()

    rows = session.exec(
        _booked_overlapping(range_start, range_end)
        .where(Appointment.shop_id == shop_id)
        .order_by(Appointment.starts_at)
    ).all()

    return ShopSchedule(
        shop_id=shop.id,
        business_hours=parse_business_hours(shop.business_hours),
        slot_minutes=shop.slot_minutes,
        chairs=list(chairs),
        booked_intervals=[
            BookedInterval(start=a.starts_at, end=a.ends_at, chair_id=a.chair_id) for a in rows
        ],
    )


def find_conflict(
    session: Session,
    chair_id: int,
    start: datetime,
    end: datetime,
) -> Optional[Appointment]:
    """First booked appointment on the chair overlapping [start, end), if any."""
    return session.exec(
        _booked_overlapping(start, end)
        .where(Appointment.chair_id == chair_id)
        .order_by(Appointment.starts_at)
    ).first()


def lock_chair(session: Session, chair_id: int) -> bool:
    """
    Take the write lock that serializes booking commits on a chair.

    Runs an UPDATE on the chair row inside the session's transaction. On
    PostgreSQL that row lock blocks other commits on the same chair until
    this transaction ends; on SQLite it takes the database write lock.
    Either way the conflict check that follows sees every booking committed
    before it.

    Returns:
        False if the chair row does not exist
    """
    result = session.exec(
        update(Chair)
        .where(Chair.id == chair_id)
        .values(lock_version=Chair.lock_version + 1)
    )
    return result.rowcount == 1


def find_by_idempotency_key(session: Session, key: str) -> Optional[Appointment]:
    return session.exec(
        select(Appointment).where(Appointment.idempotency_key == key)
    ).first()
