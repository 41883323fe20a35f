# barberbook/booking.py
"""Booking commit and cancel.

``commit_booking`` never trusts what the client computed: it re-checks the
chair, the opening hours and the ledger at write time. The final conflict
check and the insert run in one transaction that holds the chair lock
(``ledger.lock_chair``), so two overlapping commits on one chair cannot
both succeed even on a horizontally scaled API tier.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from barberbook import config, ledger
from barberbook.core import opening_window, parse_business_hours, schedule_for, to_wall_clock
from barberbook.errors import (
    AppointmentNotFound,
    Forbidden,
    InvalidRequest,
    SlotConflict,
    StorageUnavailable,
    Unauthorized,
)
from barberbook.logging_config import get_logger
from barberbook.models import Appointment, Chair, Shop
from barberbook.schemas import AppointmentStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class CustomerIdentity:
    name: Optional[str]
    phone: Optional[str]
    user_id: Optional[int] = None  # None for anonymous customers


@dataclass(frozen=True)
class BookingRequest:
    shop_id: Optional[int]
    chair_id: Optional[int]
    customer: CustomerIdentity
    start: Optional[datetime]
    end: Optional[datetime]
    idempotency_key: Optional[str] = None


def _blank(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def validate_request(request: BookingRequest) -> BookingRequest:
    """Field checks. Returns the request with trimmed names and wall-clock times."""
    missing = [
        name
        for name, value in (
            ("shop_id", request.shop_id),
            ("chair_id", request.chair_id),
            ("customer_name", request.customer.name),
            ("customer_phone", request.customer.phone),
            ("start", request.start),
            ("end", request.end),
        )
        if _blank(value)
    ]
    if missing:
        raise InvalidRequest(f"Missing required booking data: {', '.join(missing)}")

    start = to_wall_clock(request.start)
    end = to_wall_clock(request.end)
    if start >= end:
        raise InvalidRequest("start must be earlier than end")

    customer = CustomerIdentity(
        name=request.customer.name.strip(),
        phone=request.customer.phone.strip(),
        user_id=request.customer.user_id,
    )
    return BookingRequest(
        shop_id=request.shop_id,
        chair_id=request.chair_id,
        customer=customer,
        start=start,
        end=end,
        idempotency_key=request.idempotency_key or None,
    )


def _check_bookable(session: Session, request: BookingRequest, now: datetime):
    shop = session.get(Shop, request.shop_id)
    if shop is None:
        raise InvalidRequest("Shop not found")

    chair = session.get(Chair, request.chair_id)
    if chair is None or chair.shop_id != shop.id or not chair.is_active:
        raise InvalidRequest("Chair is not available for booking")

    if request.start.date() != request.end.date():
        raise InvalidRequest("Appointment must start and end on the same day")

    schedule = schedule_for(request.start.date(), parse_business_hours(shop.business_hours))
    if schedule is None:
        raise InvalidRequest("Shop is closed that day")
    work_start, work_end = opening_window(request.start.date(), schedule)
    if request.start < work_start or request.end > work_end:
        raise InvalidRequest("Appointment must be within business hours")

    if request.start <= now:
        raise InvalidRequest("Cannot book an appointment in the past")


def _replay(session: Session, request: BookingRequest) -> Optional[int]:
    """Id of an earlier commit with the same idempotency key, if any."""
    if request.idempotency_key is None:
        return None
    previous = ledger.find_by_idempotency_key(session, request.idempotency_key)
    if previous is None:
        return None
    if (
        previous.shop_id != request.shop_id
        or previous.chair_id != request.chair_id
        or previous.starts_at != request.start
        or previous.ends_at != request.end
    ):
        raise InvalidRequest("Idempotency key was already used for a different booking")
    # a key is spent once its booking is cancelled; rebooking needs a new key
    if previous.status != AppointmentStatus.booked.value:
        raise InvalidRequest("Idempotency key belongs to a cancelled booking")
    return previous.id


def commit_booking(
    session: Session,
    request: BookingRequest,
    now: Optional[datetime] = None,
) -> int:
    """
    Record a booked appointment, or refuse.

    Args:
        session: open database session; the commit happens on it
        request: what to book
        now: current wall-clock time, defaults to datetime.now()

    Returns:
        The new appointment id (or the earlier one, for a replayed idempotency key)

    Raises:
        InvalidRequest: missing data, bad interval, closed chair/shop, past start
        Unauthorized: anonymous customer while accounts are required
        SlotConflict: the interval overlaps a booked appointment on the chair
        StorageUnavailable: the database failed; nothing was committed
    """
    request = validate_request(request)
    if config.REQUIRE_CUSTOMER_ACCOUNT and request.customer.user_id is None:
        raise Unauthorized("Sign in to book an appointment")
    now = now if now is not None else datetime.now()

    log = logger.bind(
        shop_id=request.shop_id,
        chair_id=request.chair_id,
        start=request.start.isoformat(),
        end=request.end.isoformat(),
    )

    try:
        replayed = _replay(session, request)
        if replayed is not None:
            log.info("booking_replayed", appointment_id=replayed)
            return replayed

        _check_bookable(session, request, now)

        # Advisory; the authoritative check runs under the chair lock below
        if ledger.find_conflict(session, request.chair_id, request.start, request.end):
            log.info("booking_conflict", stage="precheck")
            raise SlotConflict()
        session.rollback()  # end the read transaction before taking the write lock

        if not ledger.lock_chair(session, request.chair_id):
            session.rollback()
            raise InvalidRequest("Chair is not available for booking")
        if ledger.find_conflict(session, request.chair_id, request.start, request.end):
            session.rollback()
            log.info("booking_conflict", stage="locked")
            raise SlotConflict()

        db_appt = Appointment(
            shop_id=request.shop_id,
            chair_id=request.chair_id,
            customer_name=request.customer.name,
            customer_phone=request.customer.phone,
            customer_user_id=request.customer.user_id,
            starts_at=request.start,
            ends_at=request.end,
            status=AppointmentStatus.booked.value,
            idempotency_key=request.idempotency_key,
        )
        session.add(db_appt)
        session.commit()
    except IntegrityError:
        session.rollback()
        log.info("booking_conflict", stage="constraint")
        raise SlotConflict()
    except SQLAlchemyError:
        session.rollback()
        log.exception("booking_storage_error")
        raise StorageUnavailable()

    session.refresh(db_appt)  # fills db_appt.id
    log.info("booking_committed", appointment_id=db_appt.id)
    return db_appt.id


def cancel_appointment(session: Session, appointment_id: int, actor_id: int) -> Appointment:
    """
    booked -> cancelled. Cancelling twice is a no-op.

    Only the shop owner or the registered customer who booked may cancel.
    """
    target = session.get(Appointment, appointment_id)
    if target is None:
        raise AppointmentNotFound()

    shop = session.get(Shop, target.shop_id)
    is_owner = shop is not None and shop.owner_id == actor_id
    if not is_owner and target.customer_user_id != actor_id:
        raise Forbidden("Not allowed to cancel this appointment")

    if target.status == AppointmentStatus.cancelled.value:
        return target

    target.status = AppointmentStatus.cancelled.value
    session.add(target)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("cancel_storage_error", appointment_id=appointment_id)
        raise StorageUnavailable()
    session.refresh(target)

    logger.info("appointment_cancelled", appointment_id=appointment_id, actor_id=actor_id)
    return target
