# barberbook/routers/appointments_routes.py

from datetime import datetime, timedelta, date
from typing import Optional, List

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlmodel import Session, select

from barberbook.auth import get_current_user, get_optional_user
from barberbook.booking import BookingRequest, CustomerIdentity, cancel_appointment, commit_booking
from barberbook.db import get_session
from barberbook.deps import get_current_shop, require_role
from barberbook.models import Appointment, Shop
from barberbook.schemas import AppointmentCreate, AppointmentPublic

router = APIRouter(
    tags=["appointments"],
)

STATUS_FILTERS = ("booked", "cancelled", "all")


@router.post("/shops/{shop_id}/appointments", response_model=AppointmentPublic, status_code=201)
def book_appointment(
    shop_id: int,
    appt: AppointmentCreate,
    idempotency_key: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
    current_user: Optional[dict] = Depends(get_optional_user),
):
    ends_at = appt.ends_at
    if ends_at is None:
        shop = session.get(Shop, shop_id)
        if shop is None:
            raise HTTPException(status_code=404, detail="Shop not found")
        ends_at = appt.starts_at + timedelta(minutes=shop.slot_minutes)

    request = BookingRequest(
        shop_id=shop_id,
        chair_id=appt.chair_id,
        customer=CustomerIdentity(
            name=appt.customer_name,
            phone=appt.customer_phone,
            user_id=current_user["id"] if current_user else None,
        ),
        start=appt.starts_at,
        end=ends_at,
        idempotency_key=idempotency_key,
    )
    appointment_id = commit_booking(session, request)
    return session.get(Appointment, appointment_id)


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return cancel_appointment(session, appt_id, current_user["id"])


@router.get("/shops/me/appointments", response_model=List[AppointmentPublic])
def list_shop_appointments(
    status: Optional[str] = "booked",
    on_date: Optional[date] = None,
    chair_id: Optional[int] = None,
    session: Session = Depends(get_session),
    shop: Shop = Depends(get_current_shop),
):
    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be 'booked', 'cancelled', or 'all'")

    stmt = select(Appointment).where(Appointment.shop_id == shop.id)

    if on_date is not None:
        day_start_dt = datetime.combine(on_date, datetime.min.time())
        day_end_dt = day_start_dt + timedelta(days=1)
        stmt = stmt.where(Appointment.starts_at >= day_start_dt).where(Appointment.starts_at < day_end_dt)

    if chair_id is not None:
        stmt = stmt.where(Appointment.chair_id == chair_id)

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    return session.exec(stmt.order_by(Appointment.starts_at)).all()


@router.get("/customers/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    status: Optional[str] = "booked",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "customer")

    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be 'booked', 'cancelled', or 'all'")

    stmt = select(Appointment).where(Appointment.customer_user_id == current_user["id"])

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    return session.exec(stmt.order_by(Appointment.starts_at)).all()
