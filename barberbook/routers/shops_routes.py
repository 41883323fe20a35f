# barberbook/routers/shops_routes.py

from datetime import datetime, timedelta, date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barberbook.auth import get_current_user
from barberbook.config import BOOKING_WINDOW_DAYS
from barberbook.core import (
    compile_preset,
    compute_available_slots,
    dump_business_hours,
    parse_business_hours,
    schedule_for,
)
from barberbook.db import get_session
from barberbook.deps import get_current_shop, require_role
from barberbook.errors import InvalidRequest
from barberbook.ledger import booked_intervals, get_shop_schedule
from barberbook.logging_config import get_logger
from barberbook.models import Chair, Shop
from barberbook.schemas import (
    AvailabilityResponse,
    BusinessHoursPreset,
    ChairCreate,
    ChairPublic,
    ChairUpdate,
    HoursUpdate,
    ShopCreate,
    ShopPublic,
    ShopScheduleResponse,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/shops",
    tags=["shops"],
)


def _resolve_hours(value) -> dict:
    # presets only exist at the edge; storage always gets the weekday map
    if isinstance(value, BusinessHoursPreset):
        try:
            return compile_preset(value)
        except ValueError as e:
            raise InvalidRequest(str(e))
    return dict(value)


def _shop_public(shop: Shop) -> dict:
    return {
        "id": shop.id,
        "owner_id": shop.owner_id,
        "name": shop.name,
        "business_hours": parse_business_hours(shop.business_hours),
        "slot_minutes": shop.slot_minutes,
    }


@router.post("", response_model=ShopPublic, status_code=201)
def create_shop(
    shop: ShopCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "owner")  # only owners can create

    existing = session.exec(
        select(Shop).where(Shop.owner_id == current_user["id"])
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Shop already exists for this owner")

    db_shop = Shop(
        owner_id=current_user["id"],
        name=shop.name.strip(),
        business_hours=dump_business_hours(_resolve_hours(shop.business_hours)),
        slot_minutes=shop.slot_minutes,
    )
    session.add(db_shop)
    session.commit()
    session.refresh(db_shop)

    logger.info("shop_created", shop_id=db_shop.id, owner_id=db_shop.owner_id)
    return _shop_public(db_shop)


@router.get("/me", response_model=ShopPublic)
def get_my_shop(shop: Shop = Depends(get_current_shop)):
    return _shop_public(shop)


@router.put("/me/hours", response_model=ShopPublic)
def update_hours(
    hours: HoursUpdate,
    session: Session = Depends(get_session),
    shop: Shop = Depends(get_current_shop),
):
    # reassign, JSON columns don't track in-place changes
    shop.business_hours = dump_business_hours(_resolve_hours(hours.business_hours))
    session.add(shop)
    session.commit()
    session.refresh(shop)

    logger.info("business_hours_updated", shop_id=shop.id)
    return _shop_public(shop)


@router.get("/me/chairs", response_model=List[ChairPublic])
def list_chairs(
    session: Session = Depends(get_session),
    shop: Shop = Depends(get_current_shop),
):
    return session.exec(
        select(Chair)
        .where(Chair.shop_id == shop.id)
        .order_by(Chair.created_at, Chair.id)
    ).all()


@router.post("/me/chairs", response_model=ChairPublic, status_code=201)
def add_chair(
    chair: ChairCreate,
    session: Session = Depends(get_session),
    shop: Shop = Depends(get_current_shop),
):
    db_chair = Chair(
        shop_id=shop.id,
        name=chair.name.strip(),
        image_url=chair.image_url,
    )
    session.add(db_chair)
    session.commit()
    session.refresh(db_chair)

    logger.info("chair_added", shop_id=shop.id, chair_id=db_chair.id)
    return db_chair


@router.patch("/me/chairs/{chair_id}", response_model=ChairPublic)
def update_chair(
    chair_id: int,
    changes: ChairUpdate,
    session: Session = Depends(get_session),
    shop: Shop = Depends(get_current_shop),
):
    db_chair = session.get(Chair, chair_id)
    if db_chair is None or db_chair.shop_id != shop.id:
        raise HTTPException(status_code=404, detail="Chair not found")

    # Deactivating keeps existing appointments; the chair just stops being offered
    for key, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_chair, key, value)

    session.add(db_chair)
    session.commit()
    session.refresh(db_chair)
    return db_chair


@router.get("/{shop_id}/schedule", response_model=ShopScheduleResponse)
def shop_schedule(
    shop_id: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
):
    start = start or date.today()
    end = end or start + timedelta(days=BOOKING_WINDOW_DAYS)
    if end <= start:
        raise HTTPException(status_code=422, detail="end must be after start")

    range_start = datetime.combine(start, datetime.min.time())
    range_end = datetime.combine(end, datetime.min.time())
    schedule = get_shop_schedule(session, shop_id, range_start, range_end)

    return {
        "shop_id": schedule.shop_id,
        "range_start": range_start,
        "range_end": range_end,
        "business_hours": schedule.business_hours,
        "slot_minutes": schedule.slot_minutes,
        "chairs": schedule.chairs,
        "booked_intervals": [
            {"chair_id": b.chair_id, "start": b.start, "end": b.end}
            for b in schedule.booked_intervals
        ],
    }


@router.get("/{shop_id}/chairs/{chair_id}/availability", response_model=AvailabilityResponse)
def chair_availability(
    shop_id: int,
    chair_id: int,
    date: date,
    session: Session = Depends(get_session),
):
    shop = session.get(Shop, shop_id)
    if shop is None:
        raise HTTPException(status_code=404, detail="Shop not found")
    chair = session.get(Chair, chair_id)
    if chair is None or chair.shop_id != shop_id or not chair.is_active:
        raise HTTPException(status_code=404, detail="Chair not found")

    business_hours = parse_business_hours(shop.business_hours)
    day_start = datetime.combine(date, datetime.min.time())
    intervals = booked_intervals(session, chair_id, day_start, day_start + timedelta(days=1))

    slots = compute_available_slots(
        date,
        chair_id,
        business_hours,
        intervals,
        shop.slot_minutes,
        datetime.now(),
    )
    return {
        "shop_id": shop_id,
        "chair_id": chair_id,
        "date": date,
        "closed": schedule_for(date, business_hours) is None,
        "available_starts": slots,
    }
