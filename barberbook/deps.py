# barberbook/deps.py

from fastapi import Depends, HTTPException
from sqlmodel import Session, select

from barberbook.auth import get_current_user
from barberbook.db import get_session
from barberbook.models import Shop


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_current_shop(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
) -> Shop:
    """The shop owned by the signed-in owner."""
    require_role(current_user, "owner")
    shop = session.exec(
        select(Shop).where(Shop.owner_id == current_user["id"])
    ).first()
    if shop is None:
        raise HTTPException(status_code=404, detail="Shop not set up")
    return shop
