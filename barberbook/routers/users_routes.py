# barberbook/routers/users_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barberbook.auth import get_current_user, hash_password
from barberbook.db import get_session
from barberbook.logging_config import get_logger
from barberbook.models import User
from barberbook.schemas import UserCreate, UserPublic

logger = get_logger(__name__)

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    email = user.email.strip().lower()
    existing = session.exec(
        select(User).where(User.email == email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    db_user = User(
        email=email,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id

    logger.info("user_registered", user_id=db_user.id, role=db_user.role)
    return {
        "id": db_user.id,
        "email": db_user.email,
        "role": db_user.role,
    }
