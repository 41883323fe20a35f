# barberbook/routers/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from barberbook.auth import verify_password, create_access_token
from barberbook.db import get_session
from barberbook.logging_config import get_logger
from barberbook.models import User
from barberbook.schemas import Token

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    # OAuth2 password flow calls it "username"; we log in by email
    email = form_data.username.strip().lower()

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None or not verify_password(form_data.password, user.password_hash):
        logger.info("login_failed", email=email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email, "role": user.role})
    return {"access_token": token, "token_type": "bearer"}
