# barberbook/models.py

from typing import Optional
from datetime import datetime

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # owner or customer


class Shop(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="user.id", index=True, unique=True)
    name: str
    business_hours: dict = Field(default_factory=dict, sa_column=Column(JSON))
    slot_minutes: int = 45


class Chair(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    shop_id: int = Field(foreign_key="shop.id", index=True)
    name: str
    image_url: Optional[str] = None
    is_active: bool = True
    # bumped by every booking commit; the UPDATE is what serializes writers per chair
    lock_version: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class Appointment(SQLModel, table=True):
    __table_args__ = (
        Index(
            "uq_chair_start_booked",
            "chair_id",
            "starts_at",
            unique=True,
            sqlite_where=text("status = 'booked'"),
            postgresql_where=text("status = 'booked'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    shop_id: int = Field(foreign_key="shop.id", index=True)
    chair_id: int = Field(foreign_key="chair.id", index=True)
    customer_name: str
    customer_phone: str
    customer_user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    starts_at: datetime = Field(index=True)
    ends_at: datetime
    status: str = "booked"
    idempotency_key: Optional[str] = Field(default=None, unique=True)
    created_at: datetime = Field(default_factory=datetime.now)
