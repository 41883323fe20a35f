# barberbook/schemas.py

import re
from datetime import datetime, date
from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from barberbook.config import SLOT_MINUTES

HHMM = re.compile(r"([01]\d|2[0-3]):[0-5]\d")

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class DaySchedule(BaseModel):
    # open/close are only checked when the day is open; closed days keep
    # whatever the owner last typed in.
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    open: str = "09:00"
    close: str = "17:00"
    is_open: bool = Field(default=True, alias="isOpen")

    @model_validator(mode="after")
    def check_window(self):
        if not self.is_open:
            return self
        if not HHMM.fullmatch(self.open) or not HHMM.fullmatch(self.close):
            raise ValueError("open and close must be HH:MM")
        if self.open >= self.close:
            raise ValueError("open must be earlier than close")
        return self


BusinessHours = Dict[Weekday, DaySchedule]


class PresetKind(str, Enum):
    daily = "daily"
    weekend = "weekend"
    custom = "custom"


class HoursDetails(BaseModel):
    start: str
    end: str


class BusinessHoursPreset(BaseModel):
    type: PresetKind
    details: Optional[HoursDetails] = None
    days: Optional[BusinessHours] = None  # only for type=custom


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    owner = "owner"
    customer = "customer"


class AppointmentStatus(str, Enum):
    booked = "booked"
    cancelled = "cancelled"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole


class ShopCreate(BaseModel):
    name: str = Field(min_length=1)
    business_hours: Union[BusinessHoursPreset, BusinessHours]
    slot_minutes: int = Field(default=SLOT_MINUTES, gt=0, le=24 * 60)


class HoursUpdate(BaseModel):
    business_hours: Union[BusinessHoursPreset, BusinessHours]


class ShopPublic(BaseModel):
    id: int
    owner_id: int
    name: str
    business_hours: BusinessHours
    slot_minutes: int


class ChairCreate(BaseModel):
    name: str = Field(min_length=1)
    image_url: Optional[str] = None


class ChairUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class ChairPublic(BaseModel):
    id: int
    shop_id: int
    name: str
    image_url: Optional[str] = None
    is_active: bool


class BookedIntervalPublic(BaseModel):
    chair_id: int
    start: datetime
    end: datetime


class ShopScheduleResponse(BaseModel):
    shop_id: int
    range_start: datetime
    range_end: datetime
    business_hours: BusinessHours
    slot_minutes: int
    chairs: List[ChairPublic]
    booked_intervals: List[BookedIntervalPublic]


class AvailabilityResponse(BaseModel):
    shop_id: int
    chair_id: int
    date: date
    closed: bool
    available_starts: List[str]


class AppointmentCreate(BaseModel):
    chair_id: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None  # defaults to starts_at + the shop's slot length


class AppointmentPublic(BaseModel):
    id: int
    shop_id: int
    chair_id: int
    customer_name: str
    customer_phone: str
    starts_at: datetime
    ends_at: datetime
    status: AppointmentStatus
