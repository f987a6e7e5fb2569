from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field


# -----------------------
# Auth
# -----------------------
class RegisterIn(BaseModel):
    # Presence is checked in the handler so the error text matches the other 400s.
    email: str = ""
    password: str = Field(default="", max_length=72)
    role: str = ""
    name: str = ""
    phone: str = ""


class LoginIn(BaseModel):
    email: str = ""
    password: str = ""


class ProfileUpdateIn(BaseModel):
    """Partial update: None means "keep the stored value"."""

    name: str | None = None
    phone: str | None = None
    profile_photo: str | None = None


# -----------------------
# Bikes
# -----------------------
class BikeCreateIn(BaseModel):
    make: str = ""
    model: str = ""
    year: int | None = None
    vin: str | None = Field(default=None, max_length=17)
    mileage: int | None = Field(default=None, ge=0)
    color: str | None = None
    engine: str | None = None
    power: str | None = None
    image: str | None = None


class BikeUpdateIn(BaseModel):
    make: str | None = None
    model: str | None = None
    year: int | None = None
    vin: str | None = Field(default=None, max_length=17)
    mileage: int | None = Field(default=None, ge=0)
    color: str | None = None
    engine: str | None = None
    power: str | None = None
    status: str | None = None
    image: str | None = None


class BikePhotoIn(BaseModel):
    photo_url: str = ""
    is_primary: bool = False


class MaintenanceIn(BaseModel):
    title: str = ""
    type: str | None = None
    due_mileage: int | None = None
    due_date: dt.date | None = None
    notes: str | None = None


# -----------------------
# Rides
# -----------------------
class RideCreateIn(BaseModel):
    title: str = ""
    description: str | None = None
    date: dt.date | None = None
    time: dt.time | None = None
    meeting_point: str | None = None
    difficulty: str | None = None
    max_riders: int | None = Field(default=None, ge=1)
    image: str | None = None


class RsvpIn(BaseModel):
    status: str | None = None  # going | not_going (default going)


# -----------------------
# Posts / social
# -----------------------
class PostCreateIn(BaseModel):
    content: str = ""
    image: str | None = None


class CommentIn(BaseModel):
    content: str = ""


class StoryCreateIn(BaseModel):
    media_url: str = ""
    caption: str | None = None


# -----------------------
# Shop
# -----------------------
class ShopProfileUpdateIn(BaseModel):
    business_name: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    hours: str | None = None
    description: str | None = None
    logo: str | None = None
    visible: bool | None = None
    accepting_appointments: bool | None = None


class PromotionCreateIn(BaseModel):
    title: str = ""
    description: str | None = None
    discount: str | None = None
    valid_until: dt.date | None = None
    image: str | None = None


class PromotionUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    discount: str | None = None
    valid_until: dt.date | None = None
    active: bool | None = None
    image: str | None = None


class StoreItemCreateIn(BaseModel):
    name: str = ""
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    category: str | None = None
    image: str | None = None


class StoreItemUpdateIn(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    category: str | None = None
    image: str | None = None


class AppointmentCreateIn(BaseModel):
    # Ignored for dealers (they always book into their own shop).
    shop_id: int | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    bike_info: str | None = None
    service_type: str = ""
    date: dt.date | None = None
    time: dt.time | None = None
    notes: str | None = None


class AppointmentUpdateIn(BaseModel):
    status: str | None = None
    notes: str | None = None
    date: dt.date | None = None
    time: dt.time | None = None


class InventoryCreateIn(BaseModel):
    make: str = ""
    model: str = ""
    year: int | None = None
    vin: str | None = Field(default=None, max_length=17)
    mileage: int | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)
    status: str | None = None
    image: str | None = None


class InventoryUpdateIn(BaseModel):
    make: str | None = None
    model: str | None = None
    year: int | None = None
    vin: str | None = Field(default=None, max_length=17)
    mileage: int | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)
    status: str | None = None
    image: str | None = None
