from __future__ import annotations

import datetime as dt
from typing import Any

from fastapi import APIRouter, Query
from sqlalchemy import select

from motoclub.access import resolve_shop
from motoclub.deps import CurrentDealer, CurrentIdentity, DbSession
from motoclub.models import Appointment, InventoryItem, Promotion, ShopProfile, StoreItem
from motoclub.policies import shop
from motoclub.schemas import (
    AppointmentCreateIn,
    AppointmentUpdateIn,
    InventoryCreateIn,
    InventoryUpdateIn,
    PromotionCreateIn,
    PromotionUpdateIn,
    ShopProfileUpdateIn,
    StoreItemCreateIn,
    StoreItemUpdateIn,
)
from motoclub.serializers import row_out, shop_out, shop_public_out


router = APIRouter()


# -----------------------
# Shop profile
# -----------------------
@router.get("/profile")
def get_profile(identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"shop": shop_out(resolve_shop(db, identity))}


@router.put("/profile")
def update_profile(data: ShopProfileUpdateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"shop": shop_out(shop.update_profile(db, identity, data.model_dump(exclude_none=True)))}


@router.get("/directory")
def directory(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = select(ShopProfile).where(ShopProfile.visible.is_(True)).order_by(ShopProfile.business_name.asc())
    return {"shops": [shop_public_out(s) for s in db.execute(stmt).scalars().all()]}


# -----------------------
# Promotions
# -----------------------
@router.get("/promotions")
def list_promotions(identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"promotions": [row_out(p) for p in shop.list_rows(db, identity, Promotion)]}


@router.post("/promotions", status_code=201)
def create_promotion(data: PromotionCreateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"promotion": row_out(shop.create_row(db, identity, Promotion, data.model_dump()))}


@router.put("/promotions/{promotion_id:int}")
def update_promotion(promotion_id: int, data: PromotionUpdateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    row = shop.update_row(db, identity, Promotion, promotion_id, data.model_dump(exclude_none=True))
    return {"promotion": row_out(row)}


@router.delete("/promotions/{promotion_id:int}")
def delete_promotion(promotion_id: int, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    shop.delete_row(db, identity, Promotion, promotion_id)
    return {"message": "Promotion deleted"}


# -----------------------
# Store items
# -----------------------
@router.get("/items")
def list_items(identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"items": [row_out(i) for i in shop.list_rows(db, identity, StoreItem)]}


@router.post("/items", status_code=201)
def create_item(data: StoreItemCreateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"item": row_out(shop.create_row(db, identity, StoreItem, data.model_dump()))}


@router.put("/items/{item_id:int}")
def update_item(item_id: int, data: StoreItemUpdateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"item": row_out(shop.update_row(db, identity, StoreItem, item_id, data.model_dump(exclude_none=True)))}


@router.delete("/items/{item_id:int}")
def delete_item(item_id: int, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    shop.delete_row(db, identity, StoreItem, item_id)
    return {"message": "Item deleted"}


# -----------------------
# Appointments
# -----------------------
@router.get("/appointments")
def list_appointments(
    identity: CurrentDealer,
    db: DbSession,
    date: dt.date | None = Query(None),
) -> dict[str, Any]:
    own = resolve_shop(db, identity)
    stmt = select(Appointment).where(Appointment.shop_id == own.id)
    if date is not None:
        stmt = stmt.where(Appointment.date == date)
    stmt = stmt.order_by(Appointment.date.asc(), Appointment.time.asc(), Appointment.id.asc())
    return {"appointments": [row_out(a) for a in db.execute(stmt).scalars().all()]}


@router.get("/appointments/mine")
def my_appointments(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = (
        select(Appointment)
        .where(Appointment.customer_id == identity.account_id)
        .order_by(Appointment.date.asc(), Appointment.time.asc(), Appointment.id.asc())
    )
    return {"appointments": [row_out(a) for a in db.execute(stmt).scalars().all()]}


@router.post("/appointments", status_code=201)
def create_appointment(data: AppointmentCreateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    return {"appointment": row_out(shop.create_appointment(db, identity, data.model_dump()))}


@router.put("/appointments/{appointment_id:int}")
def update_appointment(
    appointment_id: int, data: AppointmentUpdateIn, identity: CurrentDealer, db: DbSession
) -> dict[str, Any]:
    row = shop.update_row(db, identity, Appointment, appointment_id, data.model_dump(exclude_none=True))
    return {"appointment": row_out(row)}


@router.delete("/appointments/{appointment_id:int}")
def delete_appointment(appointment_id: int, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    shop.delete_row(db, identity, Appointment, appointment_id)
    return {"message": "Appointment deleted"}


# -----------------------
# Inventory (bikes for sale)
# -----------------------
@router.get("/inventory")
def list_inventory(identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"inventory": [row_out(i) for i in shop.list_rows(db, identity, InventoryItem)]}


@router.post("/inventory", status_code=201)
def add_inventory(data: InventoryCreateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    return {"bike": row_out(shop.create_row(db, identity, InventoryItem, data.model_dump()))}


@router.put("/inventory/{item_id:int}")
def update_inventory(item_id: int, data: InventoryUpdateIn, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    row = shop.update_row(db, identity, InventoryItem, item_id, data.model_dump(exclude_none=True))
    return {"bike": row_out(row)}


@router.delete("/inventory/{item_id:int}")
def delete_inventory(item_id: int, identity: CurrentDealer, db: DbSession) -> dict[str, Any]:
    shop.delete_row(db, identity, InventoryItem, item_id)
    return {"message": "Inventory item deleted"}
