"""
Dealer storefront rules.

Every write resolves the caller's own shop first and then matches the target
row on (id, shop_id). A dealer guessing another shop's promotion/item/
appointment/inventory id gets the same 404 as for an id that does not exist.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from motoclub.access import Identity, resolve_shop
from motoclub.errors import InvalidInput, NotFound
from motoclub.models import Appointment, InventoryItem, Promotion, ShopProfile, StoreItem


ShopRow = TypeVar("ShopRow", Promotion, StoreItem, Appointment, InventoryItem)

# Per child table: label used in 404s, fields required on create, fields a dealer may change.
_CHILDREN: dict[type, dict[str, Any]] = {
    Promotion: {
        "label": "Promotion",
        "required": ("title",),
        "fields": ("title", "description", "discount", "valid_until", "active", "image"),
    },
    StoreItem: {
        "label": "Item",
        "required": ("name", "price"),
        "fields": ("name", "description", "price", "stock", "category", "image"),
    },
    Appointment: {
        "label": "Appointment",
        "required": ("service_type", "date", "time"),
        "fields": ("status", "notes", "date", "time"),
    },
    InventoryItem: {
        "label": "Inventory item",
        "required": ("make", "model"),
        "fields": ("make", "model", "year", "vin", "mileage", "price", "status", "image"),
    },
}

_PROFILE_FIELDS = (
    "business_name",
    "address",
    "phone",
    "email",
    "hours",
    "description",
    "logo",
    "visible",
    "accepting_appointments",
)


def update_profile(db: Session, identity: Identity, fields: dict[str, Any]) -> ShopProfile:
    shop = resolve_shop(db, identity)
    for key in _PROFILE_FIELDS:
        if fields.get(key) is not None:
            setattr(shop, key, fields[key])
    if not (shop.business_name or "").strip():
        raise InvalidInput("Business name is required")
    shop.updated_at = dt.datetime.now(dt.timezone.utc)
    db.add(shop)
    db.flush()
    return shop


def _missing(fields: dict[str, Any], required: tuple[str, ...]) -> list[str]:
    out = []
    for key in required:
        v = fields.get(key)
        if v is None or (isinstance(v, str) and not v.strip()):
            out.append(key)
    return out


def list_rows(db: Session, identity: Identity, model: type[ShopRow]) -> list[ShopRow]:
    shop = resolve_shop(db, identity)
    stmt = select(model).where(model.shop_id == shop.id).order_by(model.created_at.desc(), model.id.desc())
    return list(db.execute(stmt).scalars().all())


def scoped_row(db: Session, identity: Identity, model: type[ShopRow], row_id: int) -> ShopRow:
    shop = resolve_shop(db, identity)
    row = db.execute(
        select(model).where((model.id == int(row_id)) & (model.shop_id == shop.id))
    ).scalar_one_or_none()
    if not row:
        raise NotFound(f"{_CHILDREN[model]['label']} not found")
    return row


def create_row(db: Session, identity: Identity, model: type[ShopRow], fields: dict[str, Any]) -> ShopRow:
    rules = _CHILDREN[model]
    missing = _missing(fields, rules["required"])
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")
    shop = resolve_shop(db, identity)
    values = {k: fields[k] for k in rules["fields"] if fields.get(k) is not None}
    row = model(shop_id=shop.id, **values)
    db.add(row)
    db.flush()
    return row


def update_row(db: Session, identity: Identity, model: type[ShopRow], row_id: int, fields: dict[str, Any]) -> ShopRow:
    row = scoped_row(db, identity, model, row_id)
    for key in _CHILDREN[model]["fields"]:
        if fields.get(key) is not None:
            setattr(row, key, fields[key])
    db.add(row)
    db.flush()
    return row


def delete_row(db: Session, identity: Identity, model: type[ShopRow], row_id: int) -> None:
    row = scoped_row(db, identity, model, row_id)
    db.delete(row)
    db.flush()


def create_appointment(db: Session, identity: Identity, fields: dict[str, Any]) -> Appointment:
    """
    Dealers book walk-ins into their own shop (no customer account attached).
    Anyone else books into the shop named in the payload and is recorded as the customer.
    """
    missing = _missing(fields, _CHILDREN[Appointment]["required"])
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    if identity.is_dealer:
        shop = resolve_shop(db, identity)
        customer_id = None
    else:
        if not fields.get("shop_id"):
            raise InvalidInput("shop_id is required")
        shop = db.get(ShopProfile, int(fields["shop_id"]))
        if not shop or not shop.visible:
            raise NotFound("Shop not found")
        if not shop.accepting_appointments:
            raise InvalidInput("Shop is not accepting appointments")
        customer_id = identity.account_id

    appt = Appointment(
        shop_id=shop.id,
        customer_id=customer_id,
        customer_name=fields.get("customer_name"),
        customer_phone=fields.get("customer_phone"),
        bike_info=fields.get("bike_info"),
        service_type=fields["service_type"].strip(),
        date=fields["date"],
        time=fields["time"],
        notes=fields.get("notes"),
    )
    db.add(appt)
    db.flush()
    return appt
