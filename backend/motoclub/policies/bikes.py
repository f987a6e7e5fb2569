from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from motoclub.access import Identity
from motoclub.errors import InvalidInput, NotFound
from motoclub.models import Bike, BikePhoto, MaintenanceRecord


# (title, type, due-mileage offset from the bike's starting mileage)
DEFAULT_REMINDERS: tuple[tuple[str, str, int], ...] = (
    ("Oil Change", "Oil", 3000),
    ("Chain Adjustment", "Chain", 500),
    ("Brake Inspection", "Brake", 5000),
    ("Tire Check", "Tire", 2000),
)

_UPDATABLE = ("make", "model", "year", "vin", "mileage", "color", "engine", "power", "status", "image")


def owned_bikes(db: Session, identity: Identity) -> list[Bike]:
    stmt = (
        select(Bike)
        .options(selectinload(Bike.photos), selectinload(Bike.maintenance))
        .where(Bike.user_id == identity.account_id)
        .order_by(Bike.created_at.desc(), Bike.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def owned_bike(db: Session, identity: Identity, bike_id: int) -> Bike:
    bike = db.execute(
        select(Bike).where((Bike.id == int(bike_id)) & (Bike.user_id == identity.account_id))
    ).scalar_one_or_none()
    if not bike:
        raise NotFound("Bike not found")
    return bike


def create_bike(db: Session, identity: Identity, fields: dict[str, Any]) -> Bike:
    make = (fields.get("make") or "").strip()
    model = (fields.get("model") or "").strip()
    if not make or not model:
        raise InvalidInput("Make and model are required")
    mileage = int(fields.get("mileage") or 0)

    bike = Bike(
        user_id=identity.account_id,
        make=make,
        model=model,
        year=fields.get("year"),
        vin=fields.get("vin"),
        mileage=mileage,
        color=fields.get("color"),
        engine=fields.get("engine"),
        power=fields.get("power"),
        image=fields.get("image"),
    )
    db.add(bike)
    db.flush()

    # Every new bike starts with the standard reminders, due relative to its current mileage.
    for title, kind, offset in DEFAULT_REMINDERS:
        db.add(MaintenanceRecord(bike_id=bike.id, title=title, type=kind, status="pending", due_mileage=mileage + offset))
    db.flush()
    db.refresh(bike)
    return bike


def update_bike(db: Session, identity: Identity, bike_id: int, fields: dict[str, Any]) -> Bike:
    bike = owned_bike(db, identity, bike_id)
    for key in _UPDATABLE:
        if fields.get(key) is not None:
            setattr(bike, key, fields[key])
    bike.updated_at = dt.datetime.now(dt.timezone.utc)
    db.add(bike)
    db.flush()
    return bike


def delete_bike(db: Session, identity: Identity, bike_id: int) -> None:
    bike = owned_bike(db, identity, bike_id)
    # Photos and maintenance records go with it (relationship cascade).
    db.delete(bike)
    db.flush()


def _mirror_image(bike: Bike, url: str | None) -> None:
    bike.image = url
    bike.updated_at = dt.datetime.now(dt.timezone.utc)


def _set_primary(db: Session, bike: Bike, photo: BikePhoto) -> None:
    db.execute(
        update(BikePhoto)
        .where((BikePhoto.bike_id == bike.id) & (BikePhoto.id != photo.id))
        .values(is_primary=False)
        .execution_options(synchronize_session="fetch")
    )
    photo.is_primary = True
    _mirror_image(bike, photo.photo_url)
    db.add_all([photo, bike])
    db.flush()


def add_photo(db: Session, identity: Identity, bike_id: int, *, photo_url: str, is_primary: bool = False) -> BikePhoto:
    bike = owned_bike(db, identity, bike_id)
    photo_url = (photo_url or "").strip()
    if not photo_url:
        raise InvalidInput("photo_url is required")

    photo = BikePhoto(bike_id=bike.id, photo_url=photo_url, is_primary=False)
    db.add(photo)
    db.flush()
    if is_primary:
        _set_primary(db, bike, photo)
    return photo


def _owned_photo(db: Session, bike: Bike, photo_id: int) -> BikePhoto:
    photo = db.execute(
        select(BikePhoto).where((BikePhoto.id == int(photo_id)) & (BikePhoto.bike_id == bike.id))
    ).scalar_one_or_none()
    if not photo:
        raise NotFound("Photo not found")
    return photo


def make_primary(db: Session, identity: Identity, bike_id: int, photo_id: int) -> BikePhoto:
    bike = owned_bike(db, identity, bike_id)
    photo = _owned_photo(db, bike, photo_id)
    _set_primary(db, bike, photo)
    return photo


def delete_photo(db: Session, identity: Identity, bike_id: int, photo_id: int) -> None:
    bike = owned_bike(db, identity, bike_id)
    photo = _owned_photo(db, bike, photo_id)
    if photo.is_primary:
        _mirror_image(bike, None)
        db.add(bike)
    db.delete(photo)
    db.flush()


def add_maintenance(db: Session, identity: Identity, bike_id: int, fields: dict[str, Any]) -> MaintenanceRecord:
    bike = owned_bike(db, identity, bike_id)
    title = (fields.get("title") or "").strip()
    if not title:
        raise InvalidInput("Title is required")
    rec = MaintenanceRecord(
        bike_id=bike.id,
        title=title,
        type=fields.get("type"),
        status="pending",
        due_mileage=fields.get("due_mileage"),
        due_date=fields.get("due_date"),
        notes=fields.get("notes"),
    )
    db.add(rec)
    db.flush()
    return rec


def complete_maintenance(db: Session, identity: Identity, record_id: int) -> MaintenanceRecord:
    """
    pending -> completed, stamping today's date. Completing an already
    completed record returns it unchanged (the first completion date stays).
    """
    rec = db.execute(
        select(MaintenanceRecord)
        .join(Bike, Bike.id == MaintenanceRecord.bike_id)
        .where((MaintenanceRecord.id == int(record_id)) & (Bike.user_id == identity.account_id))
    ).scalar_one_or_none()
    if not rec:
        raise NotFound("Maintenance record not found")
    if rec.status != "completed":
        rec.status = "completed"
        rec.completed_date = dt.date.today()
        db.add(rec)
        db.flush()
    return rec
