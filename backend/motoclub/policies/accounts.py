from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from motoclub.access import Identity, load_account
from motoclub.errors import Conflict, InvalidInput, Unauthenticated
from motoclub.models import (
    ROLES,
    Appointment,
    Bike,
    BikePhoto,
    Follow,
    InventoryItem,
    MaintenanceRecord,
    MediaUpload,
    Post,
    PostComment,
    Promotion,
    Ride,
    RideRSVP,
    ShopProfile,
    StoreItem,
    Story,
    User,
)
from motoclub.security import hash_password, verify_password


logger = logging.getLogger(__name__)


def register(db: Session, *, email: str, password: str, role: str, name: str = "", phone: str = "") -> User:
    """
    Create an account. Dealers get their (single) shop profile in the same
    transaction so a dealer never exists without one.
    """
    email = (email or "").strip().lower()
    role = (role or "").strip().lower()
    if not email or not password or not role:
        raise InvalidInput("Email, password, and role are required")
    if "@" not in email:
        raise InvalidInput("Invalid email")
    if role not in ROLES:
        raise InvalidInput("Role must be rider or dealer")
    # bcrypt counts bytes, not characters.
    if len(password.encode("utf-8")) > 72:
        raise InvalidInput("Password must be at most 72 bytes")

    exists = db.execute(select(User.id).where(User.email == email)).first()
    if exists:
        raise Conflict("Email already registered")

    name = (name or "").strip()
    user = User(
        email=email,
        password_hash=hash_password(password),
        role=role,
        name=name,
        phone=(phone or "").strip(),
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Concurrent double-submit slipped past the pre-check.
        db.rollback()
        raise Conflict("Email already registered")

    if role == "dealer":
        db.add(ShopProfile(user_id=user.id, business_name=name or "My Shop"))
        db.flush()
    logger.info("Registered account user_id=%s role=%s", user.id, role)
    return user


def authenticate(db: Session, *, email: str, password: str) -> User:
    email = (email or "").strip().lower()
    if not email or not password:
        raise InvalidInput("Email and password are required")
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid email or password")
    return user


def update_profile(db: Session, identity: Identity, fields: dict[str, Any]) -> User:
    user = load_account(db, identity)
    for key in ("name", "phone", "profile_photo"):
        if fields.get(key) is not None:
            setattr(user, key, fields[key].strip() if isinstance(fields[key], str) else fields[key])
    user.updated_at = dt.datetime.now(dt.timezone.utc)
    db.add(user)
    db.flush()
    return user


def delete_account(db: Session, identity: Identity) -> list[MediaUpload]:
    """
    Remove the account and everything it owns. Returns the media records that
    were attached to it so the caller can clean up at the media host.
    """
    uid = identity.account_id
    load_account(db, identity)

    bike_ids = select(Bike.id).where(Bike.user_id == uid)
    db.execute(delete(BikePhoto).where(BikePhoto.bike_id.in_(bike_ids)))
    db.execute(delete(MaintenanceRecord).where(MaintenanceRecord.bike_id.in_(bike_ids)))
    db.execute(delete(Bike).where(Bike.user_id == uid))

    ride_ids = select(Ride.id).where(Ride.creator_id == uid)
    db.execute(delete(RideRSVP).where(or_(RideRSVP.user_id == uid, RideRSVP.ride_id.in_(ride_ids))))
    db.execute(delete(Ride).where(Ride.creator_id == uid))

    post_ids = select(Post.id).where(Post.user_id == uid)
    db.execute(delete(PostComment).where(or_(PostComment.user_id == uid, PostComment.post_id.in_(post_ids))))
    db.execute(delete(Post).where(Post.user_id == uid))

    db.execute(delete(Story).where(Story.user_id == uid))
    db.execute(delete(Follow).where(or_(Follow.follower_id == uid, Follow.followee_id == uid)))

    shop_ids = select(ShopProfile.id).where(ShopProfile.user_id == uid)
    for model in (Promotion, StoreItem, Appointment, InventoryItem):
        db.execute(delete(model).where(model.shop_id.in_(shop_ids)))
    db.execute(delete(ShopProfile).where(ShopProfile.user_id == uid))
    # Bookings at other shops stay on their books without the account reference.
    db.execute(update(Appointment).where(Appointment.customer_id == uid).values(customer_id=None))

    media = list(db.execute(select(MediaUpload).where(MediaUpload.user_id == uid)).scalars().all())
    db.execute(delete(MediaUpload).where(MediaUpload.user_id == uid))

    db.execute(delete(User).where(User.id == uid))
    db.flush()
    logger.info("Deleted account user_id=%s", uid)
    return media
