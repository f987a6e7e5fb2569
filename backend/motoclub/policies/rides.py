"""
Ride ownership and RSVP rules.

Known limitation: the capacity check (count going RSVPs, then upsert) is not
serialised. Two riders racing for the last slot can both be accepted, so a ride
may end up slightly over `max_riders`.
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from motoclub.access import Identity
from motoclub.db import dialect_insert
from motoclub.errors import CapacityExceeded, InvalidInput, NotFound
from motoclub.models import RSVP_STATUSES, Ride, RideRSVP


def going_count(db: Session, ride_id: int) -> int:
    stmt = select(func.count(RideRSVP.id)).where((RideRSVP.ride_id == ride_id) & (RideRSVP.status == "going"))
    return int(db.execute(stmt).scalar_one() or 0)


def get_ride(db: Session, ride_id: int) -> Ride:
    ride = db.get(Ride, int(ride_id))
    if not ride:
        raise NotFound("Ride not found")
    return ride


def create_ride(db: Session, identity: Identity, fields: dict[str, Any]) -> Ride:
    """The ride and its creator's "going" RSVP are written together or not at all."""
    title = (fields.get("title") or "").strip()
    if not title or not fields.get("date"):
        raise InvalidInput("Title and date are required")

    ride = Ride(
        creator_id=identity.account_id,
        title=title,
        description=fields.get("description"),
        date=fields["date"],
        time=fields.get("time"),
        meeting_point=fields.get("meeting_point"),
        difficulty=(fields.get("difficulty") or "Beginner").strip() or "Beginner",
        max_riders=fields.get("max_riders"),
        image=fields.get("image"),
    )
    db.add(ride)
    db.flush()
    db.add(RideRSVP(ride_id=ride.id, user_id=identity.account_id, status="going"))
    db.flush()
    return ride


def rsvp(db: Session, identity: Identity, ride_id: int, status: str | None = None) -> tuple[RideRSVP, int]:
    status = (status or "going").strip().lower()
    if status not in RSVP_STATUSES:
        raise InvalidInput("Status must be going or not_going")
    ride = get_ride(db, ride_id)

    if status == "going" and ride.max_riders:
        current = db.execute(
            select(RideRSVP.status).where((RideRSVP.ride_id == ride.id) & (RideRSVP.user_id == identity.account_id))
        ).scalar_one_or_none()
        # Riders already going keep their slot.
        if current != "going" and going_count(db, ride.id) >= int(ride.max_riders):
            raise CapacityExceeded("Ride is full")

    stmt = (
        dialect_insert(db, RideRSVP)
        .values(ride_id=ride.id, user_id=identity.account_id, status=status)
        .on_conflict_do_update(index_elements=["ride_id", "user_id"], set_={"status": status})
    )
    db.execute(stmt)

    row = db.execute(
        select(RideRSVP)
        .where((RideRSVP.ride_id == ride.id) & (RideRSVP.user_id == identity.account_id))
        .execution_options(populate_existing=True)
    ).scalar_one()
    return row, going_count(db, ride.id)


def cancel_rsvp(db: Session, identity: Identity, ride_id: int) -> None:
    """Hard delete of the caller's RSVP row. Unlike RSVPing "not_going", no history is kept."""
    ride = get_ride(db, ride_id)
    db.execute(delete(RideRSVP).where((RideRSVP.ride_id == ride.id) & (RideRSVP.user_id == identity.account_id)))


def delete_ride(db: Session, identity: Identity, ride_id: int) -> None:
    ride = db.execute(
        select(Ride).where((Ride.id == int(ride_id)) & (Ride.creator_id == identity.account_id))
    ).scalar_one_or_none()
    if not ride:
        raise NotFound("Ride not found")
    db.delete(ride)
    db.flush()
