from __future__ import annotations

import datetime as dt
from typing import Any

from fastapi import APIRouter
from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from motoclub.access import Identity
from motoclub.deps import CurrentIdentity, DbSession
from motoclub.models import Ride, RideRSVP, User
from motoclub.policies import rides
from motoclub.schemas import RideCreateIn, RsvpIn
from motoclub.serializers import row_out, user_brief


router = APIRouter()


def _going_counts(db: Session, ride_ids: list[int]) -> dict[int, int]:
    if not ride_ids:
        return {}
    stmt = (
        select(RideRSVP.ride_id, func.count(RideRSVP.id))
        .where(RideRSVP.ride_id.in_(ride_ids) & (RideRSVP.status == "going"))
        .group_by(RideRSVP.ride_id)
    )
    return {int(rid): int(n) for rid, n in db.execute(stmt).all()}


def _going_users(db: Session, ride_id: int, limit: int | None = None) -> list[dict[str, Any]]:
    stmt = (
        select(User)
        .join(RideRSVP, RideRSVP.user_id == User.id)
        .where((RideRSVP.ride_id == ride_id) & (RideRSVP.status == "going"))
        .order_by(RideRSVP.created_at.asc(), RideRSVP.id.asc())
    )
    if limit:
        stmt = stmt.limit(limit)
    return [user_brief(u) for u in db.execute(stmt).scalars().all()]


def _ride_out(
    db: Session,
    ride: Ride,
    *,
    identity: Identity | None = None,
    counts: dict[int, int] | None = None,
    rsvp_user_limit: int | None = None,
    with_creator: bool = True,
) -> dict[str, Any]:
    out = row_out(ride)
    out["rsvp_count"] = counts.get(ride.id, 0) if counts is not None else rides.going_count(db, ride.id)
    if with_creator:
        creator = ride.creator
        out["creator_name"] = creator.name if creator else None
        out["creator_photo"] = creator.profile_photo if creator else None
    if identity is not None:
        out["rsvp_users"] = _going_users(db, ride.id, limit=rsvp_user_limit)
        out["user_rsvp"] = bool(
            db.execute(
                select(exists().where((RideRSVP.ride_id == ride.id) & (RideRSVP.user_id == identity.account_id)))
            ).scalar()
        )
    return out


@router.get("")
def list_rides(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = select(Ride).where(Ride.date >= dt.date.today()).order_by(Ride.date.asc(), Ride.time.asc(), Ride.id.asc())
    items = list(db.execute(stmt).scalars().all())
    counts = _going_counts(db, [r.id for r in items])
    return {"rides": [_ride_out(db, r, identity=identity, counts=counts, rsvp_user_limit=5) for r in items]}


@router.get("/my")
def my_rides(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = select(Ride).where(Ride.creator_id == identity.account_id).order_by(Ride.date.desc(), Ride.id.desc())
    items = list(db.execute(stmt).scalars().all())
    counts = _going_counts(db, [r.id for r in items])
    return {"rides": [_ride_out(db, r, counts=counts, with_creator=False) for r in items]}


@router.get("/attending")
def attending_rides(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    stmt = (
        select(Ride)
        .join(RideRSVP, RideRSVP.ride_id == Ride.id)
        .where((RideRSVP.user_id == identity.account_id) & (RideRSVP.status == "going"))
        .order_by(Ride.date.asc(), Ride.id.asc())
    )
    items = list(db.execute(stmt).scalars().all())
    counts = _going_counts(db, [r.id for r in items])
    return {"rides": [_ride_out(db, r, counts=counts) for r in items]}


@router.get("/{ride_id:int}")
def get_ride(ride_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    ride = rides.get_ride(db, ride_id)
    return {"ride": _ride_out(db, ride, identity=identity)}


@router.post("", status_code=201)
def create_ride(data: RideCreateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    ride = rides.create_ride(db, identity, data.model_dump())
    return {"ride": row_out(ride)}


@router.post("/{ride_id:int}/rsvp")
def rsvp(ride_id: int, identity: CurrentIdentity, db: DbSession, data: RsvpIn | None = None) -> dict[str, Any]:
    row, count = rides.rsvp(db, identity, ride_id, (data.status if data else None))
    return {"rsvp": row_out(row), "rsvp_count": count}


@router.delete("/{ride_id:int}/rsvp")
def cancel_rsvp(ride_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    rides.cancel_rsvp(db, identity, ride_id)
    return {"message": "RSVP cancelled", "rsvp_count": rides.going_count(db, int(ride_id))}


@router.delete("/{ride_id:int}")
def delete_ride(ride_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    rides.delete_ride(db, identity, ride_id)
    return {"message": "Ride deleted successfully"}
