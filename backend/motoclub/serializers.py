from __future__ import annotations

from typing import Any

from sqlalchemy import inspect as sa_inspect

from motoclub.models import Bike, BikePhoto, MaintenanceRecord, ShopProfile, User


def row_out(obj: Any, *, exclude: set[str] | frozenset[str] = frozenset()) -> dict[str, Any]:
    """Plain column values of an ORM row (relationships are left to the caller)."""
    return {c.key: getattr(obj, c.key) for c in sa_inspect(obj).mapper.column_attrs if c.key not in exclude}


def user_out(u: User) -> dict[str, Any]:
    return {
        "id": u.id,
        "email": u.email,
        "role": u.role,
        "name": u.name,
        "phone": u.phone,
        "profile_photo": u.profile_photo,
        "created_at": u.created_at,
    }


def user_brief(u: User | None) -> dict[str, Any] | None:
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "photo": u.profile_photo}


def shop_out(s: ShopProfile | None) -> dict[str, Any] | None:
    return row_out(s) if s is not None else None


def shop_public_out(s: ShopProfile) -> dict[str, Any]:
    return {
        "id": s.id,
        "business_name": s.business_name,
        "address": s.address,
        "phone": s.phone,
        "email": s.email,
        "hours": s.hours,
        "description": s.description,
        "logo": s.logo,
        "accepting_appointments": s.accepting_appointments,
    }


def photo_out(p: BikePhoto) -> dict[str, Any]:
    return row_out(p)


def maintenance_out(m: MaintenanceRecord) -> dict[str, Any]:
    return row_out(m)


def bike_out(b: Bike, *, with_children: bool = True) -> dict[str, Any]:
    out = row_out(b)
    if with_children:
        out["photos"] = [photo_out(p) for p in b.photos]
        out["maintenance"] = [maintenance_out(m) for m in b.maintenance]
    return out


def with_author(row: dict[str, Any], author: User | None) -> dict[str, Any]:
    row["author_name"] = author.name if author else None
    row["author_photo"] = author.profile_photo if author else None
    return row
