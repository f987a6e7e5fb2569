from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from motoclub.access import load_account, shop_for
from motoclub.deps import CurrentIdentity, DbSession
from motoclub.policies import accounts, media
from motoclub.rate_limit import limiter
from motoclub.schemas import LoginIn, ProfileUpdateIn, RegisterIn
from motoclub.security import create_access_token
from motoclub.serializers import shop_out, user_out


router = APIRouter()


@router.post("/register", status_code=201)
def register(data: RegisterIn, db: DbSession) -> dict[str, Any]:
    user = accounts.register(
        db,
        email=data.email,
        password=data.password,
        role=data.role,
        name=data.name,
        phone=data.phone,
    )
    return {
        "message": "User registered successfully",
        "user": user_out(user),
        "token": create_access_token(user_id=user.id, role=user.role),
    }


@router.post("/login")
def login(data: LoginIn, db: DbSession) -> dict[str, Any]:
    key = f"login:{(data.email or '').strip().lower()}"
    limiter.hit(key=key, limit=10, window_seconds=10 * 60, detail="Too many login attempts")
    user = accounts.authenticate(db, email=data.email, password=data.password)
    limiter.forget(key)
    return {
        "message": "Login successful",
        "user": user_out(user),
        "token": create_access_token(user_id=user.id, role=user.role),
    }


@router.get("/me")
def me(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    user = load_account(db, identity)
    shop = shop_for(db, identity) if user.role == "dealer" else None
    return {"user": user_out(user), "shopProfile": shop_out(shop)}


@router.put("/profile")
def update_profile(data: ProfileUpdateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    user = accounts.update_profile(db, identity, data.model_dump(exclude_none=True))
    return {"user": user_out(user)}


@router.delete("/me")
def delete_me(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    removed = accounts.delete_account(db, identity)
    # Commit first: remote cleanup must never resurrect or block the deletion.
    db.commit()
    media.purge_remote(removed)
    return {"message": "Account deleted"}
