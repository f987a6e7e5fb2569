"""
Identity resolution and role checks.

Every authenticated route receives an `Identity`. Under the "lookup" strategy
the account row is loaded on every request, so role changes and deleted
accounts take effect immediately. Under "claims" the token's `sub`/`role`
are trusted until the token expires.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from sqlalchemy import select
from sqlalchemy.orm import Session

from motoclub.config import identity_strategy
from motoclub.errors import Forbidden, NotFound, Unauthenticated
from motoclub.models import ROLES, ShopProfile, User
from motoclub.security import decode_access_token


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    account_id: int
    role: str
    # Loaded account under the "lookup" strategy, None under "claims".
    user: User | None = None

    @property
    def is_dealer(self) -> bool:
        return self.role == "dealer"


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def verify(db: Session, authorization: str | None, *, strategy: str | None = None) -> Identity:
    token = bearer_token(authorization)
    if not token:
        raise Unauthenticated("No token, authorization denied")
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        raise Unauthenticated("Token is not valid")

    sub = str(payload.get("sub") or "")
    if not sub.isdigit():
        raise Unauthenticated("Token is not valid")
    account_id = int(sub)

    if (strategy or identity_strategy()) == "claims":
        role = str(payload.get("role") or "")
        if role not in ROLES:
            raise Unauthenticated("Token is not valid")
        return Identity(account_id=account_id, role=role)

    user = db.get(User, account_id)
    if not user:
        raise Unauthenticated("User not found")
    return Identity(account_id=user.id, role=user.role, user=user)


def require_role(identity: Identity | None, allowed: set[str] | frozenset[str]) -> Identity:
    if identity is None:
        raise Unauthenticated("User not authenticated")
    if identity.role not in allowed:
        raise Forbidden(f"User role {identity.role} is not authorized to access this route")
    return identity


def load_account(db: Session, identity: Identity) -> User:
    if identity.user is not None:
        return identity.user
    user = db.get(User, identity.account_id)
    if not user:
        raise Unauthenticated("User not found")
    return user


def shop_for(db: Session, identity: Identity) -> ShopProfile | None:
    return db.execute(select(ShopProfile).where(ShopProfile.user_id == identity.account_id)).scalar_one_or_none()


def resolve_shop(db: Session, identity: Identity) -> ShopProfile:
    """The caller's own shop. Shop-scoped writes never take a shop id from the client."""
    shop = shop_for(db, identity)
    if not shop:
        logger.warning("Dealer account without shop profile user_id=%s", identity.account_id)
        raise NotFound("Shop not found")
    return shop
