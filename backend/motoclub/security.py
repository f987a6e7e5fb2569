from __future__ import annotations

import datetime as dt

import bcrypt
import jwt

from motoclub.config import bcrypt_rounds, jwt_exp_days, jwt_secret


def hash_password(password: str) -> str:
    # bcrypt stores algorithm + cost + salt in the resulting hash string.
    salt = bcrypt.gensalt(rounds=bcrypt_rounds())
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Invalid hash format, or a password bcrypt refuses (> 72 bytes).
        return False


def create_access_token(*, user_id: int, role: str, expires_in: dt.timedelta | None = None) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    exp = now + (expires_in if expires_in is not None else dt.timedelta(days=jwt_exp_days()))
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, jwt_secret(), algorithm="HS256")


def decode_access_token(token: str) -> dict:
    """Raises `jwt.InvalidTokenError` (or a subclass) for anything not fully valid."""
    return jwt.decode(token, jwt_secret(), algorithms=["HS256"], options={"require": ["exp", "sub"]})
