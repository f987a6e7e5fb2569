from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from motoclub.access import Identity, require_role, verify
from motoclub.db import session_scope


def get_db():
    with session_scope() as db:
        yield db


def get_identity(
    db: Annotated[Session, Depends(get_db)],
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    return verify(db, authorization)


def get_dealer(identity: Annotated[Identity, Depends(get_identity)]) -> Identity:
    return require_role(identity, {"dealer"})


DbSession = Annotated[Session, Depends(get_db)]
CurrentIdentity = Annotated[Identity, Depends(get_identity)]
CurrentDealer = Annotated[Identity, Depends(get_dealer)]
