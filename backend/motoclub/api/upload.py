from __future__ import annotations

from typing import Any

from fastapi import APIRouter, File, Form, UploadFile

from motoclub.deps import CurrentIdentity, DbSession
from motoclub.errors import InvalidInput
from motoclub.policies import media


router = APIRouter()


@router.post("")
def upload_media(
    identity: CurrentIdentity,
    db: DbSession,
    image: UploadFile = File(...),
    folder: str | None = Form(None),
) -> dict[str, Any]:
    try:
        raw = image.file.read()
    except OSError:
        raise InvalidInput("Invalid upload")
    rec = media.upload(
        db,
        identity,
        raw=raw,
        content_type=image.content_type or "",
        filename=image.filename or "",
        folder=folder,
    )
    return {"url": rec.url, "public_id": rec.public_id}


# public ids carry folder separators, hence the path converter.
@router.delete("/{public_id:path}")
def delete_media(public_id: str, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    media.delete(db, identity, public_id)
    return {"message": "Media deleted"}
