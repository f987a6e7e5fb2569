from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from motoclub.access import Identity
from motoclub.config import max_upload_bytes
from motoclub.errors import Conflict, InvalidInput, NotFound, PayloadTooLarge, UpstreamError
from motoclub.models import MediaUpload
from motoclub.utils.cloudinary_storage import MediaError, destroy, upload_bytes


logger = logging.getLogger(__name__)


def resource_type_for(content_type: str) -> str:
    ct = (content_type or "").lower().strip()
    if ct.startswith("image/"):
        return "image"
    if ct.startswith("video/"):
        return "video"
    raise InvalidInput("Only images and videos are allowed")


def upload(
    db: Session,
    identity: Identity,
    *,
    raw: bytes,
    content_type: str,
    filename: str = "",
    folder: str | None = None,
) -> MediaUpload:
    resource_type = resource_type_for(content_type)
    if not raw:
        raise InvalidInput("No image provided")
    if len(raw) > max_upload_bytes():
        raise PayloadTooLarge(f"File too large (max {max_upload_bytes()} bytes)")

    try:
        url, public_id = upload_bytes(raw=raw, resource_type=resource_type, folder=folder, filename=filename)
    except Exception:
        logger.exception(
            "Media upload failed user_id=%s filename=%r content_type=%r", identity.account_id, filename, content_type
        )
        raise UpstreamError("Upload failed")

    rec = MediaUpload(user_id=identity.account_id, public_id=public_id, url=url, resource_type=resource_type)
    db.add(rec)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        taken = db.execute(select(MediaUpload.id).where(MediaUpload.public_id == public_id)).first()
        # A recorded public_id still backs someone's media; anything else would be orphaned remotely.
        if not taken:
            purge_remote([MediaUpload(public_id=public_id, resource_type=resource_type)])
        raise Conflict("Media already registered")
    return rec


def delete(db: Session, identity: Identity, public_id: str) -> None:
    rec = db.execute(
        select(MediaUpload).where(
            (MediaUpload.public_id == (public_id or "").strip()) & (MediaUpload.user_id == identity.account_id)
        )
    ).scalar_one_or_none()
    if not rec:
        raise NotFound("Media not found")
    try:
        destroy(public_id=rec.public_id, resource_type=rec.resource_type)
    except Exception:
        logger.exception("Media delete failed user_id=%s public_id=%s", identity.account_id, rec.public_id)
        raise UpstreamError("Delete failed")
    db.delete(rec)
    db.flush()


def purge_remote(records: list[MediaUpload]) -> None:
    """Best-effort cleanup at the media host after the rows are already gone."""
    for rec in records:
        try:
            destroy(public_id=rec.public_id, resource_type=rec.resource_type)
        except MediaError:
            logger.warning("Skipped media cleanup public_id=%s (media host not available)", rec.public_id)
        except Exception:
            logger.exception("Media cleanup failed public_id=%s", rec.public_id)
