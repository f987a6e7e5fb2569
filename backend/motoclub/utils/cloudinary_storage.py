from __future__ import annotations

import logging
import os
import tempfile
from io import BytesIO
from typing import Literal

import cloudinary
import cloudinary.uploader
from PIL import Image, ImageOps, UnidentifiedImageError

from motoclub.config import cloudinary_folder


logger = logging.getLogger(__name__)

ResourceType = Literal["image", "video"]

MAX_IMAGE_SIZE = 1600   # px
JPEG_QUALITY = 82       # balance between size & quality


class MediaError(Exception):
    pass


def _credentials() -> dict[str, str]:
    return {
        "cloud_name": (os.getenv("CLOUDINARY_CLOUD_NAME") or "").strip(),
        "api_key": (os.getenv("CLOUDINARY_API_KEY") or "").strip(),
        "api_secret": (os.getenv("CLOUDINARY_API_SECRET") or "").strip(),
    }


def cloudinary_enabled() -> bool:
    """True when all three CLOUDINARY_* credentials are set."""
    return all(_credentials().values())


def configure() -> None:
    cloudinary.config(**_credentials(), secure=True)


def _safe_folder(folder: str | None) -> str:
    base = cloudinary_folder()
    sub = "".join(ch for ch in (folder or "").strip() if ch.isalnum() or ch in "-_/").strip("/")
    if not sub or sub == base:
        return base
    # Client folders are always nested under the configured root.
    return sub if sub.startswith(base + "/") else f"{base}/{sub}"


def _optimize_image(raw: bytes) -> str:
    """
    Normalise orientation/colour and cap the size.
    Returns a temp file path; undecodable formats are uploaded as-is.
    """
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".jpg")
    try:
        img = Image.open(BytesIO(raw))
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGB")
        img.thumbnail((MAX_IMAGE_SIZE, MAX_IMAGE_SIZE), Image.LANCZOS)
        img.save(tmp, format="JPEG", quality=JPEG_QUALITY, optimize=True, progressive=True)
    except (UnidentifiedImageError, OSError, ValueError):
        # Let Cloudinary decide what to do with formats Pillow can't read.
        tmp.seek(0)
        tmp.truncate()
        tmp.write(raw)
    tmp.flush()
    tmp.close()
    return tmp.name


def upload_bytes(*, raw: bytes, resource_type: ResourceType, folder: str | None, filename: str = "") -> tuple[str, str]:
    """Upload to Cloudinary. Returns (secure_url, public_id)."""
    if not cloudinary_enabled():
        raise MediaError("Cloudinary is not configured")
    configure()

    tmp_path: str | None = None
    try:
        if resource_type == "image":
            tmp_path = _optimize_image(raw)
        else:
            ext = os.path.splitext(filename or "")[1].lower() or ".mp4"
            with tempfile.NamedTemporaryFile(delete=False, suffix=ext) as tmp:
                tmp.write(raw)
                tmp_path = tmp.name

        res = cloudinary.uploader.upload(
            tmp_path,
            resource_type=resource_type,
            folder=_safe_folder(folder),
            overwrite=False,
            type="upload",
            invalidate=False,
        )
        url = str(res.get("secure_url") or "").strip()
        pid = str(res.get("public_id") or "").strip()
        if not url or not pid:
            raise MediaError("Cloudinary returned an incomplete response")
        return url, pid
    finally:
        if tmp_path:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.warning("Could not remove temp upload file %s", tmp_path)


def destroy(*, public_id: str, resource_type: ResourceType = "image") -> None:
    pid = (public_id or "").strip()
    if not pid:
        return
    if not cloudinary_enabled():
        raise MediaError("Cloudinary is not configured")
    configure()
    res = cloudinary.uploader.destroy(pid, resource_type=resource_type, invalidate=False)
    result = str((res or {}).get("result") or "")
    # "not found" means it is already gone.
    if result not in {"ok", "not found"}:
        raise MediaError(f"Cloudinary destroy failed: {result or 'unknown'}")
