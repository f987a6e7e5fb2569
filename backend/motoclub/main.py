from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from motoclub.api import auth, bikes, posts, rides, shop, social, upload
from motoclub.config import (
    allowed_hosts,
    api_prefix,
    app_env,
    auto_create_tables,
    cors_origins,
    enforce_secure_secrets,
    log_level,
)
from motoclub.db import ENGINE
from motoclub.errors import ApiError
from motoclub.models import Base
from motoclub.utils.cloudinary_storage import cloudinary_enabled


VERSION = "1.0.0"

logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="EM Motorcycle API", version=VERSION)

# Production hardening: ensure we don't run with dangerous defaults.
enforce_secure_secrets()

app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts())


@app.middleware("http")
async def _security_headers(request, call_next):
    resp = await call_next(request)
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    resp.headers.setdefault("X-Frame-Options", "DENY")
    resp.headers.setdefault("Referrer-Policy", "no-referrer")
    return resp


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------
# Error rendering
# -----------------------
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(ApiError)
async def _api_error(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error(404, "Route not found")
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(exc.status_code, detail)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(400, "Invalid input")
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    msg = first.get("msg") or "Invalid input"
    return _error(400, f"{field}: {msg}" if field else msg)


@app.exception_handler(IntegrityError)
async def _integrity_error(request: Request, exc: IntegrityError):
    # Constraint violations not mapped at the call site, e.g. a claims token for a deleted account.
    logger.warning("%s %s violated a constraint: %s", request.method, request.url.path, exc.orig)
    return _error(409, "Request conflicts with existing data")


@app.exception_handler(Exception)
async def _unhandled(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error")


# -----------------------
# Startup
# -----------------------
@app.on_event("startup")
def check_media_host() -> None:
    if not cloudinary_enabled():
        logger.warning("CLOUDINARY_* credentials are not set; uploads will fail")


@app.on_event("startup")
def create_tables() -> None:
    if not auto_create_tables():
        return
    try:
        Base.metadata.create_all(bind=ENGINE)
        logger.info("Tables ensured (env=%s)", app_env())
    except Exception:
        # Migrations may not have run yet; the app can still serve health checks.
        logger.exception("Table creation failed")


# -----------------------
# Health
# -----------------------
@app.get("/")
def root() -> dict[str, Any]:
    return {"status": "ok", "message": "EM Motorcycle API is running", "version": VERSION}


@app.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True}


_prefix = api_prefix()
app.include_router(auth.router, prefix=f"{_prefix}/auth", tags=["auth"])
app.include_router(bikes.router, prefix=f"{_prefix}/bikes", tags=["bikes"])
app.include_router(rides.router, prefix=f"{_prefix}/rides", tags=["rides"])
app.include_router(posts.router, prefix=f"{_prefix}/posts", tags=["posts"])
app.include_router(social.router, prefix=_prefix, tags=["social"])
app.include_router(shop.router, prefix=f"{_prefix}/shop", tags=["shop"])
app.include_router(upload.router, prefix=f"{_prefix}/upload", tags=["upload"])
