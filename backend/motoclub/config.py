from __future__ import annotations

import os

from dotenv import load_dotenv


# Do not override variables the deployment already set.
load_dotenv(override=False)


def database_url() -> str:
    url = os.environ.get("DATABASE_URL") or "sqlite:///./local.db"
    # Some managed providers still supply `postgres://...` which SQLAlchemy treats as invalid.
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def jwt_secret() -> str:
    return os.environ.get("JWT_SECRET") or "dev-secret-change-me"


def jwt_exp_days() -> int:
    raw = (os.environ.get("JWT_EXP_DAYS") or "").strip()
    try:
        v = int(raw or "30")
    except ValueError:
        v = 30
    return max(v, 1)


def identity_strategy() -> str:
    """
    How a bearer token is resolved to an identity:
    - "lookup" (default): token carries the account id; the account (and its role)
      is re-read from the database on every request.
    - "claims": account id and role are taken from the signed token as-is.
      Saves a query, but a role change only shows up once the token expires.
    """
    raw = (os.environ.get("IDENTITY_STRATEGY") or "lookup").strip().lower()
    return raw if raw in {"lookup", "claims"} else "lookup"


def bcrypt_rounds() -> int:
    raw = (os.environ.get("BCRYPT_ROUNDS") or "").strip()
    try:
        v = int(raw or "12")
    except ValueError:
        v = 12
    return min(max(v, 4), 16)


def is_local_dev() -> bool:
    """
    We treat the app as "local dev" when DATABASE_URL is not set, because
    `database_url()` falls back to sqlite in that case.
    """
    return not (os.environ.get("DATABASE_URL") or "").strip()


def app_env() -> str:
    """
    Application environment marker:
    - local (default when running with sqlite fallback)
    - staging
    - prod
    """
    raw = (os.environ.get("APP_ENV") or "").strip().lower()
    if raw:
        return raw
    return "local" if is_local_dev() else "prod"


def api_prefix() -> str:
    raw = (os.environ.get("API_PREFIX") if "API_PREFIX" in os.environ else "/api") or ""
    raw = raw.strip().rstrip("/")
    if raw and not raw.startswith("/"):
        raw = "/" + raw
    return raw


def log_level() -> str:
    return (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()


def allowed_hosts() -> list[str]:
    """
    Comma-separated list for TrustedHost middleware.
    Example: ALLOWED_HOSTS=api.example.com,example.com
    """
    raw = (os.environ.get("ALLOWED_HOSTS") or "").strip()
    if not raw:
        return ["*"]
    hosts = [h.strip() for h in raw.split(",") if h.strip()]
    return hosts or ["*"]


def cors_origins() -> list[str]:
    raw = (os.environ.get("CORS_ORIGINS") or "").strip()
    if raw:
        return [o.strip() for o in raw.split(",") if o.strip()]
    return [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]


def auto_create_tables() -> bool:
    raw = (os.environ.get("AUTO_CREATE_TABLES") or "").strip().lower()
    if not raw:
        return is_local_dev()
    return raw in {"1", "true", "yes", "on"}


def enforce_secure_secrets() -> None:
    """
    Fail-fast in production if dangerous defaults are still in use.
    """
    if app_env() in {"prod", "production"}:
        if jwt_secret() == "dev-secret-change-me":
            raise RuntimeError("JWT_SECRET must be set in production (default dev secret detected)")


def max_upload_bytes() -> int:
    # Default: 10 MB (raw upload bytes).
    try:
        return int(os.environ.get("MAX_UPLOAD_BYTES") or "10000000")
    except ValueError:
        return 10_000_000


def cloudinary_folder() -> str:
    return (os.environ.get("CLOUDINARY_FOLDER") or "em-motorcycle").strip() or "em-motorcycle"


def story_ttl_hours() -> int:
    raw = (os.environ.get("STORY_TTL_HOURS") or "").strip()
    try:
        v = int(raw or "24")
    except ValueError:
        v = 24
    # Reasonable bounds to avoid foot-guns.
    return min(max(v, 1), 24 * 7)
