# Configuration from environment variables (.env or deployment variables).

import os
from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_bool(key: str, default: str = "false") -> bool:
    return _env(key, default).lower() in ("1", "true", "yes")


def _env_list(key: str, default: list = None) -> list:
    s = _env(key)
    if not s:
        return default or []
    s = s.strip().strip("[]")
    result = [x.strip().strip("\"'") for x in s.split(",")]
    return [x for x in result if x] or (default or [])


def resolve_database_url(raw: str, fallback: str = "") -> str:
    """Turn a provider-style URL into an async SQLAlchemy URL."""
    if raw:
        # Hosting providers give postgres:// but asyncpg needs postgresql+asyncpg://
        if raw.startswith("postgres://"):
            return raw.replace("postgres://", "postgresql+asyncpg://", 1)
        if raw.startswith("postgresql://"):
            return raw.replace("postgresql://", "postgresql+asyncpg://", 1)
        return raw
    # Local fallback: async sqlite via aiosqlite
    return fallback or "sqlite+aiosqlite:///./incubator.db"


# ============================================================================
# Database
# ============================================================================
DATABASE_URL = resolve_database_url(
    _env("DATABASE_URL"), _env("DATABASE_URL_FALLBACK")
)
DATABASE_ECHO = _env_bool("DATABASE_ECHO")

# ============================================================================
# Logging
# ============================================================================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ============================================================================
# Access
# ============================================================================
# Bearer tokens accepted by the static resolver. Issuing them is someone else's job.
ADMIN_API_TOKENS = _env_list("ADMIN_API_TOKENS")
GUEST_API_TOKENS = _env_list("GUEST_API_TOKENS")
