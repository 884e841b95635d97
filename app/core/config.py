"""Central config — values come from .env / process env, fallbacks only here."""
import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_UPSTREAM_URL = "http://localhost:8081/process"
DEFAULT_UPSTREAM_TIMEOUT = 30.0


def get_database_url() -> str:
    return (os.getenv("DATABASE_URL") or "").strip() or "sqlite:///./hipaai_chat.db"


def get_jwt_secret() -> str:
    return (os.getenv("JWT_SECRET") or "").strip() or "change-me-in-production-hipaai-chat-secret"


def get_jwt_algorithm() -> str:
    return (os.getenv("JWT_ALGORITHM") or "").strip() or "HS256"


def get_upstream_url() -> str:
    return (os.getenv("UPSTREAM_API_URL") or "").strip() or DEFAULT_UPSTREAM_URL


def get_upstream_api_key() -> str | None:
    return (os.getenv("UPSTREAM_API_KEY") or "").strip() or None


def get_upstream_timeout() -> float:
    raw = (os.getenv("UPSTREAM_TIMEOUT_SECONDS") or "").strip()
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_UPSTREAM_TIMEOUT
    return value if value > 0 else DEFAULT_UPSTREAM_TIMEOUT


def get_cors_origins() -> list[str]:
    raw = (os.getenv("CORS_ORIGINS") or "").strip()
    if not raw or raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "").strip().upper() or "INFO"
