"""
Configuration loader.
Reads settings from the environment (and a .env file, if present) once at
startup. The resulting Settings object is immutable and is passed to the
app factory and the Play Store client explicitly.
"""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


@dataclass(frozen=True)
class Settings:
    # Server
    host: str = "localhost"
    port: int = 3000
    environment: str = "development"

    # Play Store
    base_url: str = "https://play.google.com"
    user_agent: str = DEFAULT_USER_AGENT
    language: str = "en"
    country: str = "US"
    request_timeout: float = 30.0  # seconds
    max_redirects: int = 5
    enable_fallback_parsing: bool = True

    # Rate limiting (max=0 disables)
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max: int = 100
    rate_limit_message: str = "Too many requests from this IP, please try again later."

    # Security
    enable_cors: bool = True
    cors_origin: str = "*"

    log_level: str = "INFO"


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("config_invalid_int", extra={"key": key, "value": raw})
        return default


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("config_invalid_float", extra={"key": key, "value": raw})
        return default


def _flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from `env` (defaults to os.environ after loading .env)."""
    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        host=env.get("HOST", "localhost"),
        port=_int(env, "PORT", 3000),
        environment=env.get("APP_ENV", "development"),
        base_url=env.get("PLAY_STORE_BASE_URL", "https://play.google.com").rstrip("/"),
        user_agent=env.get("USER_AGENT", DEFAULT_USER_AGENT),
        language=env.get("LANGUAGE", "en"),
        country=env.get("COUNTRY", "US"),
        request_timeout=_float(env, "REQUEST_TIMEOUT", 30.0),
        max_redirects=_int(env, "MAX_REDIRECTS", 5),
        enable_fallback_parsing=_flag(env, "ENABLE_FALLBACK_PARSING", True),
        rate_limit_window_seconds=_int(env, "RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
        rate_limit_max=_int(env, "RATE_LIMIT_MAX", 100),
        rate_limit_message=env.get(
            "RATE_LIMIT_MESSAGE", "Too many requests from this IP, please try again later."
        ),
        enable_cors=_flag(env, "ENABLE_CORS", True),
        cors_origin=env.get("CORS_ORIGIN", "*"),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
