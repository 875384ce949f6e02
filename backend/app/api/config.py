from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

LOCAL_DEV_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")


def allow_catalog_edits() -> bool:
    return os.getenv("ALLOW_CATALOG_EDITS") == "1"


def seed_catalog_on_startup() -> bool:
    return os.getenv("SEED_CATALOG_ON_STARTUP") == "1"


def log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").strip().upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS")
    if raw is None:
        origins = list(LOCAL_DEV_ORIGINS)
    else:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not be empty.")
    if not any(origin in origins for origin in LOCAL_DEV_ORIGINS):
        logger.warning("CORS allowlist does not include local dev origins: %s", origins)
    return origins
