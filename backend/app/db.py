from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

load_dotenv()

URL_ENV_VARS = ("DATABASE_URL", "SQLALCHEMY_DATABASE_URL")


def database_url() -> str:
    for name in URL_ENV_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    raise RuntimeError(f"Set one of {', '.join(URL_ENV_VARS)} before importing the statements backend.")


def make_engine(url: str) -> Engine:
    kwargs: Dict[str, Any] = {"future": True}
    if url.startswith("sqlite"):
        # connections cross threads under TestClient
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(url, **kwargs)


DATABASE_URL = database_url()
engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, future=True)


class Base(DeclarativeBase):
    pass


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    with SessionLocal() as db:
        yield db


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for batch entry points; rolls back on any error."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
