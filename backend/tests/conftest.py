import os
import pathlib
import sys
import tempfile

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
sys.path.append(str(REPO_ROOT))


def pytest_configure():
    if os.getenv("DATABASE_URL") or os.getenv("SQLALCHEMY_DATABASE_URL"):
        return
    temp_dir = tempfile.mkdtemp(prefix="statements-tests-")
    db_path = pathlib.Path(temp_dir) / "pytest.db"
    os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"


@pytest.fixture()
def db_session():
    from backend.app import models  # noqa: F401
    from backend.app.db import Base, SessionLocal, engine
    from backend.app.services.catalog import catalog_cache

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    catalog_cache.invalidate()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        catalog_cache.invalidate()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seeded_db(db_session):
    from backend.app.seed.run import seed_canonical_categories

    seed_canonical_categories(db_session)
    return db_session


@pytest.fixture()
def api_client(seeded_db):
    from backend.app.db import get_db
    from backend.app.main import app
    from fastapi.testclient import TestClient

    def _get_test_db():
        yield seeded_db

    app.dependency_overrides[get_db] = _get_test_db
    client = TestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_db, None)
