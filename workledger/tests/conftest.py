import os
import tempfile

_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ["ENV"] = "test"

import subprocess
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

_SQLITE_PATH = Path(tempfile.gettempdir()) / f"workledger_test_{os.getpid()}.db"
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", f"sqlite:///{_SQLITE_PATH}")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from workledger import database
from workledger.database import Base, SessionLocal
from workledger.models.contractor import Contractor
from workledger.services import catalog_service


def _ensure_database_exists(database_url: str) -> None:
    url = make_url(database_url)

    if url.drivername.startswith("sqlite"):
        if url.database and os.path.exists(url.database):
            os.remove(url.database)
        return

    if not url.drivername.startswith("postgresql"):
        return

    db_name = url.database
    admin_url = url.set(database="postgres")
    admin_engine = create_engine(admin_url, isolation_level="AUTOCOMMIT")

    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": db_name},
            ).scalar()
            if not exists:
                safe_db_name = db_name.replace('"', '""')
                conn.execute(text(f'CREATE DATABASE "{safe_db_name}"'))
    finally:
        admin_engine.dispose()


def _empty_all_tables() -> None:
    with database.engine.begin() as conn:
        if conn.dialect.name == "postgresql":
            quoted = ", ".join(f'"public"."{t.name}"' for t in Base.metadata.sorted_tables)
            conn.execute(text(f"TRUNCATE TABLE {quoted} RESTART IDENTITY CASCADE"))
            return
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database():
    _ensure_database_exists(TEST_DATABASE_URL)

    env = os.environ.copy()
    env["DATABASE_URL"] = TEST_DATABASE_URL

    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        cwd=Path(__file__).resolve().parents[2],
        env=env,
    )

    database.configure_database()
    yield
    database.engine.dispose()
    if make_url(TEST_DATABASE_URL).drivername.startswith("sqlite") and _SQLITE_PATH.exists():
        _SQLITE_PATH.unlink()


@pytest.fixture(scope="function", autouse=True)
def _empty_tables_between_tests():
    _empty_all_tables()
    yield
    _empty_all_tables()


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def operation_factory(db):
    def _create(name="Stitch", conversion_type="1:1", rate=1.5):
        return catalog_service.create_operation(
            db,
            ops_name=name,
            conversion_type=conversion_type,
            rate_per_unit=rate,
        )

    return _create


@pytest.fixture()
def contractor_factory(db):
    counter = {"n": 0}

    def _create(name="C1", contractor_id=None):
        counter["n"] += 1
        row = Contractor(
            contractor_id=contractor_id or f"CTR-TEST-{counter['n']}",
            name=name,
            is_deleted=False,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _create

