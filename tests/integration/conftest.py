import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from cvoptima.config.settings import Settings
from cvoptima.database.connection import close_pool, get_connection, init_pool

SCHEMA_FILE = Path(__file__).resolve().parents[2] / "migrations" / "001_initial_schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "cvoptima_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_FILE.read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def user_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh user id; every resume it owns is removed after the test."""
    new_user = str(uuid.uuid4())
    yield new_user
    with get_connection() as conn:
        conn.execute("DELETE FROM resumes WHERE user_id = %s", (new_user,))
        conn.commit()
