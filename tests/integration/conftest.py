import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.types.json import Jsonb

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool

SCHEMA = Path(__file__).with_name("schema.sql")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "listo_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA.read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def user_id(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A fresh user id whose rows are removed after the test."""
    value = f"test-{uuid.uuid4()}"
    yield value
    db_conn.execute("DELETE FROM laborers WHERE user_id = %s", (value,))
    db_conn.execute("DELETE FROM prequal WHERE user_id = %s", (value,))
    db_conn.commit()


@pytest.fixture
def seed_laborer(db_conn: psycopg.Connection[Any], user_id: str) -> tuple[str, str]:
    laborer_id = "laborer-1"
    db_conn.execute(
        "INSERT INTO laborers (user_id, laborer_id, data) VALUES (%s, %s, %s)",
        (user_id, laborer_id, Jsonb({"displayName": "Existing Name", "phone": "555-0100"})),
    )
    db_conn.commit()
    return user_id, laborer_id
