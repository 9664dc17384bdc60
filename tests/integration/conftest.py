"""
Fixtures for PostgreSQL integration tests.

Requires PostgreSQL to be reachable at DATABASE_URL; tests are skipped
otherwise.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from assetpay.adapters.repository.postgres import run_migrations
from assetpay.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool and apply migrations once per session."""
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=True)
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM registrations")
        conn.execute("DELETE FROM customer_surveys")
        conn.commit()
    yield
