"""
Shared fixtures for adversarial tests.

Provides a migrated PostgreSQL pool and a seeded pending registration for
concurrent delivery tests. Skipped when PostgreSQL is not reachable.
"""

from collections.abc import Generator
from decimal import Decimal

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from assetpay.adapters.repository.postgres import PostgresRegistrationRepository, run_migrations
from assetpay.config.settings import get_settings
from assetpay.domain.models import NewRegistration, RegistrationRecord

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
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
    """Clean registrations table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM registrations")
        conn.commit()
    yield


@pytest.fixture
def pending_registration(pool: ConnectionPool) -> RegistrationRecord:
    """A pending registration for pi_race: 5 assets, 1 month, $50."""
    return PostgresRegistrationRepository(pool).create(
        NewRegistration(
            email="race@example.com",
            company="Acme",
            asset_count=5,
            duration_months=1,
            price=Decimal("50.00"),
            payment_reference="pi_race",
        )
    )
