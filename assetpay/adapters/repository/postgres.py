"""
PostgreSQL repository adapters - Implement RegistrationRepository and
SurveyRepository protocols.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 with raw SQL.

Concurrency Design - Conditional Status Update:
-----------------------------------------------
update_status_by_payment_reference is a single UPDATE ... WHERE
payment_status = 'pending' RETURNING statement. PostgreSQL takes a row lock
for the update and re-evaluates the WHERE clause after a concurrent writer
commits, so of two concurrent deliveries for the same reference exactly one
sees the row as pending. The other matches zero rows and gets None.

Uniqueness of email and payment_reference is enforced by UNIQUE constraints.
Violations surface as psycopg.errors.UniqueViolation and are translated to
the domain's DuplicateKey.
"""

import logging
from pathlib import Path
from typing import Any
from uuid import UUID

from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from assetpay.domain.exceptions import DuplicateKey
from assetpay.domain.models import (
    CustomerSurvey,
    NewRegistration,
    PaymentStatus,
    RegistrationRecord,
    SurveyDraft,
    SurveyEntry,
)

logger = logging.getLogger(__name__)

_REGISTRATION_COLUMNS = """
    id, email, name, company, asset_count, duration_months, price,
    payment_reference, payment_status, created_at, updated_at
"""

_SURVEY_COLUMNS = """
    id, name, company_name, designation, email, mobile, url,
    questions, answers, created_at, updated_at
"""


def _to_registration(row: dict[str, Any]) -> RegistrationRecord:
    return RegistrationRecord(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        company=row["company"],
        asset_count=row["asset_count"],
        duration_months=row["duration_months"],
        price=row["price"],
        payment_reference=row["payment_reference"],
        payment_status=PaymentStatus(row["payment_status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _to_survey(row: dict[str, Any]) -> CustomerSurvey:
    entries = [
        SurveyEntry(question=question, answer=answer or "")
        for question, answer in zip(row["questions"], row["answers"], strict=True)
    ]
    return CustomerSurvey(
        id=row["id"],
        name=row["name"],
        company_name=row["company_name"],
        designation=row["designation"],
        email=row["email"],
        mobile=row["mobile"],
        url=row["url"],
        entries=entries,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PostgresRegistrationRepository:
    """
    Implements RegistrationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def create(self, draft: NewRegistration) -> RegistrationRecord:
        """
        Insert a PENDING registration.

        Raises:
            DuplicateKey: If email or payment_reference is already stored
        """
        insert_sql = f"""
            INSERT INTO registrations
                (email, name, company, asset_count, duration_months, price,
                 payment_reference, payment_status)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_REGISTRATION_COLUMNS}
        """
        params = (
            draft.email,
            draft.name,
            draft.company,
            draft.asset_count,
            draft.duration_months,
            draft.price,
            draft.payment_reference,
            PaymentStatus.PENDING.value,
        )

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(insert_sql, params)
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise DuplicateKey(draft.email) from e
        return _to_registration(row)

    def find_by_email(self, email: str) -> RegistrationRecord | None:
        return self._find_one("email", email)

    def find_by_payment_reference(self, payment_reference: str) -> RegistrationRecord | None:
        return self._find_one("payment_reference", payment_reference)

    def update_status_by_payment_reference(
        self, payment_reference: str, new_status: PaymentStatus
    ) -> RegistrationRecord | None:
        """
        Atomically move a PENDING registration to new_status.

        Returns:
            The updated record, or None if no PENDING record has this reference
        """
        update_sql = f"""
            UPDATE registrations
            SET payment_status = %s, updated_at = NOW()
            WHERE payment_reference = %s AND payment_status = %s
            RETURNING {_REGISTRATION_COLUMNS}
        """

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(
                update_sql,
                (new_status.value, payment_reference, PaymentStatus.PENDING.value),
            )
            row = cursor.fetchone()
            conn.commit()
        return _to_registration(row) if row is not None else None

    def _find_one(self, column: str, value: str) -> RegistrationRecord | None:
        query = sql.SQL("SELECT {} FROM registrations WHERE {} = %s").format(
            sql.SQL(_REGISTRATION_COLUMNS), sql.Identifier(column)
        )
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, (value,))
            row = cursor.fetchone()
        return _to_registration(row) if row is not None else None


class PostgresSurveyRepository:
    """Implements SurveyRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def create(self, draft: SurveyDraft) -> CustomerSurvey:
        insert_sql = f"""
            INSERT INTO customer_surveys
                (name, company_name, designation, email, mobile, url, questions, answers)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {_SURVEY_COLUMNS}
        """
        params = (
            draft.name,
            draft.company_name,
            draft.designation,
            draft.email,
            draft.mobile,
            draft.url,
            [entry.question for entry in draft.entries],
            [entry.answer for entry in draft.entries],
        )

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(insert_sql, params)
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise DuplicateKey(draft.email) from e
        return _to_survey(row)

    def find_by_email(self, email: str) -> CustomerSurvey | None:
        return self._fetch_one(
            f"SELECT {_SURVEY_COLUMNS} FROM customer_surveys WHERE email = %s", (email,)
        )

    def get(self, survey_id: UUID) -> CustomerSurvey | None:
        return self._fetch_one(
            f"SELECT {_SURVEY_COLUMNS} FROM customer_surveys WHERE id = %s", (survey_id,)
        )

    def list_recent(self, offset: int, limit: int) -> list[CustomerSurvey]:
        return self._fetch_all(
            f"""
            SELECT {_SURVEY_COLUMNS} FROM customer_surveys
            ORDER BY created_at DESC
            OFFSET %s LIMIT %s
            """,
            (offset, limit),
        )

    def count(self) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM customer_surveys")
            return cursor.fetchone()[0]

    def update(self, survey_id: UUID, changes: dict[str, Any]) -> CustomerSurvey | None:
        columns = dict(changes)
        entries = columns.pop("entries", None)
        if entries is not None:
            columns["questions"] = [entry.question for entry in entries]
            columns["answers"] = [entry.answer for entry in entries]

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
        ]
        assignments.append(sql.SQL("updated_at = NOW()"))
        query = sql.SQL("UPDATE customer_surveys SET {} WHERE id = %s RETURNING {}").format(
            sql.SQL(", ").join(assignments), sql.SQL(_SURVEY_COLUMNS)
        )

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, (*columns.values(), survey_id))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise DuplicateKey(columns.get("email", "")) from e
        return _to_survey(row) if row is not None else None

    def delete(self, survey_id: UUID) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM customer_surveys WHERE id = %s", (survey_id,))
            conn.commit()
            return cursor.rowcount == 1

    def search(
        self,
        text: str | None,
        company: str | None,
        designation: str | None,
        limit: int,
    ) -> list[CustomerSurvey]:
        conditions = []
        params: list[Any] = []

        if text:
            pattern = _like_pattern(text)
            conditions.append(
                """(
                    name ILIKE %s OR email ILIKE %s OR company_name ILIKE %s
                    OR EXISTS (SELECT 1 FROM unnest(questions) AS q WHERE q ILIKE %s)
                    OR EXISTS (SELECT 1 FROM unnest(answers) AS a WHERE a ILIKE %s)
                )"""
            )
            params.extend([pattern] * 5)
        if company:
            conditions.append("company_name ILIKE %s")
            params.append(_like_pattern(company))
        if designation:
            conditions.append("designation ILIKE %s")
            params.append(_like_pattern(designation))

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.append(limit)
        return self._fetch_all(
            f"""
            SELECT {_SURVEY_COLUMNS} FROM customer_surveys
            {where}
            ORDER BY created_at DESC
            LIMIT %s
            """,
            tuple(params),
        )

    def _fetch_one(self, query: str, params: tuple) -> CustomerSurvey | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return _to_survey(row) if row is not None else None

    def _fetch_all(self, query: str, params: tuple) -> list[CustomerSurvey]:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [_to_survey(row) for row in rows]


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: assetpay/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
