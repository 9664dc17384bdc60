"""Repository adapters - Database implementations."""

from .postgres import PostgresRegistrationRepository, PostgresSurveyRepository, run_migrations

__all__ = ["PostgresRegistrationRepository", "PostgresSurveyRepository", "run_migrations"]
