"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, Request
from psycopg_pool import ConnectionPool

from assetpay.adapters.payments import StripePaymentGateway
from assetpay.adapters.repository.postgres import (
    PostgresRegistrationRepository,
    PostgresSurveyRepository,
)
from assetpay.config.settings import Settings, get_settings
from assetpay.domain.reconciliation import WebhookReconciliationService
from assetpay.domain.registration import RegistrationService
from assetpay.domain.survey import SurveyService


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_registration_repository(request: Request) -> PostgresRegistrationRepository:
    """Create repository with connection pool from app state."""
    return PostgresRegistrationRepository(get_pool(request))


def get_survey_repository(request: Request) -> PostgresSurveyRepository:
    return PostgresSurveyRepository(get_pool(request))


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> StripePaymentGateway:
    return StripePaymentGateway(api_key=settings.stripe_secret_key)


def get_registration_service(
    repository: PostgresRegistrationRepository = Depends(get_registration_repository),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and payment gateway for the domain service.
    """
    return RegistrationService(repository=repository, gateway=gateway, currency=settings.currency)


def get_webhook_service(
    repository: PostgresRegistrationRepository = Depends(get_registration_repository),
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> WebhookReconciliationService:
    return WebhookReconciliationService(
        repository=repository,
        gateway=gateway,
        signing_secret=settings.stripe_webhook_secret,
    )


def get_survey_service(
    repository: PostgresSurveyRepository = Depends(get_survey_repository),
) -> SurveyService:
    return SurveyService(repository=repository)
