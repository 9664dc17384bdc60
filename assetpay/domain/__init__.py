"""
Domain layer - Pure business logic with zero framework imports.

Pricing, registration, webhook reconciliation and survey services, plus the
port interfaces they require from infrastructure.
"""

from .exceptions import (
    AssetpayError,
    DuplicateKey,
    DuplicateRegistration,
    DuplicateSurvey,
    InvalidInput,
    InvalidPayload,
    InvalidSignature,
    InvalidSurvey,
    MissingMetadata,
    PaymentGatewayError,
    PriceMismatch,
    RecordNotFound,
    SurveyNotFound,
    WebhookError,
)
from .models import PaymentStatus, WebhookOutcome
from .ports import PaymentGateway, RegistrationRepository, SurveyRepository
from .pricing import compute_price
from .reconciliation import WebhookReconciliationService
from .registration import RegistrationService
from .survey import SurveyService

__all__ = [
    "AssetpayError",
    "DuplicateKey",
    "DuplicateRegistration",
    "DuplicateSurvey",
    "InvalidInput",
    "InvalidPayload",
    "InvalidSignature",
    "InvalidSurvey",
    "MissingMetadata",
    "PaymentGateway",
    "PaymentGatewayError",
    "PaymentStatus",
    "PriceMismatch",
    "RecordNotFound",
    "RegistrationRepository",
    "RegistrationService",
    "SurveyNotFound",
    "SurveyRepository",
    "SurveyService",
    "WebhookError",
    "WebhookOutcome",
    "WebhookReconciliationService",
    "compute_price",
]
