"""
Domain exceptions - Semantic error types for registration, payment
reconciliation and surveys.

These communicate business rule violations without leaking infrastructure
details. The API layer maps them to HTTP responses.
"""

from decimal import Decimal


class AssetpayError(Exception):
    """Base class for all domain errors."""

    pass


class InvalidInput(AssetpayError):
    """Missing or malformed registration fields."""

    pass


class PriceMismatch(AssetpayError):
    """Supplied price disagrees with the server-computed price."""

    def __init__(self, expected: Decimal, received: Decimal) -> None:
        self.expected = expected
        self.received = received
        super().__init__(f"Invalid pricing amount. Expected: {expected:.2f}, Received: {received}")


class DuplicateRegistration(AssetpayError):
    """A registration already exists for this email."""

    pass


class DuplicateKey(AssetpayError):
    """Store-level uniqueness violation (email or payment reference)."""

    pass


class PaymentGatewayError(AssetpayError):
    """The payment provider could not complete the request."""

    pass


class WebhookError(AssetpayError):
    """Base class for rejected webhook deliveries."""

    pass


class InvalidSignature(WebhookError):
    """Webhook payload does not match its signature header."""

    pass


class InvalidPayload(WebhookError):
    """Signed webhook payload could not be parsed."""

    pass


class MissingMetadata(WebhookError):
    """Charge metadata lacks a field needed to re-derive the price."""

    pass


class RecordNotFound(WebhookError):
    """No registration matches the charge reference."""

    pass


class SurveyError(AssetpayError):
    """Base class for survey errors."""

    pass


class InvalidSurvey(SurveyError):
    """Survey fields failed validation."""

    pass


class DuplicateSurvey(SurveyError):
    """A survey already exists for this email."""

    pass


class SurveyNotFound(SurveyError):
    """No survey with the given id."""

    pass
