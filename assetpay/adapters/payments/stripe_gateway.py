"""
Stripe payment gateway adapter - Implements PaymentGateway protocol.

Charges are Stripe PaymentIntents; the client completes them with the
intent's client secret. Webhook events are verified against the exact raw
request bytes with the endpoint signing secret before the body is parsed.
"""

import json
import logging

import stripe

from assetpay.domain.exceptions import InvalidPayload, InvalidSignature, PaymentGatewayError
from assetpay.domain.models import Charge, EventKind, GatewayEvent

logger = logging.getLogger(__name__)

EVENT_KINDS = {
    "payment_intent.succeeded": EventKind.CHARGE_SUCCEEDED,
    "payment_intent.payment_failed": EventKind.CHARGE_FAILED,
}

# Maximum age of a signed webhook, in seconds
SIGNATURE_TOLERANCE = stripe.Webhook.DEFAULT_TOLERANCE


class StripePaymentGateway:
    """
    Implements PaymentGateway protocol via the stripe SDK.

    Uses structural subtyping - no explicit inheritance from Protocol.
    The API key is passed per request instead of set on the stripe module.
    """

    def __init__(self, api_key: str, tolerance: int = SIGNATURE_TOLERANCE) -> None:
        self._api_key = api_key
        self._tolerance = tolerance

    def create_charge(
        self, amount_minor_units: int, currency: str, metadata: dict[str, str]
    ) -> Charge:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=currency,
                payment_method_types=["card"],
                metadata=metadata,
                api_key=self._api_key,
            )
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent creation failed: %s", e)
            raise PaymentGatewayError(str(e)) from e

        logger.info("Created PaymentIntent %s for %s %s", intent.id, amount_minor_units, currency)
        return Charge(payment_reference=intent.id, client_payment_handle=intent.client_secret)

    def verify_and_parse_event(
        self, payload: bytes, signature_header: str, signing_secret: str
    ) -> GatewayEvent:
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidSignature("Payload is not valid UTF-8") from None

        try:
            stripe.WebhookSignature.verify_header(
                body, signature_header or "", signing_secret, self._tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature error: %s", e)
            raise InvalidSignature(str(e)) from None

        try:
            event = json.loads(body)
            event_type = event["type"]
            event_id = event["id"]
            obj = event["data"]["object"]
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidPayload(f"Malformed event payload: {e}") from None

        if not isinstance(obj, dict):
            raise InvalidPayload("Malformed event payload: data.object is not an object")

        metadata = obj.get("metadata") or {}
        return GatewayEvent(
            kind=EVENT_KINDS.get(event_type, EventKind.OTHER),
            event_id=event_id,
            charge_reference=obj.get("id"),
            metadata={str(k): str(v) for k, v in metadata.items()},
        )
