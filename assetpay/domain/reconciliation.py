"""
Webhook reconciliation service - payment outcome state machine.

Payment State Machine (Forward-Only Transitions)
================================================

    PENDING -> SUCCEEDED   (charge succeeded event, price re-checked)
    PENDING -> FAILED      (charge failed event)

SUCCEEDED and FAILED are terminal. An event for a record that is no longer
PENDING is a no-op that is still acknowledged, so gateway retries and
duplicate deliveries settle without side effects.

The transition is a single conditional write in the repository. When two
deliveries for the same reference race, one update matches and the other
returns None and is resolved as a duplicate.

Signature verification happens before any payload content is read.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .exceptions import InvalidPayload, MissingMetadata, PriceMismatch, RecordNotFound
from .models import EventKind, GatewayEvent, PaymentStatus, WebhookOutcome
from .ports import PaymentGateway, RegistrationRepository
from .pricing import DEFAULT_POLICY, PricingPolicy, prices_match

logger = logging.getLogger(__name__)

REQUIRED_METADATA = ("email", "company", "assets", "duration", "pricing")


@dataclass
class WebhookReconciliationService:
    """Applies verified gateway events to registration records."""

    repository: RegistrationRepository
    gateway: PaymentGateway
    signing_secret: str
    pricing: PricingPolicy = field(default=DEFAULT_POLICY)

    def handle_event(self, payload: bytes, signature_header: str) -> WebhookOutcome:
        """
        Verify and apply one webhook delivery.

        Args:
            payload: Exact request body bytes as received
            signature_header: Gateway signature header value

        Returns:
            WebhookOutcome; every outcome should be acknowledged

        Raises:
            InvalidSignature: Payload does not match the signature
            InvalidPayload: Payload could not be parsed
            MissingMetadata: Succeeded charge lacks registration metadata
            PriceMismatch: Metadata price disagrees with the computed price
            RecordNotFound: No registration for the charge reference
        """
        event = self.gateway.verify_and_parse_event(
            payload, signature_header, self.signing_secret
        )
        logger.info("Received webhook event %s (%s)", event.event_id, event.kind.value)

        if event.kind is EventKind.CHARGE_SUCCEEDED:
            self._check_metadata_price(event)
            return self._transition(event, PaymentStatus.SUCCEEDED)
        if event.kind is EventKind.CHARGE_FAILED:
            return self._transition(event, PaymentStatus.FAILED)

        logger.info("Unhandled event type for event %s", event.event_id)
        return WebhookOutcome.IGNORED

    def _check_metadata_price(self, event: GatewayEvent) -> None:
        metadata = event.metadata
        missing = [key for key in REQUIRED_METADATA if not metadata.get(key)]
        if missing:
            logger.error(
                "Missing metadata %s in webhook event %s for charge %s",
                missing,
                event.event_id,
                event.charge_reference,
            )
            raise MissingMetadata(f"Missing metadata: {', '.join(missing)}")

        try:
            asset_count = int(metadata["assets"])
            duration_months = int(metadata["duration"])
            price = Decimal(metadata["pricing"])
        except (ValueError, InvalidOperation):
            logger.error(
                "Malformed metadata in webhook event %s: %s", event.event_id, metadata
            )
            raise MissingMetadata("Malformed metadata") from None
        if asset_count <= 0 or duration_months <= 0 or not price.is_finite():
            raise MissingMetadata("Malformed metadata")

        expected = self.pricing.compute_price(asset_count, duration_months)
        if not prices_match(expected, price):
            logger.warning(
                "Price mismatch in webhook event %s: expected=%s received=%s",
                event.event_id,
                expected,
                price,
            )
            raise PriceMismatch(expected, price)

    def _transition(self, event: GatewayEvent, new_status: PaymentStatus) -> WebhookOutcome:
        reference = event.charge_reference
        if not reference:
            raise InvalidPayload(f"Event {event.event_id} has no charge reference")

        record = self.repository.update_status_by_payment_reference(reference, new_status)
        if record is not None:
            logger.info(
                "Payment %s for registration %s (reference %s)",
                new_status.value,
                record.id,
                reference,
            )
            return WebhookOutcome.APPLIED

        existing = self.repository.find_by_payment_reference(reference)
        if existing is None:
            logger.error("Registration not found for payment reference %s", reference)
            raise RecordNotFound(reference)

        logger.info(
            "Registration %s already %s; ignoring %s event %s",
            existing.id,
            existing.payment_status.value,
            new_status.value,
            event.event_id,
        )
        return WebhookOutcome.DUPLICATE
