"""
Registration domain service.

Validates a registration request, checks the client's price against the
server-side calculation, creates a charge with the payment gateway and
persists a PENDING registration tied to the charge's payment reference.

Ordering
========
The record is written only after the gateway has confirmed the charge, so a
gateway failure or timeout never leaves a record behind. The opposite window
(charge created, record write failed) is logged with the orphaned payment
reference and the error is re-raised; the webhook reports the missing record
as RecordNotFound when the charge settles.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from email_validator import EmailNotValidError, validate_email

from .exceptions import DuplicateKey, DuplicateRegistration, InvalidInput, PriceMismatch
from .models import NewRegistration, RegistrationResult
from .ports import PaymentGateway, RegistrationRepository
from .pricing import CENT, DEFAULT_POLICY, PricingPolicy, prices_match, to_minor_units

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def build_charge_metadata(
    *,
    email: str,
    company: str,
    asset_count: int,
    duration_months: int,
    price: Decimal,
    name: str | None = None,
) -> dict[str, str]:
    """
    Registration fields as string metadata attached to the charge.

    The webhook has no access to the original request, so this must carry
    everything needed to re-derive and re-check the price.
    """
    metadata = {
        "email": email,
        "company": company,
        "assets": str(asset_count),
        "duration": str(duration_months),
        "pricing": str(price),
    }
    if name:
        metadata["name"] = name
    return metadata


@dataclass
class RegistrationService:
    """
    Domain service for customer registration.

    Orchestrates validation, price verification, charge creation and
    pending-record persistence.
    """

    repository: RegistrationRepository
    gateway: PaymentGateway
    currency: str = "usd"
    pricing: PricingPolicy = field(default=DEFAULT_POLICY)

    def register(
        self,
        *,
        email: str,
        company: str,
        asset_count: int,
        duration_months: int,
        price: Decimal,
        name: str | None = None,
    ) -> RegistrationResult:
        """
        Register a customer and create the charge they must pay.

        Returns:
            The client payment handle and the new record id

        Raises:
            InvalidInput: Missing fields, non-positive counts or bad email
            PriceMismatch: Supplied price differs from the computed one
            DuplicateRegistration: Email already registered
            PaymentGatewayError: Charge could not be created
        """
        normalized_email = self._validate_email(email)
        company = (company or "").strip()
        if not company:
            raise InvalidInput("company is required")
        name = name.strip() if name and name.strip() else None
        if price is None:
            raise InvalidInput("pricing is required")
        if not price.is_finite():
            raise InvalidInput("pricing must be a finite amount")

        # Raises InvalidInput for non-positive counts
        expected = self.pricing.compute_price(asset_count, duration_months)
        if not prices_match(expected, price):
            logger.warning(
                "Pricing mismatch for %s: expected=%s received=%s",
                normalized_email,
                expected,
                price,
            )
            raise PriceMismatch(expected, price)
        # Stored, charged and metadata amounts are all whole cents
        price = price.quantize(CENT, rounding=ROUND_HALF_UP)

        if self.repository.find_by_email(normalized_email) is not None:
            logger.warning("Registration already exists: %s", normalized_email)
            raise DuplicateRegistration(normalized_email)

        metadata = build_charge_metadata(
            email=normalized_email,
            company=company,
            asset_count=asset_count,
            duration_months=duration_months,
            price=price,
            name=name,
        )
        charge = self.gateway.create_charge(to_minor_units(price), self.currency, metadata)

        draft = NewRegistration(
            email=normalized_email,
            company=company,
            asset_count=asset_count,
            duration_months=duration_months,
            price=price,
            payment_reference=charge.payment_reference,
            name=name,
        )
        try:
            record = self.repository.create(draft)
        except DuplicateKey:
            logger.error(
                "Registration for %s lost a race after charge %s was created",
                normalized_email,
                charge.payment_reference,
            )
            raise DuplicateRegistration(normalized_email) from None
        except Exception:
            logger.error(
                "Failed to persist registration for %s; charge %s is orphaned",
                normalized_email,
                charge.payment_reference,
            )
            raise

        logger.info(
            "Registration %s saved with pending status, payment reference %s",
            record.id,
            record.payment_reference,
        )
        return RegistrationResult(
            payment_handle=charge.client_payment_handle, record_id=record.id
        )

    def _validate_email(self, email: str | None) -> str:
        if not email or not email.strip():
            raise InvalidInput("email is required")
        normalized = normalize_email(email)
        try:
            validate_email(normalized, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidInput(f"Please enter a valid email address: {e}") from None
        return normalized
