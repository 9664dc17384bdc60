"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from typing import Any, Protocol
from uuid import UUID

from .models import (
    Charge,
    CustomerSurvey,
    GatewayEvent,
    NewRegistration,
    PaymentStatus,
    RegistrationRecord,
    SurveyDraft,
)


class RegistrationRepository(Protocol):
    """Port interface for registration persistence."""

    def create(self, draft: NewRegistration) -> RegistrationRecord:
        """
        Insert a new registration in PENDING state.

        Raises:
            DuplicateKey: If the email or payment reference already exists
        """
        ...

    def find_by_email(self, email: str) -> RegistrationRecord | None:
        """Look up a registration by normalized email."""
        ...

    def find_by_payment_reference(self, payment_reference: str) -> RegistrationRecord | None:
        """Look up a registration by gateway charge id."""
        ...

    def update_status_by_payment_reference(
        self, payment_reference: str, new_status: PaymentStatus
    ) -> RegistrationRecord | None:
        """
        Move a PENDING registration to new_status.

        Must be a single atomic conditional write. Concurrent callers for
        the same reference resolve as first-wins: exactly one receives the
        updated record, the others receive None.

        Returns:
            The updated record, or None if no PENDING record matched
        """
        ...


class PaymentGateway(Protocol):
    """Port interface for the external payment provider."""

    def create_charge(
        self, amount_minor_units: int, currency: str, metadata: dict[str, str]
    ) -> Charge:
        """
        Create a charge the client can complete out of band.

        Raises:
            PaymentGatewayError: If the provider rejects or fails the request
        """
        ...

    def verify_and_parse_event(
        self, payload: bytes, signature_header: str, signing_secret: str
    ) -> GatewayEvent:
        """
        Verify the raw payload against its signature, then parse it.

        Raises:
            InvalidSignature: If the signature does not match the exact bytes
            InvalidPayload: If the verified payload cannot be parsed
        """
        ...


class SurveyRepository(Protocol):
    """Port interface for survey persistence."""

    def create(self, draft: SurveyDraft) -> CustomerSurvey:
        """Insert a survey. Raises DuplicateKey on an existing email."""
        ...

    def find_by_email(self, email: str) -> CustomerSurvey | None: ...

    def get(self, survey_id: UUID) -> CustomerSurvey | None: ...

    def list_recent(self, offset: int, limit: int) -> list[CustomerSurvey]:
        """Return surveys newest first."""
        ...

    def count(self) -> int: ...

    def update(self, survey_id: UUID, changes: dict[str, Any]) -> CustomerSurvey | None:
        """Apply a partial update. Returns None if the survey does not exist."""
        ...

    def delete(self, survey_id: UUID) -> bool: ...

    def search(
        self,
        text: str | None,
        company: str | None,
        designation: str | None,
        limit: int,
    ) -> list[CustomerSurvey]:
        """Case-insensitive substring search, newest first."""
        ...
