"""
Domain models - plain dataclasses shared by services and adapters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class PaymentStatus(str, Enum):
    """
    Payment state of a registration.

    Transitions (forward-only, enforced by the repository's conditional update):
    - PENDING -> SUCCEEDED (charge succeeded webhook)
    - PENDING -> FAILED (charge failed webhook)

    SUCCEEDED and FAILED are terminal.
    """

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


@dataclass(frozen=True)
class NewRegistration:
    """Registration fields known before the store assigns id and timestamps."""

    email: str
    company: str
    asset_count: int
    duration_months: int
    price: Decimal
    payment_reference: str
    name: str | None = None


@dataclass(frozen=True)
class RegistrationRecord:
    """A stored registration."""

    id: UUID
    email: str
    company: str
    asset_count: int
    duration_months: int
    price: Decimal
    payment_reference: str
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime
    name: str | None = None


@dataclass(frozen=True)
class RegistrationResult:
    """What the client needs to finish paying."""

    payment_handle: str
    record_id: UUID


@dataclass(frozen=True)
class Charge:
    """A charge created by the payment gateway."""

    payment_reference: str
    client_payment_handle: str


class EventKind(str, Enum):
    CHARGE_SUCCEEDED = "charge_succeeded"
    CHARGE_FAILED = "charge_failed"
    OTHER = "other"


@dataclass(frozen=True)
class GatewayEvent:
    """A verified, parsed webhook event."""

    kind: EventKind
    event_id: str
    charge_reference: str | None
    metadata: dict[str, str] = field(default_factory=dict)


class WebhookOutcome(Enum):
    """How a verified webhook event was handled. All are acknowledged."""

    APPLIED = "applied"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


@dataclass(frozen=True)
class SurveyEntry:
    question: str
    answer: str = ""


@dataclass(frozen=True)
class SurveyDraft:
    """Survey fields as submitted, already normalized to entries."""

    company_name: str
    designation: str
    email: str
    mobile: str
    entries: list[SurveyEntry]
    name: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class CustomerSurvey:
    """A stored survey response."""

    id: UUID
    company_name: str
    designation: str
    email: str
    mobile: str
    entries: list[SurveyEntry]
    created_at: datetime
    updated_at: datetime
    name: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class SurveyPage:
    items: list[CustomerSurvey]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.per_page)
