"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory registration repository with an atomic conditional update
- Stripe-compatible webhook signing
- Webhook event payload factories
"""

import hashlib
import hmac
import json
import threading
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

import pytest

from assetpay.domain.exceptions import DuplicateKey
from assetpay.domain.models import NewRegistration, PaymentStatus, RegistrationRecord

WEBHOOK_SECRET = "whsec_test_secret"


class InMemoryRegistrationRepository:
    """RegistrationRepository fake. A lock stands in for the database row lock."""

    def __init__(self) -> None:
        self.records: dict[str, RegistrationRecord] = {}
        self.reads = 0
        self.writes = 0
        self._lock = threading.Lock()

    def create(self, draft: NewRegistration) -> RegistrationRecord:
        with self._lock:
            self.writes += 1
            for record in self.records.values():
                if record.email == draft.email or record.payment_reference == draft.payment_reference:
                    raise DuplicateKey(draft.email)
            now = datetime.now(timezone.utc)
            record = RegistrationRecord(
                id=uuid4(),
                email=draft.email,
                name=draft.name,
                company=draft.company,
                asset_count=draft.asset_count,
                duration_months=draft.duration_months,
                price=draft.price,
                payment_reference=draft.payment_reference,
                payment_status=PaymentStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self.records[draft.payment_reference] = record
            return record

    def find_by_email(self, email: str) -> RegistrationRecord | None:
        self.reads += 1
        return next((r for r in self.records.values() if r.email == email), None)

    def find_by_payment_reference(self, payment_reference: str) -> RegistrationRecord | None:
        self.reads += 1
        return self.records.get(payment_reference)

    def update_status_by_payment_reference(
        self, payment_reference: str, new_status: PaymentStatus
    ) -> RegistrationRecord | None:
        with self._lock:
            self.writes += 1
            record = self.records.get(payment_reference)
            if record is None or record.payment_status is not PaymentStatus.PENDING:
                return None
            updated = replace(
                record, payment_status=new_status, updated_at=datetime.now(timezone.utc)
            )
            self.records[payment_reference] = updated
            return updated


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header value for payload."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def build_event(
    event_type: str,
    payment_intent_id: str,
    metadata: dict[str, str] | None = None,
    event_id: str | None = None,
) -> bytes:
    """Serialize a minimal Stripe event carrying a PaymentIntent."""
    event = {
        "id": event_id or f"evt_{uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": payment_intent_id,
                "object": "payment_intent",
                "metadata": metadata or {},
            }
        },
    }
    return json.dumps(event).encode()


@pytest.fixture
def registration_repository() -> InMemoryRegistrationRepository:
    return InMemoryRegistrationRepository()


@pytest.fixture
def webhook_secret() -> str:
    return WEBHOOK_SECRET


@pytest.fixture
def sign() -> Callable[..., str]:
    return sign_payload


@pytest.fixture
def make_event() -> Callable[..., bytes]:
    return build_event


@pytest.fixture
def registration_metadata() -> dict[str, str]:
    """Charge metadata for 5 assets over 1 month at $50."""
    return {
        "name": "Ada",
        "email": "a@b.com",
        "company": "Acme",
        "assets": "5",
        "duration": "1",
        "pricing": "50.00",
    }
