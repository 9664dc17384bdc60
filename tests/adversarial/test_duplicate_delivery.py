"""
Adversarial tests for concurrent webhook delivery.

The payment provider delivers at least once and may deliver the same event
several times in parallel, or deliver conflicting outcomes close together.
The conditional UPDATE must let exactly one transition through.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from psycopg_pool import ConnectionPool

from assetpay.adapters.payments import StripePaymentGateway
from assetpay.adapters.repository.postgres import PostgresRegistrationRepository
from assetpay.domain.models import PaymentStatus, WebhookOutcome
from assetpay.domain.reconciliation import WebhookReconciliationService

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial

NUM_DELIVERIES = 8


class TestConcurrentDelivery:
    """Simulate a provider retrying the same event in parallel."""

    def test_parallel_status_updates_exactly_one_wins(
        self, pool: ConnectionPool, pending_registration
    ) -> None:
        """Parallel conditional updates for one reference: exactly one returns the record."""
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(NUM_DELIVERIES)

        def deliver() -> None:
            repo = PostgresRegistrationRepository(pool)
            barrier.wait()
            result = repo.update_status_by_payment_reference("pi_race", PaymentStatus.SUCCEEDED)
            with results_lock:
                results.append(result)

        with ThreadPoolExecutor(max_workers=NUM_DELIVERIES) as executor:
            futures = [executor.submit(deliver) for _ in range(NUM_DELIVERIES)]
            for f in futures:
                f.result()

        winners = [r for r in results if r is not None]
        assert len(winners) == 1, f"{len(winners)} deliveries transitioned the record"
        assert winners[0].payment_status is PaymentStatus.SUCCEEDED

    def test_conflicting_outcomes_settle_on_one_terminal_state(
        self, pool: ConnectionPool, pending_registration
    ) -> None:
        """Succeeded and failed racing for the same reference: first wins, other is a no-op."""
        barrier = threading.Barrier(2)
        results = {}

        def deliver(status: PaymentStatus) -> None:
            repo = PostgresRegistrationRepository(pool)
            barrier.wait()
            results[status] = repo.update_status_by_payment_reference("pi_race", status)

        with ThreadPoolExecutor(max_workers=2) as executor:
            list(executor.map(deliver, [PaymentStatus.SUCCEEDED, PaymentStatus.FAILED]))

        applied = [status for status, record in results.items() if record is not None]
        assert len(applied) == 1

        final = PostgresRegistrationRepository(pool).find_by_payment_reference("pi_race")
        assert final.payment_status is applied[0]

    def test_service_acknowledges_every_duplicate(
        self, pool: ConnectionPool, pending_registration, make_event, sign, webhook_secret
    ) -> None:
        """Concurrent signed deliveries apply once and acknowledge the rest."""
        service = WebhookReconciliationService(
            repository=PostgresRegistrationRepository(pool),
            gateway=StripePaymentGateway(api_key="sk_test_unused"),
            signing_secret=webhook_secret,
        )
        payload = make_event(
            "payment_intent.succeeded",
            "pi_race",
            {
                "email": "race@example.com",
                "company": "Acme",
                "assets": "5",
                "duration": "1",
                "pricing": "50.00",
            },
        )
        header = sign(payload)

        with ThreadPoolExecutor(max_workers=NUM_DELIVERIES) as executor:
            outcomes = list(
                executor.map(lambda _: service.handle_event(payload, header), range(NUM_DELIVERIES))
            )

        assert outcomes.count(WebhookOutcome.APPLIED) == 1
        assert outcomes.count(WebhookOutcome.DUPLICATE) == NUM_DELIVERIES - 1
