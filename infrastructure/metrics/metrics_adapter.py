"""
Metrics adapter that implements MetricsPort protocol.

Wraps the Prometheus metrics so the application layer never imports
prometheus_client directly.
"""
from infrastructure.metrics.metrics import (
    installment_plans_created_total,
    installment_payments_total,
    installment_payment_amount_cents_total,
    installment_plans_completed_total,
    installment_payment_duration_seconds,
)


class MetricsAdapter:
    """Adapter that implements MetricsPort on top of the /metrics registry."""

    def increment_plans_created(self) -> None:
        installment_plans_created_total.inc()

    def increment_payments_total(self, outcome: str) -> None:
        """
        Increment installment_payments_total.

        Args:
            outcome: One of "recorded", "rejected", or "error"
        """
        installment_payments_total.labels(outcome=outcome).inc()

    def add_payment_amount(self, amount_cents: int) -> None:
        installment_payment_amount_cents_total.inc(amount_cents)

    def increment_plans_completed(self) -> None:
        installment_plans_completed_total.inc()

    def observe_payment_duration(self, seconds: float) -> None:
        installment_payment_duration_seconds.observe(seconds)
