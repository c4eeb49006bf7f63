from typing_extensions import Protocol


class MetricsPort(Protocol):
    """Protocol for metrics operations."""

    def increment_plans_created(self) -> None:
        """Increment the installment_plans_created_total counter."""
        ...

    def increment_payments_total(self, outcome: str) -> None:
        """
        Increment the installment_payments_total counter.

        Args:
            outcome: One of "recorded", "rejected", or "error"
        """
        ...

    def add_payment_amount(self, amount_cents: int) -> None:
        """Add a recorded payment to installment_payment_amount_cents_total."""
        ...

    def increment_plans_completed(self) -> None:
        """Increment the installment_plans_completed_total counter."""
        ...

    def observe_payment_duration(self, seconds: float) -> None:
        """Record how long a payment took end to end."""
        ...
