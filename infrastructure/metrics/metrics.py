# infrastructure/metrics/metrics.py
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

installment_plans_created_total = Counter(
    "installment_plans_created_total",
    "Installment plans created"
)

installment_payments_total = Counter(
    "installment_payments_total",
    "Installment payment attempts",
    ["outcome"]  # recorded|rejected|error
)

installment_payment_amount_cents_total = Counter(
    "installment_payment_amount_cents_total",
    "Sum of recorded payment amounts in minor currency units"
)

installment_plans_completed_total = Counter(
    "installment_plans_completed_total",
    "Installment plans fully paid"
)

installment_payment_duration_seconds = Histogram(
    "installment_payment_duration_seconds",
    "Time to record a payment, lock to commit",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5]
)


def metrics_endpoint():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
