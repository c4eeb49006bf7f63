"""
Balance settlement and schedule arithmetic for installment plans.

All amounts are integers in minor currency units.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


def settle_balance(remaining_cents: int, amount_cents: int) -> int:
    """
    Apply a payment to an outstanding balance.

    The balance never goes below zero: any excess over the remaining amount
    is absorbed, not carried as credit.
    """
    return max(0, remaining_cents - amount_cents)


def advance_due_date(current_due: datetime, interval_days: int) -> datetime:
    """Move a due date forward by one payment interval."""
    return current_due + timedelta(days=interval_days)


def split_total(total_cents: int, number_of_payments: int) -> list[int]:
    """
    Split a total into equal installments.

    Every installment gets the integer share; the last one absorbs the
    remainder so the parts always add up to the total.
    """
    base_amount = total_cents // number_of_payments
    remainder = total_cents % number_of_payments
    amounts = [base_amount] * number_of_payments
    amounts[-1] += remainder
    return amounts


def covered_installments(amounts: list[int], paid_cents: int) -> int:
    """Count how many leading installments are fully covered by paid_cents."""
    covered = 0
    cumulative = 0
    for amount in amounts:
        cumulative += amount
        if cumulative > paid_cents:
            break
        covered += 1
    return covered


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert an offset-aware timestamp to naive UTC.

    Plan dates are stored and compared as naive UTC. Naive values are
    returned unchanged.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    """Current time as naive UTC, the convention for every stored plan date."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
