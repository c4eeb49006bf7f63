#!/usr/bin/env python3
"""
Installment Plan Simulator

Replays a series of payments against an in-memory plan and prints how the
balance, due date and schedule evolve. Nothing is written to the database.

Usage:
    python scripts/simulate_installments.py 300000 3 --payments 100000 250000
    python scripts/simulate_installments.py 90000 6 --payments 15000 15000 --interval 14
    python scripts/simulate_installments.py 300000 3 --payments 100000 --json

Arguments:
    total_cents: Plan total in minor currency units
    number_of_payments: Number of installments
    --payments: Payment amounts to apply, in order
    --interval: Days between due dates (default: INSTALLMENT_PAYMENT_INTERVAL_DAYS or 30)
    --start: Plan start date, YYYY-MM-DD (default: today)
    --json: Output raw JSON instead of formatted text
"""
import argparse
import json
import os
import sys
from datetime import datetime, timedelta

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from domain.config import InstallmentConfig
from domain.entities import InstallmentPlan
from domain.services import utc_now


def simulate(total_cents: int, number_of_payments: int, payments: list[int],
             interval_days: int, start_date: datetime) -> dict:
    """Apply payments in order and collect a step for each one."""
    plan = InstallmentPlan.create(
        sale_id="simulation",
        total_cents=total_cents,
        customer_name="simulation",
        customer_phone="-",
        number_of_payments=number_of_payments,
        start_date=start_date,
        payment_interval_days=interval_days,
    )
    steps = []
    rejected = []
    for i, amount_cents in enumerate(payments):
        if plan.is_completed:
            rejected.append({"amount_cents": amount_cents, "reason": "plan already completed"})
            continue
        # One payment per interval, paid on its due date
        paid_at = start_date + timedelta(days=(i + 1) * interval_days)
        plan.apply_payment(amount_cents=amount_cents, payment_date=paid_at)
        steps.append({
            "amount_cents": amount_cents,
            "remaining_cents": plan.remaining_cents,
            "status": plan.status.value,
            "next_payment_date": plan.next_payment_date.date().isoformat(),
        })
    return {
        "total_cents": plan.total_cents,
        "monthly_payment_cents": plan.monthly_payment_cents,
        "remaining_cents": plan.remaining_cents,
        "status": plan.status.value,
        "steps": steps,
        "rejected": rejected,
        "schedule": [
            {
                "sequence": s.sequence,
                "due_date": s.due_date.date().isoformat(),
                "amount_cents": s.amount_cents,
                "status": s.status.value,
            }
            for s in plan.schedule()
        ],
    }


def format_result(result: dict) -> str:
    """Format result for human-readable output."""
    lines = []

    lines.append("=" * 60)
    lines.append("INSTALLMENT PLAN SIMULATION")
    lines.append("=" * 60)

    lines.append(f"\nTotal: {result['total_cents']:,}")
    lines.append(f"Monthly Payment: {result['monthly_payment_cents']:,}")
    lines.append(f"Remaining: {result['remaining_cents']:,}")
    lines.append(f"Status: {result['status'].upper()}")

    lines.append("\n--- Payments ---")
    for i, step in enumerate(result["steps"], start=1):
        lines.append(
            f"{i}. paid {step['amount_cents']:,} -> remaining {step['remaining_cents']:,} "
            f"({step['status']}, next due {step['next_payment_date']})"
        )
    for rejected in result["rejected"]:
        lines.append(f"x. rejected {rejected['amount_cents']:,}: {rejected['reason']}")

    lines.append("\n--- Schedule ---")
    for s in result["schedule"]:
        lines.append(f"{s['sequence']}. {s['due_date']}  {s['amount_cents']:,}  {s['status']}")

    lines.append("\n" + "=" * 60)

    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(
        description="Simulate payments against an installment plan"
    )
    parser.add_argument("total_cents", type=int, help="Plan total in minor units")
    parser.add_argument("number_of_payments", type=int, help="Number of installments")
    parser.add_argument("--payments", type=int, nargs="*", default=[], help="Payment amounts, in order")
    parser.add_argument("--interval", type=int, default=None, help="Days between due dates")
    parser.add_argument("--start", default=None, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--json", action="store_true", help="Output raw JSON")

    args = parser.parse_args()

    if args.total_cents <= 0 or args.number_of_payments < 1:
        print("Error: total_cents must be > 0 and number_of_payments >= 1")
        sys.exit(1)
    if any(p <= 0 for p in args.payments):
        print("Error: payment amounts must be > 0")
        sys.exit(1)

    try:
        start_date = datetime.strptime(args.start, "%Y-%m-%d") if args.start else utc_now()
    except ValueError as e:
        print(f"Error: Invalid start date {args.start}: {e}")
        sys.exit(1)

    interval_days = args.interval or InstallmentConfig.from_env().payment_interval_days
    result = simulate(args.total_cents, args.number_of_payments, args.payments, interval_days, start_date)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print(format_result(result))


if __name__ == "__main__":
    main()
