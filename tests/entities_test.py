# entities test

from datetime import datetime, timedelta
from domain.entities import (
    InstallmentPlan,
    InstallmentPayment,
    PlanStatus,
    ScheduledPaymentStatus,
)
from tests.fakes import START


def test_plan_entity_create(plan):
    assert plan.id is not None
    assert plan.sale_id == "sale-1"
    assert plan.total_cents == 300000
    assert plan.remaining_cents == plan.total_cents
    assert plan.status == PlanStatus.ACTIVE
    assert plan.start_date == START
    assert plan.next_payment_date == START + timedelta(days=30)
    assert plan.first_payment_date == plan.next_payment_date

def test_plan_entity_create_with_first_payment_date():
    first_due = START + timedelta(days=10)
    plan = InstallmentPlan.create(
        sale_id="sale-1",
        total_cents=1000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=2,
        start_date=START,
        first_payment_date=first_due
    )
    assert plan.next_payment_date == first_due

def test_monthly_payment_is_derived(plan):
    assert plan.monthly_payment_cents == 100000
    plan.remaining_cents = 50000
    # Derived from the total, not from what is left
    assert plan.monthly_payment_cents == 100000

def test_apply_partial_payment_advances_from_previous_due_date(plan):
    due_before = plan.next_payment_date
    late_payment_date = due_before + timedelta(days=12)

    payment = plan.apply_payment(amount_cents=100000, payment_date=late_payment_date, notes="first")

    assert plan.remaining_cents == 200000
    assert plan.status == PlanStatus.ACTIVE
    assert plan.next_payment_date == due_before + timedelta(days=30)
    assert payment.installment_id == plan.id
    assert payment.amount_cents == 100000
    assert payment.payment_date == late_payment_date
    assert payment.notes == "first"

def test_apply_overpayment_clamps_to_zero_and_completes(plan):
    plan.apply_payment(amount_cents=100000, payment_date=START)
    due_before = plan.next_payment_date

    payment = plan.apply_payment(amount_cents=250000, payment_date=START)

    assert plan.remaining_cents == 0
    assert plan.status == PlanStatus.COMPLETED
    assert plan.is_completed is True
    # Completing payment keeps the last due date
    assert plan.next_payment_date == due_before
    # The record keeps the amount actually handed over
    assert payment.amount_cents == 250000

def test_paid_cents(plan):
    plan.apply_payment(amount_cents=120000, payment_date=START)
    assert plan.paid_cents == 120000
    assert plan.paid_cents + plan.remaining_cents == plan.total_cents

def test_schedule_splits_total_and_marks_covered(plan):
    plan.apply_payment(amount_cents=150000, payment_date=START)
    schedule = plan.schedule()

    assert [s.sequence for s in schedule] == [1, 2, 3]
    assert [s.amount_cents for s in schedule] == [100000, 100000, 100000]
    assert [s.status for s in schedule] == [
        ScheduledPaymentStatus.PAID,
        ScheduledPaymentStatus.PENDING,
        ScheduledPaymentStatus.PENDING,
    ]
    for i, s in enumerate(schedule):
        assert s.due_date == plan.first_payment_date + timedelta(days=i * 30)

def test_schedule_last_installment_absorbs_remainder():
    plan = InstallmentPlan.create(
        sale_id="sale-1",
        total_cents=1000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=3,
        start_date=START
    )
    amounts = [s.amount_cents for s in plan.schedule()]
    assert amounts == [333, 333, 334]
    assert sum(amounts) == plan.total_cents

def test_schedule_all_paid_when_completed(plan):
    plan.apply_payment(amount_cents=300000, payment_date=START)
    assert all(s.status == ScheduledPaymentStatus.PAID for s in plan.schedule())

def test_is_overdue(plan):
    assert plan.is_overdue(START) is False
    assert plan.is_overdue(plan.next_payment_date + timedelta(days=1)) is True
    plan.apply_payment(amount_cents=300000, payment_date=START)
    assert plan.is_overdue(datetime(2030, 1, 1)) is False

def test_installment_payment_entity_create():
    payment = InstallmentPayment.create(
        installment_id="123",
        amount_cents=1000,
        payment_date=START,
        request_id="req-1"
    )
    assert payment.id is not None
    assert payment.installment_id == "123"
    assert payment.amount_cents == 1000
    assert payment.notes is None
    assert payment.request_id == "req-1"
