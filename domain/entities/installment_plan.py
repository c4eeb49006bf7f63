from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import uuid4

from domain.services.settlement import settle_balance, advance_due_date, split_total, covered_installments
from .installment_payment import InstallmentPayment
from .scheduled_payment import ScheduledPayment, ScheduledPaymentStatus


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class InstallmentPlan:
    id: str
    sale_id: str
    customer_name: str
    customer_phone: str
    total_cents: int
    remaining_cents: int
    number_of_payments: int
    start_date: datetime
    first_payment_date: datetime
    next_payment_date: datetime
    status: PlanStatus = PlanStatus.ACTIVE
    payment_interval_days: int = 30
    identity_number: Optional[str] = None
    guarantor_name: Optional[str] = None
    guarantor_phone: Optional[str] = None

    @staticmethod
    def create(
        sale_id: str,
        total_cents: int,
        customer_name: str,
        customer_phone: str,
        number_of_payments: int,
        start_date: datetime,
        payment_interval_days: int = 30,
        first_payment_date: Optional[datetime] = None,
        identity_number: Optional[str] = None,
        guarantor_name: Optional[str] = None,
        guarantor_phone: Optional[str] = None,
    ) -> 'InstallmentPlan':
        # First due date is one interval after the start unless the seller picked one
        first_due = first_payment_date or start_date + timedelta(days=payment_interval_days)
        return InstallmentPlan(
            id=str(uuid4()),
            sale_id=sale_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            total_cents=total_cents,
            remaining_cents=total_cents,
            number_of_payments=number_of_payments,
            start_date=start_date,
            first_payment_date=first_due,
            next_payment_date=first_due,
            status=PlanStatus.ACTIVE,
            payment_interval_days=payment_interval_days,
            identity_number=identity_number,
            guarantor_name=guarantor_name,
            guarantor_phone=guarantor_phone,
        )

    @property
    def monthly_payment_cents(self) -> int:
        return self.total_cents // self.number_of_payments

    @property
    def paid_cents(self) -> int:
        return self.total_cents - self.remaining_cents

    @property
    def is_completed(self) -> bool:
        return self.status == PlanStatus.COMPLETED

    def is_overdue(self, now: datetime) -> bool:
        return not self.is_completed and self.next_payment_date < now

    def apply_payment(
        self,
        amount_cents: int,
        payment_date: datetime,
        notes: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> InstallmentPayment:
        """
        Settle a payment against the outstanding balance.

        Mutates remaining_cents, status and next_payment_date and returns the
        payment record to persist alongside the plan. Callers must check the
        plan is active first.
        """
        payment = InstallmentPayment.create(
            installment_id=self.id,
            amount_cents=amount_cents,
            payment_date=payment_date,
            notes=notes,
            request_id=request_id,
        )
        self.remaining_cents = settle_balance(self.remaining_cents, amount_cents)
        if self.remaining_cents == 0:
            self.status = PlanStatus.COMPLETED
        else:
            # Fixed cadence: the next due date moves from the previous due date, not from today
            self.next_payment_date = advance_due_date(self.next_payment_date, self.payment_interval_days)
        return payment

    def schedule(self) -> list[ScheduledPayment]:
        """Derive the expected installments and mark the ones already covered."""
        amounts = split_total(self.total_cents, self.number_of_payments)
        covered = covered_installments(amounts, self.paid_cents)
        schedule = []
        for i, amount_cents in enumerate(amounts):
            schedule.append(ScheduledPayment(
                sequence=i + 1,
                due_date=self.first_payment_date + timedelta(days=i * self.payment_interval_days),
                amount_cents=amount_cents,
                status=ScheduledPaymentStatus.PAID if i < covered else ScheduledPaymentStatus.PENDING,
            ))
        return schedule


@dataclass
class RecordedPayment:
    plan: InstallmentPlan
    payment: InstallmentPayment
    replayed: bool = False
