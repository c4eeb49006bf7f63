from typing import Optional, List
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, field_validator
from domain.entities import InstallmentPlan, InstallmentPayment, RecordedPayment
from domain.services import to_naive_utc, utc_now


class InstallmentCreate(BaseModel):
    sale_id: UUID
    total_cents: int = Field(gt=0)
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    number_of_payments: int = Field(ge=1)
    start_date: Optional[datetime] = None
    # First due date; defaults to one payment interval after start_date
    next_payment_date: Optional[datetime] = None
    identity_number: Optional[str] = None
    guarantor_name: Optional[str] = None
    guarantor_phone: Optional[str] = None

    @field_validator("start_date", "next_payment_date")
    @classmethod
    def _normalize_timezone(cls, v):
        # Offsets are converted; naive values are taken as UTC
        return to_naive_utc(v)


class PaymentCreate(BaseModel):
    amount_cents: int = Field(gt=0)
    notes: Optional[str] = None


class ScheduledPaymentResponse(BaseModel):
    sequence: int
    due_date: datetime
    amount_cents: int
    status: str


class PaymentResponse(BaseModel):
    id: str
    installment_id: str
    amount_cents: int
    payment_date: datetime
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, payment: InstallmentPayment) -> "PaymentResponse":
        return cls(
            id=payment.id,
            installment_id=payment.installment_id,
            amount_cents=payment.amount_cents,
            payment_date=payment.payment_date,
            notes=payment.notes
        )


class PlanResponse(BaseModel):
    id: str
    sale_id: str
    customer_name: str
    customer_phone: str
    identity_number: Optional[str] = None
    guarantor_name: Optional[str] = None
    guarantor_phone: Optional[str] = None
    total_cents: int
    remaining_cents: int
    paid_cents: int
    monthly_payment_cents: int
    number_of_payments: int
    payment_interval_days: int
    start_date: datetime
    next_payment_date: datetime
    status: str
    overdue: bool
    schedule: List[ScheduledPaymentResponse]

    @classmethod
    def from_domain(cls, plan: InstallmentPlan, now: Optional[datetime] = None) -> "PlanResponse":
        return cls(
            id=plan.id,
            sale_id=plan.sale_id,
            customer_name=plan.customer_name,
            customer_phone=plan.customer_phone,
            identity_number=plan.identity_number,
            guarantor_name=plan.guarantor_name,
            guarantor_phone=plan.guarantor_phone,
            total_cents=plan.total_cents,
            remaining_cents=plan.remaining_cents,
            paid_cents=plan.paid_cents,
            monthly_payment_cents=plan.monthly_payment_cents,
            number_of_payments=plan.number_of_payments,
            payment_interval_days=plan.payment_interval_days,
            start_date=plan.start_date,
            next_payment_date=plan.next_payment_date,
            status=plan.status.value,
            overdue=plan.is_overdue(now or utc_now()),
            schedule=[
                ScheduledPaymentResponse(
                    sequence=s.sequence,
                    due_date=s.due_date,
                    amount_cents=s.amount_cents,
                    status=s.status.value
                )
                for s in plan.schedule()
            ]
        )


class RecordPaymentResponse(BaseModel):
    plan: PlanResponse
    payment: PaymentResponse
    replayed: bool = False

    @classmethod
    def from_domain(cls, recorded: RecordedPayment) -> "RecordPaymentResponse":
        return cls(
            plan=PlanResponse.from_domain(recorded.plan),
            payment=PaymentResponse.from_domain(recorded.payment),
            replayed=recorded.replayed
        )
