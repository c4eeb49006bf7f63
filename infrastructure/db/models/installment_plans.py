from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Column, String, Integer, BigInteger, DateTime, CheckConstraint, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, relationship
from domain.entities.installment_plan import InstallmentPlan, PlanStatus
from infrastructure.db.models.base import Base

if TYPE_CHECKING:
    from infrastructure.db.models.installment_payments import InstallmentPaymentModel

# A sale backs at most one plan
SALE_UNIQUE_CONSTRAINT = "uq_installments_sale_id"


class InstallmentPlanModel(Base):
    __tablename__ = "installments"
    __table_args__ = (
        UniqueConstraint("sale_id", name=SALE_UNIQUE_CONSTRAINT),
        CheckConstraint("total_cents > 0", name="ck_installments_total_positive"),
        CheckConstraint(
            "remaining_cents >= 0 AND remaining_cents <= total_cents",
            name="ck_installments_remaining_in_range"
        ),
        CheckConstraint("number_of_payments >= 1", name="ck_installments_payments_positive"),
    )

    id: Mapped[str] = Column(UUID(as_uuid=False), primary_key=True)
    # No FK to sales: the sales table belongs to the sales-entry workflow
    sale_id: Mapped[str] = Column(UUID(as_uuid=False), nullable=False)
    customer_name: Mapped[str] = Column(String, nullable=False)
    customer_phone: Mapped[str] = Column(String, nullable=False)
    identity_number: Mapped[Optional[str]] = Column(String, nullable=True)
    guarantor_name: Mapped[Optional[str]] = Column(String, nullable=True)
    guarantor_phone: Mapped[Optional[str]] = Column(String, nullable=True)
    total_cents: Mapped[int] = Column(BigInteger, nullable=False)
    remaining_cents: Mapped[int] = Column(BigInteger, nullable=False)
    number_of_payments: Mapped[int] = Column(Integer, nullable=False)
    payment_interval_days: Mapped[int] = Column(Integer, nullable=False, default=30)
    start_date: Mapped[datetime] = Column(DateTime, nullable=False)
    first_payment_date: Mapped[datetime] = Column(DateTime, nullable=False)
    next_payment_date: Mapped[datetime] = Column(DateTime, nullable=False)
    status: Mapped[str] = Column(String, nullable=False, default=PlanStatus.ACTIVE.value, index=True)

    payments_rel: Mapped[list["InstallmentPaymentModel"]] = relationship(
        "InstallmentPaymentModel",
        back_populates="plan_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise"
    )

    def to_domain(self) -> InstallmentPlan:
        return InstallmentPlan(
            id=self.id,
            sale_id=self.sale_id,
            customer_name=self.customer_name,
            customer_phone=self.customer_phone,
            total_cents=self.total_cents,
            remaining_cents=self.remaining_cents,
            number_of_payments=self.number_of_payments,
            start_date=self.start_date,
            first_payment_date=self.first_payment_date,
            next_payment_date=self.next_payment_date,
            status=PlanStatus(self.status),
            payment_interval_days=self.payment_interval_days,
            identity_number=self.identity_number,
            guarantor_name=self.guarantor_name,
            guarantor_phone=self.guarantor_phone,
        )

    @classmethod
    def from_domain(cls, plan: InstallmentPlan) -> "InstallmentPlanModel":
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
            number_of_payments=plan.number_of_payments,
            payment_interval_days=plan.payment_interval_days,
            start_date=plan.start_date,
            first_payment_date=plan.first_payment_date,
            next_payment_date=plan.next_payment_date,
            status=plan.status.value,
        )

    def apply_settlement(self, plan: InstallmentPlan) -> None:
        """Copy the fields a payment may change; everything else is immutable."""
        self.remaining_cents = plan.remaining_cents
        self.next_payment_date = plan.next_payment_date
        self.status = plan.status.value
