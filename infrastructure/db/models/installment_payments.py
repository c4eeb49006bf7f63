from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, Text, BigInteger, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, relationship
from domain.entities.installment_payment import InstallmentPayment
from infrastructure.db.models.base import Base


class InstallmentPaymentModel(Base):
    __tablename__ = "installment_payments"
    __table_args__ = (
        UniqueConstraint("installment_id", "request_id", name="uq_installment_payments_request"),
    )

    id: Mapped[str] = Column(UUID(as_uuid=False), primary_key=True)
    installment_id: Mapped[str] = Column(
        UUID(as_uuid=False),
        ForeignKey("installments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount_cents: Mapped[int] = Column(BigInteger, nullable=False)
    payment_date: Mapped[datetime] = Column(DateTime, nullable=False)
    notes: Mapped[Optional[str]] = Column(Text, nullable=True)
    # Idempotency key supplied by the caller (X-Request-ID)
    request_id: Mapped[Optional[str]] = Column(String, nullable=True)

    plan_rel: Mapped["InstallmentPlanModel"] = relationship(
        "InstallmentPlanModel",
        back_populates="payments_rel"
    )

    def to_domain(self) -> InstallmentPayment:
        return InstallmentPayment(
            id=self.id,
            installment_id=self.installment_id,
            amount_cents=self.amount_cents,
            payment_date=self.payment_date,
            notes=self.notes,
            request_id=self.request_id
        )

    @classmethod
    def from_domain(cls, payment: InstallmentPayment) -> "InstallmentPaymentModel":
        return cls(
            id=payment.id,
            installment_id=payment.installment_id,
            amount_cents=payment.amount_cents,
            payment_date=payment.payment_date,
            notes=payment.notes,
            request_id=payment.request_id,
        )
