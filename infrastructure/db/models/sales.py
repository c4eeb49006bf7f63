from datetime import datetime
from sqlalchemy import Column, String, Boolean, BigInteger, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped
from domain.entities.sale import Sale
from infrastructure.db.models.base import Base


class SaleModel(Base):
    """Sales are written by the sales-entry workflow; this service only reads them."""

    __tablename__ = "sales"

    id: Mapped[str] = Column(UUID(as_uuid=False), primary_key=True)
    customer_name: Mapped[str] = Column(String, nullable=False)
    final_price_cents: Mapped[int] = Column(BigInteger, nullable=False)
    is_installment: Mapped[bool] = Column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = Column(DateTime, nullable=False)

    def to_domain(self) -> Sale:
        return Sale(
            id=self.id,
            customer_name=self.customer_name,
            final_price_cents=self.final_price_cents,
            is_installment=self.is_installment,
            created_at=self.created_at
        )
