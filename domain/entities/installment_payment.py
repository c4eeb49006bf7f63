from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import uuid4


@dataclass
class InstallmentPayment:
    id: str
    installment_id: str
    amount_cents: int
    payment_date: datetime
    notes: Optional[str] = None
    request_id: Optional[str] = None

    @staticmethod
    def create(installment_id: str, amount_cents: int, payment_date: datetime,
               notes: Optional[str] = None, request_id: Optional[str] = None) -> 'InstallmentPayment':
        return InstallmentPayment(
            id=str(uuid4()),
            installment_id=installment_id,
            amount_cents=amount_cents,
            payment_date=payment_date,
            notes=notes,
            request_id=request_id
        )
