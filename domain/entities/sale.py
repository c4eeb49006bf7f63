from dataclasses import dataclass
from datetime import datetime


@dataclass
class Sale:
    id: str
    customer_name: str
    final_price_cents: int
    is_installment: bool
    created_at: datetime
