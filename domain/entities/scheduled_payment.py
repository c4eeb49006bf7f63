from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ScheduledPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


@dataclass
class ScheduledPayment:
    sequence: int
    due_date: datetime
    amount_cents: int
    status: ScheduledPaymentStatus
