# import
from .sale import Sale
from .installment_payment import InstallmentPayment
from .scheduled_payment import ScheduledPayment, ScheduledPaymentStatus
from .installment_plan import InstallmentPlan, PlanStatus, RecordedPayment

__all__ = [
    "Sale",
    "InstallmentPayment",
    "ScheduledPayment",
    "ScheduledPaymentStatus",
    "InstallmentPlan",
    "PlanStatus",
    "RecordedPayment",
]
