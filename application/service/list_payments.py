from domain.entities import InstallmentPayment
from domain.interfaces import InstallmentRepository

class ListPaymentsService:
    def __init__(self, installment_repo: InstallmentRepository):
        self.installment_repo = installment_repo

    async def execute(self, installment_id: str) -> list[InstallmentPayment]:
        payments = await self.installment_repo.list_payments(installment_id)
        return sorted(payments, key=lambda p: p.payment_date)
