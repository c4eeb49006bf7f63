from typing import AsyncContextManager, Optional
from typing_extensions import Protocol
from domain.entities import InstallmentPlan, InstallmentPayment, PlanStatus


class InstallmentRepository(Protocol):
    async def save_plan(self, plan: InstallmentPlan) -> InstallmentPlan: ...
    async def get_plan(self, installment_id: str) -> Optional[InstallmentPlan]: ...
    async def get_plan_by_sale(self, sale_id: str) -> Optional[InstallmentPlan]: ...
    async def list_plans(self, status: Optional[PlanStatus] = None, limit: int = 100) -> list[InstallmentPlan]: ...
    async def list_payments(self, installment_id: str) -> list[InstallmentPayment]: ...
    async def get_payment_by_request_id(self, installment_id: str, request_id: str) -> Optional[InstallmentPayment]: ...

    def lock_plan(self, installment_id: str) -> AsyncContextManager[Optional[InstallmentPlan]]:
        """
        Open a unit of work holding an exclusive lock on one plan.

        Yields the plan (or None if unknown). Writes made through save_payment
        inside the block commit together when the block exits normally and
        are rolled back if it raises.
        """
        ...

    async def save_payment(self, plan: InstallmentPlan, payment: InstallmentPayment) -> None:
        """Stage a payment and the updated plan inside an open lock_plan block."""
        ...
