from domain.interfaces import InstallmentRepository
from domain.entities import InstallmentPlan
from domain.exceptions import NotFoundError

class GetPlanService:
    def __init__(self, installment_repo: InstallmentRepository):
        self.installment_repo = installment_repo

    async def execute(self, installment_id: str) -> InstallmentPlan:
        """Get a plan by ID, raising NotFoundError when it does not exist."""
        plan = await self.installment_repo.get_plan(installment_id)
        if plan is None:
            raise NotFoundError(f"Installment plan with id {installment_id} not found")
        return plan
