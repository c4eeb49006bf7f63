from typing import Optional
from domain.config import InstallmentConfig
from domain.entities import InstallmentPlan, PlanStatus
from domain.interfaces import InstallmentRepository

class ListPlansService:
    def __init__(self, installment_repo: InstallmentRepository, config: Optional[InstallmentConfig] = None):
        self.installment_repo = installment_repo
        self.config = config or InstallmentConfig()

    async def execute(self, status: Optional[PlanStatus] = None) -> list[InstallmentPlan]:
        """List plans newest first, optionally only active or only completed ones."""
        return await self.installment_repo.list_plans(status=status, limit=self.config.list_limit)
