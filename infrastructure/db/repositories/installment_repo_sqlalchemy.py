from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from domain.entities import InstallmentPlan, InstallmentPayment, PlanStatus
from domain.exceptions import NotFoundError, StorageError
from domain.interfaces import InstallmentRepository
from infrastructure.db.models.installment_plans import InstallmentPlanModel, SALE_UNIQUE_CONSTRAINT
from infrastructure.db.models.installment_payments import InstallmentPaymentModel


class InstallmentRepoSqlalchemy(InstallmentRepository):
    """SQLAlchemy implementation of InstallmentRepository."""

    def __init__(self, db: AsyncSession):
        self.db = db
        # Plan rows locked by an open lock_plan block, keyed by plan id
        self._locked: dict[str, InstallmentPlanModel] = {}

    async def save_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        """Insert a new plan and commit. A second plan for the same sale raises NotFoundError."""
        plan_model = InstallmentPlanModel.from_domain(plan)
        try:
            self.db.add(plan_model)
            await self.db.commit()
            await self.db.refresh(plan_model)
        except IntegrityError as e:
            await self.db.rollback()
            # Lost a race with another request creating a plan for the same sale
            if SALE_UNIQUE_CONSTRAINT in str(e.orig):
                raise NotFoundError(f"Sale with id {plan.sale_id} already has an installment plan") from e
            raise StorageError(f"Could not save installment plan: {e}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Could not save installment plan: {e}") from e
        return plan_model.to_domain()

    async def get_plan(self, installment_id: str) -> Optional[InstallmentPlan]:
        stmt = select(InstallmentPlanModel).where(InstallmentPlanModel.id == installment_id)
        plan_model = await self._scalar(stmt)
        return plan_model.to_domain() if plan_model else None

    async def get_plan_by_sale(self, sale_id: str) -> Optional[InstallmentPlan]:
        stmt = select(InstallmentPlanModel).where(InstallmentPlanModel.sale_id == sale_id)
        plan_model = await self._scalar(stmt)
        return plan_model.to_domain() if plan_model else None

    async def list_plans(self, status: Optional[PlanStatus] = None, limit: int = 100) -> list[InstallmentPlan]:
        stmt = select(InstallmentPlanModel)
        if status is not None:
            stmt = stmt.where(InstallmentPlanModel.status == status.value)
        stmt = stmt.order_by(InstallmentPlanModel.start_date.desc()).limit(limit)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not list installment plans: {e}") from e
        return [pm.to_domain() for pm in result.scalars().all()]

    async def list_payments(self, installment_id: str) -> list[InstallmentPayment]:
        stmt = (
            select(InstallmentPaymentModel)
            .where(InstallmentPaymentModel.installment_id == installment_id)
            .order_by(InstallmentPaymentModel.payment_date.asc())
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not list payments: {e}") from e
        return [pm.to_domain() for pm in result.scalars().all()]

    async def get_payment_by_request_id(self, installment_id: str, request_id: str) -> Optional[InstallmentPayment]:
        stmt = select(InstallmentPaymentModel).where(
            InstallmentPaymentModel.installment_id == installment_id,
            InstallmentPaymentModel.request_id == request_id
        )
        payment_model = await self._scalar(stmt)
        return payment_model.to_domain() if payment_model else None

    @asynccontextmanager
    async def lock_plan(self, installment_id: str) -> AsyncIterator[Optional[InstallmentPlan]]:
        """
        Lock one plan row for the duration of the block.

        SELECT ... FOR UPDATE makes concurrent payments on the same plan wait
        for each other while leaving other plans untouched. Everything staged
        inside the block is committed on exit, or rolled back on error.
        """
        stmt = (
            select(InstallmentPlanModel)
            .where(InstallmentPlanModel.id == installment_id)
            .with_for_update()
        )
        try:
            result = await self.db.execute(stmt)
            plan_model = result.scalar_one_or_none()
            if plan_model is not None:
                self._locked[installment_id] = plan_model
            yield plan_model.to_domain() if plan_model else None
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Could not record payment: {e}") from e
        except BaseException:
            await self.db.rollback()
            raise
        finally:
            self._locked.pop(installment_id, None)

    async def save_payment(self, plan: InstallmentPlan, payment: InstallmentPayment) -> None:
        plan_model = self._locked.get(plan.id)
        if plan_model is None:
            raise StorageError(f"Installment plan {plan.id} is not locked by this unit of work")
        plan_model.apply_settlement(plan)
        self.db.add(InstallmentPaymentModel.from_domain(payment))
        await self.db.flush()

    async def _scalar(self, stmt):
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageError(f"Storage query failed: {e}") from e
        return result.scalar_one_or_none()
