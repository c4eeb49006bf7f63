import time
from datetime import datetime
from typing import Callable, Optional
from domain.config import InstallmentConfig
from domain.entities import InstallmentPlan
from domain.exceptions import ValidationError, NotFoundError
from domain.interfaces import InstallmentRepository, SaleRepository, MetricsPort, LoggingPort
from domain.services import to_naive_utc, utc_now
from application.service.logging_support import bind_logger


class CreatePlanService:
    def __init__(
        self,
        installment_repo: InstallmentRepository,
        sale_repo: SaleRepository,
        config: Optional[InstallmentConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        metrics_port: Optional[MetricsPort] = None,
        logging_port: Optional[LoggingPort] = None
    ):
        """
        Initialize the plan creation service.

        Args:
            installment_repo: Repository persisting plans (required)
            sale_repo: Repository used to check the originating sale (required)
            config: Installment settings (defaults to InstallmentConfig())
            clock: Source of "now" (naive UTC) for the plan start date
            metrics_port: Metrics port for emitting metrics (optional)
            logging_port: Logging port for structured logging (optional)
        """
        self.installment_repo = installment_repo
        self.sale_repo = sale_repo
        self.config = config or InstallmentConfig()
        self.clock = clock
        self.metrics_port = metrics_port
        self.logging_port = logging_port

    def _validate(
        self,
        total_cents: int,
        customer_name: str,
        customer_phone: str,
        number_of_payments: int,
        start_date: datetime,
        first_payment_date: Optional[datetime]
    ) -> None:
        if total_cents <= 0:
            raise ValidationError("total_cents must be greater than 0")
        if number_of_payments < 1:
            raise ValidationError("number_of_payments must be at least 1")
        if number_of_payments > self.config.max_payments:
            raise ValidationError(f"number_of_payments cannot exceed {self.config.max_payments}")
        if not customer_name or not customer_name.strip():
            raise ValidationError("customer_name is required")
        if not customer_phone or not customer_phone.strip():
            raise ValidationError("customer_phone is required")
        if first_payment_date is not None and first_payment_date <= start_date:
            raise ValidationError("next_payment_date must be after start_date")

    async def execute(
        self,
        sale_id: str,
        total_cents: int,
        customer_name: str,
        customer_phone: str,
        number_of_payments: int,
        start_date: Optional[datetime] = None,
        first_payment_date: Optional[datetime] = None,
        identity_number: Optional[str] = None,
        guarantor_name: Optional[str] = None,
        guarantor_phone: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> InstallmentPlan:
        """
        Create an installment plan for an existing sale.

        The plan starts active with the whole total outstanding. A sale can
        back at most one plan.

        Raises:
            ValidationError: amounts, counts or dates out of range
            NotFoundError: the sale is unknown or already has a plan
            StorageError: persistence failed, nothing was written
        """
        start_time = time.time()
        log = bind_logger(
            self.logging_port,
            request_id=request_id or "unknown",
            sale_id=sale_id,
            step="plan_creation"
        )
        log.info(
            "plan_creation_started",
            total_cents=total_cents,
            number_of_payments=number_of_payments
        )

        try:
            start_date = to_naive_utc(start_date) or self.clock()
            first_payment_date = to_naive_utc(first_payment_date)
            self._validate(total_cents, customer_name, customer_phone, number_of_payments, start_date, first_payment_date)

            sale = await self.sale_repo.get_sale(sale_id)
            if sale is None:
                raise NotFoundError(f"Sale with id {sale_id} not found")
            log.debug("sale_found", final_price_cents=sale.final_price_cents, is_installment=sale.is_installment)
            existing = await self.installment_repo.get_plan_by_sale(sale_id)
            if existing is not None:
                raise NotFoundError(f"Sale with id {sale_id} already has installment plan {existing.id}")

            plan = InstallmentPlan.create(
                sale_id=sale_id,
                total_cents=total_cents,
                customer_name=customer_name.strip(),
                customer_phone=customer_phone.strip(),
                number_of_payments=number_of_payments,
                start_date=start_date,
                payment_interval_days=self.config.payment_interval_days,
                first_payment_date=first_payment_date,
                identity_number=identity_number,
                guarantor_name=guarantor_name,
                guarantor_phone=guarantor_phone
            )

            log.info("saving_plan", step="db_persist", installment_id=plan.id)
            plan = await self.installment_repo.save_plan(plan)

            if self.metrics_port:
                self.metrics_port.increment_plans_created()

            total_duration = (time.time() - start_time) * 1000
            log.info(
                "plan_creation_completed",
                duration_ms=round(total_duration, 2),
                installment_id=plan.id,
                monthly_payment_cents=plan.monthly_payment_cents,
                next_payment_date=plan.next_payment_date.isoformat()
            )
            return plan

        except (ValidationError, NotFoundError) as e:
            log.warning("plan_creation_rejected", error=e.code, reason=e.message)
            raise
        except Exception as e:
            total_duration = (time.time() - start_time) * 1000
            log.error(
                "plan_creation_failed",
                duration_ms=round(total_duration, 2),
                error=str(e),
                exc_info=True
            )
            raise
