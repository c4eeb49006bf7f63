import time
from datetime import datetime
from typing import Callable, Optional
from domain.entities import RecordedPayment
from domain.exceptions import ValidationError, NotFoundError, InvalidStateError
from domain.interfaces import InstallmentRepository, MetricsPort, LoggingPort
from domain.services import utc_now
from application.service.logging_support import bind_logger


class RecordPaymentService:
    def __init__(
        self,
        installment_repo: InstallmentRepository,
        clock: Callable[[], datetime] = utc_now,
        metrics_port: Optional[MetricsPort] = None,
        logging_port: Optional[LoggingPort] = None
    ):
        self.installment_repo = installment_repo
        self.clock = clock
        self.metrics_port = metrics_port
        self.logging_port = logging_port

    async def execute(
        self,
        installment_id: str,
        amount_cents: int,
        notes: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> RecordedPayment:
        """
        Record a payment against an active plan.

        The plan row stays locked while the balance is settled, so concurrent
        payments on the same plan apply one after the other. The payment
        insert and the plan update commit together or not at all.

        When request_id matches a payment already recorded on this plan, that
        payment is returned again and nothing is written.

        Args:
            installment_id: ID of the plan
            amount_cents: Amount paid, in minor units
            notes: Optional free-text annotation
            request_id: Optional idempotency key supplied by the caller

        Raises:
            ValidationError: amount_cents is not positive
            NotFoundError: the plan does not exist
            InvalidStateError: the plan is already completed
            StorageError: persistence failed, nothing was written
        """
        start_time = time.time()
        log = bind_logger(
            self.logging_port,
            request_id=request_id or "unknown",
            installment_id=installment_id,
            step="payment_recording"
        )
        log.info("payment_recording_started", amount_cents=amount_cents)

        try:
            if amount_cents <= 0:
                raise ValidationError("amount_cents must be greater than 0")

            async with self.installment_repo.lock_plan(installment_id) as plan:
                if plan is None:
                    raise NotFoundError(f"Installment plan with id {installment_id} not found")
                log.debug(
                    "plan_locked",
                    remaining_cents=plan.remaining_cents,
                    status=plan.status.value,
                    next_payment_date=plan.next_payment_date.isoformat()
                )

                if request_id:
                    previous = await self.installment_repo.get_payment_by_request_id(installment_id, request_id)
                    if previous is not None:
                        log.info("payment_replayed", payment_id=previous.id)
                        return RecordedPayment(plan=plan, payment=previous, replayed=True)

                if plan.is_completed:
                    raise InvalidStateError(f"Installment plan {installment_id} is already completed")

                remaining_before = plan.remaining_cents
                payment = plan.apply_payment(
                    amount_cents=amount_cents,
                    payment_date=self.clock(),
                    notes=notes,
                    request_id=request_id
                )
                if amount_cents > remaining_before:
                    log.warning(
                        "payment_exceeds_balance",
                        remaining_cents=remaining_before,
                        excess_cents=amount_cents - remaining_before
                    )

                log.info("saving_payment", step="db_persist", payment_id=payment.id)
                await self.installment_repo.save_payment(plan, payment)

            if self.metrics_port:
                self.metrics_port.increment_payments_total(outcome="recorded")
                self.metrics_port.add_payment_amount(amount_cents)
                if plan.is_completed:
                    self.metrics_port.increment_plans_completed()
                self.metrics_port.observe_payment_duration(time.time() - start_time)

            total_duration = (time.time() - start_time) * 1000
            log.info(
                "payment_recording_completed",
                duration_ms=round(total_duration, 2),
                payment_id=payment.id,
                remaining_cents=plan.remaining_cents,
                status=plan.status.value,
                next_payment_date=plan.next_payment_date.isoformat()
            )
            return RecordedPayment(plan=plan, payment=payment)

        except (ValidationError, NotFoundError, InvalidStateError) as e:
            if self.metrics_port:
                self.metrics_port.increment_payments_total(outcome="rejected")
            log.warning("payment_recording_rejected", error=e.code, reason=e.message)
            raise
        except Exception as e:
            if self.metrics_port:
                self.metrics_port.increment_payments_total(outcome="error")
            total_duration = (time.time() - start_time) * 1000
            log.error(
                "payment_recording_failed",
                duration_ms=round(total_duration, 2),
                error=str(e),
                exc_info=True
            )
            raise
