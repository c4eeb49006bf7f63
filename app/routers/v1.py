from fastapi import APIRouter, Depends, HTTPException, status, Request, Header, Query
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from application.service.create_plan import CreatePlanService
from application.service.get_plan import GetPlanService
from application.service.list_payments import ListPaymentsService
from application.service.list_plans import ListPlansService
from application.service.record_payment import RecordPaymentService
from domain.config import InstallmentConfig
from domain.entities import PlanStatus
from domain.exceptions import InstallmentError, ValidationError, NotFoundError, InvalidStateError, StorageError
from infrastructure.db.database import get_db_session
from infrastructure.db.repositories.installment_repo_sqlalchemy import InstallmentRepoSqlalchemy
from infrastructure.db.repositories.sale_repo_sqlalchemy import SaleRepoSqlalchemy
from infrastructure.logging.logging_adapter import LoggingAdapter
from infrastructure.metrics.metrics_adapter import MetricsAdapter
from app.schemas.installment_schema import (
    InstallmentCreate,
    PaymentCreate,
    PlanResponse,
    PaymentResponse,
    RecordPaymentResponse,
)


_STATUS_BY_ERROR = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: InstallmentError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    message = error.message
    if isinstance(error, StorageError):
        # Storage details stay in the logs
        message = "Storage is temporarily unavailable, please retry"
    return HTTPException(status_code=status_code, detail={"error": error.code, "message": message})


def get_installment_config(request: Request) -> InstallmentConfig:
    return getattr(request.app.state, "installment_config", None) or InstallmentConfig.from_env()


router = APIRouter(prefix="/v1")

@router.post("/installments", status_code=status.HTTP_201_CREATED)
async def create_installment(
    payload: InstallmentCreate,
    x_request_id: Optional[str] = Header(None, alias="X-Request-ID"),
    db: AsyncSession = Depends(get_db_session),
    config: InstallmentConfig = Depends(get_installment_config)
) -> PlanResponse:
    """
    Create an installment plan for an existing sale.

    The plan starts active with the whole total outstanding. The first due
    date defaults to one payment interval after the start date.
    """
    srv = CreatePlanService(
        installment_repo=InstallmentRepoSqlalchemy(db),
        sale_repo=SaleRepoSqlalchemy(db),
        config=config,
        metrics_port=MetricsAdapter(),
        logging_port=LoggingAdapter()
    )
    try:
        plan = await srv.execute(
            sale_id=str(payload.sale_id),
            total_cents=payload.total_cents,
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            number_of_payments=payload.number_of_payments,
            start_date=payload.start_date,
            first_payment_date=payload.next_payment_date,
            identity_number=payload.identity_number,
            guarantor_name=payload.guarantor_name,
            guarantor_phone=payload.guarantor_phone,
            request_id=x_request_id
        )
    except InstallmentError as e:
        raise to_http_exception(e)
    return PlanResponse.from_domain(plan)

@router.get("/installments")
async def list_installments(
    status_filter: Optional[PlanStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db_session),
    config: InstallmentConfig = Depends(get_installment_config)
) -> list[PlanResponse]:
    """List plans newest first. Filter with ?status=active or ?status=completed."""
    srv = ListPlansService(InstallmentRepoSqlalchemy(db), config=config)
    try:
        plans = await srv.execute(status=status_filter)
    except InstallmentError as e:
        raise to_http_exception(e)
    return [PlanResponse.from_domain(p) for p in plans]

@router.get("/installments/{installment_id}")
async def get_installment(installment_id: UUID, db: AsyncSession = Depends(get_db_session)) -> PlanResponse:
    """Get a plan with its derived monthly payment and payment schedule."""
    srv = GetPlanService(InstallmentRepoSqlalchemy(db))
    try:
        plan = await srv.execute(str(installment_id))
    except InstallmentError as e:
        raise to_http_exception(e)
    return PlanResponse.from_domain(plan)

@router.get("/installments/{installment_id}/payments")
async def list_installment_payments(
    installment_id: UUID,
    db: AsyncSession = Depends(get_db_session)
) -> list[PaymentResponse]:
    """Payments recorded on a plan, oldest first."""
    srv = ListPaymentsService(InstallmentRepoSqlalchemy(db))
    try:
        payments = await srv.execute(str(installment_id))
    except InstallmentError as e:
        raise to_http_exception(e)
    return [PaymentResponse.from_domain(p) for p in payments]

@router.post("/installments/{installment_id}/payments", status_code=status.HTTP_201_CREATED)
async def record_installment_payment(
    installment_id: UUID,
    payload: PaymentCreate,
    x_request_id: Optional[str] = Header(
        None,
        alias="X-Request-ID",
        description="Idempotency key. Retrying with the same X-Request-ID returns the original payment instead of recording it twice.",
        examples=["550e8400-e29b-41d4-a716-446655440000"]
    ),
    db: AsyncSession = Depends(get_db_session)
) -> RecordPaymentResponse:
    """
    Record a payment against an active plan.

    - Balance is reduced by the amount, never below zero
    - Plan becomes completed when nothing remains
    - Otherwise the next due date moves one interval forward
    - A completed plan rejects further payments with 409
    """
    srv = RecordPaymentService(
        installment_repo=InstallmentRepoSqlalchemy(db),
        metrics_port=MetricsAdapter(),
        logging_port=LoggingAdapter()
    )
    try:
        recorded = await srv.execute(
            installment_id=str(installment_id),
            amount_cents=payload.amount_cents,
            notes=payload.notes,
            request_id=x_request_id
        )
    except InstallmentError as e:
        raise to_http_exception(e)
    return RecordPaymentResponse.from_domain(recorded)
