# use cases test

from datetime import datetime, timedelta, timezone
import pytest

from application.service.create_plan import CreatePlanService
from application.service.get_plan import GetPlanService
from application.service.list_payments import ListPaymentsService
from application.service.list_plans import ListPlansService
from application.service.record_payment import RecordPaymentService
from domain.config import InstallmentConfig
from domain.entities import PlanStatus
from domain.exceptions import ValidationError, NotFoundError, InvalidStateError, StorageError
from domain.interfaces import MetricsPort, LoggingPort, InstallmentRepository
from tests.fakes import START


def _create_service(installment_repo, sale_repo, clock, **kwargs):
    return CreatePlanService(installment_repo=installment_repo, sale_repo=sale_repo, clock=clock, **kwargs)


@pytest.mark.asyncio
async def test_create_plan(installment_repo, sale_repo, clock):
    service = _create_service(installment_repo, sale_repo, clock)
    plan = await service.execute(
        sale_id="sale-1",
        total_cents=300000,
        customer_name=" Ali Hassan ",
        customer_phone="07701234567",
        number_of_payments=3,
        identity_number="A123",
        guarantor_name="Omar"
    )

    assert plan.id is not None
    assert plan.remaining_cents == plan.total_cents == 300000
    assert plan.status == PlanStatus.ACTIVE
    assert plan.monthly_payment_cents == 100000
    assert plan.start_date == START
    assert plan.next_payment_date == START + timedelta(days=30)
    assert plan.customer_name == "Ali Hassan"
    assert plan.identity_number == "A123"
    assert plan.guarantor_name == "Omar"
    assert installment_repo.plans[plan.id].remaining_cents == 300000


@pytest.mark.asyncio
async def test_create_plan_uses_configured_interval(installment_repo, sale_repo, clock):
    service = _create_service(installment_repo, sale_repo, clock, config=InstallmentConfig(payment_interval_days=14))
    plan = await service.execute(
        sale_id="sale-1",
        total_cents=1000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=4
    )
    assert plan.payment_interval_days == 14
    assert plan.next_payment_date == START + timedelta(days=14)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"total_cents": 0},
        {"total_cents": -500},
        {"number_of_payments": 0},
        {"number_of_payments": 121},
        {"customer_name": "   "},
        {"customer_phone": ""},
        {"first_payment_date": START},
    ],
)
async def test_create_plan_validation_error_persists_nothing(installment_repo, sale_repo, clock, overrides):
    service = _create_service(installment_repo, sale_repo, clock)
    kwargs = dict(
        sale_id="sale-1",
        total_cents=300000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=3,
        start_date=START
    )
    kwargs.update(overrides)

    with pytest.raises(ValidationError):
        await service.execute(**kwargs)
    assert installment_repo.plans == {}


@pytest.mark.asyncio
async def test_create_plan_unknown_sale(installment_repo, sale_repo, clock):
    service = _create_service(installment_repo, sale_repo, clock)
    with pytest.raises(NotFoundError):
        await service.execute(
            sale_id="missing",
            total_cents=1000,
            customer_name="Ali",
            customer_phone="0770",
            number_of_payments=1
        )
    assert installment_repo.plans == {}


@pytest.mark.asyncio
async def test_create_plan_sale_already_linked(installment_repo, sale_repo, clock, stored_plan):
    service = _create_service(installment_repo, sale_repo, clock)
    with pytest.raises(NotFoundError) as exc_info:
        await service.execute(
            sale_id=stored_plan.sale_id,
            total_cents=1000,
            customer_name="Ali",
            customer_phone="0770",
            number_of_payments=1
        )
    assert stored_plan.id in exc_info.value.message
    assert len(installment_repo.plans) == 1


@pytest.mark.asyncio
async def test_create_plan_emits_metric_and_logs(mocker, installment_repo, sale_repo, clock):
    metrics = mocker.Mock(spec=MetricsPort)
    logging_port = mocker.Mock(spec=LoggingPort)
    log = logging_port.bind.return_value

    service = _create_service(installment_repo, sale_repo, clock, metrics_port=metrics, logging_port=logging_port)
    await service.execute(
        sale_id="sale-2",
        total_cents=90000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=3,
        request_id="req-1"
    )

    metrics.increment_plans_created.assert_called_once()
    logging_port.bind.assert_called_once_with(request_id="req-1", sale_id="sale-2", step="plan_creation")
    events = [c.args[0] for c in log.info.call_args_list]
    assert events[0] == "plan_creation_started"
    assert events[-1] == "plan_creation_completed"


@pytest.mark.asyncio
async def test_record_payment_scenario(installment_repo, clock, stored_plan):
    """300000 over 3: pay 100000, overpay 250000, then any payment is refused."""
    service = RecordPaymentService(installment_repo, clock=clock)
    first_due = stored_plan.next_payment_date

    recorded = await service.execute(stored_plan.id, amount_cents=100000, notes="first month")
    assert recorded.plan.remaining_cents == 200000
    assert recorded.plan.status == PlanStatus.ACTIVE
    assert recorded.plan.next_payment_date == first_due + timedelta(days=30)
    assert recorded.payment.amount_cents == 100000
    assert recorded.payment.notes == "first month"
    assert recorded.payment.payment_date == START
    assert recorded.replayed is False

    recorded = await service.execute(stored_plan.id, amount_cents=250000)
    assert recorded.plan.remaining_cents == 0
    assert recorded.plan.status == PlanStatus.COMPLETED

    with pytest.raises(InvalidStateError):
        await service.execute(stored_plan.id, amount_cents=1)

    stored = await installment_repo.get_plan(stored_plan.id)
    assert stored.remaining_cents == 0
    assert stored.status == PlanStatus.COMPLETED
    assert len(installment_repo.payments) == 2


@pytest.mark.asyncio
async def test_record_payment_on_completed_plan_changes_nothing(installment_repo, clock, stored_plan):
    service = RecordPaymentService(installment_repo, clock=clock)
    await service.execute(stored_plan.id, amount_cents=300000)
    before = await installment_repo.get_plan(stored_plan.id)

    for amount in (1, 100000, 999999):
        with pytest.raises(InvalidStateError):
            await service.execute(stored_plan.id, amount_cents=amount)

    assert await installment_repo.get_plan(stored_plan.id) == before
    assert len(installment_repo.payments) == 1


@pytest.mark.asyncio
async def test_record_payment_balance_invariants(installment_repo, clock, stored_plan):
    service = RecordPaymentService(installment_repo, clock=clock)
    previous = stored_plan.remaining_cents

    for amount in (30000, 45000, 1, 99999, 50000, 200000):
        clock.advance(7)
        recorded = await service.execute(stored_plan.id, amount_cents=amount)
        remaining = recorded.plan.remaining_cents
        assert 0 <= remaining <= stored_plan.total_cents
        assert remaining <= previous
        previous = remaining

        paid = sum(p.amount_cents for p in installment_repo.payments)
        assert min(paid, stored_plan.total_cents) == stored_plan.total_cents - remaining
        if recorded.plan.is_completed:
            break

    assert recorded.plan.status == PlanStatus.COMPLETED


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -100])
async def test_record_payment_rejects_non_positive_amount(installment_repo, clock, stored_plan, amount):
    service = RecordPaymentService(installment_repo, clock=clock)
    with pytest.raises(ValidationError):
        await service.execute(stored_plan.id, amount_cents=amount)
    assert installment_repo.payments == []


@pytest.mark.asyncio
async def test_record_payment_unknown_plan(installment_repo, clock):
    service = RecordPaymentService(installment_repo, clock=clock)
    with pytest.raises(NotFoundError):
        await service.execute("missing", amount_cents=100)


@pytest.mark.asyncio
async def test_record_payment_replays_same_request_id(installment_repo, clock, stored_plan):
    service = RecordPaymentService(installment_repo, clock=clock)

    first = await service.execute(stored_plan.id, amount_cents=100000, request_id="req-42")
    retry = await service.execute(stored_plan.id, amount_cents=100000, request_id="req-42")

    assert retry.replayed is True
    assert retry.payment.id == first.payment.id
    assert retry.plan.remaining_cents == 200000
    assert len(installment_repo.payments) == 1


@pytest.mark.asyncio
async def test_record_payment_replay_of_completing_payment(installment_repo, clock, stored_plan):
    service = RecordPaymentService(installment_repo, clock=clock)
    first = await service.execute(stored_plan.id, amount_cents=300000, request_id="req-final")

    retry = await service.execute(stored_plan.id, amount_cents=300000, request_id="req-final")

    assert retry.replayed is True
    assert retry.payment.id == first.payment.id
    assert retry.plan.status == PlanStatus.COMPLETED


@pytest.mark.asyncio
async def test_record_payment_storage_failure_leaves_no_partial_change(installment_repo, clock, stored_plan):
    installment_repo.fail_on_save_payment = True
    service = RecordPaymentService(installment_repo, clock=clock)

    with pytest.raises(StorageError):
        await service.execute(stored_plan.id, amount_cents=100000)

    stored = await installment_repo.get_plan(stored_plan.id)
    assert stored.remaining_cents == 300000
    assert stored.next_payment_date == stored_plan.next_payment_date
    assert installment_repo.payments == []

    # Retrying the whole operation is safe
    installment_repo.fail_on_save_payment = False
    recorded = await service.execute(stored_plan.id, amount_cents=100000)
    assert recorded.plan.remaining_cents == 200000


@pytest.mark.asyncio
async def test_record_payment_metrics(mocker, installment_repo, clock, stored_plan):
    metrics = mocker.Mock(spec=MetricsPort)
    service = RecordPaymentService(installment_repo, clock=clock, metrics_port=metrics)

    await service.execute(stored_plan.id, amount_cents=100000)
    await service.execute(stored_plan.id, amount_cents=200000)
    with pytest.raises(InvalidStateError):
        await service.execute(stored_plan.id, amount_cents=5)

    outcomes = [c.kwargs["outcome"] for c in metrics.increment_payments_total.call_args_list]
    assert outcomes == ["recorded", "recorded", "rejected"]
    assert [c.args[0] for c in metrics.add_payment_amount.call_args_list] == [100000, 200000]
    metrics.increment_plans_completed.assert_called_once()
    assert metrics.observe_payment_duration.call_count == 2


@pytest.mark.asyncio
async def test_record_payment_error_outcome_on_storage_failure(mocker, installment_repo, clock, stored_plan):
    installment_repo.fail_on_save_payment = True
    metrics = mocker.Mock(spec=MetricsPort)
    logging_port = mocker.Mock(spec=LoggingPort)
    service = RecordPaymentService(installment_repo, clock=clock, metrics_port=metrics, logging_port=logging_port)

    with pytest.raises(StorageError):
        await service.execute(stored_plan.id, amount_cents=100)

    metrics.increment_payments_total.assert_called_once_with(outcome="error")
    log = logging_port.bind.return_value
    assert log.error.call_args.args[0] == "payment_recording_failed"
    assert log.error.call_args.kwargs["exc_info"] is True


@pytest.mark.asyncio
async def test_get_plan(installment_repo, stored_plan):
    plan = await GetPlanService(installment_repo).execute(stored_plan.id)
    assert plan == stored_plan


@pytest.mark.asyncio
async def test_get_plan_not_found(mocker):
    repo = mocker.AsyncMock(spec=InstallmentRepository)
    repo.get_plan.return_value = None
    with pytest.raises(NotFoundError):
        await GetPlanService(repo).execute("missing")


@pytest.mark.asyncio
async def test_list_payments_ordered_by_payment_date(installment_repo, clock, stored_plan):
    service = RecordPaymentService(installment_repo, clock=clock)
    clock.advance(20)
    await service.execute(stored_plan.id, amount_cents=1000)
    clock.advance(-10)
    await service.execute(stored_plan.id, amount_cents=2000)

    payments = await ListPaymentsService(installment_repo).execute(stored_plan.id)

    assert [p.amount_cents for p in payments] == [2000, 1000]
    assert payments[0].payment_date < payments[1].payment_date


@pytest.mark.asyncio
async def test_list_payments_empty(installment_repo, stored_plan):
    assert await ListPaymentsService(installment_repo).execute(stored_plan.id) == []
    assert await ListPaymentsService(installment_repo).execute("unknown") == []


@pytest.mark.asyncio
async def test_list_plans_filters_by_status(installment_repo, sale_repo, clock):
    create = _create_service(installment_repo, sale_repo, clock)
    first = await create.execute(
        sale_id="sale-1", total_cents=1000, customer_name="Ali", customer_phone="0770", number_of_payments=1
    )
    clock.advance(1)
    second = await create.execute(
        sale_id="sale-2", total_cents=2000, customer_name="Sara", customer_phone="0771", number_of_payments=2
    )
    await RecordPaymentService(installment_repo, clock=clock).execute(first.id, amount_cents=1000)

    service = ListPlansService(installment_repo)
    assert [p.id for p in await service.execute()] == [second.id, first.id]
    assert [p.id for p in await service.execute(status=PlanStatus.ACTIVE)] == [second.id]
    assert [p.id for p in await service.execute(status=PlanStatus.COMPLETED)] == [first.id]


@pytest.mark.asyncio
async def test_list_plans_passes_configured_limit(mocker):
    repo = mocker.AsyncMock(spec=InstallmentRepository)
    repo.list_plans.return_value = []
    await ListPlansService(repo, config=InstallmentConfig(list_limit=5)).execute(status=PlanStatus.ACTIVE)
    repo.list_plans.assert_awaited_once_with(status=PlanStatus.ACTIVE, limit=5)


@pytest.mark.asyncio
async def test_create_plan_converts_offset_dates_to_naive_utc(installment_repo, sale_repo, clock):
    service = _create_service(installment_repo, sale_repo, clock)
    plan = await service.execute(
        sale_id="sale-1",
        total_cents=300000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=3,
        start_date=datetime(2026, 1, 1, 13, 0, 0, tzinfo=timezone(timedelta(hours=3))),
        first_payment_date=datetime(2026, 2, 1, 10, 0, 0, tzinfo=timezone.utc)
    )

    assert plan.start_date == datetime(2026, 1, 1, 10, 0, 0)
    assert plan.next_payment_date == datetime(2026, 2, 1, 10, 0, 0)
    assert plan.start_date.tzinfo is None
    assert plan.next_payment_date.tzinfo is None
    assert plan.is_overdue(clock()) is False


@pytest.mark.asyncio
async def test_create_plan_offset_first_due_before_naive_start(installment_repo, sale_repo, clock):
    service = _create_service(installment_repo, sale_repo, clock)
    with pytest.raises(ValidationError):
        await service.execute(
            sale_id="sale-1",
            total_cents=1000,
            customer_name="Ali",
            customer_phone="0770",
            number_of_payments=1,
            first_payment_date=datetime(2025, 12, 31, 10, 0, 0, tzinfo=timezone.utc)
        )
    assert installment_repo.plans == {}


@pytest.mark.asyncio
async def test_create_plan_logs_sale_lookup_at_debug(mocker, installment_repo, sale_repo, clock):
    logging_port = mocker.Mock(spec=LoggingPort)
    log = logging_port.bind.return_value

    await _create_service(installment_repo, sale_repo, clock, logging_port=logging_port).execute(
        sale_id="sale-2",
        total_cents=90000,
        customer_name="Ali",
        customer_phone="0770",
        number_of_payments=3
    )

    log.debug.assert_called_once_with("sale_found", final_price_cents=90000, is_installment=True)


@pytest.mark.asyncio
async def test_record_payment_logs_locked_plan_at_debug(mocker, installment_repo, clock, stored_plan):
    logging_port = mocker.Mock(spec=LoggingPort)
    log = logging_port.bind.return_value

    await RecordPaymentService(installment_repo, clock=clock, logging_port=logging_port).execute(
        stored_plan.id, amount_cents=1000
    )

    log.debug.assert_called_once()
    assert log.debug.call_args.args[0] == "plan_locked"
    assert log.debug.call_args.kwargs["remaining_cents"] == 300000
    assert log.debug.call_args.kwargs["status"] == "active"
