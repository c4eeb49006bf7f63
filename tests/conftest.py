import pytest
import pytest_asyncio

from domain.entities import InstallmentPlan
from tests.fakes import InMemoryInstallmentRepo, InMemorySaleRepo, FixedClock, START, make_sale


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def installment_repo():
    return InMemoryInstallmentRepo()


@pytest.fixture
def sale_repo():
    return InMemorySaleRepo([make_sale("sale-1"), make_sale("sale-2", 90000)])


@pytest.fixture
def plan():
    """Active plan of 300000 over 3 payments starting on START."""
    return InstallmentPlan.create(
        sale_id="sale-1",
        total_cents=300000,
        customer_name="Ali Hassan",
        customer_phone="07701234567",
        number_of_payments=3,
        start_date=START
    )


@pytest_asyncio.fixture
async def stored_plan(installment_repo, plan):
    return await installment_repo.save_plan(plan)
