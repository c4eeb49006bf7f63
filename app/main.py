from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from domain.config import InstallmentConfig
from infrastructure.metrics.metrics import metrics_endpoint
from app.middleware.request_logging import RequestLoggingMiddleware
from app.routers.v1 import router

# Import database models to ensure they're registered
from infrastructure.db.models import Base, SaleModel, InstallmentPlanModel, InstallmentPaymentModel  # noqa: F401

app = FastAPI(title="installment-gateway")
app.state.installment_config = InstallmentConfig.from_env()
app.add_middleware(RequestLoggingMiddleware)

@app.get("/metrics")
async def metrics():
    return metrics_endpoint()

@app.get("/health")
async def health():
    return {"status": "ok", "message": "installment-gateway is running"}

app.include_router(router)
