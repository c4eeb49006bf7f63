"""
Database models package.
Import Base from here or from base.py directly.
"""
from infrastructure.db.models.base import Base

# Import all models to ensure they're registered in the same registry
# This must be done after Base is created
from infrastructure.db.models.sales import SaleModel
from infrastructure.db.models.installment_plans import InstallmentPlanModel
from infrastructure.db.models.installment_payments import InstallmentPaymentModel

__all__ = ["Base", "SaleModel", "InstallmentPlanModel", "InstallmentPaymentModel"]
