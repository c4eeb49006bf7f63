from .installment_repo import InstallmentRepository
from .sale_repo import SaleRepository
from .metrics_port import MetricsPort
from .logging_port import LoggingPort, BoundLogger

__all__ = ["InstallmentRepository", "SaleRepository", "MetricsPort", "LoggingPort", "BoundLogger"]
