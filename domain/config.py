"""
Configuration module for the installment service.

All configuration values are loaded from environment variables with sensible defaults.
See .env.example for all available configuration options.
"""
import os
from dataclasses import dataclass


def _get_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    return int(os.getenv(key, default))


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.getenv(key, default)


@dataclass(frozen=True)
class InstallmentConfig:
    """Installment plan settings."""

    # Days between two due dates
    payment_interval_days: int = 30
    # Upper bound accepted for number_of_payments
    max_payments: int = 120
    # Maximum plans returned by a listing
    list_limit: int = 100
    service_name: str = "installment-gateway"

    def __post_init__(self):
        for name in ("payment_interval_days", "max_payments", "list_limit"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")

    @classmethod
    def from_env(cls) -> "InstallmentConfig":
        """Build a configuration from the current environment."""
        return cls(
            payment_interval_days=_get_int("INSTALLMENT_PAYMENT_INTERVAL_DAYS", 30),
            max_payments=_get_int("INSTALLMENT_MAX_PAYMENTS", 120),
            list_limit=_get_int("INSTALLMENT_LIST_LIMIT", 100),
            service_name=_get_str("SERVICE_NAME", "installment-gateway"),
        )
