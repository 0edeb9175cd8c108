"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class MiniBankConfig(BaseSettings):
    """MiniBank ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="MINIBANK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage configuration
    storage_backend: str = "sqlite"  # sqlite or memory
    database_path: str = "minibank.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules configuration
    currency: str = "USD"
    large_transaction_threshold: str = "5000.00"  # Transfers above this get a log row
    suspicious_transaction_threshold: str = "10000.00"
    top_customers_limit: int = 5

    # Feature flags
    enable_audit_logging: bool = True

    @property
    def large_threshold(self) -> Decimal:
        return Decimal(self.large_transaction_threshold)

    @property
    def suspicious_threshold(self) -> Decimal:
        return Decimal(self.suspicious_transaction_threshold)


# Global configuration instance
config = MiniBankConfig()


def get_config() -> MiniBankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> MiniBankConfig:
    """Reload configuration from environment"""
    global config
    config = MiniBankConfig()
    return config
