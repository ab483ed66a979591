"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./ledgerly.db"

    # Exchange rate provider (fixer.io style, EUR based on the free plan)
    exchange_rate_api_url: str = "http://data.fixer.io/api/latest"
    exchange_rate_api_key: str = ""
    rate_pivot_currency: str = "EUR"
    rate_refresh_enabled: bool = True
    rate_refresh_interval_seconds: float = 30 * 60

    # Reporting
    reporting_currency: str = "USD"

    # Service
    service_name: str = "ledgerly"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()
