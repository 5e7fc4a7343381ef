"""
Application Configuration

Two layers:
    - ClientConfig: explicit configuration handed to every data-access service.
    - Settings: environment loader used at the process edge only.

Core services never read the environment themselves.
"""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stockchart.schemas.market import DataSource


class ClientConfig(BaseModel):
    """Configuration injected into market data providers and services."""

    data_source: DataSource = DataSource.MOCK
    # A missing key is accepted here; the first live call fails with invalid_api_key
    api_key: Optional[str] = None

    # Endpoints
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    request_timeout: float = Field(10.0, gt=0, description="Seconds per HTTP call")
    validation_timeout: float = Field(5.0, gt=0, description="Seconds for API key checks")

    # Rate limiting (free Alpha Vantage tier: 5 calls per minute)
    rate_limit_requests: int = Field(5, gt=0)
    rate_limit_window: float = Field(60.0, gt=0, description="Window length in seconds")
    rate_limit_safety_margin: float = Field(0.1, ge=0)

    # Retry
    max_retries: int = Field(3, ge=1)
    retry_delay: float = Field(1.0, ge=0, description="Base delay, multiplied by attempt")

    # Response cache
    cache_max_entries: int = Field(100, gt=0)
    ttl_quote: float = 60.0
    ttl_intraday: float = 60.0
    ttl_daily: float = 5 * 60.0
    ttl_historical: float = 15 * 60.0
    ttl_symbol_search: float = 30 * 60.0
    ttl_company_profile: float = 60 * 60.0

    # Spans longer than this request the full series
    full_output_threshold_days: int = Field(90, gt=0)

    # Timezone of provider timestamps; None means the host's local zone
    timezone: Optional[str] = None

    # Serve flagged mock data when a live call fails
    fallback_to_mock: bool = False


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="STOCKCHART_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "StockChart"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Data source
    data_source: DataSource = DataSource.MOCK
    alpha_vantage_api_key: Optional[str] = None
    finnhub_api_key: Optional[str] = None
    fallback_to_mock: bool = False
    timezone: Optional[str] = None

    # Limits
    request_timeout: float = 10.0
    rate_limit_requests: int = 5
    rate_limit_window: float = 60.0
    cache_max_entries: int = 100

    def to_client_config(self) -> ClientConfig:
        """Build the explicit client configuration for the selected source."""
        if self.data_source == DataSource.ALPHA_VANTAGE:
            api_key = self.alpha_vantage_api_key
        elif self.data_source == DataSource.FINNHUB:
            api_key = self.finnhub_api_key
        else:
            api_key = None

        return ClientConfig(
            data_source=self.data_source,
            api_key=api_key,
            request_timeout=self.request_timeout,
            rate_limit_requests=self.rate_limit_requests,
            rate_limit_window=self.rate_limit_window,
            cache_max_entries=self.cache_max_entries,
            timezone=self.timezone,
            fallback_to_mock=self.fallback_to_mock,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
