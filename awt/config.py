"""Configuration management for AWT."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from awt.core.constants import DEFAULT_TABLE_NAME, PaginationConstants, PollingConstants


class Config(BaseSettings):
    """Application configuration."""

    api_base_url: str = Field(
        default="http://localhost:8080",
        alias="AWT_API_BASE_URL",
        description="Portal backend base URL (without /api/v1)",
    )
    api_token: SecretStr | None = Field(default=None, alias="AWT_API_TOKEN", description="Bearer token for the portal")
    use_test_routes: bool = Field(
        default=False,
        alias="AWT_USE_TEST_ROUTES",
        description="Use the unauthenticated /api/v1/test/* routes",
    )

    # Paging and polling
    page_size: int = Field(
        default=PaginationConstants.DEFAULT_PAGE_SIZE,
        alias="AWT_PAGE_SIZE",
        ge=1,
        le=PaginationConstants.MAX_PAGE_SIZE,
        description="Records per page for DePara results",
    )
    poll_interval: float = Field(
        default=float(PollingConstants.INTERVAL_SECONDS),
        alias="AWT_POLL_INTERVAL",
        gt=0,
        description="Seconds between job log status checks",
    )
    default_table: str = Field(
        default=DEFAULT_TABLE_NAME,
        alias="AWT_DEFAULT_TABLE",
        description="Integration table used when none is selected",
    )

    log_level: str = Field(default="WARNING", alias="AWT_LOG_LEVEL", description="Logging level for the CLI")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )


def load_config() -> Config:
    """Load configuration from environment and .env file."""
    return Config()
