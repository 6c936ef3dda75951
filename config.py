"""Configuration management for BrandLink."""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Database settings
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection URL; requests get 503 when unset"
    )

    db_create_tables: bool = Field(
        default=False,
        description="Create tables on startup if they do not exist"
    )

    db_pool_max_size: int = Field(
        default=10,
        ge=1,
        description="Maximum size of the database connection pool"
    )

    db_timeout_seconds: int = Field(
        default=30,
        description="Connection and command timeout in seconds"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=9200,
        description="Port to listen on"
    )

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes. 1 = single process (async handles many connections); >1 = multi-process."
    )

    # Resolution settings
    legacy_response_shape: bool = Field(
        default=False,
        description="Return single links as {targetUrl, logoUrl, teamName, ...} without the type/link envelope"
    )

    # Plan limits
    pro_price_ids: str = Field(
        default="",
        description="Comma-separated subscription price ids with unlimited links"
    )

    free_plan_link_limit: int = Field(
        default=2,
        ge=0,
        description="Maximum links for teams without a pro price id"
    )

    # Analytics reporting
    analytics_default_days: int = Field(
        default=14,
        ge=1,
        description="Reporting window when none is requested"
    )

    analytics_max_days: int = Field(
        default=90,
        ge=1,
        description="Largest reporting window"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @property
    def pro_price_id_list(self) -> List[str]:
        """Pro price ids parsed from the comma-separated setting."""
        return [item.strip() for item in self.pro_price_ids.split(",") if item.strip()]

    def safe_dump(self) -> dict:
        """Configuration for logging, without database credentials."""
        data = self.model_dump()
        if self.database_url:
            data["database_url"] = "<configured>"
        return data


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
