"""Configuration management for split-ledger."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPLIT_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Currency all balances and analytics are reported in
    base_currency: str = "USD"

    # Analytics settings
    fairness_threshold_percent: float = 5.0  # Fair if score is below this
    fast_settlement_days: int = 14  # Settled within this many days counts as fast

    # Expense statuses fed into balances / analytics
    balance_statuses: list[str] = ["active"]
    analytics_statuses: list[str] = ["active", "settled"]


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SPLIT_LEDGER_* variables "
            f"in your environment or .env file.\n"
            f"Error: {e}"
        ) from e
