"""Application configuration."""

import os
from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_engine.domain.tenants import TenantDefaults
from meal_engine.services.calendar import parse_cutoff
from meal_engine.services.pricing import ComboPricing

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_COMBO_PRICES = {"Combo 25": Decimal("25"), "Combo 35": Decimal("35")}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    default_timezone: str = "Asia/Dushanbe"
    default_cutoff_time: str = "10:30"
    default_currency_code: str = "TJS"
    combo_prices: dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_COMBO_PRICES)
    )
    weekly_freeze_limit: int = 2
    min_subscription_days: int = 5
    low_budget_threshold: Decimal = Decimal("0.20")
    max_commit_attempts: int = 3
    schedule_skip_weekends: bool = False
    settlement_job_enabled: bool = False
    settlement_interval_minutes: int = 30
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def build_pricing(settings: Settings) -> ComboPricing:
    """Build the combo price table from settings."""
    return ComboPricing.from_mapping(settings.combo_prices)


def build_tenant_defaults(settings: Settings) -> TenantDefaults:
    """Build the calendar and currency fallbacks from settings."""
    return TenantDefaults(
        timezone=settings.default_timezone,
        cutoff_time=parse_cutoff(settings.default_cutoff_time),
        currency_code=settings.default_currency_code,
    )
