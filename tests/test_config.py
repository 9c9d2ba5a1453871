"""Tests for settings parsing."""

from datetime import time
from decimal import Decimal

from meal_engine.config import Settings, build_pricing, build_tenant_defaults


def _settings(**overrides) -> Settings:  # type: ignore[no-untyped-def]
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        **overrides,
    )


def test_defaults() -> None:
    settings = _settings()

    defaults = build_tenant_defaults(settings)
    pricing = build_pricing(settings)

    assert defaults.timezone == "Asia/Dushanbe"
    assert defaults.cutoff_time == time(10, 30)
    assert defaults.currency_code == "TJS"
    assert pricing.price_for("Combo 25") == Decimal("25")
    assert pricing.price_for(" Combo 35 ") == Decimal("35")
    assert pricing.price_for("Combo 50") is None


def test_combo_prices_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("COMBO_PRICES", '{"Lite": "18.50", "Full": 40}')
    monkeypatch.setenv("DEFAULT_CUTOFF_TIME", "11:15")
    monkeypatch.setenv("WEEKLY_FREEZE_LIMIT", "3")

    settings = _settings()

    assert build_pricing(settings).combos() == ["Full", "Lite"]
    assert build_pricing(settings).price_for("Lite") == Decimal("18.50")
    assert build_tenant_defaults(settings).cutoff_time == time(11, 15)
    assert settings.weekly_freeze_limit == 3
