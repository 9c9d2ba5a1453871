"""Tests for container wiring."""

import asyncio

from meal_engine import containers
from meal_engine.containers import build_container


def test_build_container_creates_services(settings, monkeypatch) -> None:
    created: list[tuple[str, str]] = []

    def fake_create_client(url: str, key: str) -> object:
        created.append((url, key))
        return object()

    monkeypatch.setattr(containers, "create_client", fake_create_client)

    container = build_container(settings)

    assert created == [("https://example.supabase.co", "service-key")]
    assert container.subscription_service is not None
    assert container.subscription_service.weekly_freeze_limit == 2
    assert container.ledger_service is not None
    assert container.scheduler is None
    asyncio.run(container.close_resources())


def test_build_container_schedules_settlement(settings, monkeypatch) -> None:
    monkeypatch.setattr(containers, "create_client", lambda url, key: object())
    settings.settlement_job_enabled = True
    settings.settlement_interval_minutes = 15

    container = build_container(settings)

    assert container.scheduler is not None
    assert [job["id"] for job in container.scheduler.get_jobs()] == [
        "settlement_sweep"
    ]
    asyncio.run(container.close_resources())
