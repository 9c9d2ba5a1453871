"""Tests for the settlement job scheduler."""

import pytest

from meal_engine.scheduler import SETTLEMENT_JOB_ID, SchedulerManager


def test_initialize_registers_settlement_job(settlement_service) -> None:
    manager = SchedulerManager()

    manager.initialize(settlement_service, interval_minutes=10)
    manager.initialize(settlement_service, interval_minutes=5)

    jobs = manager.get_jobs()
    assert [job["id"] for job in jobs] == [SETTLEMENT_JOB_ID]
    assert jobs[0]["name"] == "Order settlement sweep"
    assert "0:10:00" in jobs[0]["trigger"]


def test_uninitialized_scheduler() -> None:
    manager = SchedulerManager()

    assert manager.get_jobs() == []
    manager.shutdown()
    with pytest.raises(RuntimeError):
        manager.start()
