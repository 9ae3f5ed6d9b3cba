"""Testes do JobScheduler e do catálogo de jobs de parceiros."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.errors import JobNotFoundError
from app.domain.partners import BatchSummary
from app.observability import get_correlation_id
from app.scheduling import PARTNER_JOB_CRONS, JobScheduler, ScheduledJob, build_partner_jobs


async def _ok() -> BatchSummary:
    return BatchSummary(operation="ok", processed=2)


async def _boom() -> None:
    raise RuntimeError("falha no job")


class TestJobScheduler:
    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="duplicado"):
            JobScheduler([ScheduledJob("a", "0 * * * *", _ok), ScheduledJob("a", "0 1 * * *", _ok)])

    def test_invalid_crontab_rejected(self) -> None:
        with pytest.raises(ValueError):
            JobScheduler([ScheduledJob("a", "nunca", _ok)])

    @pytest.mark.asyncio
    async def test_run_job_returns_summary_details(self) -> None:
        scheduler = JobScheduler([ScheduledJob("ok", "0 * * * *", _ok)])

        result = await scheduler.run_job("ok")

        assert result.success is True
        assert result.details == {"operation": "ok", "processed": 2, "skipped": 0, "failed": 0}
        assert result.as_dict()["job_name"] == "ok"

    @pytest.mark.asyncio
    async def test_failure_is_isolated_and_recorded(self) -> None:
        """Exceção do handler vira resultado com success=False."""
        scheduler = JobScheduler(
            [ScheduledJob("boom", "0 * * * *", _boom), ScheduledJob("ok", "0 * * * *", _ok)]
        )

        failed = await scheduler.run_job("boom")
        ok = await scheduler.run_job("ok")

        assert failed.success is False
        assert failed.error_type == "RuntimeError"
        assert ok.success is True
        last = {entry["name"]: entry["last_result"] for entry in scheduler.status()}
        assert last["boom"]["success"] is False

    @pytest.mark.asyncio
    async def test_handler_runs_with_correlation_id(self) -> None:
        seen: list[str] = []

        async def capture() -> None:
            seen.append(get_correlation_id())

        scheduler = JobScheduler([ScheduledJob("capture", "0 * * * *", capture)])

        await scheduler.run_job("capture")

        assert seen[0] != ""
        assert get_correlation_id() == ""

    @pytest.mark.asyncio
    async def test_unknown_job(self) -> None:
        scheduler = JobScheduler([])

        with pytest.raises(JobNotFoundError):
            await scheduler.run_job("nope")

    @pytest.mark.asyncio
    async def test_start_registers_jobs_and_shutdown(self) -> None:
        scheduler = JobScheduler([ScheduledJob("ok", "0 6 * * *", _ok)], timezone="America/Sao_Paulo")

        scheduler.start()
        try:
            assert scheduler.running is True
            (entry,) = scheduler.status()
            assert entry["next_run_time"] is not None
            scheduler.start()
        finally:
            scheduler.shutdown()

        assert scheduler.running is False


class TestPartnerJobs:
    def test_catalog_covers_all_partner_jobs(self) -> None:
        engine, stats, retention, reports = MagicMock(), MagicMock(), MagicMock(), MagicMock()

        jobs = build_partner_jobs(engine, stats, retention, reports)

        assert [job.name for job in jobs] == list(PARTNER_JOB_CRONS)
        assert {job.name: job.cron for job in jobs}["commission_payments"] == "0 9 15 * *"
        JobScheduler(jobs)

    @pytest.mark.asyncio
    async def test_monthly_bonus_job_calls_engine(self) -> None:
        engine = MagicMock()
        engine.process_monthly_bonuses = AsyncMock(return_value=BatchSummary(operation="monthly_bonuses"))
        jobs = build_partner_jobs(engine, MagicMock(), MagicMock(), MagicMock())
        scheduler = JobScheduler(jobs)

        result = await scheduler.run_job("monthly_bonuses")

        assert result.success is True
        engine.process_monthly_bonuses.assert_awaited_once()
