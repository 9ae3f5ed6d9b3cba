"""Agendador de jobs: trigger cron → handler → limite de erro isolado.

Uso:
    scheduler = JobScheduler(jobs, timezone="America/Sao_Paulo")
    scheduler.start()          # requer event loop em execução
    await scheduler.run_job("partner_stats")
    scheduler.shutdown()
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, is_dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.domain.errors import JobNotFoundError
from app.observability import record_job_run, reset_correlation_id, set_correlation_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScheduledJob:
    """Job nomeado com expressão crontab de 5 campos."""

    name: str
    cron: str
    handler: Callable[[], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class JobRunResult:
    job_name: str
    success: bool
    duration_ms: float
    started_at: datetime
    error_type: str | None = None
    details: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "job_name": self.job_name,
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
            "started_at": self.started_at.isoformat(),
            "error_type": self.error_type,
            "details": self.details,
        }


def _details(outcome: Any) -> dict[str, Any] | None:
    if outcome is None:
        return None
    if hasattr(outcome, "as_dict"):
        return outcome.as_dict()
    if is_dataclass(outcome) and not isinstance(outcome, type):
        return asdict(outcome)
    if isinstance(outcome, dict):
        return outcome
    return {"result": str(outcome)}


class JobScheduler:
    """Registra jobs no AsyncIOScheduler e executa cada um isoladamente."""

    def __init__(self, jobs: Iterable[ScheduledJob], timezone: str = "UTC") -> None:
        self._jobs: dict[str, ScheduledJob] = {}
        for job in jobs:
            if job.name in self._jobs:
                msg = f"Job duplicado: {job.name}"
                raise ValueError(msg)
            # Falha cedo em crontab inválido
            CronTrigger.from_crontab(job.cron, timezone=timezone)
            self._jobs[job.name] = job
        self._timezone = timezone
        self._scheduler: AsyncIOScheduler | None = None
        self._last_results: dict[str, JobRunResult] = {}

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def run_job(self, name: str) -> JobRunResult:
        """Executa o job; exceções do handler viram resultado com success=False.

        Raises:
            JobNotFoundError: nome não registrado.
        """
        job = self._jobs.get(name)
        if job is None:
            raise JobNotFoundError(name)

        token = set_correlation_id()
        started_at = datetime.now(UTC)
        started = time.perf_counter()
        try:
            outcome = await job.handler()
        except Exception as exc:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                "scheduled_job_failed",
                extra={"job_name": name, "error_type": type(exc).__name__},
            )
            result = JobRunResult(
                job_name=name,
                success=False,
                duration_ms=duration_ms,
                started_at=started_at,
                error_type=type(exc).__name__,
            )
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            result = JobRunResult(
                job_name=name,
                success=True,
                duration_ms=duration_ms,
                started_at=started_at,
                details=_details(outcome),
            )
            logger.info("scheduled_job_completed", extra={"job_name": name})
        finally:
            reset_correlation_id(token)

        record_job_run(name, result.success, result.duration_ms, result.error_type)
        self._last_results[name] = result
        return result

    def start(self) -> None:
        if self.running:
            logger.debug("job_scheduler_already_running")
            return

        scheduler = AsyncIOScheduler(timezone=self._timezone)
        for job in self._jobs.values():
            scheduler.add_job(
                self.run_job,
                CronTrigger.from_crontab(job.cron, timezone=self._timezone),
                args=[job.name],
                id=job.name,
                name=job.name,
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "job_scheduler_started",
            extra={"jobs": sorted(self._jobs), "timezone": self._timezone},
        )

    def shutdown(self) -> None:
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("job_scheduler_stopped")

    def status(self) -> list[dict[str, Any]]:
        """Cron, próxima execução e último resultado de cada job."""
        entries = []
        for name, job in self._jobs.items():
            next_run = None
            if self._scheduler is not None:
                scheduled = self._scheduler.get_job(name)
                next_run = getattr(scheduled, "next_run_time", None)
            last = self._last_results.get(name)
            entries.append(
                {
                    "name": name,
                    "cron": job.cron,
                    "next_run_time": next_run.isoformat() if next_run else None,
                    "last_result": last.as_dict() if last else None,
                }
            )
        return entries
