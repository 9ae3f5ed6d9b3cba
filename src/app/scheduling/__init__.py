"""Agendamento de jobs em lote (APScheduler).

Cada job é um `ScheduledJob` (cron + handler) e roda atrás de um
limite de erro isolado em `JobScheduler.run_job`.
"""

from app.scheduling.job_scheduler import JobRunResult, JobScheduler, ScheduledJob
from app.scheduling.partner_jobs import PARTNER_JOB_CRONS, build_partner_jobs

__all__ = [
    "PARTNER_JOB_CRONS",
    "JobRunResult",
    "JobScheduler",
    "ScheduledJob",
    "build_partner_jobs",
]
