"""Jobs do programa de parceiros e seus horários (crontab)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.scheduling.job_scheduler import ScheduledJob

if TYPE_CHECKING:
    from app.services.analytics_retention import AnalyticsRetention
    from app.services.commission_engine import CommissionEngine
    from app.services.commission_reports import CommissionReports
    from app.services.partner_stats import PartnerStatsAggregator

PARTNER_JOB_CRONS: dict[str, str] = {
    "pending_commissions": "0 * * * *",
    "partner_stats": "0 6 * * *",
    "commission_payments": "0 9 15 * *",
    "recurring_commissions": "0 8 1 * *",
    "monthly_bonuses": "0 10 2 * *",
    "analytics_retention": "0 3 * * 0",
    "weekly_report": "0 18 * * 0",
}


def build_partner_jobs(
    engine: CommissionEngine,
    stats: PartnerStatsAggregator,
    retention: AnalyticsRetention,
    reports: CommissionReports,
) -> list[ScheduledJob]:
    handlers = {
        "pending_commissions": engine.process_all_pending_commissions,
        "partner_stats": stats.update_all_partner_stats,
        "commission_payments": engine.process_commission_payments,
        "recurring_commissions": engine.process_recurring_commissions,
        "monthly_bonuses": engine.process_monthly_bonuses,
        "analytics_retention": retention.cleanup,
        "weekly_report": reports.weekly_report,
    }
    return [
        ScheduledJob(name=name, cron=cron, handler=handlers[name])
        for name, cron in PARTNER_JOB_CRONS.items()
    ]
