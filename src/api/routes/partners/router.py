"""Administração do programa de parceiros.

Prefixo: /admin/partners
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Literal

from fastapi import APIRouter, Query

from api.routes.dependencies import ContainerDep
from api.routes.partners.models import CommissionIdsRequest, MarkPaidRequest
from app.domain.partners import PaymentDetails

router = APIRouter()


@router.get("/commissions/report")
async def commission_report(
    container: ContainerDep,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict[str, Any]:
    report = await container.reports.generate_commission_report(start, end)
    return {"partners": [asdict(item) for item in report], "total_partners": len(report)}


@router.post("/commissions/approve")
async def approve_commissions(body: CommissionIdsRequest, container: ContainerDep) -> dict[str, Any]:
    updated = await container.commissions.approve_commissions(body.commission_ids)
    return {"success": True, "updated": updated}


@router.post("/commissions/mark-paid")
async def mark_commissions_paid(body: MarkPaidRequest, container: ContainerDep) -> dict[str, Any]:
    updated = await container.commissions.mark_commissions_as_paid(
        body.commission_ids,
        PaymentDetails(method=body.payment_method, reference=body.payment_reference),
    )
    return {"success": True, "updated": updated}


@router.get("/commissions/stats")
async def commission_stats(
    container: ContainerDep,
    period: Literal["week", "month", "year"] = "month",
) -> dict[str, Any]:
    return await container.reports.get_commission_stats(period)


@router.get("/jobs")
async def jobs_status(container: ContainerDep) -> dict[str, Any]:
    return {"running": container.scheduler.running, "jobs": container.scheduler.status()}


@router.post("/jobs/{job_name}/run")
async def run_job(job_name: str, container: ContainerDep) -> dict[str, Any]:
    result = await container.scheduler.run_job(job_name)
    return result.as_dict()


@router.get("/{partner_id}/stats")
async def partner_stats(
    partner_id: str,
    container: ContainerDep,
    period: Literal["week", "month", "year", "all"] = Query(default="month"),
) -> dict[str, Any]:
    return await container.partner_stats.get_partner_stats(partner_id, period)
