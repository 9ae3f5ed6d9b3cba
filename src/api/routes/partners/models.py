"""Modelos de request da administração do programa de parceiros."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommissionIdsRequest(BaseModel):
    commission_ids: list[str] = Field(min_length=1)


class MarkPaidRequest(CommissionIdsRequest):
    payment_method: str = "bank_transfer"
    payment_reference: str | None = None
