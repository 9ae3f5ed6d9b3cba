"""Modelos e erros de domínio do CRM multicanal."""

from app.domain.channels import (
    AccessDecision,
    Channel,
    ChannelHealth,
    ChannelListing,
    ChannelSummary,
    ChannelType,
    Plan,
    Tenant,
)
from app.domain.errors import (
    ChannelNotConfiguredError,
    ChannelNotFoundError,
    CommissionTransitionError,
    CrmError,
    InvalidChannelConfigError,
    PartnerCodeGenerationError,
    PartnerNotFoundError,
    PlanRestrictionError,
    ProviderCallFailedError,
    ReferralNotFoundError,
    TenantNotFoundError,
    UnsupportedChannelError,
)

__all__ = [
    "AccessDecision",
    "Channel",
    "ChannelHealth",
    "ChannelListing",
    "ChannelNotConfiguredError",
    "ChannelNotFoundError",
    "ChannelSummary",
    "ChannelType",
    "CommissionTransitionError",
    "CrmError",
    "InvalidChannelConfigError",
    "PartnerCodeGenerationError",
    "PartnerNotFoundError",
    "Plan",
    "PlanRestrictionError",
    "ProviderCallFailedError",
    "ReferralNotFoundError",
    "Tenant",
    "TenantNotFoundError",
    "UnsupportedChannelError",
]
