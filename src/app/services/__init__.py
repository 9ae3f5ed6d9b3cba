"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.analytics_retention import AnalyticsRetention, RetentionReport
from app.services.channel_access_policy import available_channels, can_use_channel
from app.services.channel_router import ChannelRouter
from app.services.commission_engine import CommissionEngine
from app.services.commission_reports import CommissionReports
from app.services.conversation_resolver import ContactConversationResolver
from app.services.partner_registry import PartnerApplication, PartnerRegistry
from app.services.partner_settings import PartnerSettingsReader
from app.services.partner_stats import PartnerStatsAggregator
from app.services.referral_tracker import ReferralTracker

__all__ = [
    "AnalyticsRetention",
    "ChannelRouter",
    "CommissionEngine",
    "CommissionReports",
    "ContactConversationResolver",
    "PartnerApplication",
    "PartnerRegistry",
    "PartnerSettingsReader",
    "PartnerStatsAggregator",
    "ReferralTracker",
    "RetentionReport",
    "available_channels",
    "can_use_channel",
]
