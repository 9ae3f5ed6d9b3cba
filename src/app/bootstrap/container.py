"""Composition root: constrói e conecta todos os serviços.

Os serviços são objetos explícitos injetados uns nos outros (sem
singletons de módulo). A API recebe o container em `app.state`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.bootstrap.channel_adapters import create_channel_adapters
from app.bootstrap.dependencies import create_dedupe_store, create_tenant_lock
from app.infra.stores import MemoryCrmStore, MemoryPartnerStore, MemorySettingsStore
from app.scheduling import JobScheduler, build_partner_jobs
from app.services.analytics_retention import AnalyticsRetention
from app.services.channel_router import ChannelRouter
from app.services.commission_engine import CommissionEngine
from app.services.commission_reports import CommissionReports
from app.services.conversation_resolver import ContactConversationResolver
from app.services.partner_registry import PartnerRegistry
from app.services.partner_settings import PartnerSettingsReader
from app.services.partner_stats import PartnerStatsAggregator
from app.services.referral_tracker import ReferralTracker
from app.use_cases.inbound import ProcessChannelWebhookUseCase
from config.settings import get_dedupe_settings, get_partner_program_settings

if TYPE_CHECKING:
    import httpx

    from app.domain.channels import ChannelType
    from app.protocols.channel_adapter import ChannelAdapterProtocol
    from app.protocols.dedupe import AsyncDedupeProtocol
    from app.protocols.settings_store import PartnerSettingsStoreProtocol
    from app.protocols.tenant_lock import TenantLockProtocol

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Serviços prontos para a borda HTTP e para o agendador."""

    crm_store: MemoryCrmStore
    partner_store: MemoryPartnerStore
    settings_store: PartnerSettingsStoreProtocol
    dedupe: AsyncDedupeProtocol
    tenant_lock: TenantLockProtocol
    adapters: dict[ChannelType, ChannelAdapterProtocol]
    router: ChannelRouter
    inbound: ProcessChannelWebhookUseCase
    partner_settings: PartnerSettingsReader
    retention: AnalyticsRetention
    commissions: CommissionEngine
    partner_stats: PartnerStatsAggregator
    reports: CommissionReports
    registry: PartnerRegistry
    referrals: ReferralTracker
    scheduler: JobScheduler
    redis_client: Any | None = None


def build_container(
    *,
    crm_store: MemoryCrmStore | None = None,
    partner_store: MemoryPartnerStore | None = None,
    settings_store: PartnerSettingsStoreProtocol | None = None,
    dedupe: AsyncDedupeProtocol | None = None,
    tenant_lock: TenantLockProtocol | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceContainer:
    """Monta o grafo de serviços.

    Args:
        crm_store: Store de tenants/canais/contatos (memória por padrão)
        partner_store: Store do programa de parceiros (memória por padrão)
        settings_store: Store de configurações do programa
        dedupe: Dedupe inbound (backend conforme DEDUPE_BACKEND)
        tenant_lock: Lock por tenant (backend conforme TENANT_LOCK_BACKEND)
        transport: Transport httpx para os adapters (testes usam MockTransport)
    """
    program = get_partner_program_settings()
    dedupe_settings = get_dedupe_settings()

    crm_store = crm_store or MemoryCrmStore()
    partner_store = partner_store or MemoryPartnerStore()
    settings_store = settings_store or MemorySettingsStore()
    dedupe = dedupe or create_dedupe_store()
    tenant_lock = tenant_lock or create_tenant_lock()
    adapters = create_channel_adapters(transport)

    router = ChannelRouter(
        tenants=crm_store,
        channels=crm_store,
        contacts=crm_store,
        adapters=adapters,
        resolver=ContactConversationResolver(crm_store),
        tenant_lock=tenant_lock,
    )
    inbound = ProcessChannelWebhookUseCase(
        router=router,
        dedupe=dedupe,
        processing_ttl=dedupe_settings.processing_ttl_seconds,
        processed_ttl=dedupe_settings.ttl_seconds,
    )

    partner_settings = PartnerSettingsReader(settings_store)
    retention = AnalyticsRetention(partner_store)
    commissions = CommissionEngine(
        partner_store,
        partner_settings,
        retention,
        strict_transitions=program.strict_commission_transitions,
    )
    partner_stats = PartnerStatsAggregator(
        partner_store,
        partner_settings,
        monotonic_tiers=program.monotonic_tiers,
    )
    reports = CommissionReports(partner_store)
    scheduler = JobScheduler(
        build_partner_jobs(commissions, partner_stats, retention, reports),
        timezone=program.scheduler_timezone,
    )

    logger.info(
        "service_container_built",
        extra={
            "strict_commission_transitions": program.strict_commission_transitions,
            "monotonic_tiers": program.monotonic_tiers,
        },
    )
    return ServiceContainer(
        crm_store=crm_store,
        partner_store=partner_store,
        settings_store=settings_store,
        dedupe=dedupe,
        tenant_lock=tenant_lock,
        adapters=adapters,
        router=router,
        inbound=inbound,
        partner_settings=partner_settings,
        retention=retention,
        commissions=commissions,
        partner_stats=partner_stats,
        reports=reports,
        registry=PartnerRegistry(partner_store, partner_settings),
        referrals=ReferralTracker(partner_store),
        scheduler=scheduler,
    )
