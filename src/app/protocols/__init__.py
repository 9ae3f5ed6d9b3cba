"""Protocolos e contratos do core da aplicação."""

from .channel_adapter import ChannelAdapterProtocol
from .crm_store import ChannelStoreProtocol, ContactStoreProtocol, TenantStoreProtocol
from .dedupe import AsyncDedupeProtocol
from .partner_store import PartnerStoreProtocol
from .settings_store import PartnerSettingsStoreProtocol
from .tenant_lock import TenantLockProtocol

__all__ = [
    "AsyncDedupeProtocol",
    "ChannelAdapterProtocol",
    "ChannelStoreProtocol",
    "ContactStoreProtocol",
    "PartnerSettingsStoreProtocol",
    "PartnerStoreProtocol",
    "TenantLockProtocol",
    "TenantStoreProtocol",
]
