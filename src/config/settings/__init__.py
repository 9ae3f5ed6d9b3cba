"""Agregador de settings do CRM multicanal.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    DedupeBackend,
    DedupeSettings,
    Environment,
    TenantLockBackend,
    TenantLockSettings,
    get_base_settings,
    get_dedupe_settings,
    get_tenant_lock_settings,
)

# Channel-specific settings
from config.settings.instagram import InstagramSettings, get_instagram_settings

# Partner program
from config.settings.partners import (
    PartnerProgramConfigError,
    PartnerProgramSettings,
    get_partner_program_settings,
    load_partner_program_defaults,
)
from config.settings.telegram import (
    TELEGRAM_API_BASE_URL,
    TelegramSettings,
    get_telegram_settings,
)
from config.settings.whatsapp import (
    GRAPH_API_BASE_URL,
    GRAPH_API_VERSION,
    WhatsAppSettings,
    get_whatsapp_settings,
)

__all__ = [
    # Constants
    "GRAPH_API_BASE_URL",
    "GRAPH_API_VERSION",
    "TELEGRAM_API_BASE_URL",
    # Base
    "BaseSettings",
    "DedupeBackend",
    "DedupeSettings",
    "Environment",
    # Channels
    "InstagramSettings",
    # Partners
    "PartnerProgramConfigError",
    "PartnerProgramSettings",
    "TelegramSettings",
    "TenantLockBackend",
    "TenantLockSettings",
    "WhatsAppSettings",
    "get_base_settings",
    "get_dedupe_settings",
    "get_instagram_settings",
    "get_partner_program_settings",
    "get_telegram_settings",
    "get_tenant_lock_settings",
    "get_whatsapp_settings",
    "load_partner_program_defaults",
]
