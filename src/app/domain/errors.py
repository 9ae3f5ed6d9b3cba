"""Taxonomia de erros de domínio do CRM.

Cada erro carrega um `error_kind` estável e mensagem legível, usados
pela borda HTTP para montar a resposta ao chamador.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.channels import AccessDecision, ChannelType


class CrmError(Exception):
    """Base dos erros de domínio."""

    error_kind = "crm_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PlanRestrictionError(CrmError):
    """Plano do tenant não permite o canal solicitado."""

    error_kind = "plan_restriction"

    def __init__(self, decision: AccessDecision, channel_type: ChannelType) -> None:
        super().__init__(decision.reason or "Canal não permitido pelo plano atual")
        self.decision = decision
        self.channel_type = channel_type


class ChannelNotConfiguredError(CrmError):
    """Não há canal ativo e permitido para o par tenant/canal."""

    error_kind = "channel_not_configured"

    def __init__(self, tenant_id: str, channel_type: ChannelType, reason: str | None = None) -> None:
        super().__init__(reason or f"Canal {channel_type.value} não configurado ou inativo")
        self.tenant_id = tenant_id
        self.channel_type = channel_type


class UnsupportedChannelError(CrmError):
    """Nenhum adapter registrado para o tipo de canal."""

    error_kind = "unsupported_channel"

    def __init__(self, channel: str) -> None:
        super().__init__(f"Canal não suportado: {channel}")
        self.channel = channel


class ChannelNotFoundError(CrmError):
    error_kind = "channel_not_found"

    def __init__(self, tenant_id: str, channel_id: str) -> None:
        super().__init__("Canal não encontrado")
        self.tenant_id = tenant_id
        self.channel_id = channel_id


class PrimaryChannelRequiredError(CrmError):
    """Desmarcar o primário só acontece elegendo outro canal como primário."""

    error_kind = "primary_channel_required"

    def __init__(self, tenant_id: str, channel_id: str) -> None:
        super().__init__("Canal primário só deixa de ser primário quando outro canal é marcado como primário")
        self.tenant_id = tenant_id
        self.channel_id = channel_id


class TenantNotFoundError(CrmError):
    error_kind = "tenant_not_found"

    def __init__(self, tenant_id: str) -> None:
        super().__init__("Tenant não encontrado")
        self.tenant_id = tenant_id


class InvalidChannelConfigError(CrmError):
    """Configuração de canal vazia ou sem credenciais obrigatórias."""

    error_kind = "invalid_channel_config"

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "Configuração do canal é obrigatória")
        self.errors = errors


class InvalidOutboundMessageError(CrmError):
    """Mensagem outbound recusada pelo builder do canal (ex.: mídia sem URL)."""

    error_kind = "invalid_outbound_message"

    def __init__(self, channel_type: ChannelType, message: str) -> None:
        super().__init__(message)
        self.channel_type = channel_type


class ProviderCallFailedError(CrmError):
    """Timeout ou resposta não-2xx da API do provider do canal."""

    error_kind = "provider_call_failed"

    def __init__(
        self,
        channel_type: ChannelType,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.channel_type = channel_type
        self.status_code = status_code
        self.is_retryable = is_retryable


class PartnerNotFoundError(CrmError):
    error_kind = "partner_not_found"

    def __init__(self, reference: str) -> None:
        super().__init__("Parceiro não encontrado ou não aprovado")
        self.reference = reference


class ReferralNotFoundError(CrmError):
    error_kind = "referral_not_found"

    def __init__(self, referral_id: str) -> None:
        super().__init__("Indicação não encontrada")
        self.referral_id = referral_id


class CommissionTransitionError(CrmError):
    """Transição de status de comissão fora da ordem pending→approved→paid."""

    error_kind = "commission_transition"

    def __init__(self, target_status: str, invalid_ids: list[str]) -> None:
        super().__init__(
            f"Transição inválida para {target_status}: {len(invalid_ids)} comissão(ões) fora do estado exigido"
        )
        self.target_status = target_status
        self.invalid_ids = invalid_ids


class PartnerCodeGenerationError(CrmError):
    error_kind = "partner_code_generation"

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Não foi possível gerar código único após {attempts} tentativas")
        self.attempts = attempts


class JobNotFoundError(CrmError):
    error_kind = "job_not_found"

    def __init__(self, job_name: str) -> None:
        super().__init__(f"Job agendado não encontrado: {job_name}")
        self.job_name = job_name
