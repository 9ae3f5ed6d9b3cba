"""Settings do programa de parceiros e do agendador de jobs.

As regras de negócio (taxas, metas de bônus, requisitos de tier) ficam no
settings store; este módulo só aponta o YAML que semeia o store e os
flags de política.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_DEFAULTS_PATH = Path(__file__).resolve().parents[1] / "partner_program.yaml"


class PartnerProgramConfigError(Exception):
    """YAML de configuração do programa ausente ou malformado."""


@dataclass(frozen=True)
class PartnerProgramSettings:
    """Configurações do programa de parceiros.

    Attributes:
        defaults_path: YAML com valores iniciais do settings store
        scheduler_enabled: Liga o agendador de jobs no startup
        scheduler_timezone: Timezone dos cron triggers
        strict_commission_transitions: Exige pending→approved→paid
        monotonic_tiers: Impede rebaixamento automático de tier
    """

    defaults_path: str = str(DEFAULT_DEFAULTS_PATH)
    scheduler_enabled: bool = True
    scheduler_timezone: str = "America/Sao_Paulo"
    strict_commission_transitions: bool = False
    monotonic_tiers: bool = False

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not Path(self.defaults_path).is_file():
            errors.append(f"PARTNER_PROGRAM_DEFAULTS_PATH não encontrado: {self.defaults_path}")
        if not self.scheduler_timezone:
            errors.append("SCHEDULER_TIMEZONE não pode ser vazio")
        return errors


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _load_from_env() -> PartnerProgramSettings:
    return PartnerProgramSettings(
        defaults_path=os.getenv("PARTNER_PROGRAM_DEFAULTS_PATH", str(DEFAULT_DEFAULTS_PATH)),
        scheduler_enabled=_env_flag("SCHEDULER_ENABLED", "true"),
        scheduler_timezone=os.getenv("SCHEDULER_TIMEZONE", "America/Sao_Paulo"),
        strict_commission_transitions=_env_flag("STRICT_COMMISSION_TRANSITIONS", "false"),
        monotonic_tiers=_env_flag("MONOTONIC_TIERS", "false"),
    )


@lru_cache(maxsize=1)
def get_partner_program_settings() -> PartnerProgramSettings:
    """Retorna instância cacheada de PartnerProgramSettings."""
    return _load_from_env()


def load_partner_program_defaults(path: str | Path | None = None) -> dict[str, Any]:
    """Lê o YAML de configurações padrão do programa de parceiros.

    Args:
        path: Caminho do YAML. Usa o arquivo empacotado se None.

    Returns:
        Dict chave de configuração -> valor.

    Raises:
        PartnerProgramConfigError: Se o arquivo não existir ou não for um mapa.
    """
    yaml_path = Path(path) if path else DEFAULT_DEFAULTS_PATH
    if not yaml_path.is_file():
        msg = f"Arquivo de configuração não encontrado: {yaml_path}"
        raise PartnerProgramConfigError(msg)

    with yaml_path.open(encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        msg = f"Configuração do programa deve ser um mapa: {yaml_path}"
        raise PartnerProgramConfigError(msg)

    logger.info("partner_program_defaults_loaded", extra={"keys": sorted(data)})
    return data
