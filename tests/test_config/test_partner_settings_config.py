"""Testes das settings do programa de parceiros e do YAML padrão."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from config.settings.partners import (
    PartnerProgramConfigError,
    PartnerProgramSettings,
    get_partner_program_settings,
    load_partner_program_defaults,
)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    get_partner_program_settings.cache_clear()
    yield
    get_partner_program_settings.cache_clear()


class TestPartnerProgramSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("SCHEDULER_ENABLED", "STRICT_COMMISSION_TRANSITIONS", "MONOTONIC_TIERS"):
            monkeypatch.delenv(name, raising=False)

        settings = get_partner_program_settings()

        assert settings.scheduler_enabled is True
        assert settings.strict_commission_transitions is False
        assert settings.monotonic_tiers is False
        assert settings.validate() == []

    def test_flags_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEDULER_ENABLED", "false")
        monkeypatch.setenv("STRICT_COMMISSION_TRANSITIONS", "1")
        monkeypatch.setenv("MONOTONIC_TIERS", "yes")
        monkeypatch.setenv("SCHEDULER_TIMEZONE", "UTC")

        settings = get_partner_program_settings()

        assert settings.scheduler_enabled is False
        assert settings.strict_commission_transitions is True
        assert settings.monotonic_tiers is True
        assert settings.scheduler_timezone == "UTC"

    def test_validate_reports_missing_yaml_and_timezone(self, tmp_path: Path) -> None:
        settings = PartnerProgramSettings(defaults_path=str(tmp_path / "nope.yaml"), scheduler_timezone="")

        errors = settings.validate()

        assert len(errors) == 2


class TestLoadDefaults:
    def test_packaged_yaml(self) -> None:
        data = load_partner_program_defaults()

        assert data["commission_rates"]["gold"] == 20
        assert data["payment_schedule"]["minimum_amount"] == 100

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(PartnerProgramConfigError):
            load_partner_program_defaults(tmp_path / "missing.yaml")

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(PartnerProgramConfigError):
            load_partner_program_defaults(path)
