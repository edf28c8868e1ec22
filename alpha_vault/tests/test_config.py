"""
VaultConfig 테스트
"""

import pytest
from pydantic import ValidationError

from ..config import Settings, VaultConfig, settings


class TestVaultConfig:

    def test_from_settings_defaults(self):
        config = VaultConfig.from_settings()
        assert config.base_threshold == settings.BASE_THRESHOLD
        assert config.twap_duration == settings.TWAP_DURATION

    def test_overrides(self):
        config = VaultConfig.from_settings(period=0, full_range_weight=0)
        assert config.period == 0
        assert config.full_range_weight == 0

    def test_validate_on_construction(self):
        with pytest.raises(ValidationError):
            VaultConfig.from_settings(twap_duration=0)
        with pytest.raises(ValidationError):
            VaultConfig.from_settings(full_range_weight=2_000_000)

    def test_validate_on_assignment(self):
        config = VaultConfig.from_settings()
        with pytest.raises(ValidationError):
            config.max_twap_deviation = -1
        assert config.max_twap_deviation == settings.MAX_TWAP_DEVIATION

    def test_custom_settings_source(self):
        class Custom(Settings):
            BASE_THRESHOLD = 6000

        assert VaultConfig.from_settings(Custom()).base_threshold == 6000


class TestFromYaml:

    def test_top_level_mapping(self, tmp_path):
        path = tmp_path / "vault.yaml"
        path.write_text("base_threshold: 2400\nlimit_threshold: 600\nperiod: 3600\n")
        config = VaultConfig.from_yaml(path)
        assert config.base_threshold == 2400
        assert config.limit_threshold == 600
        assert config.period == 3600
        assert config.twap_duration == settings.TWAP_DURATION

    def test_vault_section(self, tmp_path):
        path = tmp_path / "vault.yaml"
        path.write_text("vault:\n  full_range_weight: 200000\nsimulation:\n  steps: 10\n")
        assert VaultConfig.from_yaml(path).full_range_weight == 200000

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert VaultConfig.from_yaml(path) == VaultConfig.from_settings()

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("twap_duration: 0\n")
        with pytest.raises(ValidationError):
            VaultConfig.from_yaml(path)
