"""Tests for configuration loading."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from gong_mcp import config
from gong_mcp.config import GongConfig, load_gong_config


@pytest.fixture
def gong_env(monkeypatch):
    monkeypatch.setenv("GONG_BASE_URL", "https://us-1234.api.gong.io/")
    monkeypatch.setenv("GONG_ACCESS_KEY", "key")
    monkeypatch.setenv("GONG_ACCESS_KEY_SECRET", "secret")
    return monkeypatch


class TestLoadGongConfig:
    def test_all_present(self, gong_env):
        cfg = load_gong_config()
        assert cfg == GongConfig(
            base_url="https://us-1234.api.gong.io",
            access_key="key",
            access_key_secret="secret",
        )

    @pytest.mark.parametrize("missing", ["GONG_BASE_URL", "GONG_ACCESS_KEY", "GONG_ACCESS_KEY_SECRET"])
    def test_any_missing_means_unconfigured(self, gong_env, missing):
        gong_env.delenv(missing)
        assert load_gong_config() is None

    def test_blank_and_placeholder_values_count_as_missing(self, gong_env):
        gong_env.setenv("GONG_ACCESS_KEY", "   ")
        assert load_gong_config() is None
        gong_env.setenv("GONG_ACCESS_KEY", "your_access_key")
        assert load_gong_config() is None

    def test_missing_variables_are_logged(self, gong_env, caplog):
        gong_env.delenv("GONG_ACCESS_KEY_SECRET")
        with caplog.at_level("WARNING", logger="gong_mcp.config"):
            load_gong_config()
        assert "GONG_ACCESS_KEY_SECRET" in caplog.text

    def test_ssm_fallback_on_aws(self, gong_env):
        gong_env.delenv("GONG_ACCESS_KEY_SECRET")
        with (
            patch.object(config, "_ON_AWS", True),
            patch.object(config, "_get_ssm_parameter", return_value="from-ssm") as mock_ssm,
        ):
            cfg = load_gong_config()
        assert cfg is not None
        assert cfg.access_key_secret == "from-ssm"
        mock_ssm.assert_called_once_with("GONG_ACCESS_KEY_SECRET")


class TestGongConfig:
    def test_rejects_partial_configuration(self):
        with pytest.raises(ValueError):
            GongConfig(base_url="https://api.gong.io", access_key="", access_key_secret="s")

    def test_is_immutable(self, gong_config):
        with pytest.raises(AttributeError):
            gong_config.access_key = "other"

    def test_repr_hides_credentials(self, gong_config):
        text = repr(gong_config)
        assert gong_config.access_key not in text
        assert gong_config.access_key_secret not in text
        assert gong_config.base_url in text
