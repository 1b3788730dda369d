"""Tests for tiered store configuration loading."""

import pytest

from modelops_cas.config import TierConfig, TieredStoreConfig, default_config_path, load_config
from modelops_cas.constants import CONFIG_ENV_VAR, CONFIG_FILE
from modelops_cas.errors import InvalidTierConfigError


class TestTierConfig:
    """Test model validation."""

    def test_defaults(self):
        config = TieredStoreConfig()
        assert [t.id for t in config.tiers] == ["local"]
        assert config.list_page_size == 1000
        assert config.fallback_on_error is False

    def test_external_requires_id(self):
        with pytest.raises(ValueError, match="need an id"):
            TierConfig(kind="external")

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate tier ids"):
            TieredStoreConfig(tiers=[TierConfig(id="a"), TierConfig(id="a")])

    def test_empty_tiers_rejected(self):
        with pytest.raises(ValueError, match="At least one tier"):
            TieredStoreConfig(tiers=[])

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            TierConfig(id="x", kind="s3")


class TestLoadConfig:
    """Test YAML loading."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config == TieredStoreConfig()

    def test_load_tiers(self, tmp_path):
        path = tmp_path / "cas.yaml"
        path.write_text(
            "tiers:\n"
            "  - id: local\n"
            "    priority: 0\n"
            "  - id: remote\n"
            "    kind: external\n"
            "    priority: 1\n"
            "    write: false\n"
            "list_page_size: 50\n"
            "fallback_on_error: true\n"
        )

        config = load_config(path)

        assert [t.id for t in config.tiers] == ["local", "remote"]
        assert config.tiers[1].kind == "external"
        assert config.tiers[1].write is False
        assert config.list_page_size == 50
        assert config.fallback_on_error is True

    def test_nested_under_cas_key(self, tmp_path):
        path = tmp_path / "cas.yaml"
        path.write_text("cas:\n  max_workers: 4\n")
        assert load_config(path).max_workers == 4

    def test_empty_file(self, tmp_path):
        path = tmp_path / "cas.yaml"
        path.write_text("")
        assert load_config(path) == TieredStoreConfig()

    @pytest.mark.parametrize("content", [
        "tiers: [unclosed\n",
        "- just\n- a list\n",
        "list_page_size: 0\n",
    ])
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "cas.yaml"
        path.write_text(content)
        with pytest.raises(InvalidTierConfigError):
            load_config(path)


class TestConfigPath:
    """Test config path resolution."""

    def test_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)
        assert default_config_path() == tmp_path / CONFIG_FILE

    def test_env_override(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.yaml"
        path.write_text("list_page_size: 7\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert default_config_path() == path
        assert load_config().list_page_size == 7
