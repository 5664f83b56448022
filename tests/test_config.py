"""Tests for merkled.config — models and YAML loader."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from merkled.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars, load_config
from merkled.config.models import HashingConfig, ManifestConfig, MerkledConfig


class TestMerkledConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"

    def test_default_log_format(self, sample_config):
        assert sample_config.log_format == "text"

    def test_default_hashing(self, sample_config):
        assert sample_config.hashing.max_workers == 4
        assert sample_config.hashing.chunk_size == 1024 * 1024
        assert sample_config.hashing.skip_hidden is True
        assert sample_config.hashing.ignore_names == ["Thumbs.db", "desktop.ini"]

    def test_default_manifest(self, sample_config):
        assert sample_config.manifest.output_dir == "."
        assert sample_config.manifest.strict_version is True


class TestHashingConfig:
    def test_workers_must_be_positive(self):
        with pytest.raises(ValidationError):
            HashingConfig(max_workers=0)

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            HashingConfig(chunk_size=0)


class TestMerkledConfigValidation:
    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            MerkledConfig(log_level="verbose")

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            MerkledConfig(log_format="xml")

    def test_nested_override(self):
        cfg = MerkledConfig(manifest=ManifestConfig(output_dir="out"))
        assert cfg.manifest.output_dir == "out"


class TestExpandEnvVars:
    def test_expands_string(self):
        with patch.dict(os.environ, {"CASE_DIR": "/cases"}):
            assert _expand_env_vars("${CASE_DIR}/manifests") == "/cases/manifests"

    def test_unset_var_becomes_empty(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _expand_env_vars("x${NOPE}y") == "xy"

    def test_nested_structures(self):
        with patch.dict(os.environ, {"N": "Thumbs.db"}):
            assert _expand_env_vars({"a": ["${N}", 3]}) == {"a": ["Thumbs.db", 3]}

    def test_fallback_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _expand_env_vars("${OUT:-manifests}") == "manifests"

    def test_fallback_ignored_when_set(self):
        with patch.dict(os.environ, {"OUT": "/srv"}):
            assert _expand_env_vars("${OUT:-manifests}") == "/srv"


class TestLoadConfig:
    @pytest.fixture(autouse=True)
    def _isolate(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.delenv("MERKLED_CONFIG", raising=False)

    def test_defaults_when_no_file(self):
        assert load_config() == MerkledConfig()

    def test_cli_path(self, tmp_path):
        p = tmp_path / "custom.yaml"
        p.write_text("log_level: debug\nhashing:\n  max_workers: 2\n")
        cfg = load_config(str(p))
        assert cfg.log_level == "debug"
        assert cfg.hashing.max_workers == 2

    def test_project_local_file(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text("log_format: json\n")
        assert load_config().log_format == "json"

    def test_env_var_path(self, tmp_path, monkeypatch):
        p = tmp_path / "env.yaml"
        p.write_text("manifest:\n  output_dir: from-env\n")
        monkeypatch.setenv("MERKLED_CONFIG", str(p))
        assert load_config().manifest.output_dir == "from-env"

    def test_cli_path_wins_over_project_file(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text("log_level: error\n")
        p = tmp_path / "cli.yaml"
        p.write_text("log_level: debug\n")
        assert load_config(str(p)).log_level == "debug"

    def test_user_global_file(self, tmp_path):
        home_cfg = tmp_path / "home" / ".merkled"
        home_cfg.mkdir(parents=True)
        (home_cfg / "config.yaml").write_text("log_level: warn\n")
        assert load_config().log_level == "warn"

    def test_empty_file_falls_through(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text("")
        assert load_config() == MerkledConfig()

    def test_env_expansion_in_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUT", "/srv/manifests")
        (tmp_path / "merkled.yaml").write_text('manifest:\n  output_dir: "${OUT}"\n')
        assert load_config().manifest.output_dir == "/srv/manifests"

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text("hashing: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_invalid_values(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text("hashing:\n  max_workers: -1\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_non_mapping_document(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="top level must be a mapping"):
            load_config()

    def test_default_template_parses(self, tmp_path):
        (tmp_path / "merkled.yaml").write_text(DEFAULT_CONFIG_TEMPLATE)
        assert load_config() == MerkledConfig()
