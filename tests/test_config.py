"""Tests for sabresite.config — models and YAML loader."""

import pytest
import yaml
from pydantic import ValidationError

from sabresite.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars, load_config
from sabresite.config.models import (
    BuildConfig,
    ChecksConfig,
    ServerConfig,
    SiteConfig,
    WatchConfig,
)


# ── SiteConfig defaults ─────────────────────────────────────────────


class TestSiteConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"

    def test_default_log_format(self, sample_config):
        assert sample_config.log_format == "text"

    def test_default_source_dir(self, sample_config):
        assert sample_config.build.source_dir == "source"

    def test_default_layouts_dir(self, sample_config):
        assert sample_config.build.layouts_dir == "_layouts"

    def test_default_server_port(self, sample_config):
        assert sample_config.server.port == 8000

    def test_default_environments(self, sample_config):
        envs = sample_config.build.environments
        assert envs["dev"].output_dir == "output_dev"
        assert envs["prod"].output_dir == "output_prod"

    def test_default_max_line_length(self, sample_config):
        assert sample_config.checks.max_line_length == 80


# ── Individual config model validations ─────────────────────────────


class TestBuildConfig:
    def test_default_markdown_extensions(self):
        assert BuildConfig().markdown_extensions == ["fenced_code", "tables", "toc"]

    def test_lists_are_not_shared(self):
        a, b = BuildConfig(), BuildConfig()
        a.ignore_patterns.append("*.bak")
        assert "*.bak" not in b.ignore_patterns


class TestChecksConfig:
    def test_invalid_validation_mode_rejected(self):
        with pytest.raises(ValidationError):
            ChecksConfig(validation="loose")

    def test_zero_line_length_rejected(self):
        with pytest.raises(ValidationError):
            ChecksConfig(max_line_length=0)


class TestServerConfig:
    def test_port_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)


class TestWatchConfig:
    def test_negative_debounce_rejected(self):
        with pytest.raises(ValidationError):
            WatchConfig(debounce_seconds=-1)


class TestEnvironments:
    def test_environment_lookup(self, sample_config):
        assert sample_config.environment("prod").url == "https://sabre.io"

    def test_unknown_environment_raises(self, sample_config):
        with pytest.raises(ValueError, match="Unknown environment 'staging'"):
            sample_config.environment("staging")

    def test_site_url_prefers_environment(self, sample_config):
        assert sample_config.site_url("prod") == "https://sabre.io"

    def test_site_url_falls_back_to_site(self, sample_config):
        assert sample_config.site_url("dev") == "http://localhost:8000"


# ── Loader ──────────────────────────────────────────────────────────


class TestExpandEnvVars:
    def test_expands_nested(self, monkeypatch):
        monkeypatch.setenv("SITE_URL", "https://example.org")
        raw = {"site": {"url": "${SITE_URL}"}, "list": ["${SITE_URL}/a"]}
        assert _expand_env_vars(raw) == {
            "site": {"url": "https://example.org"},
            "list": ["https://example.org/a"],
        }

    def test_missing_var_becomes_empty(self, monkeypatch):
        monkeypatch.delenv("NOPE_NOT_SET", raising=False)
        assert _expand_env_vars("x${NOPE_NOT_SET}y") == "xy"

    def test_non_strings_untouched(self):
        assert _expand_env_vars(42) == 42


class TestLoadConfig:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "site.yaml"
        path.write_text("site:\n  title: Test Docs\nserver:\n  port: 9000\n")
        cfg = load_config(str(path))
        assert cfg.site.title == "Test Docs"
        assert cfg.server.port == 9000

    def test_missing_explicit_path_raises(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            load_config(str(tmp_path / "nope.yaml"))

    def test_project_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        (tmp_path / "sabresite.yaml").write_text("build:\n  source_dir: docs\n")
        assert load_config().build.source_dir == "docs"

    def test_defaults_when_nothing_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        assert load_config() == SiteConfig()

    def test_empty_file_falls_through(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == SiteConfig()

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("site: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(str(path))

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("log_level: loud\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config(str(path))

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(str(path))

    def test_default_template_is_loadable(self, tmp_path):
        path = tmp_path / "sabresite.yaml"
        path.write_text(DEFAULT_CONFIG_TEMPLATE)
        cfg = load_config(str(path))
        assert cfg == SiteConfig(**yaml.safe_load(DEFAULT_CONFIG_TEMPLATE))
        assert cfg.build.environments["prod"].url == "https://sabre.io"
