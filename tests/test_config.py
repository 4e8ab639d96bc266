"""Tests for configuration loading, merging, defaults, and validation."""

import os
import tempfile

import pytest
import yaml

from src.config import (
    DEFAULT_DELAYS,
    DEFAULT_POLLING,
    DEFAULT_RETRIES,
    apply_defaults,
    load_config,
    merge_cli_overrides,
    validate_config,
)


def _write_config(data):
    """Write a config dictionary to a temporary YAML file and return its path."""
    f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
    yaml.dump(data, f)
    f.close()
    return f.name


def _full_config():
    """Return a config dictionary with every section filled in."""
    return {
        "profile": "org-management",
        "region": "us-east-1",
        "delays": {"deregister_seconds": 2, "close_seconds": 15},
        "polling": {"max_attempts": 30, "interval_seconds": 30},
        "retries": {"mode": "adaptive", "max_attempts": 5},
    }


@pytest.fixture(autouse=True)
def _clear_retry_env(monkeypatch):
    monkeypatch.delenv("AWS_RETRY_MODE", raising=False)
    monkeypatch.delenv("AWS_MAX_ATTEMPTS", raising=False)


class TestLoadConfig:
    """Tests for loading configuration from YAML files."""

    def test_load_valid_config(self):
        """Verify that a valid YAML config file is loaded and parsed correctly."""
        path = _write_config(_full_config())
        try:
            config = load_config(path)
            assert config["profile"] == "org-management"
            assert config["polling"]["interval_seconds"] == 30
        finally:
            os.unlink(path)

    def test_load_empty_config_returns_empty_dict(self):
        """Verify that an empty YAML file returns an empty dictionary."""
        f = tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False)
        f.write("")
        f.close()
        try:
            config = load_config(f.name)
            assert config == {}
        finally:
            os.unlink(f.name)

    def test_load_config_file_not_found(self, capsys):
        """Verify that a nonexistent explicit config file exits with an error line."""
        with pytest.raises(SystemExit) as exc_info:
            load_config("/nonexistent/config.yaml")

        assert exc_info.value.code == 1
        assert "ERROR: Could not read config file /nonexistent/config.yaml" in capsys.readouterr().err

    def test_malformed_yaml_exits(self, tmp_path, capsys):
        """Verify that malformed YAML exits with an error line instead of a traceback."""
        path = tmp_path / "config.yaml"
        path.write_text("delays: [unclosed\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            load_config(str(path))

        assert exc_info.value.code == 1
        assert "ERROR: Invalid YAML" in capsys.readouterr().err

    def test_non_mapping_document_exits(self, tmp_path):
        """Verify that a YAML document that is not a mapping is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- profile\n- region\n", encoding="utf-8")

        with pytest.raises(SystemExit):
            load_config(str(path))

    def test_missing_default_config_returns_empty_dict(self, tmp_path, monkeypatch):
        """Verify that a missing default config file falls back to built-in defaults."""
        monkeypatch.chdir(tmp_path)
        assert load_config() == {}


class TestMergeCliOverrides:
    """Tests for merging CLI argument overrides into the base configuration."""

    def test_override_profile(self):
        """Verify that the AWS profile can be overridden via CLI arguments."""
        merged = merge_cli_overrides(_full_config(), {"profile": "other", "role_arn": None, "region": None})
        assert merged["profile"] == "other"

    def test_override_role_and_region(self):
        """Verify that role ARN and region overrides are merged in."""
        merged = merge_cli_overrides(
            {}, {"profile": None, "role_arn": "arn:aws:iam::111111111111:role/Teardown", "region": "eu-west-1"}
        )
        assert merged["role_arn"] == "arn:aws:iam::111111111111:role/Teardown"
        assert merged["region"] == "eu-west-1"

    def test_no_overrides(self):
        """Verify that config values are preserved when all CLI overrides are None."""
        config = _full_config()
        merged = merge_cli_overrides(config, {"profile": None, "role_arn": None, "region": None})
        assert merged == config


class TestApplyDefaults:
    """Tests for filling in unconfigured settings."""

    def test_empty_config_gets_all_defaults(self):
        """Verify that an empty config receives the default region, delays, polling, and retries."""
        config = apply_defaults({})
        assert config["region"] == "us-east-1"
        assert config["delays"] == DEFAULT_DELAYS
        assert config["polling"] == DEFAULT_POLLING
        assert config["retries"] == DEFAULT_RETRIES

    def test_partial_section_keeps_other_defaults(self):
        """Verify that overriding one key in a section keeps the remaining defaults."""
        config = apply_defaults({"polling": {"interval_seconds": 5}})
        assert config["polling"] == {"max_attempts": 30, "interval_seconds": 5}

    def test_env_vars_override_retry_defaults(self, monkeypatch):
        """Verify that AWS_RETRY_MODE and AWS_MAX_ATTEMPTS replace the retry defaults."""
        monkeypatch.setenv("AWS_RETRY_MODE", "standard")
        monkeypatch.setenv("AWS_MAX_ATTEMPTS", "10")
        config = apply_defaults({})
        assert config["retries"] == {"mode": "standard", "max_attempts": 10}

    def test_config_file_overrides_env_vars(self, monkeypatch):
        """Verify that the config file retries block takes precedence over environment variables."""
        monkeypatch.setenv("AWS_RETRY_MODE", "standard")
        config = apply_defaults({"retries": {"mode": "legacy"}})
        assert config["retries"]["mode"] == "legacy"

    def test_invalid_env_max_attempts_exits(self, monkeypatch):
        """Verify that a non-integer AWS_MAX_ATTEMPTS causes a system exit."""
        monkeypatch.setenv("AWS_MAX_ATTEMPTS", "many")
        with pytest.raises(SystemExit):
            apply_defaults({})

    def test_non_mapping_section_exits(self, capsys):
        """Verify that a delays block given as a list exits with an error line."""
        with pytest.raises(SystemExit) as exc_info:
            apply_defaults({"delays": [2, 15]})

        assert exc_info.value.code == 1
        assert "ERROR: Config field delays must be a mapping" in capsys.readouterr().err


class TestValidateConfig:
    """Tests for timing and retry validation rules."""

    def test_valid_config(self):
        """Verify that a fully populated config passes validation unchanged."""
        config = apply_defaults(_full_config())
        assert validate_config(config) == config

    def test_zero_delays_allowed(self):
        """Verify that zero-second delays are accepted."""
        config = apply_defaults({"delays": {"deregister_seconds": 0, "close_seconds": 0}})
        validate_config(config)

    def test_negative_delay(self):
        """Verify that validation exits when a delay is negative."""
        config = apply_defaults({"delays": {"close_seconds": -1}})
        with pytest.raises(SystemExit):
            validate_config(config)

    def test_non_numeric_interval(self):
        """Verify that validation exits when the polling interval is not a number."""
        config = apply_defaults({"polling": {"interval_seconds": "soon"}})
        with pytest.raises(SystemExit):
            validate_config(config)

    def test_zero_max_attempts(self):
        """Verify that validation exits when polling.max_attempts is zero."""
        config = apply_defaults({"polling": {"max_attempts": 0}})
        with pytest.raises(SystemExit):
            validate_config(config)

    def test_unknown_retry_mode(self):
        """Verify that validation exits on an unsupported retry mode."""
        config = apply_defaults({"retries": {"mode": "aggressive"}})
        with pytest.raises(SystemExit):
            validate_config(config)

    def test_boolean_retry_attempts_rejected(self):
        """Verify that a boolean is not accepted as a retry attempt count."""
        config = apply_defaults({"retries": {"max_attempts": True}})
        with pytest.raises(SystemExit):
            validate_config(config)
