"""Configuration loading, merging, and validation."""

import os
import sys

import yaml

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_REGION = "us-east-1"

DEFAULT_DELAYS = {
    "deregister_seconds": 2,
    "close_seconds": 15,
}

DEFAULT_POLLING = {
    "max_attempts": 30,
    "interval_seconds": 30,
}

DEFAULT_RETRIES = {
    "mode": "adaptive",
    "max_attempts": 5,
}

RETRY_MODES = ("legacy", "standard", "adaptive")


def load_config(config_path=DEFAULT_CONFIG_PATH):
    """Load configuration from a YAML file, exiting on errors.

    A missing file is an error unless it is the default path, in which case
    the built-in defaults apply.
    """
    if config_path == DEFAULT_CONFIG_PATH and not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except OSError as e:
        print(f"ERROR: Could not read config file {config_path}: {e}", file=sys.stderr)
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML in config file {config_path}: {e}", file=sys.stderr)
        sys.exit(1)

    if not isinstance(config, dict):
        print(f"ERROR: Config file {config_path} must contain a mapping", file=sys.stderr)
        sys.exit(1)
    return config


def merge_cli_overrides(config, cli_args):
    """Merge CLI argument overrides into the loaded configuration."""
    overrides = {}
    if cli_args.get("profile"):
        overrides["profile"] = cli_args["profile"]
    if cli_args.get("role_arn"):
        overrides["role_arn"] = cli_args["role_arn"]
    if cli_args.get("region"):
        overrides["region"] = cli_args["region"]

    merged = {**config, **overrides}
    return merged


def _env_retries():
    retries = {}
    if os.environ.get("AWS_RETRY_MODE"):
        retries["mode"] = os.environ["AWS_RETRY_MODE"]
    if os.environ.get("AWS_MAX_ATTEMPTS"):
        try:
            retries["max_attempts"] = int(os.environ["AWS_MAX_ATTEMPTS"])
        except ValueError:
            print("ERROR: AWS_MAX_ATTEMPTS must be an integer", file=sys.stderr)
            sys.exit(1)
    return retries


def _section(config, name):
    section = config.get(name) or {}
    if not isinstance(section, dict):
        print(f"ERROR: Config field {name} must be a mapping", file=sys.stderr)
        sys.exit(1)
    return section


def apply_defaults(config):
    """Fill in region, delays, polling, and retry settings that were not configured."""
    result = dict(config)
    result["region"] = config.get("region") or DEFAULT_REGION
    result["delays"] = {**DEFAULT_DELAYS, **_section(config, "delays")}
    result["polling"] = {**DEFAULT_POLLING, **_section(config, "polling")}
    result["retries"] = {**DEFAULT_RETRIES, **_env_retries(), **_section(config, "retries")}
    return result


def _is_non_negative_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


def _is_positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config):
    """Validate timing and retry settings, exiting on errors."""
    for key, value in config["delays"].items():
        if not _is_non_negative_number(value):
            print(f"ERROR: delays.{key} must be a non-negative number", file=sys.stderr)
            sys.exit(1)

    if not _is_positive_int(config["polling"]["max_attempts"]):
        print("ERROR: polling.max_attempts must be a positive integer", file=sys.stderr)
        sys.exit(1)
    if not _is_non_negative_number(config["polling"]["interval_seconds"]):
        print("ERROR: polling.interval_seconds must be a non-negative number", file=sys.stderr)
        sys.exit(1)

    if config["retries"]["mode"] not in RETRY_MODES:
        print(f"ERROR: retries.mode must be one of: {', '.join(RETRY_MODES)}", file=sys.stderr)
        sys.exit(1)
    if not _is_positive_int(config["retries"]["max_attempts"]):
        print("ERROR: retries.max_attempts must be a positive integer", file=sys.stderr)
        sys.exit(1)

    return config
