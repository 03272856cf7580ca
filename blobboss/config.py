import copy
import json
import os
import sys

DEFAULT_CONFIG = {
    "general": {
        "workers": 8,
        "page_size": 5000,
        "verbose": False,
    },
    "azure": {
        "default_account": None,
        "sas_token": None,
        "endpoint": None,
    },
}

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "AZURE_STORAGE_ACCOUNT": ("azure", "default_account"),
    "AZURE_STORAGE_SAS_TOKEN": ("azure", "sas_token"),
    "AZURE_STORAGE_BLOB_ENDPOINT": ("azure", "endpoint"),
}

_verbose = False


def default_config_path():
    return os.path.join(os.path.expanduser("~"), ".blobboss", "config.json")


def load_config(config_path=None, environ=None):
    """Load config from file, merge with defaults, then apply environment overrides."""
    if config_path is None:
        config_path = default_config_path()
    if environ is None:
        environ = os.environ

    config = copy.deepcopy(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                user_config = json.load(f)
            # Merge user config over defaults
            for section, values in user_config.items():
                if section in config and isinstance(config[section], dict) and isinstance(values, dict):
                    config[section].update(values)
                else:
                    config[section] = values
        except (json.JSONDecodeError, OSError) as e:
            print(f"Warning: Could not load config from {config_path}: {e}", file=sys.stderr)

    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            config.setdefault(section, {})[key] = value

    return config


def get_workers(config):
    """Get worker count from config."""
    return config.get("general", {}).get("workers", 8)


def get_page_size(config):
    return config.get("general", {}).get("page_size") or None


def set_verbose(enabled):
    global _verbose
    _verbose = bool(enabled)


def log(message):
    """Print a bracketed diagnostic line to stderr when verbose output is on."""
    if _verbose:
        print(f"[{message}]", file=sys.stderr)
