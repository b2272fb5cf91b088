"""Configuration loader for workspace-secrets."""
import copy
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WORKSPACE_SECRETS_CONFIG"
SUPPORTED_AUTH_TYPES = ("auto", "in_cluster", "kubeconfig")

DEFAULT_CONFIG: Dict[str, Any] = {
    "kubernetes": {
        "auth": "auto",
        "kubeconfig_path": None,
        "context": None,
    },
}


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def _default_config_path() -> Path:
    return Path.home() / ".config" / "workspace-secrets" / "config.yml"


def _get_config_path() -> Optional[str]:
    """
    Get config file path.

    Priority order:
    1. WORKSPACE_SECRETS_CONFIG environment variable
    2. Default location: ~/.config/workspace-secrets/config.yml

    Returns:
        Absolute path to config file, or None if no config file exists

    Raises:
        ConfigError: If the environment variable points to a missing file
    """
    # 1. Check environment override
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        config_path = Path(env_path)
        if config_path.is_file():
            logger.info(f"Using config from {CONFIG_ENV_VAR}: {config_path}")
            return str(config_path)
        raise ConfigError(
            f"Configuration file not found at: {config_path}\n"
            f"Unset {CONFIG_ENV_VAR} or point it to an existing file."
        )

    # 2. Check default location
    default_config = _default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    return None


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with key:
        - kubernetes: dict with auth, kubeconfig_path and context

    Raises:
        ConfigError: If config file is invalid or names an unsupported auth type
    """
    # Resolve path on each call so env var changes take effect immediately
    config_path = _get_config_path()
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is None:
        logger.info("No configuration file found, using defaults")
        return config

    # Load YAML
    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    # Validate required fields
    if not loaded:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    kube = loaded.get('kubernetes') or {}
    if not isinstance(kube, dict):
        raise ConfigError(
            f"Invalid 'kubernetes' section in config at {config_path}\n"
            f"Required format:\n"
            f"kubernetes:\n"
            f"  auth: auto | in_cluster | kubeconfig\n"
            f"  kubeconfig_path: /path/to/kubeconfig  # optional\n"
            f"  context: my-context  # optional"
        )

    config['kubernetes'].update(kube)
    auth = config['kubernetes']['auth']

    if auth not in SUPPORTED_AUTH_TYPES:
        raise ConfigError(
            f"Unsupported authentication type: {auth}\n"
            f"Supported types: {', '.join(SUPPORTED_AUTH_TYPES)}."
        )

    kubeconfig_path = config['kubernetes']['kubeconfig_path']
    if kubeconfig_path and not os.path.isfile(kubeconfig_path):
        raise ConfigError(
            f"Kubeconfig file not found at: {kubeconfig_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using kubernetes auth: {auth}")

    return config
