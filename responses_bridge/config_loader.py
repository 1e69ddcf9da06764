"""Configuration loading from YAML files with environment variable support."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

from .core.exceptions import ConfigurationError

logger = logging.getLogger("responses-bridge")

# Default path to the config file (relative to project root)
DEFAULT_CONFIG_PATH = "configs/config_default.yaml"

# Environment variable to override the config path
CONFIG_ENV_VAR = "RESPONSES_BRIDGE_CONFIG"

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def resolve_config_path(path: str) -> Path:
    """Resolve config path relative to project root if needed."""
    if Path(path).is_absolute():
        return Path(path)
    project_root = Path(__file__).parent.parent
    return project_root / path


def resolve_env_path(config_path: Path, env_path: str | None = None) -> Path:
    """Resolve the env file path for a config file.

    ``configs/config_default.yaml`` pairs with ``configs/.env_default``;
    any other name pairs with ``.env`` in the same directory.
    """
    if env_path:
        return resolve_config_path(env_path)
    stem = config_path.stem
    if stem.startswith("config_"):
        suffix = stem[len("config_"):]
        return config_path.with_name(f".env_{suffix}")
    return config_path.with_name(".env")


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def load_config(
    path: str | None = None,
    env_path: str | None = None,
    substitute_env: bool = True,
) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Path to the config file. Defaults to $RESPONSES_BRIDGE_CONFIG,
              or configs/config_default.yaml in the project root.
        env_path: Optional .env path override for env substitution.
        substitute_env: Whether to substitute environment variables in the config.

    Returns:
        Parsed configuration dictionary.

    Raises:
        ConfigurationError: If the file is missing or is not a YAML mapping.
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH

    config_path = resolve_config_path(path)

    logger.info(f"Loading configuration from {config_path}")

    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise ConfigurationError(f"Config file not found: {config_path}")

    env_values: dict[str, str] = {}
    if substitute_env:
        env_file = resolve_env_path(config_path, env_path)
        if env_file.exists():
            logger.info(f"Loading environment variables from {env_file}")
            env_values = load_env_values(env_file)

    with config_path.open("r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {config_path}")

    if substitute_env:
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def _substitute_env_vars(
    obj: Any, env_values: Mapping[str, str] | None = None
) -> Any:
    """Recursively substitute environment variables in configuration values.

    Supports ``${VAR_NAME}`` and ``$VAR_NAME``. Values from the .env file win
    over the process environment. Unset variables keep their placeholder and
    log a warning.
    """
    env_values = env_values or {}

    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values) for item in obj]
    if isinstance(obj, str):
        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                value = os.getenv(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj


# =============================================================================
# Typed settings
# =============================================================================


@dataclass
class UpstreamSettings:
    """Where the chat-completion backend lives."""

    base_url: str = "http://localhost:8000/v1"
    api_key: Optional[str] = None
    timeout: float = 60.0


@dataclass
class ResponsesSettings:
    """Behaviour of the Responses layer."""

    replay_history: bool = True
    max_chain_depth: Optional[int] = None  # None = unbounded


@dataclass
class BridgeSettings:
    """Resolved configuration for the bridge."""

    database: dict[str, Any] = field(default_factory=dict)
    upstream: UpstreamSettings = field(default_factory=UpstreamSettings)
    responses: ResponsesSettings = field(default_factory=ResponsesSettings)
    log_level: str = "INFO"


_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def _as_bool(value: Any, name: str) -> bool:
    """Read a boolean setting; strings left by ${VAR} substitution are parsed."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def load_settings(config: Optional[Mapping[str, Any]] = None) -> BridgeSettings:
    """Resolve typed settings from a loaded config dict.

    Missing sections fall back to built-in defaults.

    Raises:
        ConfigurationError: If a value has the wrong type.
    """
    config = config or {}

    upstream_cfg = config.get("upstream") or {}
    responses_cfg = config.get("responses") or {}
    logging_cfg = config.get("logging") or {}

    api_key = upstream_cfg.get("api_key") or None
    if isinstance(api_key, str) and _ENV_PATTERN.fullmatch(api_key):
        # Placeholder left behind by an unset variable
        api_key = None

    try:
        upstream = UpstreamSettings(
            base_url=str(upstream_cfg.get("base_url", UpstreamSettings.base_url)),
            api_key=api_key,
            timeout=float(upstream_cfg.get("timeout", UpstreamSettings.timeout)),
        )
        max_depth = responses_cfg.get("max_chain_depth")
        responses = ResponsesSettings(
            replay_history=_as_bool(
                responses_cfg.get("replay_history", True), "responses.replay_history"
            ),
            max_chain_depth=int(max_depth) if max_depth is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e

    if responses.max_chain_depth is not None and responses.max_chain_depth < 1:
        raise ConfigurationError("responses.max_chain_depth must be at least 1")

    return BridgeSettings(
        database=dict(config.get("database") or {}),
        upstream=upstream,
        responses=responses,
        log_level=str(logging_cfg.get("level", "INFO")),
    )
