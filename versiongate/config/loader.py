"""
Client configuration loading for versiongate.

A versiongate client is configured from a single YAML file. Values of the
form ``${VAR}`` are expanded from the environment, after loading a ``.env``
file (if present) with python-dotenv, so API keys never need to live in the
YAML itself.

Configuration Fields
--------------------
- **api_key** (str, required): API key sent in the ``API-Key`` header.
- **app_version** (str, required): Running app version (e.g., "1.4.0").
- **base_url** (str, optional): API root. Default "https://api.appsidekit.com/".
- **store_type** (int, optional): Store identifier. Default 0 (App Store).
- **timeout** (int/float, optional): HTTP timeout in seconds. Default 30.
- **state_file** (str, optional): JSON state file, resolved relative to the
  config file. Default "state/versiongate.json".
- **analytics_enabled** (bool, optional): Initial analytics toggle.

Example
-------
versiongate.yaml:

    api_key: "${VERSIONGATE_API_KEY}"
    app_version: "1.4.0"
    timeout: 10
    state_file: "state/versiongate.json"

From Python:

    >>> from pathlib import Path
    >>> from versiongate.config import load_client_config
    >>> cfg = load_client_config(Path("versiongate.yaml"))
    >>> cfg.app_version
    '1.4.0'

Error Handling
--------------
- ConfigError: missing file, invalid YAML, non-mapping top level, invalid
  fields, or an unset ``${VAR}``.
- All errors are chained with "from err" for better debugging.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import re
from typing import Any

from dotenv import load_dotenv
import yaml

from versiongate.exceptions import ConfigError
from versiongate.logging import CONFIG, get_global_logger
from versiongate.transport.api import APP_STORE, DEFAULT_BASE_URL, DEFAULT_TIMEOUT

DEFAULT_STATE_FILE = "state/versiongate.json"

_ENV_REF = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


@dataclass(frozen=True)
class ClientConfig:
    """Resolved client configuration."""

    api_key: str
    app_version: str
    base_url: str = DEFAULT_BASE_URL
    store_type: int = APP_STORE
    timeout: float = DEFAULT_TIMEOUT
    state_file: Path = Path(DEFAULT_STATE_FILE)
    analytics_enabled: bool | None = None


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - when the file is missing, unparsable or empty
    """
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _expand_env(value: Any) -> Any:
    """Replace a whole-value ``${VAR}`` reference with the environment value."""
    if not isinstance(value, str):
        return value
    m = _ENV_REF.match(value)
    if not m:
        return value
    env_value = os.environ.get(m.group(1))
    if not env_value:
        raise ConfigError(f"Environment variable {m.group(1)} is not set")
    return env_value


def validate_client_config(raw: dict[str, Any]) -> list[str]:
    """Validate a raw config mapping without expanding environment values.

    Args:
        raw: Parsed YAML mapping.

    Returns:
        List of error messages (empty if valid).
    """
    errors = []

    for key in ("api_key", "app_version"):
        if key not in raw:
            errors.append(f"Missing required field: {key}")
        elif not isinstance(raw[key], str):
            errors.append(f"{key} must be a string")
        elif not raw[key].strip():
            errors.append(f"{key} cannot be empty")

    if "base_url" in raw:
        base_url = raw["base_url"]
        if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
            errors.append("base_url must be an http(s) URL")

    if "store_type" in raw and (
        isinstance(raw["store_type"], bool) or not isinstance(raw["store_type"], int)
    ):
        errors.append("store_type must be an integer")

    if "timeout" in raw:
        timeout = raw["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            errors.append("timeout must be a number")
        elif timeout <= 0:
            errors.append("timeout must be positive")

    if "state_file" in raw and not isinstance(raw["state_file"], str):
        errors.append("state_file must be a string")

    if "analytics_enabled" in raw and not isinstance(raw["analytics_enabled"], bool):
        errors.append("analytics_enabled must be a boolean")

    return errors


def load_raw_config(config_path: Path) -> dict[str, Any]:
    """Read the YAML config and check that it is a mapping.

    Raises:
        ConfigError: On a missing file, bad YAML or a non-mapping top level.
    """
    raw = _load_yaml_file(config_path)
    if not isinstance(raw, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {config_path}")
    return raw


def load_client_config(config_path: Path) -> ClientConfig:
    """
    Load, validate and resolve the client configuration.

    Steps
      1) Load .env (if present) into the environment.
      2) Read and validate the YAML mapping.
      3) Expand ${VAR} references in string values.
      4) Resolve state_file relative to the config file.

    Returns
      A ClientConfig ready to build a VersionGate client.

    Raises
      ConfigError on any problem with the file or its fields.
    """
    logger = get_global_logger()

    config_path = config_path.resolve()
    load_dotenv()

    logger.verbose(CONFIG, f"Loading config: {config_path}")
    raw = load_raw_config(config_path)

    errors = validate_client_config(raw)
    if errors:
        raise ConfigError(f"Invalid config {config_path}: " + "; ".join(errors))

    resolved = {k: _expand_env(v) for k, v in raw.items()}

    state_file = Path(resolved.get("state_file", DEFAULT_STATE_FILE))
    if not state_file.is_absolute():
        state_file = (config_path.parent / state_file).resolve()

    logger.verbose(CONFIG, f"App version: {resolved['app_version']}")
    logger.verbose(CONFIG, f"State file: {state_file}")

    return ClientConfig(
        api_key=resolved["api_key"],
        app_version=resolved["app_version"],
        base_url=resolved.get("base_url", DEFAULT_BASE_URL),
        store_type=resolved.get("store_type", APP_STORE),
        timeout=resolved.get("timeout", DEFAULT_TIMEOUT),
        state_file=state_file,
        analytics_enabled=resolved.get("analytics_enabled"),
    )
