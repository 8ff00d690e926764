"""
Configuration for RDAP Lookup.

Settings lookup order (later wins):
1. Built-in defaults
2. Config file (~/.config/rdap-lookup/config.json)
3. Environment variables (RDAP_LOOKUP_*)
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from . import __version__
from .errors import ConfigError

DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = f"rdap-lookup/{__version__} (+RDAP client)"

# Environment variable -> Settings field
ENV_VARS = {
    "RDAP_LOOKUP_MAX_REDIRECTS": "max_redirects",
    "RDAP_LOOKUP_FOLLOW_REFERRALS": "follow_referrals",
    "RDAP_LOOKUP_TIMEOUT": "timeout",
    "RDAP_LOOKUP_USER_AGENT": "user_agent",
    "RDAP_LOOKUP_BOOTSTRAP": "bootstrap_path",
}

DEBUG_ENV_VAR = "RDAP_LOOKUP_DEBUG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the query engine and bootstrap loader."""

    max_redirects: int = DEFAULT_MAX_REDIRECTS
    follow_referrals: bool = True
    timeout: float | None = None  # None = httpx default
    user_agent: str = DEFAULT_USER_AGENT
    bootstrap_path: Path | None = None


def config_path(environ=None) -> Path:
    """
    Location of config.json.

    %APPDATA%\\rdap-lookup on Windows, $XDG_CONFIG_HOME/rdap-lookup
    elsewhere (~/.config/rdap-lookup when unset).
    """
    env = os.environ if environ is None else environ
    root = env.get("APPDATA") if os.name == "nt" else env.get("XDG_CONFIG_HOME")
    if not root:
        root = Path.home() if os.name == "nt" else Path.home() / ".config"
    return Path(root) / "rdap-lookup" / "config.json"


def load_config() -> dict:
    """Load the config file, returning {} if missing or unreadable."""
    try:
        config_file = config_path()
        if config_file.exists():
            config = json.loads(config_file.read_text())
            if isinstance(config, dict):
                return config
    except (json.JSONDecodeError, OSError):
        pass
    return {}


def _coerce(field: str, value) -> object:
    """Convert a raw config/env value to the type of a Settings field."""
    try:
        if field == "max_redirects":
            number = int(value)
            if number < 0:
                raise ValueError("must not be negative")
            return number
        if field == "timeout":
            if value is None or value == "":
                return None
            number = float(value)
            if number <= 0:
                raise ValueError("must be positive")
            return number
        if field == "follow_referrals":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError("expected a boolean")
        if field == "bootstrap_path":
            return Path(value).expanduser() if value else None
        if field == "user_agent":
            text = str(value).strip()
            if not text:
                raise ValueError("must not be empty")
            return text
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {field}: {value!r} ({e})") from e
    raise ConfigError(f"Unknown setting: {field}")


def load_settings(environ: dict | None = None, config: dict | None = None) -> Settings:
    """
    Build Settings from defaults, the config file and the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        config: Config file contents (defaults to load_config())

    Raises:
        ConfigError: If a value is present but malformed.
    """
    if environ is None:
        environ = os.environ
    if config is None:
        config = load_config()

    values = {}
    for field in ENV_VARS.values():
        if field in config:
            values[field] = _coerce(field, config[field])

    for env_name, field in ENV_VARS.items():
        if env_name in environ:
            values[field] = _coerce(field, environ[env_name])

    return replace(Settings(), **values)


def configure_logging(environ: dict | None = None) -> None:
    """
    Set up logging for the CLI and MCP server.

    httpx request logging is suppressed unless RDAP_LOOKUP_DEBUG is set,
    in which case everything from this package is logged at DEBUG.
    """
    if environ is None:
        environ = os.environ

    if environ.get(DEBUG_ENV_VAR):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )
        logging.getLogger("rdap_lookup").setLevel(logging.DEBUG)
    else:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
