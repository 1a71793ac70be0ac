"""Server configuration loading.

Configuration comes either from a YAML file or from the process
environment. The server reads only a few keys for itself; the whole
mapping is handed to every tool unmodified.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from php_boost import __version__

DEFAULT_DB_PORTS = {
    "mysql": 3306,
    "pgsql": 5432,
    "sqlsrv": 1433,
    "sqlite": 0,
}


class ConfigLoadError(Exception):
    """Raised when configuration loading fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        if var_name == "HOME":
            return os.path.expanduser("~")
        return match.group(0)

    return pattern.sub(replacer, value)


def _expand(value: Any) -> Any:
    if isinstance(value, str):
        return expand_env_vars(value)
    if isinstance(value, dict):
        return {key: _expand(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand(item) for item in value]
    return value


@dataclass
class BoostConfig:
    """Server configuration.

    ``values`` is the complete configuration mapping; the other fields are
    the parts the server itself interprets.
    """

    values: dict[str, Any] = field(default_factory=dict)
    server_name: str = "php-boost"
    server_version: str = __version__
    enabled_tools: list[str] = field(default_factory=list)
    tool_timeout: float = 0
    audit_log_file: str = ""

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> BoostConfig:
        """Create a BoostConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            BoostConfig with environment references expanded.
        """
        values = _expand(config)
        server = values.get("server") or {}
        tools = values.get("tools") or {}
        audit = values.get("audit") or {}

        try:
            timeout = float(tools.get("timeout") or 0)
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"tools.timeout must be a number: {e}") from e

        enabled = tools.get("enabled") or []
        if not isinstance(enabled, list):
            raise ConfigLoadError("tools.enabled must be a list of tool names")

        return cls(
            values=values,
            server_name=str(server.get("name", "php-boost")),
            server_version=str(server.get("version", __version__)),
            enabled_tools=[str(name) for name in enabled],
            tool_timeout=timeout,
            audit_log_file=str(audit.get("log_file") or ""),
        )

    @classmethod
    def from_env(cls, base_path: str | None = None) -> BoostConfig:
        """Build configuration from environment variables.

        Args:
            base_path: Project root; defaults to ``PHP_BOOST_PROJECT_PATH``
                or the current directory.
        """
        root = (base_path or os.environ.get("PHP_BOOST_PROJECT_PATH") or os.getcwd()).rstrip("/")

        log_path = Path(root) / "storage" / "logs" / "laravel.log"
        if not log_path.exists():
            log_path = Path(root) / "storage" / "logs" / "app.log"

        driver = os.environ.get("DB_CONNECTION") or "mysql"
        try:
            port = int(os.environ.get("DB_PORT") or DEFAULT_DB_PORTS.get(driver, 3306))
        except ValueError as e:
            raise ConfigLoadError(f"DB_PORT must be an integer: {e}") from e

        return cls.from_dict(
            {
                "base_path": root,
                "log_path": os.environ.get("LOG_PATH") or str(log_path),
                "database": {
                    "driver": driver,
                    "host": os.environ.get("DB_HOST") or "localhost",
                    "port": port,
                    "database": os.environ.get("DB_DATABASE") or "",
                    "username": os.environ.get("DB_USERNAME") or "root",
                    "password": os.environ.get("DB_PASSWORD") or "",
                },
                "audit": {"log_file": os.environ.get("PHP_BOOST_AUDIT_LOG") or ""},
            }
        )


def load_config(path: Path) -> BoostConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        BoostConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed, or validated.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse config YAML: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigLoadError("Config must be a YAML mapping")

    return BoostConfig.from_dict(config)
