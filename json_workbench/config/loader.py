"""Configuration loading: ``config.yaml``, a ``.env`` file and ``JSON_WORKBENCH_*`` variables."""

import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import ValidationError
from dotenv import load_dotenv

from .models import WorkbenchConfig


ENV_PREFIX = "JSON_WORKBENCH_"
_CONFIG_SECTIONS = ("analyzer", "history", "query", "redis")
_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


class ConfigurationError(Exception):
    """The workbench configuration could not be read or is invalid."""
    pass


class ConfigLoader:
    """Builds a :class:`WorkbenchConfig` from file and environment.

    Precedence, highest first: ``JSON_WORKBENCH_*`` variables (including those
    set by the ``.env`` file), the YAML file, model defaults. Variables that
    are already set are not overridden by the ``.env`` file.
    """

    def __init__(self, config_file: Optional[str] = None, env_file: Optional[str] = None):
        self.config_file = Path(config_file or "config.yaml")
        self.env_file = Path(env_file or ".env")

        self._load_dotenv()

    def _load_dotenv(self) -> None:
        # Fall back to a .env next to the config file.
        for candidate in (self.env_file, self.config_file.parent / ".env"):
            if candidate.exists():
                load_dotenv(candidate)
                return

    def load_config(self) -> WorkbenchConfig:
        """Read, merge and validate the configuration.

        Raises:
            ConfigurationError: If a source cannot be read or the result fails validation
        """
        try:
            file_values = self._read_yaml() or {}
            merged = self._merge(file_values, self._environment_overrides())
            return WorkbenchConfig(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{self._describe_errors(e)}")
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

    def _read_yaml(self) -> Optional[Dict[str, Any]]:
        """Parsed YAML mapping, or None when the file is absent.

        ``${VAR}`` and ``${VAR:-default}`` are expanded before parsing.
        """
        if not self.config_file.exists():
            return None

        try:
            raw = self.config_file.read_text(encoding="utf-8")
            data = yaml.safe_load(self._expand_variables(raw)) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_file}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read {self.config_file}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {self.config_file} must be a mapping")
        return data

    def _environment_overrides(self) -> Dict[str, Any]:
        """Nest ``JSON_WORKBENCH_*`` variables by config section.

        ``JSON_WORKBENCH_ANALYZER_CONFIG_MAX_DEPTH`` sets
        ``analyzer_config.max_depth``; ``JSON_WORKBENCH_LOG_LEVEL`` sets
        ``log_level``.
        """
        overrides: Dict[str, Any] = {}
        for name, raw in os.environ.items():
            if name.startswith(ENV_PREFIX):
                self._assign(overrides, name[len(ENV_PREFIX):].lower(), self._parse_env_value(raw))
        return overrides

    def _assign(self, overrides: Dict[str, Any], key: str, value: Any) -> None:
        for section in _CONFIG_SECTIONS:
            prefix = f"{section}_config_"
            if key.startswith(prefix) and len(key) > len(prefix):
                overrides.setdefault(f"{section}_config", {})[key[len(prefix):]] = value
                return
        overrides[key] = value

    def _parse_env_value(self, raw: str) -> Any:
        """Interpret a variable as bool, int, float, comma-separated list or string."""
        lowered = raw.lower()
        if lowered in ('true', 'false'):
            return lowered == 'true'

        for number_type in (int, float):
            try:
                return number_type(raw)
            except ValueError:
                continue

        if ',' in raw:
            return [part.strip() for part in raw.split(',') if part.strip()]
        return raw

    def _merge(self, file_values: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay environment values on file values; sections merge key by key."""
        merged = dict(file_values)
        for key, value in overrides.items():
            current = merged.get(key)
            merged[key] = {**current, **value} if isinstance(current, dict) and isinstance(value, dict) else value
        return merged

    def _describe_errors(self, error: ValidationError) -> str:
        return "\n".join(
            f"  {' -> '.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in error.errors()
        )

    def _expand_variables(self, content: str) -> str:
        """Replace ``${VAR}`` and ``${VAR:-default}``; unset variables without a default stay as written."""
        def expand(match):
            expression = match.group(1)
            if ':-' in expression:
                name, default = expression.split(':-', 1)
                return os.getenv(name.strip(), default.strip())
            value = os.getenv(expression.strip())
            return match.group(0) if value is None else value

        return _ENV_VAR_PATTERN.sub(expand, content)


def load_config(config_file: Optional[str] = None, env_file: Optional[str] = None) -> WorkbenchConfig:
    """Load the workbench configuration.

    Raises:
        ConfigurationError: If a source cannot be read or the result fails validation
    """
    return ConfigLoader(config_file, env_file).load_config()


def create_example_config() -> Dict[str, Any]:
    """Configuration dict with every setting at its default, Redis included."""
    return {
        "analyzer_config": {
            "max_depth": 10,
            "max_array_length": 1000,
            "max_string_length": 10000,
            "repeated_key_threshold": 50,
            "identifier_keys": ["id", "_id", "ID", "uuid", "key"],
        },
        "history_config": {
            "capacity": 50,
        },
        "query_config": {
            "max_examples": 6,
        },
        "redis_config": {
            "host": "localhost",
            "port": 6379,
            "password": None,
            "db": 0,
            "connection_timeout": 5,
            "socket_timeout": 5,
            "max_connections": 10,
        },
        "prefer_redis": False,
        "max_document_size": 10485760,
        "max_session_bytes": 4194304,
        "log_level": "INFO",
        "session_ttl": 86400,
    }
