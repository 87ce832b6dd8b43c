"""Configuration loader with 3-tier parameter precedence."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import SettingsValidationError

from .defaults import (
    DefaultConfig,
    EmailParams,
    GeneratorParams,
    HistoryParams,
    StorageParams,
    get_default_config,
)
from .validation import ConfigValidator

# Environment variable -> (section, key, converter)
ENV_OVERRIDES = {
    "EMAIL_HOST": ("email", "smtp_host", str),
    "EMAIL_PORT": ("email", "smtp_port", int),
    "EMAIL_USER": ("email", "smtp_user", str),
    "EMAIL_PASS": ("email", "smtp_password", str),
    "SIGNALS_DB_PATH": ("storage", "db_path", str),
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig
    filename: str = "generator.yaml"

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load the YAML configuration file, empty when absent."""
        config_file = self.config_dir / self.filename

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def load_env_config(self, environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
        """
        Collect overrides from environment variables.

        A value that fails conversion is kept as the raw string so that
        load() reports it as a validation error.
        """
        environ = os.environ if environ is None else environ
        config: dict[str, Any] = {}

        for env_name, (section, key, convert) in ENV_OVERRIDES.items():
            raw = environ.get(env_name)
            if raw:
                try:
                    value = convert(raw)
                except ValueError:
                    value = raw
                config.setdefault(section, {})[key] = value

        return config

    def merge_config(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides and environment variables (highest priority)
        2. YAML configuration file
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config(environ))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None
    ) -> DefaultConfig:
        """
        Build typed configuration from the merged mapping.

        Raises:
            SettingsValidationError: a merged value is out of range
        """
        merged = self.merge_config(overrides, environ)

        validation_errors = ConfigValidator.validate_config(merged)
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            raise SettingsValidationError(
                "Invalid configuration: " + "; ".join(error_msgs),
                errors=validation_errors
            )

        email = dict(merged.get("email", {}))
        email["recipients"] = tuple(email.get("recipients") or ())

        return DefaultConfig(
            generator=GeneratorParams(**merged.get("generator", {})),
            history=HistoryParams(**merged.get("history", {})),
            storage=StorageParams(**merged.get("storage", {})),
            email=EmailParams(**email),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
