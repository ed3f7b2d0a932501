"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from ..errors import ConfigurationError
from .defaults import (
    HistoryParams,
    IngestParams,
    QueryParams,
    ReplayConfig,
    SessionParams,
    get_default_config,
)
from .validation import ConfigValidator, ValidationError

logger = structlog.get_logger(__name__)

CONFIG_FILENAME = "replay.yaml"

_SECTIONS = {
    "ingest": IngestParams,
    "history": HistoryParams,
    "session": SessionParams,
    "query": QueryParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ReplayConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from ``replay.yaml`` in the config directory."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Call-time overrides (highest priority)
        2. ``replay.yaml`` overrides
        3. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load_config(self, overrides: Optional[dict[str, Any]] = None) -> ReplayConfig:
        """
        Merge, validate and build the typed configuration.

        Raises:
            ConfigurationError: If any value is unknown or out of range
        """
        merged = self.merge_config(overrides)
        errors = self._unknown_fields(merged) + ConfigValidator.validate_config(merged)

        if errors:
            messages = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            logger.error("Configuration validation failed", errors=messages)
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(messages),
                errors=errors,
            )

        return ReplayConfig(**{
            name: params_cls(**merged[name]) for name, params_cls in _SECTIONS.items()
        })

    def _unknown_fields(self, config: dict[str, Any]) -> list[ValidationError]:
        errors = []
        for section, value in config.items():
            if section not in _SECTIONS:
                errors.append(ValidationError(field=section, message="Unknown section", value=value))
                continue
            if not isinstance(value, dict):
                continue
            known = {f.name for f in fields(_SECTIONS[section])}
            for key in value:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown parameter",
                        value=value[key]
                    ))
        return errors

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
