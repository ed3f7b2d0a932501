"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    POSITIVE_INT_FIELDS = {
        "ingest": (
            "encoding_sample_bytes",
            "max_batch_bytes",
            "max_line_chars",
            "yield_every_lines",
            "queue_max_records",
            "progress_log_bytes",
            "snapshot_log_every",
        ),
        "history": ("target_bins",),
        "session": ("capacity",),
        "query": ("max_depth_levels",),
    }

    @staticmethod
    def validate_ingest_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate ingestion parameters."""
        errors = ConfigValidator._validate_positive_ints("ingest", params)

        if "encoding_min_confidence" in params:
            value = params["encoding_min_confidence"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="ingest.encoding_min_confidence",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration dictionary."""
        errors = []

        for section in ConfigValidator.POSITIVE_INT_FIELDS:
            params = config.get(section, {})
            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue
            if section == "ingest":
                errors.extend(ConfigValidator.validate_ingest_params(params))
            else:
                errors.extend(ConfigValidator._validate_positive_ints(section, params))

        return errors

    @staticmethod
    def _validate_positive_ints(section: str, params: dict[str, Any]) -> list[ValidationError]:
        errors = []
        for name in ConfigValidator.POSITIVE_INT_FIELDS[section]:
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=f"{section}.{name}",
                    message="Must be a positive integer",
                    value=params[name]
                ))
        return errors
